"""
Endpoint Decorators

Attach documentation metadata to route handlers without import-time side
effects. Registration happens when the handler is added to a ``Router`` or
passed to ``register``.

    @endpoint(method="GET", path="/todos/:id", description="Get todo by id")
    async def get_todo(id: Path[int]) -> Json[Todo]:
        ...
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, TypeVar
import inspect

from .faults import UnsupportedHttpMethodFault


F = TypeVar('F', bound=Callable[..., Any])

HTTP_METHODS = frozenset({
    'GET',
    'POST',
    'PUT',
    'DELETE',
    'HEAD',
    'OPTIONS',
    'CONNECT',
    'PATCH',
})


def normalize_method(method: Any) -> str:
    """
    Upper-case and validate an HTTP method token.

    Raises:
        UnsupportedHttpMethodFault: token outside ``HTTP_METHODS``
    """
    if not isinstance(method, str) or method.upper() not in HTTP_METHODS:
        raise UnsupportedHttpMethodFault(method)
    return method.upper()


@dataclass
class EndpointMetadata:
    """
    Documentation metadata attached to a handler.

    Attributes:
        method: Upper-case HTTP method
        path: Route template as written (``:id`` or ``{id}`` placeholders)
        description: OpenAPI description
        summary: OpenAPI summary
        tags: OpenAPI tags
        deprecated: Mark as deprecated in OpenAPI
        operation_id: Overrides the handler name as operation id
    """
    method: str
    path: str
    description: str = ""
    summary: str = ""
    tags: List[str] = field(default_factory=list)
    deprecated: bool = False
    operation_id: Optional[str] = None


class endpoint:
    """
    Endpoint decorator.

    Args:
        method: HTTP method (case-insensitive)
        path: URL path template (e.g., "/todos/:id" or "/todos/{id}")
        description: OpenAPI description; defaults to the handler docstring
        summary: OpenAPI summary
        tags: OpenAPI tags
        deprecated: Mark as deprecated in OpenAPI
        operation_id: Operation id; defaults to the handler name

    Raises:
        UnsupportedHttpMethodFault: at decoration time for unknown methods
    """

    def __init__(
        self,
        method: str,
        path: str,
        description: Optional[str] = None,
        *,
        summary: Optional[str] = None,
        tags: Optional[List[str]] = None,
        deprecated: bool = False,
        operation_id: Optional[str] = None,
    ):
        self.method = normalize_method(method)
        self.path = path
        self.description = description
        self.summary = summary
        self.tags = tags or []
        self.deprecated = deprecated
        self.operation_id = operation_id

    def __call__(self, func: F) -> F:
        func.__endpoint_metadata__ = EndpointMetadata(
            method=self.method,
            path=self.path,
            description=self.description if self.description is not None else (inspect.getdoc(func) or ''),
            summary=self.summary or '',
            tags=list(self.tags),
            deprecated=self.deprecated,
            operation_id=self.operation_id,
        )
        return func


class GET(endpoint):
    """GET endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('GET', path, description, **kwargs)


class POST(endpoint):
    """POST endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('POST', path, description, **kwargs)


class PUT(endpoint):
    """PUT endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('PUT', path, description, **kwargs)


class PATCH(endpoint):
    """PATCH endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('PATCH', path, description, **kwargs)


class DELETE(endpoint):
    """DELETE endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('DELETE', path, description, **kwargs)


class HEAD(endpoint):
    """HEAD endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('HEAD', path, description, **kwargs)


class OPTIONS(endpoint):
    """OPTIONS endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('OPTIONS', path, description, **kwargs)


class CONNECT(endpoint):
    """CONNECT endpoint decorator."""

    def __init__(self, path: str, description: Optional[str] = None, **kwargs):
        super().__init__('CONNECT', path, description, **kwargs)


def get_endpoint_metadata(handler: Callable[..., Any]) -> Optional[EndpointMetadata]:
    """Metadata attached by ``@endpoint``, or None."""
    return getattr(handler, '__endpoint_metadata__', None)
