"""
Documentation context.

A ``DocContext`` owns one operation registry, one document cache and the
resolvers used to document handlers. Pass one explicitly to keep documents
apart (tests, several apps in one process); module-level helpers fall back
to a process-wide default context.

Usage::

    docs = DocContext()
    binding = docs.register(get_todo)
    document = docs.build(lambda: OpenAPIConfig(title="Todo API"))
    docs.reset()
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .config import OpenAPIConfig, Settings
from .decorators import get_endpoint_metadata, normalize_method
from .document import OpenAPIDocument
from .operation import OperationDescriptor, build_operation
from .patterns import extract_params, transform_route
from .registry import DocumentCache, Initializer, OperationRegistry, RegistryEntry
from .schema import ParameterSetResolver, SchemaResolver
from .signature import handler_name, parse_handler_arguments, parse_handler_return

logger = logging.getLogger("sigapi.context")


@dataclass(frozen=True)
class RouteBinding:
    """
    Route handed to a dispatch layer.

    Attributes:
        path: Canonical path (``/todos/{id}``)
        method: Upper-case HTTP method
        handler: The handler callable, unchanged
        operation_id: Documented operation id
        state_type: Type expression of the shared state the handler requires
    """
    path: str
    method: str
    handler: Callable[..., Any]
    operation_id: str
    state_type: Optional[str] = None


class DocContext:
    """
    Registry, cache and resolvers for one OpenAPI document.

    Args:
        settings: Document metadata and signature policy
        schemas: Schema resolver (defaults to ``SchemaResolver()``)
        parameter_sets: Query parameter resolver
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        schemas: Optional[SchemaResolver] = None,
        parameter_sets: Optional[ParameterSetResolver] = None,
    ):
        self.settings = settings or Settings()
        self.schemas = schemas or SchemaResolver()
        self.parameter_sets = parameter_sets or ParameterSetResolver(self.schemas)
        self.registry = OperationRegistry()
        self.cache = DocumentCache()
        self.roles = self.settings.signature.role_table()

    @property
    def openapi_config(self) -> OpenAPIConfig:
        return self.settings.openapi

    def describe(
        self,
        handler: Callable[..., Any],
        *,
        method: Optional[str] = None,
        path: Optional[str] = None,
        description: Optional[str] = None,
        summary: Optional[str] = None,
        tags: Optional[List[str]] = None,
        deprecated: Optional[bool] = None,
        operation_id: Optional[str] = None,
    ) -> OperationDescriptor:
        """
        Build the operation descriptor of ``handler`` without registering it.

        Explicit arguments override ``@endpoint`` metadata.

        Raises:
            UnsupportedHttpMethodFault, UnsupportedParameterTypeFault,
            UnsupportedTypeArgumentFault, MissingReturnTypeFault,
            MismatchedPathParametersFault
        """
        meta = get_endpoint_metadata(handler)
        method = method if method is not None else (meta.method if meta else None)
        path = path if path is not None else (meta.path if meta else None)
        if method is None or path is None:
            raise ValueError(
                f"Handler '{handler_name(handler)}' has no @endpoint metadata; "
                "pass method and path explicitly"
            )

        method = normalize_method(method)
        canonical = transform_route(path)
        policy = self.settings.signature

        arguments = parse_handler_arguments(
            handler, roles=self.roles, strict=policy.strict_type_arguments,
        )
        returns = parse_handler_return(
            handler, roles=self.roles, strict=policy.strict_type_arguments,
        )

        def pick(value, attr, default):
            if value is not None:
                return value
            return getattr(meta, attr) if meta else default

        return build_operation(
            method,
            canonical,
            pick(operation_id, "operation_id", None) or handler_name(handler),
            arguments,
            returns,
            placeholders=extract_params(canonical),
            description=pick(description, "description", ""),
            summary=pick(summary, "summary", ""),
            tags=pick(tags, "tags", []),
            deprecated=pick(deprecated, "deprecated", False),
            schemas=self.schemas,
            parameter_sets=self.parameter_sets,
            strict_path_parameters=policy.strict_path_parameters,
            success_status=policy.success_status,
            media_type=policy.media_type,
        )

    def register(self, handler: Callable[..., Any], **kwargs) -> RouteBinding:
        """
        Document ``handler`` and append its operation to the registry.

        Accepts the same keyword overrides as ``describe``. Any fault aborts
        the registration with nothing appended.
        """
        operation = self.describe(handler, **kwargs)
        self.registry.register(RegistryEntry(
            path=operation.path,
            method=operation.method,
            operation=operation,
        ))
        return RouteBinding(
            path=operation.path,
            method=operation.method,
            handler=handler,
            operation_id=operation.operation_id,
            state_type=operation.state_type,
        )

    def build(self, initializer: Optional[Initializer] = None) -> OpenAPIDocument:
        """
        Build (once per epoch) and return the document.

        ``initializer`` supplies top-level metadata; defaults to this
        context's ``OpenAPIConfig``.
        """
        if initializer is None:
            initializer = lambda: self.settings.openapi  # noqa: E731
        return self.cache.build_or_get(initializer, self.registry)

    def reset(self) -> None:
        """Clear pending registrations and drop the cached document."""
        self.cache.reset(self.registry)
        self.schemas.reset_names()
        logger.debug("Documentation context reset")


_default_context: Optional[DocContext] = None
_default_lock = threading.Lock()


def default_context() -> DocContext:
    """Process-wide context used when none is passed."""
    global _default_context
    with _default_lock:
        if _default_context is None:
            _default_context = DocContext()
        return _default_context


def register(
    handler: Callable[..., Any],
    context: Optional[DocContext] = None,
    **kwargs,
) -> RouteBinding:
    """Register ``handler`` with ``context`` (or the default context)."""
    return (context or default_context()).register(handler, **kwargs)


def register_route(
    handler: Callable[..., Any],
    *,
    method: str,
    path: str,
    description: Optional[str] = None,
    context: Optional[DocContext] = None,
    **kwargs,
) -> RouteBinding:
    """Register an undecorated handler under ``method`` and ``path``."""
    return (context or default_context()).register(
        handler, method=method, path=path, description=description, **kwargs,
    )


def build_openapi(
    initializer: Optional[Initializer] = None,
    context: Optional[DocContext] = None,
) -> OpenAPIDocument:
    """
    Build the OpenAPI document.

    Cached: call it as often as needed, the registry is drained only on the
    first call after a reset.
    """
    return (context or default_context()).build(initializer)


def reset_openapi(context: Optional[DocContext] = None) -> None:
    """Reset registrations and the cached document. Mostly used in tests."""
    (context or default_context()).reset()
