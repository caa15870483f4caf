"""
Operation descriptors.

Combines classified handler arguments, the canonical path and the return
classification into one OpenAPI operation. Building is pure; registering
the result is a separate step (see ``sigapi.registry``).

Precedence rules:
- the first body argument supplies the request body, later ones are ignored
- the first query argument supplies the query parameters, later ones are ignored
- path arguments are zipped with the placeholder names, truncated to the
  shorter of the two (unless ``strict_path_parameters`` is set)
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .extractors import Role
from .faults import MismatchedPathParametersFault
from .patterns import extract_params
from .schema import ParameterSetResolver, SchemaResolver
from .signature import HandlerArgument

logger = logging.getLogger("sigapi.operation")

SUCCESS_STATUS = "200"
JSON_MEDIA_TYPE = "application/json"

_STATUS_DESCRIPTIONS: Dict[str, str] = {
    "200": "Successful response",
    "201": "Resource created",
    "202": "Accepted for processing",
    "204": "No content",
}


@dataclass
class PathParameter:
    """A path placeholder paired with the schema of its handler argument."""
    name: str
    schema: Dict[str, Any]
    expression: str = ""

    def to_openapi(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "in": "path",
            "required": True,
            "schema": copy.deepcopy(self.schema),
        }


@dataclass
class OperationDescriptor:
    """
    Documented behaviour of one (method, path) pair.

    Attributes:
        method: Upper-case HTTP method
        path: Canonical path (``/todos/{id}``)
        operation_id: Unique operation name (handler name)
        description: Operation description
        response_schema: Schema of the success response, None when opaque
        request_body_schema: Schema of the JSON request body
        query_parameters: Query parameter objects, None without a query argument
        path_parameters: Path parameters aligned with the placeholders
        state_type: Type expression of the required shared state
        components: Object schemas referenced from this operation
    """
    method: str
    path: str
    operation_id: str
    description: str = ""
    summary: str = ""
    tags: List[str] = field(default_factory=list)
    deprecated: bool = False
    response_schema: Optional[Dict[str, Any]] = None
    request_body_schema: Optional[Dict[str, Any]] = None
    query_parameters: Optional[List[Dict[str, Any]]] = None
    path_parameters: List[PathParameter] = field(default_factory=list)
    state_type: Optional[str] = None
    components: Dict[str, Any] = field(default_factory=dict)
    success_status: str = SUCCESS_STATUS
    media_type: str = JSON_MEDIA_TYPE

    @property
    def parameters(self) -> List[Dict[str, Any]]:
        """Query parameters followed by path parameters."""
        params = [copy.deepcopy(p) for p in self.query_parameters or []]
        params.extend(p.to_openapi() for p in self.path_parameters)
        return params

    def to_openapi(self) -> Dict[str, Any]:
        """Serialize to an OpenAPI operation object."""
        operation: Dict[str, Any] = {
            "operationId": self.operation_id,
            "description": self.description,
        }
        if self.summary:
            operation["summary"] = self.summary
        if self.tags:
            operation["tags"] = list(self.tags)

        parameters = self.parameters
        if parameters:
            operation["parameters"] = parameters

        if self.request_body_schema is not None:
            operation["requestBody"] = {
                "required": True,
                "content": {
                    self.media_type: {"schema": copy.deepcopy(self.request_body_schema)},
                },
            }

        response: Dict[str, Any] = {
            "description": _STATUS_DESCRIPTIONS.get(self.success_status, "Successful response"),
        }
        if self.response_schema is not None:
            response["content"] = {
                self.media_type: {"schema": copy.deepcopy(self.response_schema)},
            }
        operation["responses"] = {self.success_status: response}

        if self.deprecated:
            operation["deprecated"] = True

        return operation


def _first(arguments: Sequence[HandlerArgument], role: Role) -> Optional[HandlerArgument]:
    matches = [a for a in arguments if a.role is role]
    if len(matches) > 1:
        ignored = ", ".join(a.name or a.expression for a in matches[1:])
        logger.debug("Only the first %s argument is documented; ignoring %s", role.value, ignored)
    return matches[0] if matches else None


def build_operation(
    method: str,
    path: str,
    operation_id: str,
    arguments: Sequence[HandlerArgument],
    returns: Optional[HandlerArgument],
    *,
    placeholders: Optional[Sequence[str]] = None,
    description: str = "",
    summary: str = "",
    tags: Optional[Sequence[str]] = None,
    deprecated: bool = False,
    schemas: Optional[SchemaResolver] = None,
    parameter_sets: Optional[ParameterSetResolver] = None,
    strict_path_parameters: bool = False,
    success_status: str = SUCCESS_STATUS,
    media_type: str = JSON_MEDIA_TYPE,
) -> OperationDescriptor:
    """
    Build the descriptor of one operation.

    Args:
        method: Upper-case HTTP method
        path: Canonical path
        operation_id: Operation identifier
        arguments: Classified handler arguments in declaration order
        returns: Return type classification (None for an opaque response)
        placeholders: Placeholder names of ``path`` (extracted when omitted)
        strict_path_parameters: Raise on a path argument/placeholder count
            mismatch instead of truncating

    Raises:
        MismatchedPathParametersFault: strict mode and counts differ
    """
    schemas = schemas or SchemaResolver()
    parameter_sets = parameter_sets or ParameterSetResolver(schemas)
    names = list(placeholders) if placeholders is not None else extract_params(path)
    components: Dict[str, Any] = {}

    response_schema = None
    if returns is not None and returns.role is Role.BODY:
        response_schema = schemas.schema(returns.annotation, returns.expression, components)

    request_body_schema = None
    body = _first(arguments, Role.BODY)
    if body is not None:
        request_body_schema = schemas.schema(body.annotation, body.expression, components)

    query_parameters = None
    query = _first(arguments, Role.QUERY)
    if query is not None:
        query_parameters = parameter_sets.parameters(query.annotation, "query", components)

    path_arguments = [a for a in arguments if a.role is Role.PATH]
    if len(path_arguments) != len(names):
        if strict_path_parameters:
            raise MismatchedPathParametersFault(path, names, len(path_arguments))
        logger.debug(
            "%s %s: %d path argument(s) for %d placeholder(s), documenting %d",
            method, path, len(path_arguments), len(names),
            min(len(path_arguments), len(names)),
        )

    path_parameters = [
        PathParameter(
            name=name,
            schema=schemas.schema(argument.annotation, argument.expression, components),
            expression=argument.expression,
        )
        for argument, name in zip(path_arguments, names)
    ]

    state = _first(arguments, Role.STATE)

    return OperationDescriptor(
        method=method,
        path=path,
        operation_id=operation_id,
        description=description,
        summary=summary,
        tags=list(tags or []),
        deprecated=deprecated,
        response_schema=response_schema,
        request_body_schema=request_body_schema,
        query_parameters=query_parameters,
        path_parameters=path_parameters,
        state_type=state.expression if state is not None else None,
        components=components,
        success_status=success_status,
        media_type=media_type,
    )
