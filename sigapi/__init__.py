"""
sigapi - OpenAPI documents from handler signatures

Handlers declare what they consume and produce through their annotations;
registering them yields an OpenAPI operation without hand-written schemas:

- Extractors: Json / Query / Path / State markers give each parameter a role
- Signature: classification of parameters and return types by wrapper name
- Schema: JSON schemas for dataclasses, annotated classes and builtin types
- Registry: thread-safe registration and a cached, merged document
- Docs: ASGI app serving the document, Swagger UI and ReDoc
- Faults: structured errors for unsupported signatures and routes

    from sigapi import GET, Json, Path, Router, build_openapi

    @GET("/todos/:id", "Get todo by id")
    async def get_todo(id: Path[int]) -> Json[Todo]:
        ...

    router = Router().add(get_todo)
    document = build_openapi()
"""

__version__ = "0.1.0"

# ============================================================================
# Core
# ============================================================================

from .extractors import Role, Extractor, Json, Query, Path, State, ROLE_TABLE
from .signature import (
    TypeChain,
    HandlerArgument,
    type_chain,
    classify,
    parse_handler_arguments,
    parse_handler_return,
)
from .patterns import transform_route, extract_params
from .schema import SchemaResolver, ParameterSetResolver
from .operation import OperationDescriptor, PathParameter, build_operation
from .registry import RegistryEntry, OperationRegistry, DocumentCache
from .document import OpenAPIDocument

# ============================================================================
# Registration
# ============================================================================

from .decorators import (
    endpoint,
    GET,
    POST,
    PUT,
    PATCH,
    DELETE,
    HEAD,
    OPTIONS,
    CONNECT,
    EndpointMetadata,
    HTTP_METHODS,
)
from .context import (
    DocContext,
    RouteBinding,
    default_context,
    register,
    register_route,
    build_openapi,
    reset_openapi,
)
from .router import Router
from .docs_app import DocsApp, generate_swagger_html, generate_redoc_html

# ============================================================================
# Config & Faults
# ============================================================================

from .config import OpenAPIConfig, SignatureConfig, Settings, ConfigLoader
from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ConfigInvalidFault,
    UnsupportedParameterTypeFault,
    UnsupportedTypeArgumentFault,
    MissingReturnTypeFault,
    UnsupportedHttpMethodFault,
    MismatchedPathParametersFault,
)

__all__ = [
    "__version__",
    # Extractors
    "Role",
    "Extractor",
    "Json",
    "Query",
    "Path",
    "State",
    "ROLE_TABLE",
    # Signature
    "TypeChain",
    "HandlerArgument",
    "type_chain",
    "classify",
    "parse_handler_arguments",
    "parse_handler_return",
    # Patterns
    "transform_route",
    "extract_params",
    # Schema
    "SchemaResolver",
    "ParameterSetResolver",
    # Operations & registry
    "OperationDescriptor",
    "PathParameter",
    "build_operation",
    "RegistryEntry",
    "OperationRegistry",
    "DocumentCache",
    "OpenAPIDocument",
    # Registration
    "endpoint",
    "GET",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "HEAD",
    "OPTIONS",
    "CONNECT",
    "EndpointMetadata",
    "HTTP_METHODS",
    "DocContext",
    "RouteBinding",
    "default_context",
    "register",
    "register_route",
    "build_openapi",
    "reset_openapi",
    "Router",
    "DocsApp",
    "generate_swagger_html",
    "generate_redoc_html",
    # Config
    "OpenAPIConfig",
    "SignatureConfig",
    "Settings",
    "ConfigLoader",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigInvalidFault",
    "UnsupportedParameterTypeFault",
    "UnsupportedTypeArgumentFault",
    "MissingReturnTypeFault",
    "UnsupportedHttpMethodFault",
    "MismatchedPathParametersFault",
]
