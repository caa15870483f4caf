"""
sigapi faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- SIGNATURE faults
- ROUTING faults
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# SIGNATURE Faults
# ============================================================================

class SignatureFault(Fault):
    """Base class for handler signature faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.SIGNATURE,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class UnsupportedParameterTypeFault(SignatureFault):
    """Declared parameter has no explicit, name-based annotation."""

    def __init__(self, handler: str, parameter: str, annotation: Any = None, **kwargs):
        if annotation is None:
            reason = "has no type annotation"
        else:
            reason = f"is annotated with {annotation!r}, which is not a named type"
        super().__init__(
            code="UNSUPPORTED_PARAMETER_TYPE",
            message=f"Parameter '{parameter}' of handler '{handler}' {reason}",
            metadata={
                "handler": handler,
                "parameter": parameter,
                "annotation": repr(annotation),
                **kwargs.get("metadata", {}),
            },
        )


class UnsupportedTypeArgumentFault(SignatureFault):
    """Generic type argument cannot be represented in a type chain."""

    def __init__(self, annotation: Any, argument: Any, **kwargs):
        super().__init__(
            code="UNSUPPORTED_TYPE_ARGUMENT",
            message=f"Type argument {argument!r} of {annotation!r} is not a named type",
            metadata={
                "annotation": repr(annotation),
                "argument": repr(argument),
                **kwargs.get("metadata", {}),
            },
        )


class MissingReturnTypeFault(SignatureFault):
    """Handler declares no return annotation."""

    def __init__(self, handler: str, **kwargs):
        super().__init__(
            code="MISSING_RETURN_TYPE",
            message=f"Handler '{handler}' declares no return type",
            metadata={"handler": handler, **kwargs.get("metadata", {})},
        )


# ============================================================================
# ROUTING Faults
# ============================================================================

class RoutingFault(Fault):
    """Base class for routing faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.ROUTING,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class UnsupportedHttpMethodFault(RoutingFault):
    """HTTP method token outside the supported set."""

    def __init__(self, method: Any, **kwargs):
        super().__init__(
            code="UNSUPPORTED_HTTP_METHOD",
            message=f"Unsupported HTTP method {method!r}",
            metadata={"method": method, **kwargs.get("metadata", {})},
        )


class MismatchedPathParametersFault(RoutingFault):
    """Path-typed arguments and route placeholders differ in count."""

    def __init__(self, path: str, placeholders: list[str], arguments: int, **kwargs):
        super().__init__(
            code="MISMATCHED_PATH_PARAMETERS",
            message=(
                f"Route '{path}' declares {len(placeholders)} placeholder(s) "
                f"but the handler takes {arguments} path argument(s)"
            ),
            metadata={
                "path": path,
                "placeholders": placeholders,
                "arguments": arguments,
                **kwargs.get("metadata", {}),
            },
        )
