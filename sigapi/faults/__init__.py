"""
sigapi faults - structured errors raised while documenting handlers.

Faults are typed exceptions carrying a stable code, a domain and metadata.
Every registration-time fault aborts that single registration; nothing is
appended to the registry.
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DOMAIN_DEFAULTS,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    SignatureFault,
    UnsupportedParameterTypeFault,
    UnsupportedTypeArgumentFault,
    MissingReturnTypeFault,
    RoutingFault,
    UnsupportedHttpMethodFault,
    MismatchedPathParametersFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",

    # Signature
    "SignatureFault",
    "UnsupportedParameterTypeFault",
    "UnsupportedTypeArgumentFault",
    "MissingReturnTypeFault",

    # Routing
    "RoutingFault",
    "UnsupportedHttpMethodFault",
    "MismatchedPathParametersFault",
]
