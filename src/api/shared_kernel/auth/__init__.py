"""Authentication shared kernel module."""

from shared_kernel.auth.context import (
    ClaimNames,
    RequestContext,
    extract_request_context,
)
from shared_kernel.auth.jwt_validator import JWTValidator
from shared_kernel.auth.observability import (
    DefaultJWTValidatorProbe,
    DefaultRequestContextProbe,
    JWTValidatorProbe,
    RequestContextProbe,
)

__all__ = [
    "ClaimNames",
    "DefaultJWTValidatorProbe",
    "DefaultRequestContextProbe",
    "JWTValidator",
    "JWTValidatorProbe",
    "RequestContext",
    "RequestContextProbe",
    "extract_request_context",
]
