"""Domain-Oriented Observability for IAM infrastructure."""

from iam.infrastructure.observability.identity_provider_probe import (
    DefaultIdentityProviderProbe,
    IdentityProviderProbe,
)

__all__ = [
    "DefaultIdentityProviderProbe",
    "IdentityProviderProbe",
]
