"""Domain-Oriented Observability for IAM application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from iam.application.observability.tenant_authorization_probe import (
    DefaultTenantAuthorizationProbe,
    TenantAuthorizationProbe,
)
from iam.application.observability.user_lifecycle_probe import (
    DefaultUserLifecycleProbe,
    UserLifecycleProbe,
)

__all__ = [
    "DefaultTenantAuthorizationProbe",
    "DefaultUserLifecycleProbe",
    "TenantAuthorizationProbe",
    "UserLifecycleProbe",
]
