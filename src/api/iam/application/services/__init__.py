"""Application services for IAM bounded context.

Application services orchestrate domain aggregates, repositories, and
other infrastructure to fulfill use cases. They are the "front door" to
the IAM context.
"""

from iam.application.services.tenant_authorization import TenantAuthorizationGuard
from iam.application.services.user_lifecycle import (
    DualSystemUserLifecycleCoordinator,
)

__all__ = [
    "DualSystemUserLifecycleCoordinator",
    "TenantAuthorizationGuard",
]
