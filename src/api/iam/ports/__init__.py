"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for repositories and external services without
specifying implementation details. This allows for dependency inversion
and makes the domain layer independent of infrastructure.
"""

from iam.ports.exceptions import DuplicateUserRowError
from iam.ports.identity_provider import IIdentityProvider
from iam.ports.repositories import IUserRepository, TransactionRunner

__all__ = [
    "DuplicateUserRowError",
    "IIdentityProvider",
    "IUserRepository",
    "TransactionRunner",
]
