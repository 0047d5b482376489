"""Relational store credential retrieval and caching."""

from infrastructure.credentials.cache import CredentialCache
from infrastructure.credentials.sources import (
    CredentialSource,
    DatabaseCredentials,
    EnvironmentCredentialSource,
    SecretsManagerCredentialSource,
)

__all__ = [
    "CredentialCache",
    "CredentialSource",
    "DatabaseCredentials",
    "EnvironmentCredentialSource",
    "SecretsManagerCredentialSource",
]
