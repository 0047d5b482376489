"""Ports (interfaces) for the analytics bounded context."""

from analytics.ports.embedding import EmbeddingExperience, IEmbeddingService
from analytics.ports.repositories import (
    ICallerDirectory,
    IGovernanceRuleRepository,
    IRoleVisibilityRepository,
)

__all__ = [
    "EmbeddingExperience",
    "ICallerDirectory",
    "IEmbeddingService",
    "IGovernanceRuleRepository",
    "IRoleVisibilityRepository",
]
