"""Port for the external analytics embedding service."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable

from analytics.domain.value_objects import EmbedUrl, SessionContext


class EmbeddingExperience(StrEnum):
    """What the embed URL opens."""

    DASHBOARD = "dashboard"
    Q_TOPIC = "q_topic"


@runtime_checkable
class IEmbeddingService(Protocol):
    """Issues embed URLs restricted by a session context."""

    async def generate_embed_url(
        self,
        session_context: SessionContext,
        experience: EmbeddingExperience = EmbeddingExperience.DASHBOARD,
    ) -> EmbedUrl:
        """Generate a URL whose data is filtered by the context's tags.

        Raises:
            AnalyticsConfigurationError: Embedding is not configured
            AnalyticsAccessDeniedError: The service refused access
            AnalyticsThrottledError: The service throttled the request
            AnalyticsPlanUnsupportedError: The account plan does not allow
                anonymous embedding
            AnalyticsUnavailableError: The service could not be reached
        """
        ...
