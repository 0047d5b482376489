"""Amazon QuickSight implementation of IEmbeddingService.

Uses anonymous embedding: the session tags carry the row-level security
context, so QuickSight needs no per-user registration. Requires the
capacity pricing plan.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from analytics.domain.value_objects import EmbedUrl, SessionContext
from analytics.ports.embedding import EmbeddingExperience, IEmbeddingService
from infrastructure.settings import AnalyticsSettings
from shared_kernel.errors import (
    AnalyticsAccessDeniedError,
    AnalyticsConfigurationError,
    AnalyticsError,
    AnalyticsPlanUnsupportedError,
    AnalyticsThrottledError,
    AnalyticsUnavailableError,
    ServiceError,
)

_UNAVAILABLE_CODES = frozenset({"InternalFailureException", "ServiceUnavailable"})


class QuickSightEmbeddingService(IEmbeddingService):
    """Embed URLs for one QuickSight dashboard and Q topic."""

    def __init__(self, settings: AnalyticsSettings, client: Any | None = None):
        """Initialize the adapter.

        Args:
            settings: Account, dashboard, topic and session lifetime
            client: Pre-built ``quicksight`` client (tests)
        """
        self._settings = settings
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            session = boto3.session.Session()
            self._client = session.client("quicksight", region_name=self._settings.region)
        return self._client

    async def generate_embed_url(
        self,
        session_context: SessionContext,
        experience: EmbeddingExperience = EmbeddingExperience.DASHBOARD,
    ) -> EmbedUrl:
        resource_arn, experience_configuration = self._experience(experience)
        request = {
            "AwsAccountId": self._settings.aws_account_id,
            "Namespace": self._settings.namespace,
            "SessionLifetimeInMinutes": self._settings.session_lifetime_minutes,
            "AuthorizedResourceArns": [resource_arn],
            "ExperienceConfiguration": experience_configuration,
            "SessionTags": [
                {"Key": tag.key, "Value": tag.value} for tag in session_context.tags
            ],
        }

        loop = asyncio.get_running_loop()
        fn = self._get_client().generate_embed_url_for_anonymous_user
        try:
            response = await loop.run_in_executor(None, partial(fn, **request))
        except (ClientError, BotoCoreError) as e:
            raise _translate(e) from e

        url = response.get("EmbedUrl")
        if not url:
            raise AnalyticsError("QuickSight did not return an embed URL")
        return EmbedUrl(
            url=url, expires_in=self._settings.session_lifetime_minutes * 60
        )

    def _experience(
        self, experience: EmbeddingExperience
    ) -> tuple[str, dict[str, Any]]:
        if not self._settings.aws_account_id:
            raise AnalyticsConfigurationError("QuickSight configuration error")
        if experience is EmbeddingExperience.Q_TOPIC:
            if not self._settings.q_topic_id:
                raise AnalyticsConfigurationError("QuickSight Q Topic not configured")
            return self._settings.topic_arn, {
                "GenerativeQnA": {"InitialTopicId": self._settings.q_topic_id}
            }
        if not self._settings.dashboard_id:
            raise AnalyticsConfigurationError("QuickSight configuration error")
        return self._settings.dashboard_arn, {
            "Dashboard": {"InitialDashboardId": self._settings.dashboard_id}
        }


def _translate(error: ClientError | BotoCoreError) -> ServiceError:
    if isinstance(error, BotoCoreError):
        return AnalyticsUnavailableError("Analytics service unavailable")
    code = error.response.get("Error", {}).get("Code", "")
    if code == "AccessDeniedException":
        return AnalyticsAccessDeniedError("Access denied to QuickSight dashboard")
    if code == "ThrottlingException":
        return AnalyticsThrottledError("Too many requests, please try again")
    if code == "UnsupportedPricingPlanException":
        return AnalyticsPlanUnsupportedError(
            "QuickSight Capacity Pricing plan required for anonymous embedding"
        )
    if code in _UNAVAILABLE_CODES:
        return AnalyticsUnavailableError("Analytics service unavailable")
    return AnalyticsError("Failed to generate dashboard URL", details={"code": code})
