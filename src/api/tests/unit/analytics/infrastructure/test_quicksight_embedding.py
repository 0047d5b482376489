"""Tests for the QuickSight embedding adapter."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from analytics.domain.value_objects import SessionContext, SessionTag
from analytics.infrastructure.quicksight_embedding import QuickSightEmbeddingService
from analytics.ports import EmbeddingExperience
from infrastructure.settings import AnalyticsSettings
from shared_kernel.errors import (
    AnalyticsAccessDeniedError,
    AnalyticsConfigurationError,
    AnalyticsError,
    AnalyticsPlanUnsupportedError,
    AnalyticsThrottledError,
    AnalyticsUnavailableError,
)

SESSION = SessionContext(
    tenant_id="T001",
    user_id="U002",
    role="Finance",
    tags=(SessionTag("tenant_id", "T001"), SessionTag("region", "West,East")),
)


def make_settings(**overrides):
    values = {
        "aws_account_id": "123456789012",
        "region": "us-east-1",
        "dashboard_id": "dash-1",
        "q_topic_id": "topic-1",
        "session_lifetime_minutes": 60,
    }
    values.update(overrides)
    return AnalyticsSettings(**values)


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "GenerateEmbedUrlForAnonymousUser")


@pytest.fixture
def client():
    client = MagicMock()
    client.generate_embed_url_for_anonymous_user.return_value = {
        "EmbedUrl": "https://us-east-1.quicksight.aws.amazon.com/embed/abc",
        "Status": 200,
    }
    return client


@pytest.mark.asyncio
async def test_dashboard_request(client):
    settings = make_settings()
    service = QuickSightEmbeddingService(settings, client=client)

    embed_url = await service.generate_embed_url(SESSION)

    assert embed_url.url.endswith("/embed/abc")
    assert embed_url.expires_in == 3600
    kwargs = client.generate_embed_url_for_anonymous_user.call_args.kwargs
    assert kwargs["AwsAccountId"] == "123456789012"
    assert kwargs["SessionLifetimeInMinutes"] == 60
    assert kwargs["AuthorizedResourceArns"] == [settings.dashboard_arn]
    assert kwargs["ExperienceConfiguration"] == {
        "Dashboard": {"InitialDashboardId": "dash-1"}
    }
    assert kwargs["SessionTags"] == [
        {"Key": "tenant_id", "Value": "T001"},
        {"Key": "region", "Value": "West,East"},
    ]


@pytest.mark.asyncio
async def test_q_topic_request(client):
    settings = make_settings()
    service = QuickSightEmbeddingService(settings, client=client)

    await service.generate_embed_url(SESSION, EmbeddingExperience.Q_TOPIC)

    kwargs = client.generate_embed_url_for_anonymous_user.call_args.kwargs
    assert kwargs["AuthorizedResourceArns"] == [settings.topic_arn]
    assert kwargs["ExperienceConfiguration"] == {
        "GenerativeQnA": {"InitialTopicId": "topic-1"}
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, experience, message",
    [
        ({"aws_account_id": ""}, EmbeddingExperience.DASHBOARD, "QuickSight configuration error"),
        ({"dashboard_id": ""}, EmbeddingExperience.DASHBOARD, "QuickSight configuration error"),
        ({"q_topic_id": ""}, EmbeddingExperience.Q_TOPIC, "QuickSight Q Topic not configured"),
    ],
)
async def test_missing_configuration(client, overrides, experience, message):
    service = QuickSightEmbeddingService(make_settings(**overrides), client=client)

    with pytest.raises(AnalyticsConfigurationError, match=message):
        await service.generate_embed_url(SESSION, experience)

    client.generate_embed_url_for_anonymous_user.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code, expected",
    [
        ("AccessDeniedException", AnalyticsAccessDeniedError),
        ("ThrottlingException", AnalyticsThrottledError),
        ("UnsupportedPricingPlanException", AnalyticsPlanUnsupportedError),
        ("InternalFailureException", AnalyticsUnavailableError),
        ("ServiceUnavailable", AnalyticsUnavailableError),
        ("ResourceNotFoundException", AnalyticsError),
    ],
)
async def test_client_errors_are_translated(client, code, expected):
    client.generate_embed_url_for_anonymous_user.side_effect = client_error(code)
    service = QuickSightEmbeddingService(make_settings(), client=client)

    with pytest.raises(expected) as exc_info:
        await service.generate_embed_url(SESSION)

    assert type(exc_info.value) is expected


@pytest.mark.asyncio
async def test_unreachable_endpoint(client):
    client.generate_embed_url_for_anonymous_user.side_effect = EndpointConnectionError(
        endpoint_url="https://quicksight.us-east-1.amazonaws.com"
    )
    service = QuickSightEmbeddingService(make_settings(), client=client)

    with pytest.raises(AnalyticsUnavailableError) as exc_info:
        await service.generate_embed_url(SESSION)

    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_empty_url(client):
    client.generate_embed_url_for_anonymous_user.return_value = {"Status": 200}
    service = QuickSightEmbeddingService(make_settings(), client=client)

    with pytest.raises(AnalyticsError, match="did not return"):
        await service.generate_embed_url(SESSION)
