"""Unit tests for domain probes.

Tests that domain probes correctly capture domain events
following the Domain Oriented Observability pattern.
"""

from unittest.mock import MagicMock

import structlog

from analytics.application.observability import (
    DefaultDashboardEmbeddingProbe,
    DefaultRLSContextProbe,
)
from iam.application.observability import DefaultUserLifecycleProbe
from infrastructure.observability import (
    DefaultConnectionPoolProbe,
    DefaultCredentialProbe,
    ObservationContext,
)


def mock_logger() -> MagicMock:
    return MagicMock(spec=structlog.stdlib.BoundLogger)


class TestConnectionPoolProbe:
    """Tests for ConnectionPoolProbe protocol and implementation."""

    def test_default_probe_creates_with_default_logger(self):
        probe = DefaultConnectionPoolProbe()
        assert probe._logger is not None

    def test_default_probe_accepts_custom_logger(self):
        logger = mock_logger()
        probe = DefaultConnectionPoolProbe(logger=logger)
        assert probe._logger is logger

    def test_connection_failed_logs_warning(self):
        logger = mock_logger()
        probe = DefaultConnectionPoolProbe(logger=logger)

        probe.connection_failed(
            host="db.internal", database="shoppulse", error=Exception("Connection refused")
        )

        logger.warning.assert_called_once_with(
            "database_connection_failed",
            host="db.internal",
            database="shoppulse",
            error="Connection refused",
        )

    def test_transient_failure_rounds_delay(self):
        logger = mock_logger()
        probe = DefaultConnectionPoolProbe(logger=logger)

        probe.transient_failure(
            operation="query", attempt=2, delay_seconds=0.123456, error=OSError("reset")
        )

        logger.warning.assert_called_once_with(
            "database_transient_failure",
            operation="query",
            attempt=2,
            delay_seconds=0.123,
            error="reset",
            error_type="OSError",
        )

    def test_retries_exhausted_logs_error(self):
        logger = mock_logger()
        probe = DefaultConnectionPoolProbe(logger=logger)

        probe.retries_exhausted(operation="transaction", attempts=4, error=TimeoutError())

        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["attempts"] == 4

    def test_with_context_includes_context_in_logs(self):
        logger = mock_logger()
        context = ObservationContext(request_id="req-123", tenant_id="T001")
        probe = DefaultConnectionPoolProbe(logger=logger).with_context(context)

        probe.pool_closed()

        logger.info.assert_called_once_with(
            "connection_pool_closed", request_id="req-123", tenant_id="T001"
        )


class TestCredentialProbe:
    def test_fetch_failed_never_logs_values(self):
        logger = mock_logger()
        probe = DefaultCredentialProbe(logger=logger)

        probe.credentials_fetch_failed(source="secrets_manager", error=Exception("denied"))

        logger.error.assert_called_once_with(
            "database_credentials_fetch_failed",
            source="secrets_manager",
            error="denied",
            error_type="Exception",
        )

    def test_cache_hit_is_debug(self):
        logger = mock_logger()

        DefaultCredentialProbe(logger=logger).credentials_cache_hit()

        logger.debug.assert_called_once_with("database_credentials_cache_hit")


class TestUserLifecycleProbe:
    def test_user_created(self):
        logger = mock_logger()

        DefaultUserLifecycleProbe(logger=logger).user_created(
            tenant_id="T001", user_id="U003", role="Finance"
        )

        logger.info.assert_called_once_with(
            "user_created", tenant_id="T001", user_id="U003", role="Finance"
        )

    def test_divergence_is_critical_and_flagged(self):
        logger = mock_logger()

        DefaultUserLifecycleProbe(logger=logger).divergence_detected(
            kind="OrphanedIdentityRecord",
            tenant_id="T001",
            identity_id="sub-new",
            user_id=None,
            error=RuntimeError("delete failed"),
        )

        logger.critical.assert_called_once()
        kwargs = logger.critical.call_args.kwargs
        assert kwargs["divergence_kind"] == "OrphanedIdentityRecord"
        assert kwargs["requires_reconciliation"] is True
        assert kwargs["retryable_by_caller"] is False

    def test_self_deletion_denied_is_audited(self):
        logger = mock_logger()
        context = ObservationContext(request_id="req-7", tenant_id="T001", user_id="sub-admin")
        probe = DefaultUserLifecycleProbe(logger=logger).with_context(context)

        probe.self_deletion_denied(tenant_id="T001", user_id="U001")

        logger.warning.assert_called_once_with(
            "user_self_deletion_denied",
            tenant_id="T001",
            user_id="U001",
            reason="self_deletion_forbidden",
            request_id="req-7",
        )

    def test_context_does_not_override_event_identity(self):
        logger = mock_logger()
        context = ObservationContext(request_id="req-1", tenant_id="T009", user_id="sub-x")
        probe = DefaultUserLifecycleProbe(logger=logger).with_context(context)

        probe.user_deleted(tenant_id="T001", user_id="U002")

        logger.info.assert_called_once_with(
            "user_deleted", tenant_id="T001", user_id="U002", request_id="req-1"
        )


class TestAnalyticsProbes:
    def test_foreign_tenant_rule_is_an_error(self):
        logger = mock_logger()

        DefaultRLSContextProbe(logger=logger).foreign_tenant_rule_discarded(
            tenant_id="T001", user_id="U002", rule_tenant_id="T002"
        )

        logger.error.assert_called_once_with(
            "rls_foreign_tenant_rule_discarded",
            tenant_id="T001",
            user_id="U002",
            rule_tenant_id="T002",
        )

    def test_embed_url_generated(self):
        logger = mock_logger()

        DefaultDashboardEmbeddingProbe(logger=logger).embed_url_generated(
            tenant_id="T001", user_id="U002", experience="dashboard", expires_in=900
        )

        logger.info.assert_called_once_with(
            "dashboard_embed_url_generated",
            tenant_id="T001",
            user_id="U002",
            experience="dashboard",
            expires_in=900,
        )
