"""Unit tests for log event redaction."""

from infrastructure.logging import redact_sensitive


def test_credential_values_are_masked():
    event = {"event": "connecting", "password": "s3cret", "secret": "abc"}

    result = redact_sensitive(None, "info", event)

    assert result["password"] == "***"
    assert result["secret"] == "***"
    assert result["event"] == "connecting"


def test_other_keys_untouched():
    event = {"event": "user_created", "tenant_id": "T001", "user_id": "U001"}

    assert redact_sensitive(None, "info", dict(event)) == event
