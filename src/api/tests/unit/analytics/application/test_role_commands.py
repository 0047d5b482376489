"""Unit tests for role visibility commands."""

import pytest

from analytics.application.commands import CreateRoleCommand, ShowMetricsCommand
from shared_kernel.errors import ValidationFailedError
from shared_kernel.roles import UserRole


def test_create_role_normalizes_metrics():
    command = CreateRoleCommand.build(
        role=" Finance ", metrics=["revenue", " margin ", "revenue"]
    )

    assert command.role is UserRole.FINANCE
    assert command.metrics == ("revenue", "margin")


@pytest.mark.parametrize("role", [None, "", "   "])
def test_role_required(role):
    with pytest.raises(ValidationFailedError) as exc_info:
        CreateRoleCommand.build(role=role, metrics=["revenue"])

    assert exc_info.value.message == "Role name is required"
    assert exc_info.value.field == "role"


def test_unknown_role():
    with pytest.raises(ValidationFailedError, match="Must be one of: Admin, Finance"):
        ShowMetricsCommand.build(role="Intern", metrics=["revenue"])


@pytest.mark.parametrize("metrics", [None, []])
def test_metrics_required(metrics):
    with pytest.raises(ValidationFailedError) as exc_info:
        CreateRoleCommand.build(role="Finance", metrics=metrics)

    assert exc_info.value.message == "At least one metric is required"
    assert exc_info.value.field == "metrics"


@pytest.mark.parametrize("name", ["  ", "x" * 51])
def test_metric_name_length(name):
    with pytest.raises(ValidationFailedError, match="1 to 50 characters"):
        ShowMetricsCommand.build(role="Marketing", metrics=["revenue", name])


def test_fifty_character_name_allowed():
    command = ShowMetricsCommand.build(role="Marketing", metrics=["x" * 50])

    assert command.metrics == ("x" * 50,)
