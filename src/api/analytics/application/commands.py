"""Validated commands for role visibility management.

Request bodies are turned into these before any service runs; anything
malformed becomes a ``ValidationFailedError`` naming the offending field.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from shared_kernel.errors import ValidationFailedError
from shared_kernel.roles import UserRole

MAX_METRIC_NAME_LENGTH = 50


def parse_role_name(role: str | None) -> UserRole:
    """Parse a role name from a request.

    Raises:
        ValidationFailedError: Role missing or not a known role
    """
    if role is None or not role.strip():
        raise ValidationFailedError("Role name is required", field="role")
    try:
        return UserRole(role.strip())
    except ValueError:
        allowed = ", ".join(r.value for r in UserRole)
        raise ValidationFailedError(
            f"Invalid role. Must be one of: {allowed}", field="role"
        ) from None


def parse_metric_names(metrics: Sequence[str] | None) -> tuple[str, ...]:
    """Strip, de-duplicate and check metric names, keeping their order.

    Raises:
        ValidationFailedError: No metrics, or a blank or overlong name
    """
    if not metrics:
        raise ValidationFailedError("At least one metric is required", field="metrics")
    names: list[str] = []
    for metric in metrics:
        name = metric.strip()
        if not name or len(name) > MAX_METRIC_NAME_LENGTH:
            raise ValidationFailedError(
                f"Metric names must be 1 to {MAX_METRIC_NAME_LENGTH} characters",
                field="metrics",
            )
        if name not in names:
            names.append(name)
    return tuple(names)


@dataclass(frozen=True)
class CreateRoleCommand:
    role: UserRole
    metrics: tuple[str, ...]

    @classmethod
    def build(
        cls, role: str | None, metrics: Sequence[str] | None
    ) -> CreateRoleCommand:
        return cls(role=parse_role_name(role), metrics=parse_metric_names(metrics))


@dataclass(frozen=True)
class ShowMetricsCommand:
    role: UserRole
    metrics: tuple[str, ...]

    @classmethod
    def build(
        cls, role: str | None, metrics: Sequence[str] | None
    ) -> ShowMetricsCommand:
        return cls(role=parse_role_name(role), metrics=parse_metric_names(metrics))
