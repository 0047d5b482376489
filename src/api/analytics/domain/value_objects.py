"""Value objects for the analytics domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

TENANT_ID_TAG = "tenant_id"


class GovernanceDimension(StrEnum):
    """Dimensions a governance rule can narrow.

    Declaration order is the order tags are emitted in.
    """

    REGION = "region"
    STORE = "store"
    TEAM = "team"
    CUSTOM = "custom"


@dataclass(frozen=True)
class GovernanceRule:
    """Restriction of one user to a set of values along one dimension."""

    tenant_id: str
    user_id: str
    dimension: GovernanceDimension
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class SessionTag:
    """A key/value pair the analytics service filters rows on."""

    key: str
    value: str


@dataclass(frozen=True)
class SessionContext:
    """Row-level security context for one embedded analytics session.

    ``tags`` always starts with the ``tenant_id`` tag.
    """

    tenant_id: str
    user_id: str
    role: str
    tags: tuple[SessionTag, ...] = field(default_factory=tuple)

    def tag_value(self, key: str) -> str | None:
        for tag in self.tags:
            if tag.key == key:
                return tag.value
        return None


@dataclass(frozen=True)
class CallerProfile:
    """The caller's relational user row, as analytics needs it."""

    tenant_id: str
    user_id: str
    role: str
    is_tenant_admin: bool


@dataclass(frozen=True)
class RoleMetric:
    """Visibility of one metric for one role in a tenant."""

    id: int
    role: str
    metric_name: str
    is_visible: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class EmbedUrl:
    """A signed embed URL and its lifetime in seconds."""

    url: str
    expires_in: int
