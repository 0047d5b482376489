"""Row-level security session context for embedded analytics.

The tags built here are the whole contract with the analytics service:
it filters every dataset on them, so the ``tenant_id`` tag must always
be present and must always be the caller's verified tenant.
"""

from __future__ import annotations

from analytics.application.observability import (
    DefaultRLSContextProbe,
    RLSContextProbe,
)
from analytics.domain.value_objects import (
    TENANT_ID_TAG,
    GovernanceDimension,
    GovernanceRule,
    SessionContext,
    SessionTag,
)
from analytics.ports.repositories import IGovernanceRuleRepository

VALUE_SEPARATOR = ","


class RLSContextBuilder:
    """Builds the ordered session tags for one user."""

    def __init__(
        self,
        governance_rules: IGovernanceRuleRepository,
        probe: RLSContextProbe | None = None,
    ):
        self._governance_rules = governance_rules
        self._probe = probe or DefaultRLSContextProbe()

    async def build(self, tenant_id: str, user_id: str, role: str) -> SessionContext:
        """Build the session context for ``(tenant_id, user_id)``.

        Tags are ``tenant_id`` first, then one tag per dimension in
        ``GovernanceDimension`` order. A dimension's values are merged
        across rules, de-duplicated keeping first-seen order and joined
        with a comma. Dimensions without values are left out.

        Args:
            tenant_id: Caller's verified tenant
            user_id: Caller's tenant-scoped user id (e.g. ``U001``)
            role: Caller's role

        Returns:
            SessionContext whose first tag is ``tenant_id``
        """
        rules = await self._governance_rules.list_for_user(tenant_id, user_id)

        values_by_dimension: dict[GovernanceDimension, list[str]] = {
            dimension: [] for dimension in GovernanceDimension
        }
        for rule in rules:
            if rule.tenant_id != tenant_id:
                self._probe.foreign_tenant_rule_discarded(
                    tenant_id=tenant_id,
                    user_id=user_id,
                    rule_tenant_id=rule.tenant_id,
                )
                continue
            _merge_values(values_by_dimension[rule.dimension], rule)

        tags = [SessionTag(key=TENANT_ID_TAG, value=tenant_id)]
        for dimension, values in values_by_dimension.items():
            if values:
                tags.append(
                    SessionTag(key=dimension.value, value=VALUE_SEPARATOR.join(values))
                )

        self._probe.session_context_built(
            tenant_id=tenant_id,
            user_id=user_id,
            tag_keys=[tag.key for tag in tags],
        )
        return SessionContext(
            tenant_id=tenant_id, user_id=user_id, role=role, tags=tuple(tags)
        )


def _merge_values(merged: list[str], rule: GovernanceRule) -> None:
    for value in rule.values:
        value = value.strip()
        if value and value not in merged:
            merged.append(value)
