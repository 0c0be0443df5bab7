# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Effective notification rule resolution with provider overrides.
# ============================================================================
"""Rule Resolver.

Patient rules are global only and always apply. Provider rules have two
tiers: a provider-specific rule replaces the global rule with the same
minutes_before for that provider; rules at different lead times are
independent and all apply.
"""

from collections.abc import Iterable

from ...domain.entities import NotificationRule
from ...domain.value_objects import TargetRole


def get_effective_provider_rules(
    global_rules: Iterable[NotificationRule],
    provider_id: str,
    specific_rules: Iterable[NotificationRule],
) -> list[NotificationRule]:
    """Provider-specific rules for `provider_id` plus the global rules they do not override."""
    provider_specific = [r for r in specific_rules if r.provider_id == provider_id]
    covered_minutes = {r.minutes_before for r in provider_specific}
    applicable_global = [r for r in global_rules if r.minutes_before not in covered_minutes]
    return provider_specific + applicable_global


class RuleResolver:
    """Partitions a set of active rules and answers "which rules apply here?"."""

    def __init__(self, rules: Iterable[NotificationRule]):
        active = [r for r in rules if r.is_active]
        self._all = active
        self._patient_global = [r for r in active if r.target_role is TargetRole.PATIENT and r.is_global]
        self._provider_global = [r for r in active if r.target_role is TargetRole.PROVIDER and r.is_global]
        self._provider_specific = [r for r in active if r.target_role is TargetRole.PROVIDER and not r.is_global]

    def __bool__(self) -> bool:
        return bool(self._all)

    def thresholds(self) -> list[int]:
        """Distinct minutes_before values across all active rules, ascending."""
        return sorted({r.minutes_before for r in self._all})

    def patient_rules(self, minutes_before: int | None = None) -> list[NotificationRule]:
        if minutes_before is None:
            return list(self._patient_global)
        return [r for r in self._patient_global if r.minutes_before == minutes_before]

    def effective_provider_rules(self, provider_id: str) -> list[NotificationRule]:
        return get_effective_provider_rules(self._provider_global, provider_id, self._provider_specific)

    def rules_for(self, provider_id: str, minutes_before: int) -> list[NotificationRule]:
        """Every rule applicable to an appointment with `provider_id` at one lead time."""
        provider_rules = [r for r in self.effective_provider_rules(provider_id) if r.minutes_before == minutes_before]
        return self.patient_rules(minutes_before) + provider_rules
