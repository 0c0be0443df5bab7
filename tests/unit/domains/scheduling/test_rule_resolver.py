from clinicbot.domains.scheduling.application.services import RuleResolver, get_effective_provider_rules
from clinicbot.domains.scheduling.domain.entities import NotificationRule
from clinicbot.domains.scheduling.domain.value_objects import TargetRole


def _rule(rule_id, role, minutes, template, provider_id=None, is_active=True):
    return NotificationRule(
        id=rule_id,
        target_role=role,
        minutes_before=minutes,
        template_name=template,
        provider_id=provider_id,
        is_active=is_active,
    )


class TestGetEffectiveProviderRules:
    """Provider-specific rules override global ones at the same lead time."""

    def test_specific_rule_replaces_global_at_same_threshold(self):
        global_60 = _rule("g60", TargetRole.PROVIDER, 60, "provider_1h")
        specific_60 = _rule("p60", TargetRole.PROVIDER, 60, "provider_1h_custom", provider_id="P")

        effective = get_effective_provider_rules([global_60], "P", [specific_60])

        assert specific_60 in effective
        assert global_60 not in effective

    def test_other_providers_keep_global_rule(self):
        global_60 = _rule("g60", TargetRole.PROVIDER, 60, "provider_1h")
        specific_60 = _rule("p60", TargetRole.PROVIDER, 60, "provider_1h_custom", provider_id="P")

        effective = get_effective_provider_rules([global_60], "Q", [specific_60])

        assert effective == [global_60]

    def test_different_thresholds_are_independent(self):
        global_60 = _rule("g60", TargetRole.PROVIDER, 60, "provider_1h")
        global_1440 = _rule("g1440", TargetRole.PROVIDER, 1440, "provider_24h")
        specific_60 = _rule("p60", TargetRole.PROVIDER, 60, "provider_1h_custom", provider_id="P")

        effective = get_effective_provider_rules([global_60, global_1440], "P", [specific_60])

        assert {r.id for r in effective} == {"p60", "g1440"}


class TestRuleResolver:
    def test_thresholds_are_distinct_and_sorted(self):
        resolver = RuleResolver(
            [
                _rule("a", TargetRole.PATIENT, 1440, "reminder_24h"),
                _rule("b", TargetRole.PROVIDER, 60, "provider_1h"),
                _rule("c", TargetRole.PATIENT, 60, "reminder_1h"),
            ]
        )

        assert resolver.thresholds() == [60, 1440]

    def test_inactive_rules_are_ignored(self):
        resolver = RuleResolver([_rule("a", TargetRole.PATIENT, 60, "reminder_1h", is_active=False)])

        assert not resolver
        assert resolver.thresholds() == []

    def test_rules_for_combines_patient_and_effective_provider_rules(self):
        patient_60 = _rule("pat60", TargetRole.PATIENT, 60, "reminder_1h")
        global_60 = _rule("g60", TargetRole.PROVIDER, 60, "provider_1h")
        specific_60 = _rule("p60", TargetRole.PROVIDER, 60, "provider_1h_custom", provider_id="P")
        resolver = RuleResolver([patient_60, global_60, specific_60])

        assert {r.id for r in resolver.rules_for("P", 60)} == {"pat60", "p60"}
        assert {r.id for r in resolver.rules_for("Q", 60)} == {"pat60", "g60"}
        assert resolver.rules_for("P", 1440) == []
