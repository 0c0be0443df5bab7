"""Notification Rule Entity."""

from dataclasses import dataclass

from ..value_objects.statuses import TargetRole


@dataclass(frozen=True)
class NotificationRule:
    """A lead-time notification rule.

    Rules without a provider_id are global. Provider-specific rules only
    exist for provider-targeted notifications and override the global rule
    at the same minutes_before for that provider.
    """

    id: str
    target_role: TargetRole
    minutes_before: int
    template_name: str
    provider_id: str | None = None
    is_active: bool = True

    @property
    def is_global(self) -> bool:
        return self.provider_id is None

    @property
    def targets_patient(self) -> bool:
        return self.target_role is TargetRole.PATIENT
