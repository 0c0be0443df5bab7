from .delivery_service import NotificationDeliveryService
from .rule_resolver import RuleResolver, get_effective_provider_rules
from .template_renderer import TemplateRenderer

__all__ = [
    "NotificationDeliveryService",
    "RuleResolver",
    "TemplateRenderer",
    "get_effective_provider_rules",
]
