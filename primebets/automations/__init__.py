"""Automation handlers and their manager."""

from primebets.automations.context import AutomationContext
from primebets.automations.manager import AutomationManager

__all__ = ["AutomationContext", "AutomationManager"]
