"""PrimeBets advisor: betting profiles, predictions and background automations."""

__version__ = "0.3.0"
