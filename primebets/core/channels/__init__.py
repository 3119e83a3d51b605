"""Outbound notification channels."""

from primebets.core.channels.webhook import WebhookPush

__all__ = ["WebhookPush"]
