"""Webhook push: OS-level push delivery via an HTTP relay."""

from __future__ import annotations

import httpx
from loguru import logger

from primebets.storage.models import Notification


class WebhookPush:
    """POST each notification as JSON to a push relay.

    Delivery is best effort: failures are logged and reported as False,
    never raised.
    """

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def send(self, notification: Notification) -> bool:
        payload = {
            "user_id": notification.user_id,
            "title": notification.title,
            "body": notification.message,
            "tag": notification.type,
            "data": {"id": notification.id, **notification.data},
        }
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
                resp = await client.post(self.url, json=payload)
            if resp.status_code >= 400:
                logger.error(f"Push rejected ({resp.status_code}) for {notification.id}")
                return False
        except httpx.HTTPError as e:
            logger.error(f"Push delivery failed for {notification.id}: {e}")
            return False
        logger.debug(f"Push delivered: {notification.id} → {notification.user_id}")
        return True
