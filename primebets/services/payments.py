"""Payment gateway: protocol + simulated implementation."""

from __future__ import annotations

import asyncio
import random
import uuid
from dataclasses import dataclass
from typing import Protocol

from loguru import logger


@dataclass
class PaymentResult:
    success: bool
    payment_id: str | None = None
    error: str | None = None


class PaymentGateway(Protocol):
    async def charge(self, user_id: str, plan: str, amount: float) -> PaymentResult: ...


class SimulatedGateway:
    """Approves a charge with probability ``success_rate`` after ``delay_s``."""

    def __init__(
        self,
        success_rate: float = 0.8,
        delay_s: float = 1.0,
        rng: random.Random | None = None,
    ):
        self.success_rate = success_rate
        self.delay_s = delay_s
        self.rng = rng or random.Random()

    async def charge(self, user_id: str, plan: str, amount: float) -> PaymentResult:
        if self.delay_s > 0:
            await asyncio.sleep(self.delay_s)
        if self.rng.random() >= self.success_rate:
            logger.warning(f"Payment declined: {user_id} ({plan}, {amount:.2f})")
            return PaymentResult(success=False, error="Card declined")
        payment_id = f"txn_{uuid.uuid4().hex[:12]}"
        logger.info(f"Payment approved: {user_id} ({plan}, {amount:.2f}) → {payment_id}")
        return PaymentResult(success=True, payment_id=payment_id)
