"""AutomationContext: the collaborators every handler runs against."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from primebets.core.clock import Clock
from primebets.core.config.schema import PaymentsConfig
from primebets.services.history import BetHistory
from primebets.services.notifications import NotificationCenter
from primebets.services.payments import PaymentGateway
from primebets.services.profiles import ProfileStore
from primebets.services.subscriptions import SubscriptionLedger
from primebets.services.users import UserDirectory
from primebets.storage.store import KeyValueStore


@dataclass
class AutomationContext:
    store: KeyValueStore
    clock: Clock
    users: UserDirectory
    ledger: SubscriptionLedger
    notifications: NotificationCenter
    history: BetHistory
    profiles: ProfileStore
    gateway: PaymentGateway
    payments: PaymentsConfig = field(default_factory=PaymentsConfig)
    rng: random.Random = field(default_factory=random.Random)

    def plan_price(self, plan: str) -> float:
        price = self.payments.prices.get(plan)
        return price.price if price else 0.0
