"""Runtime: builds the object graph from a Config.

config → store → services → scheduler → automation manager
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from primebets.automations import AutomationContext, AutomationManager
from primebets.core.channels import WebhookPush
from primebets.core.clock import Clock, SystemClock
from primebets.core.config.schema import Config
from primebets.core.scheduler import JobScheduler
from primebets.services import (
    BetHistory,
    NotificationCenter,
    ProfileStore,
    SimulatedGateway,
    SubscriptionLedger,
    UserDirectory,
)
from primebets.services.payments import PaymentGateway
from primebets.storage import KeyValueStore


@dataclass
class Runtime:
    config: Config
    clock: Clock
    store: KeyValueStore
    users: UserDirectory
    ledger: SubscriptionLedger
    notifications: NotificationCenter
    history: BetHistory
    profiles: ProfileStore
    gateway: PaymentGateway
    scheduler: JobScheduler
    automations: AutomationManager
    rng: random.Random

    async def shutdown(self) -> None:
        await self.scheduler.shutdown()
        await self.notifications.drain()


def build_runtime(
    config: Config,
    clock: Clock | None = None,
    gateway: PaymentGateway | None = None,
    rng: random.Random | None = None,
) -> Runtime:
    clock = clock or SystemClock(config.app.timezone)
    rng = rng or random.Random()
    store = KeyValueStore(str(config.db_path))

    push = WebhookPush(config.notifications.push_webhook_url) if config.push_enabled else None
    notifications = NotificationCenter(
        store,
        clock,
        max_history=config.notifications.max_history,
        default_ttl_days=config.notifications.default_ttl_days,
        push=push,
    )
    users = UserDirectory(store, clock)
    ledger = SubscriptionLedger(store, clock)
    history = BetHistory(store, clock)
    profiles = ProfileStore(store)
    gateway = gateway or SimulatedGateway(
        success_rate=config.payments.success_rate,
        delay_s=config.payments.delay_s,
        rng=rng,
    )

    scheduler = JobScheduler(
        clock=clock,
        store=store,
        poll_interval_s=config.scheduler.poll_interval_s,
        handler_timeout_s=config.scheduler.handler_timeout_s,
    )
    ctx = AutomationContext(
        store=store,
        clock=clock,
        users=users,
        ledger=ledger,
        notifications=notifications,
        history=history,
        profiles=profiles,
        gateway=gateway,
        payments=config.payments,
        rng=rng,
    )
    automations = AutomationManager(
        scheduler, ctx, defaults=config.automations, timezone=config.app.timezone
    )
    return Runtime(
        config=config,
        clock=clock,
        store=store,
        users=users,
        ledger=ledger,
        notifications=notifications,
        history=history,
        profiles=profiles,
        gateway=gateway,
        scheduler=scheduler,
        automations=automations,
        rng=rng,
    )
