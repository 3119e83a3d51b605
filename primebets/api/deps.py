"""FastAPI dependency injection: pull singletons from app.state."""

from __future__ import annotations

from fastapi import Request

from primebets.automations import AutomationManager
from primebets.core.config.schema import Config
from primebets.runtime import Runtime
from primebets.services import NotificationCenter, SubscriptionLedger


def get_config(request: Request) -> Config:
    """Get Config singleton from app state."""
    return request.app.state.config


def get_runtime(request: Request) -> Runtime:
    """Get the whole object graph from app state."""
    return request.app.state.runtime


def get_manager(request: Request) -> AutomationManager:
    return request.app.state.runtime.automations


def get_notifications(request: Request) -> NotificationCenter:
    return request.app.state.runtime.notifications


def get_ledger(request: Request) -> SubscriptionLedger:
    return request.app.state.runtime.ledger
