"""Shared fixtures: manual clock, tmp store, fully wired runtime."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from primebets.core.config import Config
from primebets.runtime import build_runtime
from primebets.services import SimulatedGateway
from primebets.storage import KeyValueStore

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def set(self, when: datetime) -> None:
        self.current = when

    def advance(self, **delta) -> datetime:
        self.current += timedelta(**delta)
        return self.current


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(str(tmp_path / "test.db"))


@pytest.fixture
def config(tmp_path):
    return Config(
        app={"timezone": "UTC"},
        database={"path": str(tmp_path / "test.db")},
        scheduler={"poll_interval_s": 0.01, "handler_timeout_s": 5},
        payments={"delay_s": 0},
    )


@pytest.fixture
def make_runtime(config, clock):
    """Factory: runtime over the tmp db with an always-approve (or always-decline) gateway."""

    def _make(approve: bool = True, **overrides):
        cfg = config.model_copy(update=overrides) if overrides else config
        gateway = SimulatedGateway(success_rate=1.0 if approve else 0.0, delay_s=0)
        return build_runtime(cfg, clock=clock, gateway=gateway, rng=random.Random(42))

    return _make


@pytest.fixture
def runtime(make_runtime):
    return make_runtime()
