"""Tests for primebets.services.subscriptions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from primebets.core.errors import ValidationError
from primebets.services import SubscriptionLedger
from primebets.services.subscriptions import add_months, days_until, plan_period_end


@pytest.fixture
def ledger(store, clock):
    return SubscriptionLedger(store, clock)


# ── Date helpers ───────────────────────────────────────────


def test_add_months_clamps_day():
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2023, 1, 31), 1) == datetime(2023, 2, 28)
    assert add_months(datetime(2024, 11, 15), 3) == datetime(2025, 2, 15)


def test_plan_period_end():
    start = datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert plan_period_end(start, "monthly") == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert plan_period_end(start, "quarterly") == datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert plan_period_end(start, "yearly") == datetime(2025, 3, 1, tzinfo=timezone.utc)
    with pytest.raises(ValidationError):
        plan_period_end(start, "weekly")


def test_days_until_is_ceiling_floored_at_zero():
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert days_until(now + timedelta(days=3), now) == 3
    assert days_until(now + timedelta(days=2, hours=1), now) == 3
    assert days_until(now + timedelta(minutes=1), now) == 1
    assert days_until(now, now) == 0
    assert days_until(now - timedelta(days=2), now) == 0


# ── Ledger ─────────────────────────────────────────────────


def test_create_and_status(ledger, clock):
    sub = ledger.create("ana", "monthly")
    assert sub.status == "active"
    assert sub.expires_at == add_months(clock.now(), 1)
    assert ledger.is_premium("ana")

    status = ledger.status("ana")
    assert status["is_premium"] is True
    assert status["days_remaining"] == 31
    assert status["needs_renewal"] is False
    assert status["is_expired"] is False


def test_no_subscription(ledger):
    assert ledger.get("ghost") is None
    assert ledger.is_premium("ghost") is False
    assert ledger.days_remaining("ghost") == 0
    assert ledger.status("ghost")["subscription"] is None
    assert ledger.cancel("ghost") is False


def test_needs_renewal_window(ledger, clock):
    ledger.create("ana", "monthly")
    clock.set(add_months(clock.now(), 1) - timedelta(days=5))
    status = ledger.status("ana")
    assert status["days_remaining"] == 5
    assert status["needs_renewal"] is True


def test_lazy_expiry_on_read(ledger, store, clock):
    ledger.create("ana", "monthly")
    clock.advance(days=40)

    assert ledger.peek("ana").status == "active"
    sub = ledger.get("ana")
    assert sub.status == "expired"
    # persisted
    assert store.get_json("subscription:ana")["status"] == "expired"
    assert ledger.days_remaining("ana") == 0
    assert ledger.is_premium("ana") is False


def test_cancel_keeps_access_until_expiry(ledger, clock):
    ledger.create("ana", "monthly")
    assert ledger.cancel("ana") is True

    sub = ledger.get("ana")
    assert sub.status == "cancelled"
    assert sub.auto_renew is False
    assert ledger.is_premium("ana")

    clock.advance(days=40)
    assert ledger.is_premium("ana") is False
    assert ledger.days_remaining("ana") == 0


def test_cancel_after_expiry_keeps_expired_status(ledger, clock):
    ledger.create("ana", "monthly")
    clock.advance(days=40)

    assert ledger.cancel("ana") is True
    sub = ledger.peek("ana")
    assert sub.status == "expired"
    assert sub.auto_renew is False


def test_renew_extends_from_expiry_when_early(ledger, clock):
    sub = ledger.create("ana", "monthly")
    old_expiry = sub.expires_at
    clock.advance(days=20)

    renewed = ledger.renew("ana", payment_id="txn_1")
    assert renewed.expires_at == add_months(old_expiry, 1)
    assert renewed.last_payment_id == "txn_1"


def test_renew_extends_from_now_when_lapsed(ledger, clock):
    ledger.create("ana", "monthly")
    ledger.expire("ana")
    clock.advance(days=45)

    renewed = ledger.renew("ana")
    assert renewed.status == "active"
    assert renewed.expires_at == add_months(clock.now(), 1)
    assert renewed.reminders_sent == []
    assert renewed.lapse_handled is False


def test_renew_unknown(ledger):
    assert ledger.renew("ghost") is None


def test_corrupt_record_is_absent(ledger, store):
    store.set_json("subscription:ana", {"user_id": "ana", "plan": "lifetime"})
    assert ledger.get("ana") is None
    assert ledger.list_all() == []


def test_list_all(ledger):
    ledger.create("ana")
    ledger.create("bia", "yearly")
    assert {s.user_id for s in ledger.list_all()} == {"ana", "bia"}


def test_feature_access(ledger):
    assert ledger.feature_access("ana", "basic_predictions") is True
    assert ledger.feature_access("ana", "platform_comparison") is False
    ledger.create("ana")
    assert ledger.feature_access("ana", "platform_comparison") is True
