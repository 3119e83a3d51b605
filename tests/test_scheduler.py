"""Tests for primebets.core.scheduler."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from primebets.core.scheduler import ClockRule, IntervalRule, JobScheduler
from primebets.core.scheduler.scheduler import STATE_KEY


@pytest.fixture
def sched(clock):
    return JobScheduler(clock=clock, poll_interval_s=0.01, handler_timeout_s=5)


# ── Rules ──────────────────────────────────────────────────


def test_clock_rule_past_target_rolls_to_tomorrow():
    rule = ClockRule(8, 0, timezone="UTC")
    now = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
    assert rule.next_after(now) == datetime(2024, 1, 11, 8, 0, tzinfo=timezone.utc)


def test_clock_rule_future_target_is_today():
    rule = ClockRule.parse("10:30", timezone="UTC")
    now = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
    assert rule.next_after(now) == datetime(2024, 1, 10, 10, 30, tzinfo=timezone.utc)


def test_clock_rule_equal_to_now_counts_as_passed():
    rule = ClockRule(8, 0, timezone="UTC")
    now = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)
    assert rule.next_after(now) == datetime(2024, 1, 11, 8, 0, tzinfo=timezone.utc)


def test_clock_rule_weekday():
    """2024-01-10 is a Wednesday → next Monday is the 15th."""
    rule = ClockRule(9, 0, day_of_week="mon", timezone="UTC")
    now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
    nxt = rule.next_after(now)
    assert nxt == datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
    assert nxt.weekday() == 0


def test_clock_rule_local_timezone():
    rule = ClockRule(8, 0, timezone="America/Sao_Paulo")
    now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)  # 09:00 in São Paulo
    assert rule.next_after(now) == datetime(2024, 1, 11, 11, 0, tzinfo=timezone.utc)


def test_clock_rule_rejects_bad_time():
    with pytest.raises(ValueError):
        ClockRule(24, 0)


def test_interval_rule():
    rule = IntervalRule.minutes(15)
    now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
    assert rule.next_after(now) == now + timedelta(minutes=15)
    assert rule.describe() == "every 15min"
    assert IntervalRule.minutes(360).describe() == "every 6h"
    with pytest.raises(ValueError):
        IntervalRule(0)


# ── Registration & control ─────────────────────────────────


async def test_register_arms_next_run(sched, clock):
    job = sched.register("tick", IntervalRule.minutes(5), AsyncMock())
    assert job.enabled
    assert job.next_run_at == clock.now() + timedelta(minutes=5)


async def test_register_then_stop_never_fires(sched, clock):
    handler = AsyncMock()
    sched.register("tick", IntervalRule.minutes(1), handler)
    sched.stop("tick")

    clock.advance(minutes=10)
    assert await sched.run_pending() == []
    handler.assert_not_awaited()
    assert sched.get("tick").next_run_at is None


async def test_stop_is_idempotent_and_ignores_unknown(sched):
    sched.register("tick", IntervalRule.minutes(1), AsyncMock())
    sched.stop("tick")
    sched.stop("tick")
    sched.stop("nope")
    assert sched.get("tick").enabled is False


async def test_run_immediately_runs_exactly_once(sched, clock):
    handler = AsyncMock()
    sched.register("boot", IntervalRule.minutes(60), handler, run_immediately=True)

    tasks = await sched.run_pending()
    await asyncio.gather(*tasks)
    assert await sched.run_pending() == []

    handler.assert_awaited_once()
    job = sched.get("boot")
    assert job.run_count == 1
    assert job.next_run_at == clock.now() + timedelta(minutes=60)


async def test_due_job_fires_and_rearms(sched, clock):
    handler = AsyncMock()
    sched.register("tick", IntervalRule.minutes(5), handler)

    assert await sched.run_pending() == []
    clock.advance(minutes=5)
    await asyncio.gather(*await sched.run_pending())

    handler.assert_awaited_once()
    assert sched.get("tick").next_run_at == clock.now() + timedelta(minutes=5)


async def test_overlapping_firing_is_skipped(sched, clock):
    release = asyncio.Event()
    calls = 0

    async def slow():
        nonlocal calls
        calls += 1
        await release.wait()

    sched.register("slow", IntervalRule.minutes(1), slow, run_immediately=True)
    [task] = await sched.run_pending()
    await asyncio.sleep(0)
    assert sched.is_running("slow")

    clock.advance(minutes=2)
    assert await sched.run_pending() == []
    assert sched.get("slow").skipped_count == 1

    release.set()
    await task
    assert calls == 1
    assert not sched.is_running("slow")


async def test_restart_arms_relative_to_now(sched, clock):
    sched.register("tick", IntervalRule.minutes(5), AsyncMock())
    sched.stop("tick")
    clock.advance(hours=1)

    sched.restart("tick")
    job = sched.get("tick")
    assert job.enabled
    assert job.next_run_at > clock.now()
    assert job.next_run_at == clock.now() + timedelta(minutes=5)


async def test_restart_unknown_is_noop(sched):
    sched.restart("nope")
    assert sched.get("nope") is None


async def test_reregister_replaces_previous(sched, clock):
    first, second = AsyncMock(), AsyncMock()
    old = sched.register("tick", IntervalRule.minutes(1), first)
    sched.register("tick", IntervalRule.minutes(1), second)

    assert old.enabled is False
    clock.advance(minutes=1)
    await asyncio.gather(*await sched.run_pending())
    first.assert_not_awaited()
    second.assert_awaited_once()
    assert len(sched.list()) == 1


async def test_handler_error_keeps_cadence(sched, clock):
    handler = AsyncMock(side_effect=RuntimeError("boom"))
    sched.register("bad", IntervalRule.minutes(1), handler, run_immediately=True)

    await asyncio.gather(*await sched.run_pending())

    job = sched.get("bad")
    assert job.failure_count == 1
    assert job.last_error == "boom"
    assert job.enabled
    assert job.next_run_at == clock.now() + timedelta(minutes=1)


async def test_handler_timeout(clock):
    sched = JobScheduler(clock=clock, handler_timeout_s=0.05)

    async def hang():
        await asyncio.sleep(10)

    sched.register("hang", IntervalRule.minutes(1), hang, run_immediately=True)
    await asyncio.gather(*await sched.run_pending())

    job = sched.get("hang")
    assert job.failure_count == 1
    assert "timed out" in job.last_error
    assert job.next_run_at is not None


async def test_stop_during_run_stays_stopped(sched):
    release = asyncio.Event()

    async def slow():
        await release.wait()

    sched.register("slow", IntervalRule.minutes(1), slow, run_immediately=True)
    [task] = await sched.run_pending()
    await asyncio.sleep(0)
    sched.stop("slow")
    release.set()
    await task

    job = sched.get("slow")
    assert job.run_count == 1
    assert job.next_run_at is None


async def test_run_now_does_not_touch_schedule(sched, clock):
    handler = AsyncMock()
    job = sched.register("tick", IntervalRule.minutes(30), handler)
    armed = job.next_run_at

    clock.advance(minutes=1)
    await sched.run_now("tick")
    handler.assert_awaited_once()
    assert sched.run_now("nope") is None
    assert job.next_run_at == armed


async def test_interval_cadence_ignores_handler_duration(sched, clock):
    async def slow():
        clock.advance(minutes=2)

    sched.register("tick", IntervalRule.minutes(5), slow)
    clock.advance(minutes=5)
    armed_at = clock.now()
    await asyncio.gather(*await sched.run_pending())

    job = sched.get("tick")
    assert clock.now() == armed_at + timedelta(minutes=2)
    assert job.next_run_at == armed_at + timedelta(minutes=5)


async def test_run_outlasting_its_slot_rearms_from_finish(sched, clock):
    async def slower():
        clock.advance(minutes=7)

    sched.register("tick", IntervalRule.minutes(5), slower)
    clock.advance(minutes=5)
    await asyncio.gather(*await sched.run_pending())
    assert sched.get("tick").next_run_at == clock.now() + timedelta(minutes=5)


async def test_list_reports_status(sched):
    sched.register("a", IntervalRule.minutes(1), AsyncMock())
    sched.register("b", ClockRule(8, 0), AsyncMock())
    sched.stop("b")

    status = {s.name: s for s in sched.list()}
    assert status["a"].enabled and status["a"].schedule == "every 1min"
    assert not status["b"].enabled and status["b"].next_run_at is None


# ── Persistence ────────────────────────────────────────────


async def test_run_metadata_persists_across_instances(store, clock):
    handler = AsyncMock()
    first = JobScheduler(clock=clock, store=store)
    first.register("tick", IntervalRule.minutes(60), handler, run_immediately=True)
    await asyncio.gather(*await first.run_pending())
    finished = clock.now()
    assert store.get_json(STATE_KEY)["tick"]["run_count"] == 1

    clock.advance(minutes=10)
    second = JobScheduler(clock=clock, store=store)
    job = second.register("tick", IntervalRule.minutes(60), handler)
    assert job.run_count == 1
    assert job.last_run_at == finished
    # Interval cadence resumes from the persisted last run
    assert job.next_run_at == finished + timedelta(minutes=60)


async def test_overdue_interval_job_runs_on_restart(store, clock):
    first = JobScheduler(clock=clock, store=store)
    first.register("tick", IntervalRule.minutes(60), AsyncMock(), run_immediately=True)
    await asyncio.gather(*await first.run_pending())

    clock.advance(hours=5)
    second = JobScheduler(clock=clock, store=store)
    job = second.register("tick", IntervalRule.minutes(60), AsyncMock())
    assert job.next_run_at == clock.now()


async def test_corrupt_state_is_ignored(store, clock):
    store.set(STATE_KEY, "{not json")
    sched = JobScheduler(clock=clock, store=store)
    job = sched.register("tick", IntervalRule.minutes(1), AsyncMock())
    assert job.run_count == 0


# ── Loop ───────────────────────────────────────────────────


async def test_start_loop_dispatches_and_shuts_down(sched):
    fired = asyncio.Event()

    async def handler():
        fired.set()

    sched.register("boot", IntervalRule.minutes(60), handler, run_immediately=True)
    loop_task = asyncio.create_task(sched.start())

    await asyncio.wait_for(fired.wait(), timeout=2)
    assert sched.running

    await sched.shutdown()
    await asyncio.wait_for(loop_task, timeout=2)
    assert not sched.running
    assert all(not s.enabled for s in sched.list())
