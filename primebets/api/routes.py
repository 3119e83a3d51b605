"""Core API routes: health, users, notifications, subscription, quiz, advice, bets."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from primebets import __version__
from primebets.advisor.advisory import (
    analyze_market_conditions,
    daily_advice,
    risk_alert,
    time_of_day_advice,
    weekday_advice,
)
from primebets.advisor.personalization import (
    kelly_stake,
    personalized_insights,
    strategy_for,
    suggested_stake,
)
from primebets.advisor.quiz import process_answers
from primebets.api.deps import get_ledger, get_notifications, get_runtime
from primebets.runtime import Runtime
from primebets.services import NotificationCenter, SubscriptionLedger
from primebets.storage.models import (
    BetRecord,
    BetRequest,
    BetSettleRequest,
    BettorProfile,
    HealthResponse,
    Notification,
    QuizRequest,
    SubscriptionRequest,
    User,
    UserRequest,
)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(runtime: Runtime = Depends(get_runtime)):
    """Health check."""
    return HealthResponse(
        status="ok",
        version=__version__,
        scheduler_running=runtime.scheduler.running,
        jobs=len(runtime.scheduler.list()),
    )


# ── Users ───────────────────────────────────────────────────


@router.get("/users", response_model=list[User])
async def list_users(runtime: Runtime = Depends(get_runtime)):
    return runtime.users.list()


@router.put("/users/{user_id}", response_model=User)
async def register_user(
    user_id: str, body: UserRequest, runtime: Runtime = Depends(get_runtime)
):
    return runtime.users.register(user_id, body.name, body.email)


# ── Notifications ───────────────────────────────────────────


@router.get("/users/{user_id}/notifications", response_model=list[Notification])
async def list_notifications(
    user_id: str,
    unread_only: bool = False,
    limit: int | None = Query(default=None, ge=1, le=200),
    notifications: NotificationCenter = Depends(get_notifications),
):
    if unread_only:
        return notifications.list_unread(user_id)[:limit]
    return notifications.list(user_id, limit=limit)


@router.get("/users/{user_id}/notifications/stats")
async def notification_stats(
    user_id: str, notifications: NotificationCenter = Depends(get_notifications)
):
    return notifications.stats(user_id)


@router.post("/users/{user_id}/notifications/{notification_id}/read")
async def mark_read(
    user_id: str,
    notification_id: str,
    notifications: NotificationCenter = Depends(get_notifications),
):
    if not notifications.mark_read(user_id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"status": "read", "id": notification_id}


@router.post("/users/{user_id}/notifications/read-all")
async def mark_all_read(
    user_id: str, notifications: NotificationCenter = Depends(get_notifications)
):
    return {"updated": notifications.mark_all_read(user_id)}


@router.delete("/users/{user_id}/notifications")
async def clear_notifications(
    user_id: str, notifications: NotificationCenter = Depends(get_notifications)
):
    notifications.clear_all(user_id)
    return {"status": "cleared"}


@router.delete("/users/{user_id}/notifications/{notification_id}")
async def delete_notification(
    user_id: str,
    notification_id: str,
    notifications: NotificationCenter = Depends(get_notifications),
):
    if not notifications.delete(user_id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"status": "deleted", "id": notification_id}


# ── Subscription ────────────────────────────────────────────


@router.get("/users/{user_id}/subscription")
async def get_subscription(user_id: str, ledger: SubscriptionLedger = Depends(get_ledger)):
    return ledger.status(user_id)


@router.post("/users/{user_id}/subscription")
async def subscribe(
    user_id: str,
    body: SubscriptionRequest,
    runtime: Runtime = Depends(get_runtime),
):
    """Charge the plan price, then create (or extend) the subscription."""
    price = runtime.config.payments.prices.get(body.plan)
    result = await runtime.gateway.charge(user_id, body.plan, price.price if price else 0.0)
    if not result.success:
        raise HTTPException(status_code=402, detail=result.error or "Payment declined")

    current = runtime.ledger.peek(user_id)
    if current and current.plan == body.plan and runtime.ledger.is_premium(user_id):
        sub = runtime.ledger.renew(user_id, payment_id=result.payment_id)
        if not body.auto_renew:
            sub.auto_renew = False
            runtime.ledger.save(sub)
    else:
        sub = runtime.ledger.create(
            user_id, body.plan, auto_renew=body.auto_renew, payment_id=result.payment_id
        )
    runtime.notifications.notify(
        user_id,
        "update",
        "🎉 Premium activated!",
        f"Welcome to PrimeBets Premium ({body.plan}). Every feature is unlocked.",
        {"event": "activated", "plan": body.plan},
    )
    return runtime.ledger.status(user_id) | {"payment_id": sub.last_payment_id}


@router.delete("/users/{user_id}/subscription")
async def cancel_subscription(user_id: str, ledger: SubscriptionLedger = Depends(get_ledger)):
    if not ledger.cancel(user_id):
        raise HTTPException(status_code=404, detail="No subscription")
    return ledger.status(user_id)


# ── Quiz / profile ──────────────────────────────────────────


@router.post("/users/{user_id}/quiz", response_model=BettorProfile)
async def submit_quiz(user_id: str, body: QuizRequest, runtime: Runtime = Depends(get_runtime)):
    profile = process_answers(body.answers, rng=runtime.rng)
    profile.created_at = runtime.clock.now()
    runtime.profiles.save(user_id, profile)
    return profile


@router.get("/users/{user_id}/profile", response_model=BettorProfile)
async def get_profile(user_id: str, runtime: Runtime = Depends(get_runtime)):
    profile = runtime.profiles.get(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="No profile, take the quiz first")
    return profile


# ── Advice ──────────────────────────────────────────────────


def _style(runtime: Runtime, user_id: str) -> str:
    profile = runtime.profiles.get(user_id)
    return profile.style if profile else "balanced"


@router.get("/users/{user_id}/advice")
async def get_advice(
    user_id: str,
    bankroll: float = Query(default=1000.0, gt=0),
    runtime: Runtime = Depends(get_runtime),
):
    """Today's advice, strategy and any risk alert for the user's style."""
    now = runtime.clock.now()
    style = _style(runtime, user_id)
    stats = runtime.history.statistics(user_id)
    alert = risk_alert(runtime.history.list(user_id), bankroll, now)
    return {
        "style": style,
        "advice": asdict(daily_advice(style, stats, analyze_market_conditions(runtime.rng), now)),
        "strategy": asdict(strategy_for(style)),
        "insights": personalized_insights(style, stats),
        "risk_alert": asdict(alert) if alert else None,
        "time_tip": time_of_day_advice(now),
        "weekday_tip": weekday_advice(now),
    }


@router.get("/users/{user_id}/stake")
async def get_stake(
    user_id: str,
    probability: float = Query(gt=0, le=100),
    odds: float = Query(gt=1),
    bankroll: float = Query(gt=0),
    runtime: Runtime = Depends(get_runtime),
):
    """Fractional Kelly stake for a bet, capped by the style's flat stake."""
    style = _style(runtime, user_id)
    return {
        "style": style,
        "stake": kelly_stake(probability, odds, bankroll, style),
        "max_stake": suggested_stake(style, bankroll),
    }


# ── Bets ────────────────────────────────────────────────────


@router.post("/users/{user_id}/bets", response_model=BetRecord)
async def add_bet(user_id: str, body: BetRequest, runtime: Runtime = Depends(get_runtime)):
    return runtime.history.add(user_id, body.match, body.odds, body.stake, market=body.market)


@router.get("/users/{user_id}/bets", response_model=list[BetRecord])
async def list_bets(user_id: str, runtime: Runtime = Depends(get_runtime)):
    return runtime.history.list(user_id)


@router.get("/users/{user_id}/bets/stats")
async def bet_stats(user_id: str, runtime: Runtime = Depends(get_runtime)):
    return runtime.history.statistics(user_id)


@router.post("/users/{user_id}/bets/{bet_id}/settle", response_model=BetRecord)
async def settle_bet(
    user_id: str,
    bet_id: str,
    body: BetSettleRequest,
    runtime: Runtime = Depends(get_runtime),
):
    bet = runtime.history.settle(user_id, bet_id, body.result)
    if bet is None:
        raise HTTPException(status_code=404, detail="Bet not found")
    logger.info(f"Bet settled: {user_id} {bet_id} → {body.result}")
    return bet
