"""Tests for primebets.api."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from primebets.api.app import create_app, install_runtime


def _app(runtime):
    application = create_app(runtime.config)
    # Lifespan does not run under ASGITransport; install state manually
    install_runtime(application, runtime)
    runtime.automations.initialize_all()
    return application


@pytest.fixture
async def client(runtime):
    async with AsyncClient(
        transport=ASGITransport(app=_app(runtime)), base_url="http://test"
    ) as c:
        yield c


@pytest.fixture
async def declining_client(make_runtime):
    async with AsyncClient(
        transport=ASGITransport(app=_app(make_runtime(approve=False))), base_url="http://test"
    ) as c:
        yield c


_ANSWERS = [
    {"question_id": q, "option_id": f"{p}_1"}
    for q, p in enumerate(["freq", "amount", "risk", "type", "odds", "sport"], start=1)
]


# --- Health / users ---

@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["jobs"] == 6


@pytest.mark.asyncio
async def test_register_and_list_users(client):
    resp = await client.put("/users/ana", json={"name": "Ana", "email": "ana@example.com"})
    assert resp.status_code == 200
    assert resp.json()["user_id"] == "ana"

    resp = await client.get("/users")
    assert [u["user_id"] for u in resp.json()] == ["ana"]


@pytest.mark.asyncio
async def test_register_invalid_user(client):
    resp = await client.put("/users/ana", json={"name": "A"})
    assert resp.status_code == 400


# --- Subscription ---

@pytest.mark.asyncio
async def test_subscribe_flow(client, runtime):
    resp = await client.get("/users/ana/subscription")
    assert resp.json()["is_premium"] is False

    resp = await client.post("/users/ana/subscription", json={"plan": "quarterly"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_premium"] is True
    assert body["subscription"]["plan"] == "quarterly"
    assert body["payment_id"].startswith("txn_")
    assert runtime.notifications.list("ana")[0].data["event"] == "activated"

    resp = await client.delete("/users/ana/subscription")
    assert resp.json()["subscription"]["status"] == "cancelled"
    assert resp.json()["is_premium"] is True


@pytest.mark.asyncio
async def test_subscribe_declined(declining_client):
    resp = await declining_client.post("/users/ana/subscription", json={"plan": "monthly"})
    assert resp.status_code == 402
    resp = await declining_client.get("/users/ana/subscription")
    assert resp.json()["subscription"] is None


@pytest.mark.asyncio
async def test_cancel_without_subscription(client):
    resp = await client.delete("/users/ghost/subscription")
    assert resp.status_code == 404


# --- Notifications ---

@pytest.mark.asyncio
async def test_notification_endpoints(client, runtime):
    first = runtime.notifications.notify("ana", "update", "one", "m")
    runtime.notifications.notify("ana", "renewal", "two", "m")

    resp = await client.get("/users/ana/notifications", params={"limit": 1})
    assert [n["title"] for n in resp.json()] == ["two"]

    resp = await client.post(f"/users/ana/notifications/{first.id}/read")
    assert resp.status_code == 200
    resp = await client.post("/users/ana/notifications/notif_missing/read")
    assert resp.status_code == 404

    resp = await client.get("/users/ana/notifications", params={"unread_only": True})
    assert [n["title"] for n in resp.json()] == ["two"]

    resp = await client.post("/users/ana/notifications/read-all")
    assert resp.json() == {"updated": 1}
    resp = await client.get("/users/ana/notifications/stats")
    assert resp.json()["unread"] == 0

    resp = await client.delete(f"/users/ana/notifications/{first.id}")
    assert resp.status_code == 200
    resp = await client.delete(f"/users/ana/notifications/{first.id}")
    assert resp.status_code == 404
    resp = await client.get("/users/ana/notifications")
    assert [n["title"] for n in resp.json()] == ["two"]

    await client.delete("/users/ana/notifications")
    resp = await client.get("/users/ana/notifications")
    assert resp.json() == []


# --- Quiz / bets ---

@pytest.mark.asyncio
async def test_quiz_and_profile(client):
    resp = await client.get("/users/ana/profile")
    assert resp.status_code == 404

    resp = await client.post("/users/ana/quiz", json={"answers": _ANSWERS})
    assert resp.status_code == 200
    assert resp.json()["style"] == "conservative"

    resp = await client.get("/users/ana/profile")
    assert resp.json()["style"] == "conservative"


@pytest.mark.asyncio
async def test_incomplete_quiz(client):
    resp = await client.post("/users/ana/quiz", json={"answers": _ANSWERS[:3]})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_bets(client):
    resp = await client.post(
        "/users/ana/bets", json={"match": "Flamengo vs Palmeiras", "odds": 2.5, "stake": 20}
    )
    assert resp.status_code == 200
    bet_id = resp.json()["id"]

    resp = await client.post(f"/users/ana/bets/{bet_id}/settle", json={"result": "win"})
    assert resp.json()["profit"] == 30.0

    resp = await client.get("/users/ana/bets/stats")
    assert resp.json()["wins"] == 1

    resp = await client.post("/users/ana/bets/bet_missing/settle", json={"result": "loss"})
    assert resp.status_code == 404

    resp = await client.post("/users/ana/bets", json={"match": "X", "odds": 0.5, "stake": 20})
    assert resp.status_code == 400


# --- Automations ---

@pytest.mark.asyncio
async def test_list_automations(client):
    resp = await client.get("/automations")
    assert resp.status_code == 200
    assert len(resp.json()) == 6


@pytest.mark.asyncio
async def test_stop_and_restart(client, runtime):
    resp = await client.post("/automations/odds-monitoring/stop")
    assert resp.status_code == 200
    assert runtime.scheduler.get("odds-monitoring").enabled is False

    resp = await client.post("/automations/odds-monitoring/restart")
    assert runtime.scheduler.get("odds-monitoring").enabled is True

    resp = await client.post("/automations/nope/stop")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_stop_all_restart_all(client):
    await client.post("/automations/stop-all")
    resp = await client.get("/automations")
    assert not any(j["enabled"] for j in resp.json())

    await client.post("/automations/restart-all")
    resp = await client.get("/automations")
    assert all(j["enabled"] for j in resp.json())


@pytest.mark.asyncio
async def test_run_now(client, runtime):
    resp = await client.post("/automations/platform-updates/run")
    assert resp.json()["status"] == "started"
    await runtime.scheduler.shutdown()
    assert runtime.scheduler.get("platform-updates").run_count == 1


@pytest.mark.asyncio
async def test_config_endpoints(client):
    resp = await client.patch("/automations/premium-checks/config", json={"enabled": False})
    assert resp.status_code == 200
    assert resp.json()["enabled"] is False

    resp = await client.get("/automations/config")
    assert resp.json()["premium-checks"]["enabled"] is False

    resp = await client.patch("/automations/nope/config", json={"enabled": False})
    assert resp.status_code == 404
    resp = await client.patch("/automations/premium-checks/config", json={"bogus": 1})
    assert resp.status_code == 400

    resp = await client.delete("/automations/config")
    assert resp.json()["premium-checks"]["enabled"] is True


# --- Advice ---

@pytest.mark.asyncio
async def test_advice_for_profile_style(client, runtime):
    await client.post("/users/ana/quiz", json={"answers": _ANSWERS})
    for _ in range(11):
        runtime.history.add("ana", "A vs B", odds=2.0, stake=10)

    resp = await client.get("/users/ana/advice", params={"bankroll": 500})
    assert resp.status_code == 200
    body = resp.json()
    assert body["style"] == "conservative"
    assert body["strategy"]["stake_pct"] == 2
    assert body["advice"]["tips"]
    assert body["risk_alert"]["severity"] == "high"


@pytest.mark.asyncio
async def test_advice_without_bets(client):
    resp = await client.get("/users/ghost/advice")
    body = resp.json()
    assert body["style"] == "balanced"
    assert body["risk_alert"] is None


@pytest.mark.asyncio
async def test_kelly_stake_endpoint(client):
    resp = await client.get(
        "/users/ghost/stake", params={"probability": 60, "odds": 2.0, "bankroll": 1000}
    )
    assert resp.json() == {"style": "balanced", "stake": 30.0, "max_stake": 30.0}

    resp = await client.get(
        "/users/ghost/stake", params={"probability": 60, "odds": 1.0, "bankroll": 1000}
    )
    assert resp.status_code == 422
