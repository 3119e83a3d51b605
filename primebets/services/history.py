"""BetHistory: per-user bet records and derived statistics."""

from __future__ import annotations

import uuid
from datetime import datetime

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from primebets.core.clock import Clock, SystemClock
from primebets.core.errors import ValidationError
from primebets.services.validation import validate_odds, validate_stake
from primebets.storage.models import BetRecord
from primebets.storage.store import KeyValueStore

PREFIX = "bets:"


class BetHistory:
    def __init__(self, store: KeyValueStore, clock: Clock | None = None):
        self.store = store
        self.clock = clock or SystemClock()

    def _load(self, user_id: str) -> list[BetRecord]:
        data = self.store.get_json(f"{PREFIX}{user_id}", [])
        if not isinstance(data, list):
            return []
        bets = []
        for raw in data:
            try:
                bets.append(BetRecord.model_validate(raw))
            except PydanticValidationError:
                logger.debug(f"Dropping corrupt bet record for {user_id}")
        return bets

    def _save(self, user_id: str, bets: list[BetRecord]) -> None:
        self.store.set_json(f"{PREFIX}{user_id}", [b.model_dump(mode="json") for b in bets])

    def add(
        self,
        user_id: str,
        match: str,
        odds: float,
        stake: float,
        market: str = "match_result",
        placed_at: datetime | None = None,
    ) -> BetRecord:
        for check in (validate_odds(odds), validate_stake(stake)):
            if not check:
                raise ValidationError(check.error)
        bet = BetRecord(
            id=f"bet_{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            match=match,
            market=market,
            odds=odds,
            stake=stake,
            placed_at=placed_at or self.clock.now(),
        )
        bets = self._load(user_id)
        bets.append(bet)
        self._save(user_id, bets)
        logger.debug(f"Bet added: {user_id} {match} @ {odds}")
        return bet

    def settle(self, user_id: str, bet_id: str, result: str) -> BetRecord | None:
        """Record a win/loss and compute profit. None if the bet does not exist."""
        if result not in ("win", "loss"):
            raise ValidationError(f"Invalid result: {result}")
        bets = self._load(user_id)
        for bet in bets:
            if bet.id == bet_id:
                bet.result = result
                bet.settled_at = self.clock.now()
                bet.profit = round(bet.stake * (bet.odds - 1), 2) if result == "win" else -bet.stake
                self._save(user_id, bets)
                return bet
        return None

    def list(self, user_id: str, since: datetime | None = None) -> list[BetRecord]:
        bets = self._load(user_id)
        if since is not None:
            bets = [b for b in bets if b.placed_at >= since]
        return bets

    def statistics(self, user_id: str) -> dict:
        """Lifetime totals, win rate over settled bets and streaks."""
        bets = self._load(user_id)
        wins = sum(1 for b in bets if b.result == "win")
        losses = sum(1 for b in bets if b.result == "loss")
        settled = sorted((b for b in bets if b.result != "pending"), key=lambda b: b.placed_at)

        best = run = 0
        for bet in settled:
            run = run + 1 if bet.result == "win" else 0
            best = max(best, run)

        current = 0
        if settled:
            last = settled[-1].result
            for bet in reversed(settled):
                if bet.result != last:
                    break
                current += 1
            if last == "loss":
                current = -current

        return {
            "total_bets": len(bets),
            "wins": wins,
            "losses": losses,
            "pending": len(bets) - wins - losses,
            "win_rate": round(wins / (wins + losses) * 100, 1) if wins + losses else 0.0,
            "total_profit": round(sum(b.profit or 0.0 for b in bets), 2),
            "average_odds": (
                round(sum(b.odds for b in settled) / len(settled), 2) if settled else 0.0
            ),
            "best_streak": best,
            "current_streak": current,
        }
