"""ProfileStore: persisted bettor profiles (quiz results)."""

from __future__ import annotations

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from primebets.storage.models import BettorProfile
from primebets.storage.store import KeyValueStore

PREFIX = "profile:"


class ProfileStore:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def save(self, user_id: str, profile: BettorProfile) -> None:
        """Replace the user's profile wholesale."""
        self.store.set_json(f"{PREFIX}{user_id}", profile.model_dump(mode="json"))
        logger.info(f"Profile saved: {user_id} → {profile.style} ({profile.confidence}%)")

    def get(self, user_id: str) -> BettorProfile | None:
        data = self.store.get_json(f"{PREFIX}{user_id}")
        if not isinstance(data, dict):
            return None
        try:
            return BettorProfile.model_validate(data)
        except PydanticValidationError:
            logger.warning(f"Corrupt profile for {user_id}, treating as absent")
            return None

    def remove(self, user_id: str) -> bool:
        return self.store.remove(f"{PREFIX}{user_id}")
