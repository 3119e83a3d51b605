"""UserDirectory: registered users, the population fleet-wide jobs iterate."""

from __future__ import annotations

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from primebets.core.clock import Clock, SystemClock
from primebets.core.errors import ValidationError
from primebets.services.validation import validate_email, validate_name
from primebets.storage.models import User
from primebets.storage.store import KeyValueStore

PREFIX = "user:"


class UserDirectory:
    def __init__(self, store: KeyValueStore, clock: Clock | None = None):
        self.store = store
        self.clock = clock or SystemClock()

    def register(self, user_id: str, name: str, email: str | None = None) -> User:
        """Create or update a user. Raises ``ValidationError`` on bad input."""
        if not user_id or not user_id.strip():
            raise ValidationError("user_id is required")
        check = validate_name(name)
        if not check:
            raise ValidationError(check.error)
        if email is not None:
            check = validate_email(email)
            if not check:
                raise ValidationError(check.error)

        existing = self.get(user_id)
        user = User(
            user_id=user_id,
            name=name.strip(),
            email=email,
            created_at=existing.created_at if existing else self.clock.now(),
        )
        self.store.set_json(f"{PREFIX}{user_id}", user.model_dump(mode="json"))
        if existing is None:
            logger.info(f"User registered: {user_id}")
        return user

    def get(self, user_id: str) -> User | None:
        data = self.store.get_json(f"{PREFIX}{user_id}")
        if not isinstance(data, dict):
            return None
        try:
            return User.model_validate(data)
        except PydanticValidationError:
            logger.warning(f"Corrupt user record for {user_id}, treating as absent")
            return None

    def list_ids(self) -> list[str]:
        return [key[len(PREFIX):] for key in self.store.keys(PREFIX)]

    def list(self) -> list[User]:
        users = []
        for user_id in self.list_ids():
            user = self.get(user_id)
            if user is not None:
                users.append(user)
        return users

    def remove(self, user_id: str) -> bool:
        removed = self.store.remove(f"{PREFIX}{user_id}")
        if removed:
            logger.info(f"User removed: {user_id}")
        return removed
