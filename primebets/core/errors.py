"""Domain exceptions."""

from __future__ import annotations


class PrimeBetsError(Exception):
    """Base class for all PrimeBets errors."""


class ValidationError(PrimeBetsError):
    """Invalid input passed to a programmatic operation."""


class UnknownAutomationError(PrimeBetsError):
    """Configuration update for a job name that does not exist."""

    def __init__(self, name: str):
        super().__init__(f"Unknown automation: {name}")
        self.name = name


class QuizIncompleteError(ValidationError):
    """Not every quiz question has an answer."""
