"""Form-style validators.

Each returns a ``ValidationResult``; none of them raise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_STAKE = 10_000.0
MIN_ODDS, MAX_ODDS = 1.01, 1000.0


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.is_valid


OK = ValidationResult(True)


def _fail(error: str) -> ValidationResult:
    return ValidationResult(False, error)


def validate_email(email: str | None) -> ValidationResult:
    if not email:
        return _fail("Email is required")
    if not EMAIL_RE.match(email):
        return _fail("Invalid email")
    return OK


def validate_password(password: str | None) -> ValidationResult:
    if not password:
        return _fail("Password is required")
    if len(password) < 6:
        return _fail("Password must have at least 6 characters")
    return OK


def validate_name(name: str | None) -> ValidationResult:
    if not name or not name.strip():
        return _fail("Name is required")
    if len(name.strip()) < 2:
        return _fail("Name must have at least 2 characters")
    if len(name) > 100:
        return _fail("Name is too long")
    return OK


def validate_stake(stake: float | None) -> ValidationResult:
    if not stake or stake <= 0:
        return _fail("Stake must be greater than zero")
    if stake > MAX_STAKE:
        return _fail(f"Maximum stake is {MAX_STAKE:,.0f}")
    return OK


def validate_odds(odds: float | None) -> ValidationResult:
    if not odds or odds < MIN_ODDS:
        return _fail(f"Odds must be at least {MIN_ODDS}")
    if odds > MAX_ODDS:
        return _fail("Odds too high")
    return OK


def validate_cpf(cpf: str) -> ValidationResult:
    """Brazilian taxpayer id: 11 digits with two mod-11 check digits."""
    digits = re.sub(r"\D", "", cpf or "")
    if len(digits) != 11:
        return _fail("CPF must have 11 digits")
    if digits == digits[0] * 11:
        return _fail("Invalid CPF")
    for size in (9, 10):
        total = sum(int(d) * (size + 1 - i) for i, d in enumerate(digits[:size]))
        check = 11 - total % 11
        if check >= 10:
            check = 0
        if check != int(digits[size]):
            return _fail("Invalid CPF")
    return OK


def validate_phone(phone: str) -> ValidationResult:
    digits = re.sub(r"\D", "", phone or "")
    if not 10 <= len(digits) <= 11:
        return _fail("Invalid phone number")
    return OK


def validate_card_number(number: str) -> ValidationResult:
    number = re.sub(r"[\s-]", "", number or "")
    if not number.isdigit():
        return _fail("Card number must contain only digits")
    if not 13 <= len(number) <= 19:
        return _fail("Invalid card number")
    # Luhn
    total = 0
    for i, ch in enumerate(reversed(number)):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    if total % 10 != 0:
        return _fail("Invalid card number")
    return OK


def validate_cvv(cvv: str) -> ValidationResult:
    if not re.fullmatch(r"\d{3,4}", cvv or ""):
        return _fail("CVV must have 3 or 4 digits")
    return OK


def validate_card_expiry(month: str, year: str, now: datetime | None = None) -> ValidationResult:
    """``year`` is two digits (MM/YY)."""
    try:
        month_num, year_num = int(month), int(year)
    except (TypeError, ValueError):
        return _fail("Invalid month")
    if not 1 <= month_num <= 12:
        return _fail("Invalid month")
    now = now or datetime.now()
    current_year = now.year % 100
    if year_num < current_year or (year_num == current_year and month_num < now.month):
        return _fail("Card expired")
    return OK
