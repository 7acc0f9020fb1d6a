"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Scores are append-only; daily challenges are keyed by calendar day.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, date, timezone

DIFFICULTIES = ("easy", "medium", "hard")
MODES = ("normal", "daily")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `email`: unique login, stored lower-cased
    - `password_hash`: hashed password string (never store plaintext)
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)


class Score(SQLModel, table=True):
    """One completed typing test.

    `name` is the display name or the authenticated user's email.
    `date` is the insertion time in UTC.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    wpm: float
    accuracy: float
    difficulty: str = Field(default="easy", index=True)
    mode: str = Field(default="normal")
    date: datetime = Field(default_factory=_utcnow, index=True)


class DailyChallenge(SQLModel, table=True):
    """The shared paragraph for one calendar day (at most one row per day)."""
    id: Optional[int] = Field(default=None, primary_key=True)
    day: date = Field(nullable=False, unique=True)
    paragraph: str
