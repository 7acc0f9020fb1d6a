"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and the paragraph pools. Services are intentionally thin: they perform
validation, execute domain logic and persist rows via repositories.
Validation failures raise `errors.ValidationError`; the HTTP layer turns
every `errors.TyperankError` into a JSON error response.
"""

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

import jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from . import models, repositories
from .config import settings
from .errors import AuthError, StoreError, ValidationError
from .paragraphs import pick_daily_candidate

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
MIN_PASSWORD_LENGTH = 6
LEADERBOARD_SIZE = 10
ALL_DIFFICULTIES = "all"

logger = logging.getLogger("typerank.services")


def round_half_up(value: float) -> int:
    """Round .5 upwards, matching how the web client rounds its stats."""
    return int(math.floor(value + 0.5))


def score_to_dict(score: models.Score) -> dict:
    return {
        'id': score.id,
        'name': score.name,
        'wpm': score.wpm,
        'accuracy': score.accuracy,
        'difficulty': score.difficulty,
        'mode': score.mode,
        'date': score.date.isoformat() if score.date else None,
    }


class AuthService:
    """Authentication related operations (signup + signin)."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def signup(self, email: Optional[str], password: Optional[str]) -> models.User:
        """Create a new user with a hashed password.

        Local accounts are usable immediately, so no confirmation step
        exists. Raises `AuthError` (400) if the email is already taken.
        """
        email = self._check_credentials(email, password)
        if '@' not in email:
            raise ValidationError('Invalid email address')
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'Password should be at least {MIN_PASSWORD_LENGTH} characters')
        if self.user_repo.get_by_email(email):
            raise AuthError('Email already in use', status_code=400)
        hashed = PWD_CTX.hash(password)
        try:
            return self.user_repo.create(models.User(email=email, password_hash=hashed))
        except IntegrityError:
            # lost a race against a concurrent signup for the same email
            self.session.rollback()
            raise AuthError('Email already in use', status_code=400)

    def signin(self, email: Optional[str], password: Optional[str]) -> models.User:
        """Verify credentials and return the matching `User`.

        Raises `AuthError` (401) for an unknown email or a wrong password.
        """
        email = self._check_credentials(email, password)
        user = self.user_repo.get_by_email(email)
        if not user or not PWD_CTX.verify(password, user.password_hash):
            raise AuthError('Invalid login credentials')
        return user

    def issue_token(self, user: models.User) -> str:
        """Return a signed JWT carrying the user's id and email."""
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)
        payload = {"user_id": user.id, "email": user.email, "exp": int(expire.timestamp())}
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def _check_credentials(email: Optional[str], password: Optional[str]) -> str:
        if not email or not email.strip() or not password:
            raise ValidationError('Email and password required')
        return email.strip().lower()


class ScoreService:
    """Record typing tests and answer leaderboard/progress queries."""
    def __init__(self, session: Session):
        self.session = session
        self.score_repo = repositories.ScoreRepository(session)

    def record(self, payload: dict) -> dict:
        """Validate and store a finished test, returning `{id, rank}`.

        `name`, `wpm` and `accuracy` are required. `difficulty` defaults to
        `easy` and `mode` to `normal`. The rank is counted after the insert
        in a separate statement, so a concurrent faster submission can make
        it stale; it is only used for display.
        """
        name = payload.get('name')
        wpm = payload.get('wpm')
        accuracy = payload.get('accuracy')
        if not name or not str(name).strip() or wpm is None or accuracy is None:
            raise ValidationError('Missing required fields')
        if not math.isfinite(wpm) or not math.isfinite(accuracy):
            raise ValidationError('wpm and accuracy must be finite numbers')
        if wpm < 0:
            raise ValidationError('wpm must be >= 0')
        if not 0 <= accuracy <= 100:
            raise ValidationError('accuracy must be between 0 and 100')
        difficulty = payload.get('difficulty') or 'easy'
        if difficulty not in models.DIFFICULTIES:
            raise ValidationError(f"difficulty must be one of {', '.join(models.DIFFICULTIES)}")
        mode = payload.get('mode') or 'normal'
        if mode not in models.MODES:
            raise ValidationError(f"mode must be one of {', '.join(models.MODES)}")

        score = self.score_repo.create(models.Score(
            name=str(name).strip(),
            wpm=wpm,
            accuracy=accuracy,
            difficulty=difficulty,
            mode=mode,
        ))
        rank = self.score_repo.rank_of(score.difficulty, score.wpm)
        logger.info("score_recorded id=%s difficulty=%s wpm=%s rank=%s", score.id, score.difficulty, score.wpm, rank)
        return {'id': score.id, 'rank': rank}

    def top(self, difficulty: Optional[str] = None) -> List[models.Score]:
        """Return at most ten scores ordered by wpm, fastest first.

        `None`, an empty string or `"all"` disables the difficulty filter.
        """
        if not difficulty or difficulty == ALL_DIFFICULTIES:
            return self.score_repo.top(limit=LEADERBOARD_SIZE)
        if difficulty not in models.DIFFICULTIES:
            raise ValidationError(f"difficulty must be one of {', '.join(models.DIFFICULTIES)} or all")
        return self.score_repo.top(difficulty, limit=LEADERBOARD_SIZE)

    def history_of(self, name: Optional[str]) -> List[dict]:
        """Return `{wpm, accuracy, date}` for every test by `name`, oldest first."""
        if not name or not name.strip():
            raise ValidationError('Name required')
        return [
            {'wpm': s.wpm, 'accuracy': s.accuracy, 'date': s.date.isoformat()}
            for s in self.score_repo.list_by_name(name.strip())
        ]

    @staticmethod
    def summary(history: List[dict]) -> dict:
        """Aggregate a progress history into test count, mean wpm and best accuracy."""
        if not history:
            return {'tests': 0, 'average_wpm': 0, 'best_accuracy': 0}
        return {
            'tests': len(history),
            'average_wpm': round_half_up(sum(h['wpm'] for h in history) / len(history)),
            'best_accuracy': max(h['accuracy'] for h in history),
        }


class DailyChallengeService:
    """Serve one shared paragraph per calendar day."""
    def __init__(self, session: Session, rng=None):
        self.session = session
        self.repo = repositories.DailyChallengeRepository(session)
        self.rng = rng

    def get_paragraph(self, day: date) -> str:
        """Return the paragraph for `day`, creating the row on first use.

        When two first-of-day requests race, the unique constraint on the
        day rejects the second insert; that request re-reads and returns
        the stored paragraph instead of failing.
        """
        existing = self.repo.get_by_day(day)
        if existing:
            return existing.paragraph
        candidate = models.DailyChallenge(day=day, paragraph=pick_daily_candidate(self.rng))
        try:
            created = self.repo.create(candidate)
        except IntegrityError:
            self.session.rollback()
            logger.info("daily_challenge_conflict day=%s; re-reading stored row", day.isoformat())
            winner = self.repo.get_by_day(day)
            if winner is None:
                raise StoreError('daily challenge insert failed')
            return winner.paragraph
        logger.info("daily_challenge_created day=%s", day.isoformat())
        return created.paragraph


class AdminService:
    """Maintenance operations over the score table."""
    def __init__(self, session: Session):
        self.session = session
        self.score_repo = repositories.ScoreRepository(session)

    def list_all(self) -> List[models.Score]:
        return self.score_repo.list_all()

    def delete_one(self, score_id: int) -> None:
        """Delete a score; a missing id is a no-op."""
        removed = self.score_repo.delete(score_id)
        logger.info("admin_delete id=%s removed=%s", score_id, removed)

    def delete_all(self) -> None:
        removed = self.score_repo.delete_all()
        logger.info("admin_reset removed=%s", removed)
