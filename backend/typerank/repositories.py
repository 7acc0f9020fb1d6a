"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table (users, scores,
daily challenges). Repositories return SQLModel objects and perform
commits/refreshes where appropriate.
"""

from datetime import date
from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import delete, func
from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)


class ScoreRepository:
    """Insert, query and delete `Score` rows."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, score: models.Score) -> models.Score:
        """Persist a score and return it with its assigned id."""
        self.session.add(score)
        self.session.commit()
        self.session.refresh(score)
        return score

    def rank_of(self, difficulty: str, wpm: float) -> int:
        """Return the 1-based rank of `wpm` within `difficulty`.

        Only strictly faster attempts push the rank down, so equal wpm
        values share a rank.
        """
        stmt = select(func.count()).select_from(models.Score).where(
            models.Score.difficulty == difficulty,
            models.Score.wpm > wpm
        )
        return self.session.exec(stmt).one() + 1

    def top(self, difficulty: Optional[str] = None, limit: int = 10) -> List[models.Score]:
        """Return the fastest scores, optionally for a single difficulty."""
        stmt = select(models.Score)
        if difficulty:
            stmt = stmt.where(models.Score.difficulty == difficulty)
        stmt = stmt.order_by(models.Score.wpm.desc(), models.Score.id).limit(limit)
        return self.session.exec(stmt).all()

    def list_by_name(self, name: str) -> List[models.Score]:
        """Return all scores for `name`, oldest first."""
        stmt = select(models.Score).where(models.Score.name == name).order_by(models.Score.date, models.Score.id)
        return self.session.exec(stmt).all()

    def list_all(self) -> List[models.Score]:
        """Return every score, newest first."""
        stmt = select(models.Score).order_by(models.Score.date.desc(), models.Score.id.desc())
        return self.session.exec(stmt).all()

    def delete(self, score_id: int) -> int:
        """Delete a score by id and return the number of rows removed."""
        result = self.session.exec(delete(models.Score).where(models.Score.id == score_id))
        self.session.commit()
        return result.rowcount

    def delete_all(self) -> int:
        result = self.session.exec(delete(models.Score))
        self.session.commit()
        return result.rowcount


class DailyChallengeRepository:
    """Lookup and insert helpers for `DailyChallenge` rows."""
    def __init__(self, session: Session):
        self.session = session

    def get_by_day(self, day: date) -> Optional[models.DailyChallenge]:
        stmt = select(models.DailyChallenge).where(models.DailyChallenge.day == day)
        return self.session.exec(stmt).first()

    def create(self, challenge: models.DailyChallenge) -> models.DailyChallenge:
        """Insert a challenge row.

        Raises `sqlalchemy.exc.IntegrityError` when a row for the same day
        already exists; the caller is expected to roll back and re-read.
        """
        self.session.add(challenge)
        self.session.commit()
        self.session.refresh(challenge)
        return challenge
