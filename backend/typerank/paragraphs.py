"""Practice and daily-challenge paragraph pools.

Practice paragraphs are picked per request and never stored. Daily
challenge candidates are drawn once per calendar day by
`services.DailyChallengeService` and persisted so every user on that
day types the same text.
"""

import random
from datetime import date, datetime, timezone
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from .config import settings
from .errors import ValidationError
from .models import DIFFICULTIES

PRACTICE_PARAGRAPHS: Dict[str, List[str]] = {
    "easy": [
        "The sun rises in the east and sets in the west every single day.",
        "A quick fox jumped over the lazy dog in the middle of the park.",
        "Learning to type fast is a useful skill for any student or worker.",
        "The cat sat on the mat and watched the mouse run across the floor.",
        "Rainy days are perfect for reading a good book and drinking tea.",
    ],
    "medium": [
        "A build tool should provide a faster and leaner development experience for modern web projects.",
        "Good interfaces are painless to use. Design simple views for each state in your application.",
        "A strongly typed language that builds on a dynamic one can give you better tooling at any scale.",
        "A utility framework works by scanning all of your templates and components for class names.",
        "The importance of regular exercise cannot be overstated for maintaining both physical and mental health.",
    ],
    "hard": [
        "In the realm of software engineering, the ability to write clean, maintainable code is often more valuable than the ability to write clever, complex algorithms that are difficult for others to understand or modify.",
        "The rapid advancement of artificial intelligence has sparked intense debates regarding its potential impact on the global job market, ethical considerations of autonomous systems, and the future of human-computer interaction.",
        "Quantum computing represents a paradigm shift in computational power, leveraging the principles of superposition and entanglement to solve problems that are currently intractable for classical computers.",
        "Sustainable development requires a holistic approach that balances economic growth, social equity, and environmental protection to ensure that future generations can meet their own needs without compromise.",
        "The intricate dance of celestial bodies in our solar system is governed by the laws of physics, which scientists have spent centuries uncovering through rigorous observation, experimentation, and mathematical modeling.",
    ],
}

DAILY_CANDIDATES: List[str] = [
    "The quick brown fox jumps over the lazy dog.",
    "Success is not final, failure is not fatal.",
    "Programming is the art of telling another human what one wants the computer to do.",
    "In the middle of every difficulty lies opportunity.",
    "The only way to do great work is to love what you do.",
]


def practice_paragraph(difficulty: str, rng: random.Random = None) -> str:
    """Return a uniformly random practice paragraph for `difficulty`."""
    if difficulty not in DIFFICULTIES:
        raise ValidationError(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
    return (rng or random).choice(PRACTICE_PARAGRAPHS[difficulty])


def pick_daily_candidate(rng: random.Random = None) -> str:
    return (rng or random).choice(DAILY_CANDIDATES)


def challenge_day(now: Optional[datetime] = None) -> date:
    """Return the calendar day of `now` in the configured reference zone.

    `now` defaults to the current time. Naive datetimes are taken to be UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(settings.CHALLENGE_TZ)).date()
