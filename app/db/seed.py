"""Startup seed data for the users table."""

from __future__ import annotations

import logging
import random
from datetime import date

from sqlalchemy.orm import Session

from app.db.models.user import User
from app.db.repository.users import create_user
from app.db.repository.validation import years_before

logger = logging.getLogger(__name__)

FIRST_NAMES = ("John", "Robert", "Nataly", "Mary", "Alex", "Mark")
LAST_NAMES = ("Doe", "Smith", "Portman", "Li", "Erickson", "Roach")
MIN_AGE_YEARS = 20
AGE_SPREAD_YEARS = 70


def seed_users(session: Session, count: int, *, rng: random.Random | None = None) -> list[User]:
    """Insert ``count`` random users numbered from 1 and log each of them."""
    rng = rng or random.Random()
    today = date.today()
    users = [
        create_user(
            session,
            first_name=rng.choice(FIRST_NAMES),
            last_name=rng.choice(LAST_NAMES),
            email=f"workingemail-{index}@gmail.com",
            day_of_birth=years_before(today, MIN_AGE_YEARS + rng.randrange(AGE_SPREAD_YEARS)),
        )
        for index in range(1, count + 1)
    ]
    for user in users:
        logger.info("Seeded %r", user)
    return users
