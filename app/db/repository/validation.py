"""Repository-level validators run before users are created or saved."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from app.core.errors import RepositoryConstraintViolationError
from app.core.validation import ValidationErrors
from app.db.models.user import User

MAX_AGE_YEARS = 150

UserRule = Callable[[User, ValidationErrors], None]


def years_before(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return today.replace(year=today.year - years, day=28)


def birth_date_within_lifespan(user: User, errors: ValidationErrors) -> None:
    if user.day_of_birth is None:
        return
    if user.day_of_birth < years_before(date.today(), MAX_AGE_YEARS):
        errors.reject_value("dayOfBirth", user.day_of_birth, f"must be within the last {MAX_AGE_YEARS} years")


def names_differ(user: User, errors: ValidationErrors) -> None:
    if not user.first_name or not user.last_name:
        return
    if user.first_name.strip().casefold() == user.last_name.strip().casefold():
        errors.reject("first name and last name must differ")


USER_RULES: tuple[UserRule, ...] = (
    birth_date_within_lifespan,
    names_differ,
)


def validate_user(user: User, rules: tuple[UserRule, ...] = USER_RULES) -> None:
    """Run repository rules against ``user``.

    Raises:
        RepositoryConstraintViolationError: if any rule rejects the user.
    """
    errors = ValidationErrors(object_name="User")
    for rule in rules:
        rule(user, errors)
    if errors.has_errors():
        raise RepositoryConstraintViolationError(errors)
