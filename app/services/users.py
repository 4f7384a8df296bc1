"""Service helpers for user API operations."""

from __future__ import annotations

from datetime import date

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.errors import ConstraintViolationError
from app.core.errors import DataIntegrityViolationError
from app.core.errors import EntityNotFoundError
from app.core.errors import RepositoryConstraintViolationError
from app.core.validation import constraint_violations_from
from app.db.integrity import commit
from app.db.models.user import User
from app.db.repository.paging import PageRequest
from app.db.repository.users import create_user
from app.db.repository.users import delete_user
from app.db.repository.users import find_user_by_email
from app.db.repository.users import get_user
from app.db.repository.users import list_users
from app.db.repository.users import list_users_born_before
from app.db.repository.users import list_users_by_last_name
from app.db.repository.users import save_user
from app.schemas.user import UserPatch
from app.schemas.user import UserPayload

_WRITE_FAILURES = (DataIntegrityViolationError, RepositoryConstraintViolationError)


def _apply(user: User, payload: UserPayload) -> None:
    user.first_name = payload.first_name
    user.last_name = payload.last_name
    user.email = payload.email
    user.day_of_birth = payload.day_of_birth


def _validate_merged(user: User, patch: UserPatch) -> UserPayload:
    merged = {
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "dayOfBirth": user.day_of_birth,
    }
    merged.update(patch.model_dump(by_alias=True, exclude_unset=True))
    try:
        return UserPayload.model_validate(merged)
    except ValidationError as exc:
        raise ConstraintViolationError(
            constraint_violations_from(exc, root_name=UserPayload.model_config["title"])
        ) from exc


def create_user_service(session: Session, payload: UserPayload) -> User:
    """Create and persist a new user."""
    try:
        user = create_user(
            session,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            day_of_birth=payload.day_of_birth,
        )
        commit(session)
        return user
    except _WRITE_FAILURES:
        session.rollback()
        raise


def list_users_service(session: Session, page_request: PageRequest) -> tuple[list[User], int]:
    """List one page of users."""
    return list_users(session, page_request)


def get_user_service(session: Session, user_id: int) -> User:
    """Fetch a user or raise not found."""
    user = get_user(session, user_id)
    if user is None:
        raise EntityNotFoundError.for_key("User", "id", user_id)
    return user


def replace_user_service(session: Session, user_id: int, payload: UserPayload) -> User:
    """Replace every mutable field of an existing user."""
    user = get_user_service(session, user_id)
    try:
        _apply(user, payload)
        user = save_user(session, user)
        commit(session)
        return user
    except _WRITE_FAILURES:
        session.rollback()
        raise


def patch_user_service(session: Session, user_id: int, patch: UserPatch) -> User:
    """Merge a partial update into an existing user and validate the result."""
    user = get_user_service(session, user_id)
    payload = _validate_merged(user, patch)
    try:
        _apply(user, payload)
        user = save_user(session, user)
        commit(session)
        return user
    except _WRITE_FAILURES:
        session.rollback()
        raise


def delete_user_service(session: Session, user_id: int) -> None:
    """Delete an existing user."""
    user = get_user_service(session, user_id)
    delete_user(session, user)
    commit(session)


def find_user_by_email_service(session: Session, email: str) -> User:
    user = find_user_by_email(session, email)
    if user is None:
        raise EntityNotFoundError.for_key("User", "email", email)
    return user


def find_users_by_last_name_service(
    session: Session,
    last_name: str,
    page_request: PageRequest,
) -> tuple[list[User], int]:
    return list_users_by_last_name(session, last_name, page_request)


def find_users_born_before_service(
    session: Session,
    day: date,
    page_request: PageRequest,
) -> tuple[list[User], int]:
    return list_users_born_before(session, day, page_request)
