"""Repository primitives for user entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import ColumnElement
from sqlalchemy import Select
from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.integrity import flush
from app.db.models.user import User
from app.db.repository.paging import PageRequest
from app.db.repository.paging import SortDirection
from app.db.repository.paging import SortOrder
from app.db.repository.validation import validate_user

SORTABLE_COLUMNS = {
    "id": User.id,
    "firstName": User.first_name,
    "lastName": User.last_name,
    "email": User.email,
    "dayOfBirth": User.day_of_birth,
}


def create_user(
    session: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    day_of_birth: date,
) -> User:
    """Validate, create and return a user row."""
    user = User(first_name=first_name, last_name=last_name, email=email, day_of_birth=day_of_birth)
    validate_user(user)
    session.add(user)
    flush(session)
    session.refresh(user)
    return user


def get_user(session: Session, user_id: int) -> User | None:
    """Fetch a user by id."""
    return session.get(User, user_id)


def find_user_by_email(session: Session, email: str) -> User | None:
    """Fetch a user by its unique email."""
    return session.scalars(select(User).where(User.email == email)).first()


def save_user(session: Session, user: User) -> User:
    """Validate and flush pending changes of an existing user."""
    validate_user(user)
    flush(session)
    session.refresh(user)
    return user


def delete_user(session: Session, user: User) -> None:
    """Delete a user row."""
    session.delete(user)
    flush(session)


def count_users(session: Session) -> int:
    return int(session.scalar(select(func.count()).select_from(User)) or 0)


def _order_by(orders: Sequence[SortOrder]) -> list[ColumnElement]:
    clauses: list[ColumnElement] = []
    for order in orders:
        column = SORTABLE_COLUMNS.get(order.property)
        if column is None:
            continue
        clauses.append(column.desc() if order.direction == SortDirection.DESC else column.asc())
    clauses.append(User.id.asc())
    return clauses


def _paged(
    session: Session,
    page_request: PageRequest,
    criteria: Sequence[ColumnElement[bool]] = (),
) -> tuple[list[User], int]:
    count_stmt = select(func.count()).select_from(User)
    stmt: Select[tuple[User]] = select(User)
    if criteria:
        count_stmt = count_stmt.where(*criteria)
        stmt = stmt.where(*criteria)

    total = int(session.scalar(count_stmt) or 0)
    stmt = stmt.order_by(*_order_by(page_request.sort)).limit(page_request.size).offset(page_request.offset)
    return list(session.scalars(stmt)), total


def list_users(session: Session, page_request: PageRequest) -> tuple[list[User], int]:
    """Return one page of users and the total number of users."""
    return _paged(session, page_request)


def list_users_by_last_name(
    session: Session,
    last_name: str,
    page_request: PageRequest,
) -> tuple[list[User], int]:
    """Return one page of users with the given last name."""
    return _paged(session, page_request, [User.last_name == last_name])


def list_users_born_before(
    session: Session,
    day: date,
    page_request: PageRequest,
) -> tuple[list[User], int]:
    """Return one page of users born strictly before ``day``."""
    return _paged(session, page_request, [User.day_of_birth < day])
