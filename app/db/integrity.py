"""Classification of storage integrity failures raised by SQLAlchemy."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DataError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DataIntegrityViolationError


@contextmanager
def translate_integrity_errors() -> Iterator[None]:
    """Re-raise driver integrity failures as classified ``DataIntegrityViolationError``s.

    Constraint rejections (unique, not-null, foreign key, check) are conflicts
    and carry the database's own message. Value errors such as truncation are
    reported without that classification.
    """
    try:
        yield
    except IntegrityError as exc:
        raise DataIntegrityViolationError(str(exc), conflict=True, database_message=str(exc.orig)) from exc
    except DataError as exc:
        raise DataIntegrityViolationError(str(exc), conflict=False) from exc


def flush(session: Session) -> None:
    with translate_integrity_errors():
        session.flush()


def commit(session: Session) -> None:
    with translate_integrity_errors():
        session.commit()
