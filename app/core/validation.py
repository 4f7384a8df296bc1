"""Validation failure shapes and their conversion into error document issues."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Union

from pydantic import ValidationError

from app.schemas.error import ValidationIssue


@dataclass(frozen=True)
class FieldError:
    """Failure attributable to one named field of a validated object."""

    object_name: str
    field: str
    rejected_value: Any
    message: str


@dataclass(frozen=True)
class ObjectError:
    """Failure attributable to a validated object as a whole."""

    object_name: str
    message: str


@dataclass(frozen=True)
class ConstraintViolation:
    """Failure reported by a validator invoked outside payload binding."""

    root_name: str
    property_path: str
    invalid_value: Any
    message: str

    @property
    def leaf_name(self) -> str:
        return self.property_path.rsplit(".", 1)[-1]


ValidationFailure = Union[FieldError, ObjectError, ConstraintViolation]


@dataclass
class ValidationErrors:
    """Accumulates field and global errors for one validated object."""

    object_name: str
    field_errors: list[FieldError] = field(default_factory=list)
    global_errors: list[ObjectError] = field(default_factory=list)

    def reject(self, message: str) -> None:
        self.global_errors.append(ObjectError(object_name=self.object_name, message=message))

    def reject_value(self, field_name: str, rejected_value: Any, message: str) -> None:
        self.field_errors.append(
            FieldError(
                object_name=self.object_name,
                field=field_name,
                rejected_value=rejected_value,
                message=message,
            )
        )

    def has_errors(self) -> bool:
        return bool(self.field_errors or self.global_errors)

    def all_errors(self) -> list[ValidationFailure]:
        """Return field errors followed by global errors."""
        return [*self.field_errors, *self.global_errors]


def to_validation_issue(error: ValidationFailure) -> ValidationIssue:
    """Convert one validation failure into its error document issue.

    Raises:
        TypeError: if ``error`` is not one of the known failure shapes.
    """
    if isinstance(error, FieldError):
        return ValidationIssue.for_field(error.object_name, error.field, error.rejected_value, error.message)
    if isinstance(error, ObjectError):
        return ValidationIssue.for_object(error.object_name, error.message)
    if isinstance(error, ConstraintViolation):
        return ValidationIssue.for_field(error.root_name, error.leaf_name, error.invalid_value, error.message)
    raise TypeError(f"Wrong error format: {type(error).__name__}")


def format_location(location: Sequence[Any]) -> str:
    return ".".join(str(part) for part in location)


def rejected_input(issue: Mapping[str, Any]) -> Any:
    """Return the value a pydantic error rejected; missing values are ``None``."""
    if issue.get("type") == "missing":
        return None
    return issue.get("input")


def constraint_violations_from(exc: ValidationError, *, root_name: str) -> list[ConstraintViolation]:
    """Translate a pydantic validation error raised by an ad-hoc validation call."""
    return [
        ConstraintViolation(
            root_name=root_name,
            property_path=format_location(issue.get("loc", ())),
            invalid_value=rejected_input(issue),
            message=str(issue.get("msg", "Invalid value")),
        )
        for issue in exc.errors()
    ]
