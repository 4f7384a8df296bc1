"""Mapping of classified request failures onto error documents."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from types import MappingProxyType
from typing import Any

from fastapi import status

from app.core.validation import ValidationFailure
from app.core.validation import to_validation_issue
from app.schemas.error import ErrorDocument


class FailureKind(str, Enum):
    MISSING_PARAMETER = "missing_parameter"
    BODY_VALIDATION = "body_validation"
    RESPONSE_SERIALIZATION = "response_serialization"
    NO_ROUTE = "no_route"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    CONSTRAINT_VIOLATION = "constraint_violation"
    UNREADABLE_BODY = "unreadable_body"
    NUMBER_FORMAT = "number_format"
    ENTITY_NOT_FOUND = "entity_not_found"
    REPOSITORY_CONSTRAINT = "repository_constraint"
    TYPE_MISMATCH = "type_mismatch"
    DATABASE_CONFLICT = "database_conflict"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class Failure:
    """A request failure classified into one ``FailureKind``.

    ``detail`` is the underlying diagnostic text, ``params`` feeds the message
    template and ``errors`` holds the individual complaints of aggregate kinds.
    """

    kind: FailureKind
    detail: str | None = None
    params: Mapping[str, Any] = field(default_factory=dict)
    errors: Sequence[ValidationFailure] = ()


@dataclass(frozen=True)
class ErrorPolicy:
    """How one failure kind is rendered into an error document."""

    status_code: int
    message: str
    expose_detail: bool = False
    aggregate: bool = False

    def render_message(self, failure: Failure) -> str:
        return self.message.format(detail=failure.detail or "", **failure.params)


ERROR_POLICIES: Mapping[FailureKind, ErrorPolicy] = MappingProxyType(
    {
        FailureKind.MISSING_PARAMETER: ErrorPolicy(
            status.HTTP_400_BAD_REQUEST,
            "Parameter is missing: {name}",
            expose_detail=True,
        ),
        FailureKind.BODY_VALIDATION: ErrorPolicy(
            status.HTTP_400_BAD_REQUEST,
            "Validation error",
            aggregate=True,
        ),
        FailureKind.RESPONSE_SERIALIZATION: ErrorPolicy(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to write JSON output",
            expose_detail=True,
        ),
        FailureKind.NO_ROUTE: ErrorPolicy(
            status.HTTP_400_BAD_REQUEST,
            "Unsupported method {method} with URL {url}",
            expose_detail=True,
        ),
        FailureKind.UNSUPPORTED_MEDIA_TYPE: ErrorPolicy(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            "{content_type} media type is not supported. Supported media types: {supported}",
        ),
        FailureKind.CONSTRAINT_VIOLATION: ErrorPolicy(
            status.HTTP_400_BAD_REQUEST,
            "Validation error",
            aggregate=True,
        ),
        FailureKind.UNREADABLE_BODY: ErrorPolicy(
            status.HTTP_400_BAD_REQUEST,
            "Wrong content-type of the request format. Expected content-type is application/json.",
            expose_detail=True,
        ),
        FailureKind.NUMBER_FORMAT: ErrorPolicy(status.HTTP_400_BAD_REQUEST, "{detail}"),
        FailureKind.ENTITY_NOT_FOUND: ErrorPolicy(status.HTTP_404_NOT_FOUND, "{detail}"),
        FailureKind.REPOSITORY_CONSTRAINT: ErrorPolicy(
            status.HTTP_400_BAD_REQUEST,
            "{detail}",
            aggregate=True,
        ),
        FailureKind.TYPE_MISMATCH: ErrorPolicy(
            status.HTTP_400_BAD_REQUEST,
            "The parameter '{name}' of value '{value}' could not be converted to type '{type}'",
            expose_detail=True,
        ),
        FailureKind.DATABASE_CONFLICT: ErrorPolicy(
            status.HTTP_409_CONFLICT,
            "Database error",
            expose_detail=True,
        ),
        FailureKind.STORAGE_FAILURE: ErrorPolicy(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Server error",
            expose_detail=True,
        ),
    }
)

_unmapped_kinds = [kind.name for kind in FailureKind if kind not in ERROR_POLICIES]
if _unmapped_kinds:
    raise RuntimeError(f"Failure kinds without an error policy: {', '.join(_unmapped_kinds)}")


def normalize(failure: Failure) -> ErrorDocument:
    """Render one classified failure into its error document."""
    policy = ERROR_POLICIES[failure.kind]
    issues = tuple(to_validation_issue(error) for error in failure.errors) if policy.aggregate else ()
    return ErrorDocument(
        status=policy.status_code,
        message=policy.render_message(failure),
        debug_message=failure.detail if policy.expose_detail else None,
        sub_errors=issues or None,
    )
