"""Error document schemas returned by every failed request."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import SerializerFunctionWrapHandler
from pydantic import field_serializer
from pydantic import field_validator
from pydantic import model_serializer
from pydantic import model_validator

TIMESTAMP_FORMAT = "%d-%m-%Y %I:%M:%S"

_OPTIONAL_KEYS = frozenset({"debugMessage", "debug_message", "subErrors", "sub_errors"})


class ValidationIssue(BaseModel):
    """Single field-level or object-level validation complaint.

    Field issues always carry both ``field`` and ``rejectedValue`` (the latter
    may be ``null``); object issues carry neither.
    """

    model_config = ConfigDict(frozen=True)

    object: str
    field: str | None = None
    rejected_value: Any = None
    message: str

    @classmethod
    def for_field(cls, object_name: str, field: str, rejected_value: Any, message: str) -> ValidationIssue:
        """Build an issue attributed to one field of ``object_name``."""
        return cls(object=object_name, field=field, rejected_value=rejected_value, message=message)

    @classmethod
    def for_object(cls, object_name: str, message: str) -> ValidationIssue:
        """Build an issue attributed to ``object_name`` as a whole."""
        return cls(object=object_name, message=message)

    @model_validator(mode="after")
    def _rejected_value_needs_field(self) -> ValidationIssue:
        if self.field is None and self.rejected_value is not None:
            raise ValueError("rejectedValue requires field")
        return self

    @model_serializer(mode="plain")
    def _serialize(self) -> dict[str, Any]:
        if self.field is None:
            return {"object": self.object, "message": self.message}
        return {
            "object": self.object,
            "field": self.field,
            "rejectedValue": self.rejected_value,
            "message": self.message,
        }


class ErrorDocument(BaseModel):
    """Canonical JSON error body.

    The document is immutable and built in one step; ``timestamp`` is taken
    at construction time.
    """

    model_config = ConfigDict(frozen=True)

    status: int
    timestamp: datetime = Field(default_factory=datetime.now)
    message: str
    debug_message: str | None = Field(
        default=None,
        validation_alias=AliasChoices("debugMessage", "debug_message"),
        serialization_alias="debugMessage",
    )
    sub_errors: tuple[ValidationIssue, ...] | None = Field(
        default=None,
        validation_alias=AliasChoices("subErrors", "sub_errors"),
        serialization_alias="subErrors",
    )

    @field_validator("sub_errors")
    @classmethod
    def _reject_empty_sub_errors(
        cls, value: tuple[ValidationIssue, ...] | None
    ) -> tuple[ValidationIssue, ...] | None:
        if value is not None and not value:
            raise ValueError("subErrors must not be empty when present")
        return value

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return value.strftime(TIMESTAMP_FORMAT)

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if key not in _OPTIONAL_KEYS or value is not None}

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready response body."""
        return self.model_dump(mode="json", by_alias=True)
