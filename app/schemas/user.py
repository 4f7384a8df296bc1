"""Pydantic schemas for user API payloads."""

from __future__ import annotations

from datetime import date
import re

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}$"
)

FIRST_NAME_LENGTH = (2, 30)
LAST_NAME_LENGTH = (2, 15)


def _require_text(value: str | None, *, min_length: int, max_length: int) -> str:
    if value is None or not value.strip():
        raise PydanticCustomError("not_blank", "must not be blank")
    if not min_length <= len(value) <= max_length:
        raise PydanticCustomError(
            "size",
            "size must be between {min} and {max}",
            {"min": min_length, "max": max_length},
        )
    return value


def _aliased_field(name: str, alias: str, **kwargs):
    return Field(
        validation_alias=AliasChoices(alias, name),
        serialization_alias=alias,
        **kwargs,
    )


class UserPayload(BaseModel):
    """Payload to create or fully replace a user.

    Missing fields are validated too, so every offending field is reported.
    """

    model_config = ConfigDict(title="User")

    first_name: str | None = Field(default=None, alias="firstName", validate_default=True)
    last_name: str | None = Field(default=None, alias="lastName", validate_default=True)
    email: str | None = Field(default=None, validate_default=True)
    day_of_birth: date | None = Field(default=None, alias="dayOfBirth", validate_default=True)

    @field_validator("first_name")
    @classmethod
    def _check_first_name(cls, value: str | None) -> str:
        return _require_text(value, min_length=FIRST_NAME_LENGTH[0], max_length=FIRST_NAME_LENGTH[1])

    @field_validator("last_name")
    @classmethod
    def _check_last_name(cls, value: str | None) -> str:
        return _require_text(value, min_length=LAST_NAME_LENGTH[0], max_length=LAST_NAME_LENGTH[1])

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise PydanticCustomError("not_blank", "must not be blank")
        if not EMAIL_PATTERN.fullmatch(value):
            raise PydanticCustomError("email", "must be a well-formed email address")
        return value

    @field_validator("day_of_birth")
    @classmethod
    def _check_day_of_birth(cls, value: date | None) -> date:
        if value is None:
            raise PydanticCustomError("not_null", "must not be null")
        if value >= date.today():
            raise PydanticCustomError("past", "must be a past date")
        return value


class UserPatch(BaseModel):
    """Partial user update; the merged user is validated by the service."""

    model_config = ConfigDict(title="User")

    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None
    day_of_birth: date | None = Field(default=None, alias="dayOfBirth")


class User(BaseModel):
    """User response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str = _aliased_field("first_name", "firstName")
    last_name: str = _aliased_field("last_name", "lastName")
    email: str
    day_of_birth: date = _aliased_field("day_of_birth", "dayOfBirth")


class Link(BaseModel):
    """Hypermedia link."""

    href: str
    templated: bool | None = None


class EmbeddedUsers(BaseModel):
    users: list[User]


class PageMetadata(BaseModel):
    """Position of one page within the full result."""

    size: int
    total_elements: int = _aliased_field("total_elements", "totalElements")
    total_pages: int = _aliased_field("total_pages", "totalPages")
    number: int


class UserPage(BaseModel):
    """HAL-style page of users."""

    embedded: EmbeddedUsers = _aliased_field("embedded", "_embedded")
    links: dict[str, Link] = _aliased_field("links", "_links")
    page: PageMetadata


class SearchIndex(BaseModel):
    """Links to the available user search queries."""

    links: dict[str, Link] = _aliased_field("links", "_links")
