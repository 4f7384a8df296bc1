"""Application exceptions and the handlers that normalize request failures."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.exceptions import ResponseValidationError
from fastapi.responses import JSONResponse
from pydantic_core import PydanticSerializationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.normalizer import Failure
from app.core.normalizer import FailureKind
from app.core.normalizer import normalize
from app.core.validation import ConstraintViolation
from app.core.validation import FieldError
from app.core.validation import ObjectError
from app.core.validation import ValidationErrors
from app.core.validation import format_location
from app.core.validation import rejected_input
from app.schemas.error import ErrorDocument

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPES = ("application/json", "application/*+json")

PARAMETER_LOCATIONS = frozenset({"query", "path", "header", "cookie"})

_TARGET_TYPE_NAMES = {
    "bool": "bool",
    "date": "date",
    "datetime": "datetime",
    "decimal": "Decimal",
    "enum": "Enum",
    "float": "float",
    "int": "int",
    "string": "str",
    "time": "time",
    "uuid": "UUID",
}


class APIError(Exception):
    """Base class for failures raised deliberately by the application."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EntityNotFoundError(APIError):
    """Raised when a requested entity does not exist."""

    @classmethod
    def for_key(cls, entity_name: str, key_name: str, key: Any) -> EntityNotFoundError:
        return cls(f"Unable to find {entity_name} with {key_name} {key}")


class IdentifierFormatError(APIError, ValueError):
    """Raised when a path identifier is not a number."""


class UnsupportedMediaTypeError(APIError):
    """Raised when a request declares a content type the endpoint cannot read."""

    def __init__(self, content_type: str, supported_media_types: Sequence[str] = JSON_MEDIA_TYPES) -> None:
        super().__init__(f"Content type '{content_type}' not supported")
        self.content_type = content_type
        self.supported_media_types = tuple(supported_media_types)


class ConstraintViolationError(APIError):
    """Raised by validation invoked outside request payload binding."""

    def __init__(self, violations: Sequence[ConstraintViolation]) -> None:
        super().__init__(
            "; ".join(f"{violation.property_path}: {violation.message}" for violation in violations)
        )
        self.violations = list(violations)


class RepositoryConstraintViolationError(APIError):
    """Raised when repository-level validators reject an entity before it is stored."""

    def __init__(self, errors: ValidationErrors, message: str = "Validation failed") -> None:
        super().__init__(message)
        self.errors = errors


class DataIntegrityViolationError(APIError):
    """Storage integrity failure, classified by the persistence layer.

    ``conflict`` is set when the store rejected the write because of one of its
    constraints; ``database_message`` then holds the store's own description.
    """

    def __init__(self, message: str, *, conflict: bool, database_message: str | None = None) -> None:
        super().__init__(message)
        self.conflict = conflict
        self.database_message = database_message


def _build_error_response(document: ErrorDocument) -> JSONResponse:
    return JSONResponse(status_code=document.status, content=document.to_payload())


def _respond(failure: Failure) -> JSONResponse:
    return _build_error_response(normalize(failure))


def _location(issue: Mapping[str, Any]) -> str | None:
    location = issue.get("loc", ())
    if not location:
        return None
    return str(location[0])


def _is_conversion_error(issue: Mapping[str, Any]) -> bool:
    error_type = str(issue.get("type", ""))
    return error_type.endswith(("_parsing", "_type")) or error_type == "int_from_float"


def _target_type_name(issue: Mapping[str, Any]) -> str:
    prefix = str(issue.get("type", "")).split("_", 1)[0]
    return _TARGET_TYPE_NAMES.get(prefix, prefix)


def _describe(issue: Mapping[str, Any]) -> str:
    message = str(issue.get("msg", "Invalid value"))
    reason = (issue.get("ctx") or {}).get("error")
    if reason:
        return f"{message}: {reason}"
    return message


def _route_name(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "name", None) or "request"


def _body_model_name(request: Request) -> str:
    route = request.scope.get("route")
    body_field = getattr(route, "body_field", None)
    model = getattr(getattr(body_field, "field_info", None), "annotation", None)
    config = getattr(model, "model_config", None) or {}
    return config.get("title") or getattr(model, "__name__", None) or "request"


def _unsupported_media_type(content_type: str, supported_media_types: Sequence[str]) -> Failure:
    return Failure(
        FailureKind.UNSUPPORTED_MEDIA_TYPE,
        params={"content_type": content_type, "supported": ", ".join(supported_media_types)},
    )


def classify_request_validation(exc: RequestValidationError, request: Request) -> Failure:
    """Pick the failure kind for a FastAPI request validation error.

    Unreadable bodies win over parameter problems, which win over body
    field validation.
    """
    issues = list(exc.errors())
    body_issues = [issue for issue in issues if _location(issue) == "body"]
    parameter_issues = [issue for issue in issues if _location(issue) in PARAMETER_LOCATIONS]

    for issue in body_issues:
        whole_body = len(issue.get("loc", ())) == 1
        if issue.get("type") == "json_invalid":
            return Failure(FailureKind.UNREADABLE_BODY, detail=_describe(issue))
        if whole_body and issue.get("type") == "missing":
            return Failure(FailureKind.UNREADABLE_BODY, detail="Required request body is missing")
        if whole_body and _is_conversion_error(issue):
            return Failure(FailureKind.UNREADABLE_BODY, detail=_describe(issue))

    for issue in parameter_issues:
        if issue.get("type") == "missing":
            location, name = issue["loc"][0], format_location(issue["loc"][1:])
            return Failure(
                FailureKind.MISSING_PARAMETER,
                detail=f"Required {location} parameter '{name}' is not present",
                params={"name": name},
            )

    for issue in parameter_issues:
        if _is_conversion_error(issue):
            return Failure(
                FailureKind.TYPE_MISMATCH,
                detail=str(issue.get("msg", "")),
                params={
                    "name": format_location(issue["loc"][1:]),
                    "value": issue.get("input"),
                    "type": _target_type_name(issue),
                },
            )

    if parameter_issues:
        root_name = _route_name(request)
        return Failure(
            FailureKind.CONSTRAINT_VIOLATION,
            errors=[
                ConstraintViolation(
                    root_name=root_name,
                    property_path=format_location(issue["loc"][1:]),
                    invalid_value=rejected_input(issue),
                    message=str(issue.get("msg", "Invalid value")),
                )
                for issue in parameter_issues
            ],
        )

    for issue in body_issues:
        if _is_conversion_error(issue):
            field_name = format_location(issue["loc"][1:])
            return Failure(FailureKind.UNREADABLE_BODY, detail=f"{field_name}: {_describe(issue)}")

    errors = ValidationErrors(object_name=_body_model_name(request))
    for issue in body_issues:
        message = str(issue.get("msg", "Invalid value"))
        if len(issue["loc"]) > 1:
            errors.reject_value(format_location(issue["loc"][1:]), rejected_input(issue), message)
        else:
            errors.reject(message)
    return Failure(FailureKind.BODY_VALIDATION, errors=errors.all_errors())


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI request validation errors."""

    return _respond(classify_request_validation(exc, request))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize routing failures raised by Starlette."""

    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return _respond(
            Failure(
                FailureKind.NO_ROUTE,
                detail=str(exc.detail),
                params={"method": request.method, "url": str(request.url.replace(query=""))},
            )
        )
    if exc.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE:
        return _respond(_unsupported_media_type(request.headers.get("content-type", ""), JSON_MEDIA_TYPES))
    return await unhandled_exception_handler(request, exc)


async def response_serialization_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Normalize failures to encode the service's own response."""

    if isinstance(exc, ResponseValidationError):
        detail = "; ".join(
            f"{format_location(issue.get('loc', ()))}: {issue.get('msg', 'Invalid value')}" for issue in exc.errors()
        )
    else:
        detail = str(exc)
    return _respond(Failure(FailureKind.RESPONSE_SERIALIZATION, detail=detail))


async def unsupported_media_type_handler(_: Request, exc: UnsupportedMediaTypeError) -> JSONResponse:
    return _respond(_unsupported_media_type(exc.content_type, exc.supported_media_types))


async def constraint_violation_handler(_: Request, exc: ConstraintViolationError) -> JSONResponse:
    return _respond(Failure(FailureKind.CONSTRAINT_VIOLATION, errors=exc.violations))


async def identifier_format_handler(_: Request, exc: IdentifierFormatError) -> JSONResponse:
    return _respond(Failure(FailureKind.NUMBER_FORMAT, detail=exc.message))


async def entity_not_found_handler(_: Request, exc: EntityNotFoundError) -> JSONResponse:
    return _respond(Failure(FailureKind.ENTITY_NOT_FOUND, detail=exc.message))


async def repository_constraint_violation_handler(
    _: Request, exc: RepositoryConstraintViolationError
) -> JSONResponse:
    return _respond(
        Failure(
            FailureKind.REPOSITORY_CONSTRAINT,
            detail=exc.message,
            errors=exc.errors.all_errors(),
        )
    )


async def data_integrity_violation_handler(_: Request, exc: DataIntegrityViolationError) -> JSONResponse:
    """Report store constraint clashes as conflicts and anything else as opaque server errors."""

    if exc.conflict:
        return _respond(Failure(FailureKind.DATABASE_CONFLICT, detail=exc.database_message or exc.message))
    return _respond(Failure(FailureKind.STORAGE_FAILURE, detail=exc.message))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer failures no policy covers with a stable 500 document."""

    logger.error(
        "Unmapped failure %s while handling %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _build_error_response(
        ErrorDocument(
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Internal server error",
        )
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach all error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ResponseValidationError, response_serialization_exception_handler)
    app.add_exception_handler(PydanticSerializationError, response_serialization_exception_handler)
    app.add_exception_handler(UnsupportedMediaTypeError, unsupported_media_type_handler)
    app.add_exception_handler(ConstraintViolationError, constraint_violation_handler)
    app.add_exception_handler(IdentifierFormatError, identifier_format_handler)
    app.add_exception_handler(EntityNotFoundError, entity_not_found_handler)
    app.add_exception_handler(RepositoryConstraintViolationError, repository_constraint_violation_handler)
    app.add_exception_handler(DataIntegrityViolationError, data_integrity_violation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
