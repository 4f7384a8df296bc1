"""User API routes."""

from __future__ import annotations

from datetime import date
import re

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import Request
from fastapi import Response
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.config import get_settings
from app.core.errors import IdentifierFormatError
from app.core.errors import UnsupportedMediaTypeError
from app.db.base import get_db_session
from app.db.models.user import User as UserRecord
from app.db.repository.paging import PageRequest
from app.db.repository.paging import total_pages
from app.schemas.user import EmbeddedUsers
from app.schemas.user import Link
from app.schemas.user import PageMetadata
from app.schemas.user import SearchIndex
from app.schemas.user import User
from app.schemas.user import UserPage
from app.schemas.user import UserPatch
from app.schemas.user import UserPayload
from app.services.paging import parse_page_request
from app.services.users import create_user_service
from app.services.users import delete_user_service
from app.services.users import find_user_by_email_service
from app.services.users import find_users_born_before_service
from app.services.users import find_users_by_last_name_service
from app.services.users import get_user_service
from app.services.users import list_users_service
from app.services.users import patch_user_service
from app.services.users import replace_user_service

router = APIRouter(prefix="/api", tags=["users"])

IDENTIFIER_PATTERN = re.compile(r"[+-]?[0-9]+")
ID_MIN = -(2**63)
ID_MAX = 2**63 - 1


def require_json_content_type(request: Request) -> None:
    """Reject request bodies that declare a non-JSON content type."""
    content_type = request.headers.get("content-type")
    if content_type is None:
        return
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json":
        return
    if media_type.startswith("application/") and media_type.endswith("+json"):
        return
    raise UnsupportedMediaTypeError(content_type)


def resolve_user_id(user_id: str) -> int:
    """Parse the signed 64-bit user identifier from the path."""
    if not IDENTIFIER_PATTERN.fullmatch(user_id):
        raise IdentifierFormatError(f"invalid literal for int() with base 10: {user_id!r}")
    identifier = int(user_id)
    if not ID_MIN <= identifier <= ID_MAX:
        raise IdentifierFormatError(f"value {user_id!r} is out of range for a 64-bit integer")
    return identifier


def page_request_params(
    page: str | None = None,
    size: str | None = None,
    sort: list[str] | None = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> PageRequest:
    """Collect paging query values without rejecting malformed ones."""
    return parse_page_request(
        page,
        size,
        sort or (),
        default_size=settings.default_page_size,
        max_size=settings.max_page_size,
    )


def _page_links(request: Request, page_request: PageRequest, pages: int) -> dict[str, Link]:
    def href(number: int) -> str:
        return str(request.url.include_query_params(page=number, size=page_request.size))

    links = {"self": Link(href=str(request.url))}
    if pages > 0:
        links["first"] = Link(href=href(0))
        links["last"] = Link(href=href(pages - 1))
    if page_request.page > 0:
        links["prev"] = Link(href=href(min(page_request.page, pages) - 1 if pages else 0))
    if page_request.page + 1 < pages:
        links["next"] = Link(href=href(page_request.page + 1))
    return links


def _to_page(request: Request, users: list[UserRecord], total: int, page_request: PageRequest) -> UserPage:
    pages = total_pages(total, page_request.size)
    return UserPage(
        embedded=EmbeddedUsers(users=[User.model_validate(user) for user in users]),
        links=_page_links(request, page_request, pages),
        page=PageMetadata(
            size=page_request.size,
            total_elements=total,
            total_pages=pages,
            number=page_request.page,
        ),
    )


@router.get("/users", response_model=UserPage, response_model_exclude_none=True)
def list_users_endpoint(
    request: Request,
    page_request: PageRequest = Depends(page_request_params),
    session: Session = Depends(get_db_session),
) -> UserPage:
    """List users page by page."""
    users, total = list_users_service(session, page_request)
    return _to_page(request, users, total, page_request)


@router.post(
    "/users",
    response_model=User,
    status_code=201,
    dependencies=[Depends(require_json_content_type)],
)
def create_user_endpoint(
    payload: UserPayload,
    session: Session = Depends(get_db_session),
) -> UserRecord:
    """Create a user."""
    return create_user_service(session, payload)


@router.get("/users/search", response_model=SearchIndex, response_model_exclude_none=True)
def search_index_endpoint(request: Request) -> SearchIndex:
    """List the available user searches."""
    base = str(request.url.replace(query=""))
    return SearchIndex(
        links={
            "findByEmail": Link(href=f"{base}/findByEmail{{?email}}", templated=True),
            "findByLastName": Link(href=f"{base}/findByLastName{{?lastName,page,size,sort}}", templated=True),
            "findByDayOfBirthBefore": Link(
                href=f"{base}/findByDayOfBirthBefore{{?date,page,size,sort}}",
                templated=True,
            ),
            "self": Link(href=base),
        }
    )


@router.get("/users/search/findByEmail", response_model=User, name="findByEmail")
def find_by_email_endpoint(
    email: str,
    session: Session = Depends(get_db_session),
) -> UserRecord:
    """Find the user registered with an email address."""
    return find_user_by_email_service(session, email)


@router.get(
    "/users/search/findByLastName",
    response_model=UserPage,
    response_model_exclude_none=True,
    name="findByLastName",
)
def find_by_last_name_endpoint(
    request: Request,
    last_name: str = Query(alias="lastName", min_length=2, max_length=15),
    page_request: PageRequest = Depends(page_request_params),
    session: Session = Depends(get_db_session),
) -> UserPage:
    """List users with a last name."""
    users, total = find_users_by_last_name_service(session, last_name, page_request)
    return _to_page(request, users, total, page_request)


@router.get(
    "/users/search/findByDayOfBirthBefore",
    response_model=UserPage,
    response_model_exclude_none=True,
    name="findByDayOfBirthBefore",
)
def find_by_day_of_birth_before_endpoint(
    request: Request,
    day: date = Query(alias="date"),
    page_request: PageRequest = Depends(page_request_params),
    session: Session = Depends(get_db_session),
) -> UserPage:
    """List users born before a date."""
    users, total = find_users_born_before_service(session, day, page_request)
    return _to_page(request, users, total, page_request)


@router.get("/users/{user_id}", response_model=User)
def get_user_endpoint(
    identifier: int = Depends(resolve_user_id),
    session: Session = Depends(get_db_session),
) -> UserRecord:
    """Get a single user by id."""
    return get_user_service(session, identifier)


@router.put(
    "/users/{user_id}",
    response_model=User,
    dependencies=[Depends(require_json_content_type)],
)
def replace_user_endpoint(
    payload: UserPayload,
    identifier: int = Depends(resolve_user_id),
    session: Session = Depends(get_db_session),
) -> UserRecord:
    """Replace a user."""
    return replace_user_service(session, identifier, payload)


@router.patch(
    "/users/{user_id}",
    response_model=User,
    dependencies=[Depends(require_json_content_type)],
)
def patch_user_endpoint(
    payload: UserPatch,
    identifier: int = Depends(resolve_user_id),
    session: Session = Depends(get_db_session),
) -> UserRecord:
    """Partially update a user."""
    return patch_user_service(session, identifier, payload)


@router.delete("/users/{user_id}", status_code=204)
def delete_user_endpoint(
    identifier: int = Depends(resolve_user_id),
    session: Session = Depends(get_db_session),
) -> Response:
    """Delete a user."""
    delete_user_service(session, identifier)
    return Response(status_code=204)
