"""User directory routes."""

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from app.config import settings
from app.features.communications.api.dependencies import require_connection
from app.features.communications.api.errors import reporting
from app.features.communications.services import user_service
from app.features.communications.services.pagination import compute_window
from app.features.communications.services.pair_normalizer import validate_user_id
from app.middleware.conditional_cache import conditional_cache
from app.models.api.communication_response import (
    UserContactsResponse,
    UserDetailResponse,
    UserListResponse,
    UserSearchResponse,
)

router = APIRouter(prefix="/api/users", tags=["users"])

LIST_DEFAULT_LIMIT = 20
SEARCH_DEFAULT_LIMIT = 10
SEARCH_MAX_LIMIT = 50
CONTACTS_DEFAULT_LIMIT = 20
CONTACTS_MAX_LIMIT = 1000


@router.get("", dependencies=[Depends(require_connection)])
async def list_users(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
) -> Response:
    window = compute_window(
        page,
        limit,
        max_limit=settings.PAGINATION_MAX_LIMIT,
        default_limit=LIST_DEFAULT_LIMIT,
        context="users-api",
    )

    with reporting("Failed to fetch users"):
        users, pagination = await user_service.list_users(window)

    payload = UserListResponse.model_validate(
        {"users": users, "pagination": pagination}, from_attributes=True
    )
    return conditional_cache.respond(payload.model_dump(by_alias=True), request)


@router.get(
    "/search",
    response_model=UserSearchResponse,
    dependencies=[Depends(require_connection)],
)
async def search_users(
    query: str | None = None,
    excludeUserId: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> UserSearchResponse:
    window = compute_window(
        page,
        limit,
        max_limit=SEARCH_MAX_LIMIT,
        default_limit=SEARCH_DEFAULT_LIMIT,
        context="users-search",
    )

    with reporting("Failed to search users"):
        results, total, trimmed, pagination = await user_service.search_users(
            query, window, excludeUserId or None
        )

    return UserSearchResponse.model_validate(
        {"results": results, "total": total, "query": trimmed, "pagination": pagination},
        from_attributes=True,
    )


@router.get("/{user_id}", response_model=UserDetailResponse)
async def get_user(user_id: str) -> UserDetailResponse:
    validate_user_id(user_id, "userId")

    with reporting("Failed to fetch user details"):
        detail = await user_service.get_user_detail(user_id)

    return UserDetailResponse.model_validate(detail)


@router.get("/{user_id}/contacts", response_model=UserContactsResponse)
async def get_user_contacts(
    user_id: str,
    query: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> UserContactsResponse:
    validate_user_id(user_id, "userId")
    window = compute_window(
        page,
        limit,
        max_limit=CONTACTS_MAX_LIMIT,
        default_limit=CONTACTS_DEFAULT_LIMIT,
        context="user-contacts",
    )

    with reporting("Failed to fetch user contacts"):
        contacts, total, pagination = await user_service.get_user_contacts(user_id, window, query)

    return UserContactsResponse.model_validate(
        {"results": contacts, "total": total, "pagination": pagination}, from_attributes=True
    )
