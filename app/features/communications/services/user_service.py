"""User directory: listing, search, profile detail and contacts."""

from typing import Any

from app.features.communications.domain.errors import UserNotFound
from app.features.communications.domain.models import PaginationInfo, UserContact, UserSummary
from app.features.communications.repository.user_repository import UserRepository
from app.features.communications.services.pagination import PageWindow


async def list_users(window: PageWindow) -> tuple[list[UserSummary], PaginationInfo]:
    total, users = await UserRepository.list_page(window)
    return users, window.info(total)


async def search_users(
    query: str | None,
    window: PageWindow,
    exclude_user_id: str | None = None,
) -> tuple[list[dict[str, Any]], int, str, PaginationInfo]:
    """
    Search by name, email or username.

    A blank query returns an empty result without touching the store.
    """
    trimmed = (query or "").strip()
    if not trimmed:
        return [], 0, "", window.info(0)

    total, results = await UserRepository.search(trimmed, window, exclude_user_id)
    return results, total, trimmed, window.info(total)


async def get_user_detail(user_id: str) -> dict[str, Any]:
    detail = await UserRepository.get_detail(user_id)
    if detail is None:
        raise UserNotFound()
    return detail


async def get_user_contacts(
    user_id: str,
    window: PageWindow,
    query: str | None = None,
) -> tuple[list[UserContact], int, PaginationInfo]:
    if not await UserRepository.exists(user_id):
        raise UserNotFound()

    total, contacts = await UserRepository.contacts_page(user_id, window, (query or "").strip())
    return contacts, total, window.info(total)
