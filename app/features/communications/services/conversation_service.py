"""Conversation listing, search, detail and message paging."""

from typing import Any

from app.features.communications.domain.errors import ConversationNotFound
from app.features.communications.domain.models import ConversationDetail, ConversationSummary, PaginationInfo
from app.features.communications.repository.conversation_repository import ConversationRepository
from app.features.communications.services.pagination import PageWindow
from app.features.communications.services.validation import DateRange
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

ALL_MESSAGE_TYPES = "all"


def effective_message_type(message_type: str | None) -> str | None:
    """'all' and blank mean no type filter at all."""
    if not message_type or message_type.strip().lower() == ALL_MESSAGE_TYPES:
        return None
    return message_type.strip()


async def list_conversations(window: PageWindow) -> tuple[list[ConversationSummary], PaginationInfo]:
    total, conversations = await ConversationRepository.list_page(window)
    return conversations, window.info(total)


async def search_conversations(
    query: str,
    window: PageWindow,
    *,
    conversation_type: str | None = None,
    priority: str | None = None,
    date_range: DateRange = DateRange(),
) -> tuple[list[ConversationSummary], int, PaginationInfo]:
    total, results = await ConversationRepository.search(
        query,
        window,
        conversation_type=conversation_type,
        priority=priority,
        date_from=date_range.date_from,
        date_to=date_range.date_to,
    )
    logger.debug("Conversation search completed", total=total, returned=len(results))
    return results, total, window.info(total)


async def get_conversation(conversation_id: str) -> ConversationDetail:
    conversation = await ConversationRepository.get_by_id(conversation_id)
    if conversation is None:
        raise ConversationNotFound()
    return conversation


async def list_messages(
    conversation_id: str,
    window: PageWindow,
    message_type: str | None = None,
) -> tuple[list[dict[str, Any]], PaginationInfo]:
    exists, total, messages = await ConversationRepository.messages_page(
        conversation_id, window, effective_message_type(message_type)
    )
    if not exists:
        raise ConversationNotFound()
    return messages, window.info(total)
