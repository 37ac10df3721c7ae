"""
Conversation routes.

GET /api/conversations                      lenient paging, conditional cache
GET /api/conversations/search               lenient paging
GET /api/conversations/{id}                 detail, 404 when absent
GET /api/conversations/{id}/messages        strict paging, optional messageType
"""

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from app.config import settings
from app.features.communications.api.dependencies import require_connection
from app.features.communications.api.errors import reporting
from app.features.communications.services import conversation_service
from app.features.communications.services.pagination import PaginationPolicy, compute_window
from app.features.communications.services.validation import (
    CONVERSATION_PRIORITIES,
    CONVERSATION_TYPES,
    validate_choice,
    validate_date_range,
    validate_search_query,
)
from app.middleware.conditional_cache import conditional_cache
from app.models.api.communication_response import (
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationSearchResponse,
    MessageListResponse,
)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])

LIST_DEFAULT_LIMIT = 20
MESSAGES_DEFAULT_LIMIT = 50
MESSAGES_MAX_LIMIT = 100


@router.get("", dependencies=[Depends(require_connection)])
async def list_conversations(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
) -> Response:
    window = compute_window(
        page,
        limit,
        max_limit=settings.PAGINATION_MAX_LIMIT,
        default_limit=LIST_DEFAULT_LIMIT,
        context="conversations-api",
    )

    with reporting("Failed to fetch conversations"):
        conversations, pagination = await conversation_service.list_conversations(window)

    payload = ConversationListResponse.model_validate(
        {"conversations": conversations, "pagination": pagination}, from_attributes=True
    )
    return conditional_cache.respond(payload.model_dump(by_alias=True), request)


@router.get(
    "/search",
    response_model=ConversationSearchResponse,
    dependencies=[Depends(require_connection)],
)
async def search_conversations(
    query: str | None = None,
    type: str | None = None,
    priority: str | None = None,
    dateFrom: str | None = None,
    dateTo: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> ConversationSearchResponse:
    search_query = validate_search_query(query)
    conversation_type = validate_choice(type, "type", CONVERSATION_TYPES)
    conversation_priority = validate_choice(priority, "priority", CONVERSATION_PRIORITIES)
    date_range = validate_date_range(dateFrom, dateTo)
    window = compute_window(
        page,
        limit,
        max_limit=settings.PAGINATION_MAX_LIMIT,
        default_limit=LIST_DEFAULT_LIMIT,
        context="conversations-search",
    )

    with reporting("Failed to search conversations"):
        results, total, pagination = await conversation_service.search_conversations(
            search_query,
            window,
            conversation_type=conversation_type,
            priority=conversation_priority,
            date_range=date_range,
        )

    return ConversationSearchResponse.model_validate(
        {"results": results, "total": total, "pagination": pagination}, from_attributes=True
    )


@router.get("/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(conversation_id: str) -> ConversationDetailResponse:
    with reporting("Failed to fetch conversation"):
        conversation = await conversation_service.get_conversation(conversation_id)
    return ConversationDetailResponse.model_validate(conversation, from_attributes=True)


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages(
    conversation_id: str,
    page: str | None = None,
    limit: str | None = None,
    messageType: str | None = None,
) -> MessageListResponse:
    window = compute_window(
        page,
        limit,
        max_limit=MESSAGES_MAX_LIMIT,
        default_limit=MESSAGES_DEFAULT_LIMIT,
        policy=PaginationPolicy.STRICT,
        context="conversation-messages",
    )

    with reporting("Failed to fetch messages"):
        messages, pagination = await conversation_service.list_messages(
            conversation_id, window, messageType
        )

    return MessageListResponse.model_validate(
        {"messages": messages, "pagination": pagination}, from_attributes=True
    )
