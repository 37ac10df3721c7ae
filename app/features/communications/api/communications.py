"""
Pair communication routes.

Both endpoints accept the two users in either order; the response always
follows the caller's order. Neither is conditionally cached.
"""

from fastapi import APIRouter

from app.features.communications.api.errors import reporting
from app.features.communications.services.analytics_service import communication_analytics_service
from app.features.communications.services.pagination import compute_window
from app.features.communications.services.pair_normalizer import validate_user_id
from app.features.communications.services.validation import validate_date_range, validate_granularity
from app.infrastructure.observability.logging import get_logger
from app.models.api.communication_response import (
    AggregatedCommunicationResponse,
    UserCommunicationResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/users/communications", tags=["communications"])

TIMELINE_DEFAULT_LIMIT = 50
TIMELINE_MAX_LIMIT = 100


@router.get("/{user_id1}/{user_id2}", response_model=UserCommunicationResponse)
async def get_pair_communication(
    user_id1: str,
    user_id2: str,
    page: str | None = None,
    limit: str | None = None,
    conversationId: str | None = None,
    dateFrom: str | None = None,
    dateTo: str | None = None,
) -> UserCommunicationResponse:
    date_range = validate_date_range(dateFrom, dateTo)
    validate_user_id(user_id1, "userId1")
    validate_user_id(user_id2, "userId2")
    window = compute_window(
        page,
        limit,
        max_limit=TIMELINE_MAX_LIMIT,
        default_limit=TIMELINE_DEFAULT_LIMIT,
        context="pair-communication",
    )

    with reporting("Failed to fetch communication data"):
        data = await communication_analytics_service.get_pair_communication(
            user_id1,
            user_id2,
            window=window,
            date_range=date_range,
            conversation_id=conversationId or None,
        )

    logger.info(
        "Pair communication served",
        shared_conversations=len(data.shared_conversations),
        timeline_entries=len(data.message_timeline),
    )
    return UserCommunicationResponse.model_validate(data, from_attributes=True)


@router.get("/{user_id1}/{user_id2}/analytics", response_model=AggregatedCommunicationResponse)
async def get_pair_analytics(
    user_id1: str,
    user_id2: str,
    dateFrom: str | None = None,
    dateTo: str | None = None,
    granularity: str | None = None,
) -> AggregatedCommunicationResponse:
    validate_user_id(user_id1, "userId1")
    validate_user_id(user_id2, "userId2")
    date_range = validate_date_range(dateFrom, dateTo)
    bucket = validate_granularity(granularity)

    with reporting("Failed to fetch aggregated communication data"):
        data = await communication_analytics_service.get_pair_analytics(
            user_id1,
            user_id2,
            date_range=date_range,
            granularity=bucket,
        )

    return AggregatedCommunicationResponse.model_validate(data, from_attributes=True)
