"""
Canonical ordering of user pairs.

Queries and cache keys always use the lexicographically sorted pair so that
(a, b) and (b, a) hit the same data. The caller's order is restored once, at
the response boundary, by `unswap`.
"""

import re
from dataclasses import dataclass, replace

from app.features.communications.domain.errors import InvalidIdentifier
from app.features.communications.domain.models import (
    AggregatedCommunicationData,
    CommunicationStats,
    FrequencyDataPoint,
    SharedConversation,
    TalkListenRatio,
    UserCommunicationData,
)

USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True, slots=True)
class PairKey:
    canonical_id1: str
    canonical_id2: str
    was_swapped: bool


def validate_user_id(user_id: str | None, name: str = "userId") -> str:
    if not user_id or not USER_ID_PATTERN.fullmatch(user_id):
        raise InvalidIdentifier(
            f"Invalid {name} format. Only alphanumeric characters, hyphens, "
            "and underscores are allowed."
        )
    return user_id


def normalize_pair(user_id1: str, user_id2: str) -> PairKey:
    """Validate both identifiers and return them in canonical order."""
    validate_user_id(user_id1, "userId1")
    validate_user_id(user_id2, "userId2")

    first, second = sorted((user_id1, user_id2))
    return PairKey(
        canonical_id1=first,
        canonical_id2=second,
        was_swapped=user_id1 != first,
    )


def unswap(response, was_swapped: bool):
    """
    Restore the caller's user order on a response built from a canonical pair.

    Pure: returns a new object and never mutates its input. Every field that
    is relative to user 1 vs user 2 is handled here and nowhere else.
    """
    if not was_swapped:
        return response
    if isinstance(response, UserCommunicationData):
        return _unswap_communication(response)
    if isinstance(response, AggregatedCommunicationData):
        return _unswap_aggregated(response)
    raise TypeError(f"Cannot unswap {type(response).__name__}")


def _unswap_communication(data: UserCommunicationData) -> UserCommunicationData:
    return replace(
        data,
        user1=data.user2,
        user2=data.user1,
        communication_stats=_swap_stats(data.communication_stats),
        shared_conversations=[_swap_shared(conv) for conv in data.shared_conversations],
    )


def _unswap_aggregated(data: AggregatedCommunicationData) -> AggregatedCommunicationData:
    return replace(
        data,
        frequency=[_swap_frequency(point) for point in data.frequency],
        talk_to_listen_ratio=_swap_ratio(data.talk_to_listen_ratio),
    )


def _swap_stats(stats: CommunicationStats) -> CommunicationStats:
    return replace(
        stats,
        user1_messages=stats.user2_messages,
        user2_messages=stats.user1_messages,
    )


def _swap_shared(conversation: SharedConversation) -> SharedConversation:
    return replace(
        conversation,
        user1_message_count=conversation.user2_message_count,
        user2_message_count=conversation.user1_message_count,
    )


def _swap_frequency(point: FrequencyDataPoint) -> FrequencyDataPoint:
    return replace(
        point,
        user1_messages=point.user2_messages,
        user2_messages=point.user1_messages,
    )


def _swap_ratio(ratio: TalkListenRatio) -> TalkListenRatio:
    return TalkListenRatio(
        user1_messages=ratio.user2_messages,
        user2_messages=ratio.user1_messages,
        user1_percentage=ratio.user2_percentage,
        user2_percentage=ratio.user1_percentage,
    )
