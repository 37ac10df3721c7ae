"""
Pair communication analytics.

Issues the independent sub-queries behind one analytics response and merges
them. The sub-queries share no intermediate results, so they run
concurrently; the first failure fails the whole response once every sibling
has settled.
"""

from __future__ import annotations

import statistics
from collections import defaultdict
from datetime import datetime

from app.db.neo4j import run_concurrently
from app.features.communications.domain.errors import UserNotFound
from app.features.communications.domain.models import (
    AggregatedCommunicationData,
    Granularity,
    PairMessage,
    ResponseTimeAnalysis,
    ResponseTimeBucket,
    TalkListenRatio,
    UserCommunicationData,
)
from app.features.communications.repository.communication_repository import (
    CommunicationRepository,
)
from app.features.communications.services.pagination import PageWindow
from app.features.communications.services.pair_normalizer import normalize_pair, unswap
from app.features.communications.services.validation import DateRange, parse_iso_timestamp
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# (upper bound in seconds, label); the last band is open-ended
RESPONSE_TIME_BANDS: list[tuple[float, str]] = [
    (60, "<1 min"),
    (5 * 60, "1-5 min"),
    (15 * 60, "5-15 min"),
    (30 * 60, "15-30 min"),
    (60 * 60, "30-60 min"),
    (2 * 3600, "1-2 hrs"),
    (6 * 3600, "2-6 hrs"),
    (float("inf"), ">6 hrs"),
]


def response_intervals(messages: list[PairMessage]) -> list[float]:
    """
    Seconds between each message and the next later message from another
    sender in the same conversation.

    `messages` must be ordered by conversation, then timestamp.
    """
    by_conversation: dict[str, list[tuple[datetime, str]]] = defaultdict(list)
    for message in messages:
        timestamp = parse_iso_timestamp(message.timestamp)
        if timestamp is None:
            continue
        by_conversation[message.conversation_id].append((timestamp, message.sender_id))

    intervals: list[float] = []
    for stream in by_conversation.values():
        next_by_sender: dict[str, datetime] = {}
        for timestamp, sender in reversed(stream):
            replies = [ts for other, ts in next_by_sender.items() if other != sender]
            if replies:
                elapsed = (min(replies) - timestamp).total_seconds()
                if elapsed > 0:
                    intervals.append(elapsed)
            next_by_sender[sender] = timestamp
    return intervals


def analyze_response_times(intervals: list[float]) -> ResponseTimeAnalysis:
    counts = [0] * len(RESPONSE_TIME_BANDS)
    for seconds in intervals:
        for index, (upper, _label) in enumerate(RESPONSE_TIME_BANDS):
            if seconds < upper:
                counts[index] += 1
                break

    return ResponseTimeAnalysis(
        avg_response_time=statistics.fmean(intervals) if intervals else 0.0,
        median_response_time=float(statistics.median(intervals)) if intervals else 0.0,
        distribution=[
            ResponseTimeBucket(range=label, count=count)
            for (_upper, label), count in zip(RESPONSE_TIME_BANDS, counts)
        ],
    )


def talk_listen_ratio(user1_messages: int, user2_messages: int) -> TalkListenRatio:
    total = user1_messages + user2_messages
    if total == 0:
        return TalkListenRatio(
            user1_messages=0,
            user2_messages=0,
            user1_percentage=50.0,
            user2_percentage=50.0,
        )
    return TalkListenRatio(
        user1_messages=user1_messages,
        user2_messages=user2_messages,
        user1_percentage=user1_messages / total * 100,
        user2_percentage=user2_messages / total * 100,
    )


class CommunicationAnalyticsService:
    def __init__(self, repository: type[CommunicationRepository] = CommunicationRepository) -> None:
        self.repository = repository

    async def get_communication_data(
        self,
        canonical_id1: str,
        canonical_id2: str,
        *,
        window: PageWindow,
        date_range: DateRange = DateRange(),
        conversation_id: str | None = None,
    ) -> UserCommunicationData:
        users = await self.repository.fetch_user_summaries([canonical_id1, canonical_id2])
        user1, user2 = users.get(canonical_id1), users.get(canonical_id2)
        if user1 is None or user2 is None:
            raise UserNotFound("One or both users not found")

        shared, stats, (total, timeline) = await run_concurrently(
            self.repository.fetch_shared_conversations(canonical_id1, canonical_id2),
            self.repository.fetch_communication_stats(canonical_id1, canonical_id2, date_range),
            self.repository.fetch_timeline_page(
                canonical_id1, canonical_id2, window, date_range, conversation_id
            ),
        )

        logger.debug(
            "Communication data assembled",
            shared_conversations=len(shared),
            timeline_total=total,
            page=window.page,
        )

        return UserCommunicationData(
            user1=user1,
            user2=user2,
            shared_conversations=shared,
            communication_stats=stats,
            message_timeline=timeline,
            pagination=window.info(total),
        )

    async def get_aggregated_communication_data(
        self,
        canonical_id1: str,
        canonical_id2: str,
        *,
        date_range: DateRange = DateRange(),
        granularity: Granularity = Granularity.DAILY,
    ) -> AggregatedCommunicationData:
        frequency, pair_messages, heatmap, (user1_count, user2_count), types = await run_concurrently(
            self.repository.fetch_frequency(canonical_id1, canonical_id2, date_range, granularity),
            self.repository.fetch_pair_messages(canonical_id1, canonical_id2, date_range),
            self.repository.fetch_activity_heatmap(canonical_id1, canonical_id2, date_range),
            self.repository.fetch_message_counts(canonical_id1, canonical_id2, date_range),
            self.repository.fetch_conversation_types(canonical_id1, canonical_id2),
        )

        return AggregatedCommunicationData(
            frequency=frequency,
            response_time=analyze_response_times(response_intervals(pair_messages)),
            activity_heatmap=heatmap,
            talk_to_listen_ratio=talk_listen_ratio(user1_count, user2_count),
            conversation_types=types,
        )

    async def get_pair_communication(
        self,
        user_id1: str,
        user_id2: str,
        *,
        window: PageWindow,
        date_range: DateRange = DateRange(),
        conversation_id: str | None = None,
    ) -> UserCommunicationData:
        """Caller-ordered entry point: normalise, query, restore order."""
        pair = normalize_pair(user_id1, user_id2)
        data = await self.get_communication_data(
            pair.canonical_id1,
            pair.canonical_id2,
            window=window,
            date_range=date_range,
            conversation_id=conversation_id,
        )
        return unswap(data, pair.was_swapped)

    async def get_pair_analytics(
        self,
        user_id1: str,
        user_id2: str,
        *,
        date_range: DateRange = DateRange(),
        granularity: Granularity = Granularity.DAILY,
    ) -> AggregatedCommunicationData:
        pair = normalize_pair(user_id1, user_id2)
        data = await self.get_aggregated_communication_data(
            pair.canonical_id1,
            pair.canonical_id2,
            date_range=date_range,
            granularity=granularity,
        )
        return unswap(data, pair.was_swapped)


communication_analytics_service = CommunicationAnalyticsService()
