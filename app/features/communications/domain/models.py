"""
Domain models for the communication analytics feature.

These dataclasses are transient read projections built per request. They
carry no business logic so repositories, services and the API layer can all
share them; the API layer serialises them through pydantic response models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(slots=True)
class UserSummary:
    user_id: str
    name: str | None
    email: str | None
    avatar: str | None = None
    conversation_count: int = 0
    message_count: int = 0
    last_active_timestamp: str = ""


@dataclass(slots=True)
class ConversationSummary:
    conversation_id: str
    title: str | None
    type: str | None
    priority: str | None
    participant_count: int
    message_count: int
    last_message_timestamp: str | None


@dataclass(slots=True)
class PaginationInfo:
    page: int
    limit: int
    total: int
    total_pages: int


@dataclass(slots=True)
class SharedConversation:
    conversation_id: str
    title: str
    type: str  # "direct" or "group"
    message_count: int
    user1_message_count: int
    user2_message_count: int
    last_message_timestamp: str
    participants: list[UserSummary] = field(default_factory=list)


@dataclass(slots=True)
class TimelineMessage:
    message_id: str
    content: str | None
    sender_id: str
    timestamp: str
    conversation_id: str
    conversation_title: str


@dataclass(slots=True)
class CommunicationStats:
    total_shared_conversations: int = 0
    total_messages: int = 0
    user1_messages: int = 0
    user2_messages: int = 0
    first_interaction: str | None = None
    last_interaction: str | None = None


@dataclass(slots=True)
class UserCommunicationData:
    user1: UserSummary
    user2: UserSummary
    shared_conversations: list[SharedConversation]
    communication_stats: CommunicationStats
    message_timeline: list[TimelineMessage]
    pagination: PaginationInfo


@dataclass(slots=True)
class FrequencyDataPoint:
    date: str
    total_messages: int
    user1_messages: int
    user2_messages: int


@dataclass(slots=True)
class ResponseTimeBucket:
    range: str
    count: int


@dataclass(slots=True)
class ResponseTimeAnalysis:
    avg_response_time: float
    median_response_time: float
    distribution: list[ResponseTimeBucket]


@dataclass(slots=True)
class ActivityHeatmapPoint:
    day_of_week: int  # 0 = Sunday
    hour: int
    message_count: int


@dataclass(slots=True)
class TalkListenRatio:
    user1_messages: int
    user2_messages: int
    user1_percentage: float
    user2_percentage: float


@dataclass(slots=True)
class ConversationTypeDistribution:
    type: str
    count: int
    percentage: float


@dataclass(slots=True)
class AggregatedCommunicationData:
    frequency: list[FrequencyDataPoint]
    response_time: ResponseTimeAnalysis
    activity_heatmap: list[ActivityHeatmapPoint]
    talk_to_listen_ratio: TalkListenRatio
    conversation_types: list[ConversationTypeDistribution]


@dataclass(slots=True)
class PairMessage:
    """One message of the pair's stream, used for response-time analysis."""

    conversation_id: str
    sender_id: str
    timestamp: str


@dataclass(slots=True)
class ConversationDetail:
    conversation_id: str
    title: str | None
    type: str | None
    priority: str | None
    created_at: str | None
    tags: list[str]
    participants: list[dict[str, Any]]


@dataclass(slots=True)
class UserContact:
    user_id: str
    name: str | None
    email: str | None
    username: str | None
    avatar_url: str | None
    status: str
    role: str
    bio: str | None
    department: str | None
    location: str | None
    last_seen: str
    shared_conversation_count: int
    total_message_count: int
    first_interaction: str
    last_interaction: str
