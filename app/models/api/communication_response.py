# app/models/api/communication_response.py
"""
Response models for the communication dashboard API.

Field names are snake_case in Python and camelCase on the wire. Models are
built straight from the domain dataclasses (`from_attributes`) or from the
camelCase dicts some repositories return.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class UserSummaryResponse(CamelModel):
    user_id: str
    name: str | None = None
    email: str | None = None
    avatar: str | None = None
    conversation_count: int = 0
    message_count: int = 0
    last_active_timestamp: str = ""


class ConversationSummaryResponse(CamelModel):
    conversation_id: str
    title: str | None = None
    type: str | None = None
    priority: str | None = None
    participant_count: int = 0
    message_count: int = 0
    last_message_timestamp: str | None = None


class ConversationListResponse(CamelModel):
    """Response for GET /api/conversations"""

    conversations: list[ConversationSummaryResponse]
    pagination: PaginationResponse


class ConversationSearchResponse(CamelModel):
    """Response for GET /api/conversations/search"""

    results: list[ConversationSummaryResponse]
    total: int
    pagination: PaginationResponse


class ConversationDetailResponse(CamelModel):
    conversation_id: str
    title: str | None = None
    type: str | None = None
    priority: str | None = None
    created_at: str | None = None
    tags: list[str] = Field(default_factory=list)
    participants: list[dict[str, Any]] = Field(default_factory=list)


class MessageListResponse(CamelModel):
    """Response for GET /api/conversations/{id}/messages"""

    messages: list[dict[str, Any]]
    pagination: PaginationResponse


class UserListResponse(CamelModel):
    users: list[UserSummaryResponse]
    pagination: PaginationResponse


class UserSearchResponse(CamelModel):
    results: list[dict[str, Any]]
    total: int
    query: str
    pagination: PaginationResponse


class UserDetailResponse(CamelModel):
    """Response for GET /api/users/{userId}"""

    user: dict[str, Any]
    stats: dict[str, Any]
    conversations: list[dict[str, Any]]
    activity_timeline: list[dict[str, Any]]


class UserContactResponse(CamelModel):
    user_id: str
    name: str | None = None
    email: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    status: str = "active"
    role: str = "member"
    bio: str | None = None
    department: str | None = None
    location: str | None = None
    last_seen: str = ""
    shared_conversation_count: int = 0
    total_message_count: int = 0
    first_interaction: str = ""
    last_interaction: str = ""


class UserContactsResponse(CamelModel):
    results: list[UserContactResponse]
    total: int
    pagination: PaginationResponse


# Pair communication


class SharedConversationResponse(CamelModel):
    conversation_id: str
    title: str
    type: str
    message_count: int
    user1_message_count: int
    user2_message_count: int
    last_message_timestamp: str
    participants: list[UserSummaryResponse] = Field(default_factory=list)


class CommunicationStatsResponse(CamelModel):
    total_shared_conversations: int = 0
    total_messages: int = 0
    user1_messages: int = 0
    user2_messages: int = 0
    first_interaction: str | None = None
    last_interaction: str | None = None


class TimelineMessageResponse(CamelModel):
    message_id: str
    content: str | None = None
    sender_id: str
    timestamp: str
    conversation_id: str
    conversation_title: str


class UserCommunicationResponse(CamelModel):
    """Response for GET /api/users/communications/{userId1}/{userId2}"""

    user1: UserSummaryResponse
    user2: UserSummaryResponse
    shared_conversations: list[SharedConversationResponse]
    communication_stats: CommunicationStatsResponse
    message_timeline: list[TimelineMessageResponse]
    pagination: PaginationResponse


class FrequencyPointResponse(CamelModel):
    date: str
    total_messages: int
    user1_messages: int
    user2_messages: int


class ResponseTimeBucketResponse(CamelModel):
    range: str
    count: int


class ResponseTimeResponse(CamelModel):
    avg_response_time: float
    median_response_time: float
    distribution: list[ResponseTimeBucketResponse]


class HeatmapPointResponse(CamelModel):
    day_of_week: int
    hour: int
    message_count: int


class TalkListenRatioResponse(CamelModel):
    user1_messages: int
    user2_messages: int
    user1_percentage: float
    user2_percentage: float


class ConversationTypeResponse(CamelModel):
    type: str
    count: int
    percentage: float


class AggregatedCommunicationResponse(CamelModel):
    """Response for GET /api/users/communications/{userId1}/{userId2}/analytics"""

    frequency: list[FrequencyPointResponse]
    response_time: ResponseTimeResponse
    activity_heatmap: list[HeatmapPointResponse]
    talk_to_listen_ratio: TalkListenRatioResponse
    conversation_types: list[ConversationTypeResponse]


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class ErrorReportReceivedResponse(BaseModel):
    received: bool
