"""
Domain layer for the communications feature.
"""

from .errors import (
    CommunicationError,
    ConversationNotFound,
    InvalidIdentifier,
    InvalidParameter,
    QueryFailed,
    UpstreamUnavailable,
    UserNotFound,
)
from .models import AggregatedCommunicationData, Granularity, PaginationInfo, UserCommunicationData

__all__ = [
    "CommunicationError",
    "ConversationNotFound",
    "InvalidIdentifier",
    "InvalidParameter",
    "QueryFailed",
    "UpstreamUnavailable",
    "UserNotFound",
    "AggregatedCommunicationData",
    "Granularity",
    "PaginationInfo",
    "UserCommunicationData",
]
