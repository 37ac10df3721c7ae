"""
Neo4j repository for pair communication analytics.

This layer only contains Cypher and record-to-model mapping. Every method
takes the canonical (sorted) pair; restoring the caller's order is the
service's job.
"""

from typing import Any

from app.db.neo4j import execute_read_query
from app.features.communications.domain.models import (
    ActivityHeatmapPoint,
    CommunicationStats,
    ConversationTypeDistribution,
    FrequencyDataPoint,
    Granularity,
    PairMessage,
    SharedConversation,
    TimelineMessage,
    UserSummary,
)
from app.features.communications.services.pagination import PageWindow, fetch_page
from app.features.communications.services.validation import DateRange

UNTITLED_CONVERSATION = "Untitled Conversation"

# Stored timestamps may be ISO strings or DateTime values; both normalise to UTC
MESSAGE_UTC = "datetime({epochMillis: datetime(toString(m.timestamp)).epochMillis})"

PAIR_MATCH = """
    MATCH (u1:User {userId: $userId1})-[:PARTICIPATES_IN]->(c:Conversation)<-[:PARTICIPATES_IN]-(u2:User {userId: $userId2})
"""

TRUNCATE_UNITS = {
    Granularity.DAILY: "day",
    Granularity.WEEKLY: "week",
    Granularity.MONTHLY: "month",
}


def date_filter_clause(date_range: DateRange, alias: str = "m") -> str:
    timestamp = f"datetime(toString({alias}.timestamp))"
    clauses = []
    if date_range.date_from:
        clauses.append(f"{timestamp} >= datetime($dateFrom)")
    if date_range.date_to:
        clauses.append(f"{timestamp} <= datetime($dateTo)")
    return "".join(f" AND {clause}" for clause in clauses)


def user_summary_from_row(row: dict[str, Any]) -> UserSummary:
    return UserSummary(
        user_id=row["userId"],
        name=row.get("name"),
        email=row.get("email"),
        avatar=row.get("avatar"),
        conversation_count=row.get("conversationCount") or 0,
        message_count=row.get("messageCount") or 0,
        last_active_timestamp=row.get("lastActiveTimestamp") or "",
    )


class CommunicationRepository:
    """Cypher helpers for the user-pair analytics views."""

    @staticmethod
    async def fetch_user_summaries(user_ids: list[str]) -> dict[str, UserSummary]:
        if not user_ids:
            return {}

        query = """
            MATCH (u:User)
            WHERE u.userId IN $userIds
            RETURN {
                userId: u.userId,
                name: u.name,
                email: u.email,
                avatar: u.avatarUrl,
                lastActiveTimestamp: u.lastSeen,
                conversationCount: COUNT { (u)-[:PARTICIPATES_IN]->(:Conversation) },
                messageCount: COUNT { (u)-[:SENT]->(:Message) }
            } AS user
        """
        rows = await execute_read_query(
            query, {"userIds": user_ids}, operation="communications.user_summaries"
        )
        summaries = [user_summary_from_row(row["user"]) for row in rows]
        return {summary.user_id: summary for summary in summaries}

    @staticmethod
    async def fetch_shared_conversations(user_id1: str, user_id2: str) -> list[SharedConversation]:
        query = f"""
            {PAIR_MATCH}
            WITH DISTINCT c
            ORDER BY c.lastMessageTimestamp DESC, c.conversationId ASC
            CALL {{
                WITH c
                OPTIONAL MATCH (c)<-[:BELONGS_TO]-(m:Message)
                RETURN count(m) AS totalMessages,
                       sum(CASE WHEN m.senderId = $userId1 THEN 1 ELSE 0 END) AS user1Messages,
                       sum(CASE WHEN m.senderId = $userId2 THEN 1 ELSE 0 END) AS user2Messages
            }}
            CALL {{
                WITH c
                MATCH (u:User)-[:PARTICIPATES_IN]->(c)
                RETURN collect({{
                    userId: u.userId,
                    name: u.name,
                    email: u.email,
                    avatar: u.avatarUrl
                }}) AS participants
            }}
            RETURN c.conversationId AS conversationId,
                   c.title AS title,
                   c.type AS type,
                   c.lastMessageTimestamp AS lastMessageTimestamp,
                   totalMessages,
                   user1Messages,
                   user2Messages,
                   participants
        """
        rows = await execute_read_query(
            query,
            {"userId1": user_id1, "userId2": user_id2},
            operation="communications.shared_conversations",
        )
        return [
            SharedConversation(
                conversation_id=row["conversationId"],
                title=row.get("title") or UNTITLED_CONVERSATION,
                type="direct" if row.get("type") == "direct" else "group",
                message_count=row.get("totalMessages") or 0,
                user1_message_count=row.get("user1Messages") or 0,
                user2_message_count=row.get("user2Messages") or 0,
                last_message_timestamp=row.get("lastMessageTimestamp") or "",
                participants=[user_summary_from_row(p) for p in row.get("participants") or []],
            )
            for row in rows
        ]

    @staticmethod
    async def fetch_communication_stats(
        user_id1: str, user_id2: str, date_range: DateRange
    ) -> CommunicationStats:
        # Only the pair's own messages count, so user1 + user2 == total
        query = f"""
            {PAIR_MATCH}
            WITH collect(DISTINCT c) AS conversations
            UNWIND conversations AS c
            OPTIONAL MATCH (c)<-[:BELONGS_TO]-(m:Message)
            WHERE m.senderId IN [$userId1, $userId2]{date_filter_clause(date_range)}
            RETURN size(conversations) AS totalConversations,
                   count(m) AS totalMessages,
                   sum(CASE WHEN m.senderId = $userId1 THEN 1 ELSE 0 END) AS user1Messages,
                   sum(CASE WHEN m.senderId = $userId2 THEN 1 ELSE 0 END) AS user2Messages,
                   min(m.timestamp) AS firstInteraction,
                   max(m.timestamp) AS lastInteraction
        """
        params = {"userId1": user_id1, "userId2": user_id2, **date_range.as_params()}
        rows = await execute_read_query(query, params, operation="communications.stats")
        if not rows:
            return CommunicationStats()

        row = rows[0]
        return CommunicationStats(
            total_shared_conversations=row.get("totalConversations") or 0,
            total_messages=row.get("totalMessages") or 0,
            user1_messages=row.get("user1Messages") or 0,
            user2_messages=row.get("user2Messages") or 0,
            first_interaction=row.get("firstInteraction"),
            last_interaction=row.get("lastInteraction"),
        )

    @staticmethod
    async def fetch_timeline_page(
        user_id1: str,
        user_id2: str,
        window: PageWindow,
        date_range: DateRange,
        conversation_id: str | None = None,
    ) -> tuple[int, list[TimelineMessage]]:
        filters = date_filter_clause(date_range)
        if conversation_id:
            filters += " AND c.conversationId = $conversationId"

        base = f"""
            {PAIR_MATCH}
            WITH DISTINCT c
            MATCH (c)<-[:BELONGS_TO]-(m:Message)
            WHERE m.senderId IN [$userId1, $userId2]{filters}
        """
        count_query = f"{base} RETURN count(m) AS total"
        data_query = f"""
            {base}
            RETURN m.messageId AS messageId,
                   m.content AS content,
                   m.senderId AS senderId,
                   m.timestamp AS timestamp,
                   c.conversationId AS conversationId,
                   c.title AS conversationTitle
            ORDER BY {MESSAGE_UTC} DESC, m.messageId ASC
            SKIP $skip
            LIMIT $limit
        """

        params = {"userId1": user_id1, "userId2": user_id2, **date_range.as_params()}
        if conversation_id:
            params["conversationId"] = conversation_id

        total, rows = await fetch_page(
            count_query, data_query, params, window, operation="communications.timeline"
        )
        timeline = [
            TimelineMessage(
                message_id=row["messageId"],
                content=row.get("content"),
                sender_id=row["senderId"],
                timestamp=row.get("timestamp") or "",
                conversation_id=row["conversationId"],
                conversation_title=row.get("conversationTitle") or UNTITLED_CONVERSATION,
            )
            for row in rows
        ]
        return total, timeline

    @staticmethod
    async def fetch_frequency(
        user_id1: str, user_id2: str, date_range: DateRange, granularity: Granularity
    ) -> list[FrequencyDataPoint]:
        unit = TRUNCATE_UNITS[granularity]
        query = f"""
            {PAIR_MATCH}
            WITH DISTINCT c
            MATCH (c)<-[:BELONGS_TO]-(m:Message)
            WHERE m.senderId IN [$userId1, $userId2]{date_filter_clause(date_range)}
            WITH datetime.truncate('{unit}', {MESSAGE_UTC}) AS period, m
            WITH period,
                 count(m) AS totalMessages,
                 sum(CASE WHEN m.senderId = $userId1 THEN 1 ELSE 0 END) AS user1Messages,
                 sum(CASE WHEN m.senderId = $userId2 THEN 1 ELSE 0 END) AS user2Messages
            RETURN period, totalMessages, user1Messages, user2Messages
            ORDER BY period
        """
        params = {"userId1": user_id1, "userId2": user_id2, **date_range.as_params()}
        rows = await execute_read_query(query, params, operation="communications.frequency")
        return [
            FrequencyDataPoint(
                date=row.get("period") or "",
                total_messages=row.get("totalMessages") or 0,
                user1_messages=row.get("user1Messages") or 0,
                user2_messages=row.get("user2Messages") or 0,
            )
            for row in rows
        ]

    @staticmethod
    async def fetch_pair_messages(
        user_id1: str, user_id2: str, date_range: DateRange
    ) -> list[PairMessage]:
        query = f"""
            {PAIR_MATCH}
            WITH DISTINCT c
            MATCH (c)<-[:BELONGS_TO]-(m:Message)
            WHERE m.senderId IN [$userId1, $userId2]{date_filter_clause(date_range)}
            WITH c, m, {MESSAGE_UTC} AS ts
            RETURN c.conversationId AS conversationId,
                   m.senderId AS senderId,
                   toString(ts) AS timestamp
            ORDER BY conversationId, ts, m.messageId
        """
        params = {"userId1": user_id1, "userId2": user_id2, **date_range.as_params()}
        rows = await execute_read_query(query, params, operation="communications.response_time")
        return [
            PairMessage(
                conversation_id=row["conversationId"],
                sender_id=row["senderId"],
                timestamp=row["timestamp"],
            )
            for row in rows
        ]

    @staticmethod
    async def fetch_activity_heatmap(
        user_id1: str, user_id2: str, date_range: DateRange
    ) -> list[ActivityHeatmapPoint]:
        # Cypher dayOfWeek is 1 (Monday) .. 7 (Sunday); % 7 maps Sunday to 0
        query = f"""
            {PAIR_MATCH}
            WITH DISTINCT c
            MATCH (c)<-[:BELONGS_TO]-(m:Message)
            WHERE m.senderId IN [$userId1, $userId2]{date_filter_clause(date_range)}
            WITH {MESSAGE_UTC} AS ts
            WITH ts.dayOfWeek % 7 AS dayOfWeek, ts.hour AS hour, count(*) AS messageCount
            RETURN dayOfWeek, hour, messageCount
            ORDER BY dayOfWeek, hour
        """
        params = {"userId1": user_id1, "userId2": user_id2, **date_range.as_params()}
        rows = await execute_read_query(query, params, operation="communications.activity_heatmap")
        return [
            ActivityHeatmapPoint(
                day_of_week=row.get("dayOfWeek") or 0,
                hour=row.get("hour") or 0,
                message_count=row.get("messageCount") or 0,
            )
            for row in rows
        ]

    @staticmethod
    async def fetch_message_counts(
        user_id1: str, user_id2: str, date_range: DateRange
    ) -> tuple[int, int]:
        query = f"""
            {PAIR_MATCH}
            WITH DISTINCT c
            MATCH (c)<-[:BELONGS_TO]-(m:Message)
            WHERE m.senderId IN [$userId1, $userId2]{date_filter_clause(date_range)}
            RETURN sum(CASE WHEN m.senderId = $userId1 THEN 1 ELSE 0 END) AS user1Messages,
                   sum(CASE WHEN m.senderId = $userId2 THEN 1 ELSE 0 END) AS user2Messages
        """
        params = {"userId1": user_id1, "userId2": user_id2, **date_range.as_params()}
        rows = await execute_read_query(query, params, operation="communications.talk_listen")
        if not rows:
            return 0, 0
        return rows[0].get("user1Messages") or 0, rows[0].get("user2Messages") or 0

    @staticmethod
    async def fetch_conversation_types(
        user_id1: str, user_id2: str
    ) -> list[ConversationTypeDistribution]:
        query = f"""
            {PAIR_MATCH}
            WITH c.type AS type, count(DISTINCT c) AS count
            WITH collect({{type: type, count: count}}) AS types, sum(count) AS total
            UNWIND types AS t
            RETURN t.type AS type, t.count AS count, (t.count * 100.0 / total) AS percentage
            ORDER BY count DESC, type
        """
        rows = await execute_read_query(
            query,
            {"userId1": user_id1, "userId2": user_id2},
            operation="communications.conversation_types",
        )
        return [
            ConversationTypeDistribution(
                type=row.get("type") or "unknown",
                count=row.get("count") or 0,
                percentage=row.get("percentage") or 0.0,
            )
            for row in rows
        ]
