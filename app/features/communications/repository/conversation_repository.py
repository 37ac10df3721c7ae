"""
Neo4j repository for conversation listings.

Every listing applies its page window directly after ordering the base match;
participant and message counts are computed only for rows inside the window.
"""

from typing import Any

from app.db.neo4j import execute_read_query, run_concurrently
from app.features.communications.domain.models import ConversationDetail, ConversationSummary
from app.features.communications.repository.communication_repository import MESSAGE_UTC
from app.features.communications.services.pagination import PageWindow, fetch_page, read_count

CONVERSATION_PROJECTION = """
    RETURN {
        conversationId: c.conversationId,
        title: c.title,
        type: c.type,
        priority: c.priority,
        lastMessageTimestamp: c.lastMessageTimestamp,
        participantCount: COUNT { (:User)-[:PARTICIPATES_IN]->(c) },
        messageCount: COUNT { (:Message)-[:BELONGS_TO]->(c) }
    } AS conversation
"""

MESSAGE_PROJECTION = "m { .messageId, .content, .senderId, .timestamp, .status, .type, .reactions }"


def conversation_summary_from_row(row: dict[str, Any]) -> ConversationSummary:
    conversation = row["conversation"]
    return ConversationSummary(
        conversation_id=conversation["conversationId"],
        title=conversation.get("title"),
        type=conversation.get("type"),
        priority=conversation.get("priority"),
        participant_count=conversation.get("participantCount") or 0,
        message_count=conversation.get("messageCount") or 0,
        last_message_timestamp=conversation.get("lastMessageTimestamp"),
    )


class ConversationRepository:
    """Cypher helpers for conversation listings and detail views."""

    @staticmethod
    async def list_page(window: PageWindow) -> tuple[int, list[ConversationSummary]]:
        count_query = "MATCH (c:Conversation) RETURN count(c) AS total"
        data_query = f"""
            MATCH (c:Conversation)
            WITH c
            ORDER BY c.lastMessageTimestamp DESC, c.conversationId ASC
            SKIP $skip
            LIMIT $limit
            {CONVERSATION_PROJECTION}
        """
        total, rows = await fetch_page(
            count_query, data_query, {}, window, operation="conversations.list"
        )
        return total, [conversation_summary_from_row(row) for row in rows]

    @staticmethod
    async def search(
        query: str,
        window: PageWindow,
        *,
        conversation_type: str | None = None,
        priority: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> tuple[int, list[ConversationSummary]]:
        conditions = [
            "(toLower(c.title) CONTAINS toLower($query) OR EXISTS { "
            "MATCH (u:User)-[:PARTICIPATES_IN]->(c) WHERE toLower(u.name) CONTAINS toLower($query) })"
        ]
        params: dict[str, Any] = {"query": query}

        if conversation_type:
            conditions.append("c.type = $type")
            params["type"] = conversation_type
        if priority:
            conditions.append("c.priority = $priority")
            params["priority"] = priority
        if date_from:
            conditions.append("datetime(toString(c.lastMessageTimestamp)) >= datetime($dateFrom)")
            params["dateFrom"] = date_from
        if date_to:
            conditions.append("datetime(toString(c.lastMessageTimestamp)) <= datetime($dateTo)")
            params["dateTo"] = date_to

        where = " AND ".join(conditions)
        count_query = f"""
            MATCH (c:Conversation)
            WHERE {where}
            RETURN count(c) AS total
        """
        data_query = f"""
            MATCH (c:Conversation)
            WHERE {where}
            WITH c,
                CASE
                    WHEN toLower(c.title) = toLower($query) THEN 1
                    WHEN toLower(c.title) STARTS WITH toLower($query) THEN 2
                    WHEN toLower(c.title) CONTAINS toLower($query) THEN 3
                    ELSE 4
                END AS relevance
            ORDER BY relevance, c.lastMessageTimestamp DESC, c.conversationId ASC
            SKIP $skip
            LIMIT $limit
            {CONVERSATION_PROJECTION}
        """
        total, rows = await fetch_page(
            count_query,
            data_query,
            params,
            window,
            operation="conversations.search",
            skip_data_when_empty=True,
        )
        return total, [conversation_summary_from_row(row) for row in rows]

    @staticmethod
    async def get_by_id(conversation_id: str) -> ConversationDetail | None:
        query = """
            MATCH (c:Conversation {conversationId: $conversationId})
            OPTIONAL MATCH (u:User)-[:PARTICIPATES_IN]->(c)
            WITH c, collect(CASE WHEN u IS NULL THEN null ELSE {
                userId: u.userId,
                name: u.name,
                email: u.email,
                avatarUrl: u.avatarUrl,
                status: u.status
            } END) AS participants
            RETURN {
                conversationId: c.conversationId,
                title: c.title,
                type: c.type,
                priority: c.priority,
                createdAt: c.createdAt,
                tags: c.tags,
                participants: participants
            } AS conversation
        """
        rows = await execute_read_query(
            query, {"conversationId": conversation_id}, operation="conversations.detail"
        )
        if not rows:
            return None

        conversation = rows[0]["conversation"]
        return ConversationDetail(
            conversation_id=conversation["conversationId"],
            title=conversation.get("title"),
            type=conversation.get("type"),
            priority=conversation.get("priority"),
            created_at=conversation.get("createdAt"),
            tags=conversation.get("tags") or [],
            participants=conversation.get("participants") or [],
        )

    @staticmethod
    async def messages_page(
        conversation_id: str,
        window: PageWindow,
        message_type: str | None = None,
    ) -> tuple[bool, int, list[dict[str, Any]]]:
        """
        Return (conversation exists, total, page rows).

        `message_type` of None adds neither a predicate nor a parameter.
        """
        type_filter = " WHERE m.type = $messageType" if message_type else ""
        params: dict[str, Any] = {"conversationId": conversation_id}
        if message_type:
            params["messageType"] = message_type

        # Always yields exactly one record, even for an unknown conversation
        count_query = f"""
            OPTIONAL MATCH (c:Conversation {{conversationId: $conversationId}})
            OPTIONAL MATCH (m:Message)-[:BELONGS_TO]->(c){type_filter}
            RETURN c IS NOT NULL AS conversationExists, count(m) AS count
        """
        data_query = f"""
            MATCH (m:Message)-[:BELONGS_TO]->(c:Conversation {{conversationId: $conversationId}}){type_filter}
            WITH m
            ORDER BY {MESSAGE_UTC} ASC, m.messageId ASC
            SKIP $skip
            LIMIT $limit
            RETURN {MESSAGE_PROJECTION} AS message
        """
        count_records, rows = await run_concurrently(
            execute_read_query(count_query, params, operation="conversations.messages.count"),
            execute_read_query(
                data_query,
                {**params, "skip": window.skip, "limit": window.limit},
                operation="conversations.messages.data",
            ),
        )
        total = read_count(count_records, "count", operation="conversations.messages")
        exists = bool(count_records[0].get("conversationExists", True))
        return exists, total, [row["message"] for row in rows]
