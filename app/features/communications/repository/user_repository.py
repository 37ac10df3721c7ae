"""
Neo4j repository for user listings, search, detail and contacts.
"""

from typing import Any

from app.db.neo4j import execute_read_query
from app.features.communications.domain.models import UserContact, UserSummary
from app.features.communications.repository.communication_repository import user_summary_from_row
from app.features.communications.services.pagination import PageWindow, fetch_page

SEARCH_CONDITION = (
    "(toLower(u.name) CONTAINS toLower($query) OR toLower(u.email) CONTAINS toLower($query) "
    "OR toLower(u.username) CONTAINS toLower($query))"
)

DAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}


def messages_by_day(day_counts: list[dict[str, Any]]) -> dict[str, int]:
    counts = {name: 0 for name in DAY_NAMES.values()}
    for entry in day_counts:
        name = DAY_NAMES.get(entry.get("day"))
        if name:
            counts[name] = entry.get("count") or 0
    return counts


def most_active_day(by_day: dict[str, int]) -> str | None:
    """Busiest weekday; ties go to the earlier day of the week."""
    if not any(by_day.values()):
        return None
    return max(DAY_NAMES.values(), key=lambda name: (by_day[name], -list(DAY_NAMES.values()).index(name)))


class UserRepository:
    """Cypher helpers for the user directory."""

    @staticmethod
    async def list_page(window: PageWindow) -> tuple[int, list[UserSummary]]:
        count_query = "MATCH (u:User) RETURN count(u) AS total"
        data_query = """
            MATCH (u:User)
            WITH u
            ORDER BY u.name, u.userId
            SKIP $skip
            LIMIT $limit
            RETURN {
                userId: u.userId,
                name: u.name,
                avatar: u.avatarUrl,
                email: u.email,
                lastActiveTimestamp: u.lastSeen,
                conversationCount: COUNT { (u)-[:PARTICIPATES_IN]->(:Conversation) },
                messageCount: COUNT { (u)-[:SENT]->(:Message) }
            } AS user
        """
        total, rows = await fetch_page(count_query, data_query, {}, window, operation="users.list")
        return total, [user_summary_from_row(row["user"]) for row in rows]

    @staticmethod
    async def search(
        query: str, window: PageWindow, exclude_user_id: str | None = None
    ) -> tuple[int, list[dict[str, Any]]]:
        conditions = [SEARCH_CONDITION]
        params: dict[str, Any] = {"query": query}
        if exclude_user_id:
            conditions.append("u.userId <> $excludeUserId")
            params["excludeUserId"] = exclude_user_id

        where = " AND ".join(conditions)
        count_query = f"""
            MATCH (u:User)
            WHERE {where}
            RETURN count(u) AS total
        """
        data_query = f"""
            MATCH (u:User)
            WHERE {where}
            WITH u,
                CASE
                    WHEN toLower(u.name) STARTS WITH toLower($query) THEN 1
                    WHEN toLower(u.email) STARTS WITH toLower($query) THEN 2
                    WHEN toLower(u.username) STARTS WITH toLower($query) THEN 3
                    ELSE 4
                END AS relevance
            ORDER BY relevance, u.name, u.userId
            SKIP $skip
            LIMIT $limit
            RETURN u {{
                .userId, .name, .email, .username, .status, .role,
                .avatarUrl, .department, .location, .bio, .lastSeen
            }} AS user
        """
        total, rows = await fetch_page(
            count_query,
            data_query,
            params,
            window,
            operation="users.search",
            skip_data_when_empty=True,
        )
        return total, [row["user"] for row in rows]

    @staticmethod
    async def exists(user_id: str) -> bool:
        rows = await execute_read_query(
            "MATCH (u:User {userId: $userId}) RETURN u.userId AS userId LIMIT 1",
            {"userId": user_id},
            operation="users.exists",
        )
        return bool(rows)

    @staticmethod
    async def get_detail(user_id: str) -> dict[str, Any] | None:
        query = """
            MATCH (u:User {userId: $userId})
            CALL {
                WITH u
                OPTIONAL MATCH (u)-[:PARTICIPATES_IN]->(c:Conversation)
                RETURN count(DISTINCT c) AS conversationCount
            }
            CALL {
                WITH u
                OPTIONAL MATCH (u)-[:SENT]->(m:Message)
                RETURN count(m) AS messageCount,
                       min(m.timestamp) AS firstActivity,
                       max(m.timestamp) AS lastActivity
            }
            CALL {
                WITH u
                MATCH (u)-[:SENT]->(m:Message)
                WITH datetime(toString(m.timestamp)).dayOfWeek AS day, count(*) AS count
                RETURN collect({day: day, count: count}) AS dayCounts
            }
            CALL {
                WITH u
                MATCH (u)-[:PARTICIPATES_IN]->(c:Conversation)
                WITH c
                ORDER BY c.lastMessageTimestamp DESC, c.conversationId ASC
                LIMIT 10
                RETURN collect({
                    conversationId: c.conversationId,
                    title: c.title,
                    type: c.type,
                    lastMessageTimestamp: c.lastMessageTimestamp,
                    messageCount: COUNT { (:Message)-[:BELONGS_TO]->(c) },
                    participantCount: COUNT { (:User)-[:PARTICIPATES_IN]->(c) }
                }) AS conversations
            }
            CALL {
                WITH u
                MATCH (u)-[:SENT]->(m:Message)-[:BELONGS_TO]->(c:Conversation)
                WITH m, c
                ORDER BY datetime({epochMillis: datetime(toString(m.timestamp)).epochMillis}) DESC, m.messageId ASC
                LIMIT 20
                RETURN collect({
                    type: 'message_sent',
                    conversationId: c.conversationId,
                    conversationTitle: c.title,
                    timestamp: m.timestamp,
                    content: substring(m.content, 0, 100)
                }) AS activityTimeline
            }
            RETURN u {
                .userId, .name, .email, .username, .avatarUrl, .bio,
                .status, .lastSeen, .department, .location, .role
            } AS user,
            conversationCount, messageCount, firstActivity, lastActivity,
            dayCounts, conversations, activityTimeline
        """
        rows = await execute_read_query(query, {"userId": user_id}, operation="users.detail")
        if not rows:
            return None

        row = rows[0]
        conversation_count = row.get("conversationCount") or 0
        message_count = row.get("messageCount") or 0
        by_day = messages_by_day(row.get("dayCounts") or [])

        return {
            "user": row["user"],
            "stats": {
                "totalMessages": message_count,
                "totalConversations": conversation_count,
                "averageMessagesPerConversation": (
                    message_count / conversation_count if conversation_count else 0
                ),
                "mostActiveDay": most_active_day(by_day),
                "firstActivity": row.get("firstActivity"),
                "lastActivity": row.get("lastActivity"),
                "messagesByDay": by_day,
            },
            "conversations": row.get("conversations") or [],
            "activityTimeline": row.get("activityTimeline") or [],
        }

    @staticmethod
    async def contacts_page(
        user_id: str, window: PageWindow, query: str = ""
    ) -> tuple[int, list[UserContact]]:
        search = ""
        params: dict[str, Any] = {"userId": user_id}
        if query:
            search = " AND " + SEARCH_CONDITION.replace("u.", "u2.")
            params["query"] = query

        base = f"""
            MATCH (u1:User {{userId: $userId}})-[:PARTICIPATES_IN]->(:Conversation)<-[:PARTICIPATES_IN]-(u2:User)
            WHERE u2.userId <> $userId{search}
        """
        count_query = f"{base} RETURN count(DISTINCT u2) AS total"
        data_query = f"""
            {base}
            WITH DISTINCT u1, u2
            ORDER BY u2.name, u2.userId
            SKIP $skip
            LIMIT $limit
            CALL {{
                WITH u1, u2
                MATCH (u1)-[:PARTICIPATES_IN]->(conv:Conversation)<-[:PARTICIPATES_IN]-(u2)
                RETURN collect(DISTINCT conv) AS sharedConversations
            }}
            CALL {{
                WITH u1, u2, sharedConversations
                UNWIND sharedConversations AS conv
                MATCH (m:Message)-[:BELONGS_TO]->(conv)
                WHERE m.senderId IN [u1.userId, u2.userId]
                RETURN count(m) AS totalMessageCount,
                       min(m.timestamp) AS firstInteraction,
                       max(m.timestamp) AS lastInteraction
            }}
            RETURN u2 {{
                .userId, .name, .email, .username, .avatarUrl, .status,
                .role, .bio, .department, .location, .lastSeen
            }} AS contact,
            size(sharedConversations) AS sharedConversationCount,
            totalMessageCount, firstInteraction, lastInteraction
        """
        total, rows = await fetch_page(
            count_query,
            data_query,
            params,
            window,
            operation="users.contacts",
            skip_data_when_empty=True,
        )

        contacts = []
        for row in rows:
            contact = row["contact"]
            contacts.append(
                UserContact(
                    user_id=contact["userId"],
                    name=contact.get("name"),
                    email=contact.get("email"),
                    username=contact.get("username"),
                    avatar_url=contact.get("avatarUrl"),
                    status=contact.get("status") or "active",
                    role=contact.get("role") or "member",
                    bio=contact.get("bio"),
                    department=contact.get("department"),
                    location=contact.get("location"),
                    last_seen=contact.get("lastSeen") or "",
                    shared_conversation_count=row.get("sharedConversationCount") or 0,
                    total_message_count=row.get("totalMessageCount") or 0,
                    first_interaction=row.get("firstInteraction") or "",
                    last_interaction=row.get("lastInteraction") or "",
                )
            )
        return total, contacts
