"""
Tests for the user directory endpoints.
"""

from fastapi.testclient import TestClient

from app.features.communications.repository.user_repository import messages_by_day, most_active_day
from app.main import app

client = TestClient(app)


def _user_row(user_id: str) -> dict:
    return {
        "user": {
            "userId": user_id,
            "name": user_id.title(),
            "email": f"{user_id}@example.com",
            "avatar": None,
            "lastActiveTimestamp": "2024-01-01T00:00:00Z",
            "conversationCount": 2,
            "messageCount": 5,
        }
    }


class TestListUsers:
    def test_list(self, fake_store, store_online):
        fake_store.responder = lambda query, params: (
            [{"total": 2}] if "RETURN count(u) AS total" in query else [_user_row("ann"), _user_row("ben")]
        )

        response = client.get("/api/users")

        assert response.status_code == 200
        data = response.json()
        assert [user["userId"] for user in data["users"]] == ["ann", "ben"]
        assert data["users"][0]["conversationCount"] == 2
        assert data["pagination"] == {"page": 1, "limit": 20, "total": 2, "totalPages": 1}

    def test_etag_matches_for_identical_data(self, fake_store, store_online, etags_enabled):
        fake_store.responder = lambda query, params: (
            [{"total": 1}] if "RETURN count(u) AS total" in query else [_user_row("ann")]
        )

        first = client.get("/api/users")
        second = client.get("/api/users")
        conditional = client.get("/api/users", headers={"If-None-Match": first.headers["etag"]})

        assert first.headers["etag"] == second.headers["etag"]
        assert conditional.status_code == 304

    def test_changed_data_changes_etag(self, fake_store, store_online, etags_enabled):
        fake_store.responder = lambda query, params: (
            [{"total": 1}] if "RETURN count(u) AS total" in query else [_user_row("ann")]
        )
        first = client.get("/api/users")

        fake_store.responder = lambda query, params: (
            [{"total": 1}] if "RETURN count(u) AS total" in query else [_user_row("ben")]
        )
        second = client.get("/api/users", headers={"If-None-Match": first.headers["etag"]})

        assert second.status_code == 200
        assert second.headers["etag"] != first.headers["etag"]

    def test_store_unavailable(self, store_offline):
        response = client.get("/api/users")

        assert response.status_code == 503
        assert "etag" not in response.headers


class TestSearchUsers:
    def test_blank_query_does_not_touch_the_store(self, fake_store, store_online):
        response = client.get("/api/users/search", params={"query": "   "})

        assert response.status_code == 200
        assert response.json()["results"] == []
        assert response.json()["total"] == 0
        assert fake_store.calls == []

    def test_search_with_exclusion(self, fake_store, store_online):
        fake_store.responder = lambda query, params: (
            [{"total": 1}] if "RETURN count(u) AS total" in query else [{"user": {"userId": "ann", "name": "Ann"}}]
        )

        response = client.get(
            "/api/users/search", params={"query": " an ", "excludeUserId": "ben", "limit": 500}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == "an"
        assert data["results"] == [{"userId": "ann", "name": "Ann"}]
        assert data["pagination"]["limit"] == 50
        _query, params = fake_store.calls[0]
        assert params == {"query": "an", "excludeUserId": "ben"}


class TestUserDetail:
    def test_not_found(self, fake_store):
        fake_store.responder = lambda query, params: []

        response = client.get("/api/users/nobody")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_invalid_identifier(self, fake_store):
        response = client.get("/api/users/bad%20id")

        assert response.status_code == 400
        assert fake_store.calls == []

    def test_detail(self, fake_store):
        fake_store.responder = lambda query, params: [
            {
                "user": {"userId": "ann", "name": "Ann"},
                "conversationCount": 4,
                "messageCount": 10,
                "firstActivity": "2024-01-01T00:00:00Z",
                "lastActivity": "2024-02-01T00:00:00Z",
                "dayCounts": [{"day": 2, "count": 6}, {"day": 5, "count": 4}],
                "conversations": [{"conversationId": "c1"}],
                "activityTimeline": [],
            }
        ]

        response = client.get("/api/users/ann")

        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["mostActiveDay"] == "Tuesday"
        assert data["stats"]["averageMessagesPerConversation"] == 2.5
        assert data["stats"]["messagesByDay"]["Friday"] == 4
        assert data["stats"]["messagesByDay"]["Sunday"] == 0
        assert data["activityTimeline"] == []


def test_most_active_day_prefers_earlier_day_on_ties():
    by_day = messages_by_day([{"day": 7, "count": 3}, {"day": 3, "count": 3}])

    assert most_active_day(by_day) == "Wednesday"
    assert most_active_day(messages_by_day([])) is None


class TestUserContacts:
    def test_unknown_user(self, fake_store):
        fake_store.responder = lambda query, params: []

        response = client.get("/api/users/nobody/contacts")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_contacts(self, fake_store):
        def responder(query, params):
            if "LIMIT 1" in query:
                return [{"userId": "ann"}]
            if "count(DISTINCT u2) AS total" in query:
                return [{"total": 1}]
            return [
                {
                    "contact": {"userId": "ben", "name": "Ben", "email": "ben@example.com"},
                    "sharedConversationCount": 2,
                    "totalMessageCount": 7,
                    "firstInteraction": "2024-01-01T00:00:00Z",
                    "lastInteraction": "2024-03-01T00:00:00Z",
                }
            ]

        fake_store.responder = responder

        response = client.get("/api/users/ann/contacts", params={"limit": 5000})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["results"][0]["userId"] == "ben"
        assert data["results"][0]["sharedConversationCount"] == 2
        assert data["pagination"]["limit"] == 1000
