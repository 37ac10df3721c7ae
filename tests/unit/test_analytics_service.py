import pytest

from app.features.communications.domain.errors import QueryFailed, UserNotFound
from app.features.communications.domain.models import (
    CommunicationStats,
    ConversationTypeDistribution,
    FrequencyDataPoint,
    Granularity,
    PairMessage,
    SharedConversation,
    UserSummary,
)
from app.features.communications.services.analytics_service import (
    RESPONSE_TIME_BANDS,
    CommunicationAnalyticsService,
    analyze_response_times,
    response_intervals,
    talk_listen_ratio,
)
from app.features.communications.services.pagination import PageWindow


def _msg(conversation_id: str, sender: str, timestamp: str) -> PairMessage:
    return PairMessage(conversation_id=conversation_id, sender_id=sender, timestamp=timestamp)


class FakeCommunicationRepository:
    """Canned answers for the canonical pair ("alice", "bob")."""

    users = {
        "alice": UserSummary(user_id="alice", name="Alice", email="alice@example.com"),
        "bob": UserSummary(user_id="bob", name="Bob", email="bob@example.com"),
    }
    calls: list[str] = []

    @classmethod
    async def fetch_user_summaries(cls, user_ids):
        cls.calls.append("users")
        return {uid: cls.users[uid] for uid in user_ids if uid in cls.users}

    @classmethod
    async def fetch_shared_conversations(cls, user_id1, user_id2):
        cls.calls.append("shared")
        return [
            SharedConversation(
                conversation_id="c1",
                title="Design sync",
                type="direct",
                message_count=9,
                user1_message_count=6,
                user2_message_count=3,
                last_message_timestamp="2024-01-02T10:00:00Z",
            )
        ]

    @classmethod
    async def fetch_communication_stats(cls, user_id1, user_id2, date_range):
        cls.calls.append("stats")
        return CommunicationStats(
            total_shared_conversations=1, total_messages=9, user1_messages=6, user2_messages=3
        )

    @classmethod
    async def fetch_timeline_page(cls, user_id1, user_id2, window, date_range, conversation_id):
        cls.calls.append("timeline")
        return 9, []

    @classmethod
    async def fetch_frequency(cls, user_id1, user_id2, date_range, granularity):
        return [FrequencyDataPoint(date="2024-01-01T00:00:00Z", total_messages=9, user1_messages=6, user2_messages=3)]

    @classmethod
    async def fetch_pair_messages(cls, user_id1, user_id2, date_range):
        return [
            _msg("c1", "alice", "2024-01-01T10:00:00Z"),
            _msg("c1", "bob", "2024-01-01T10:00:30Z"),
        ]

    @classmethod
    async def fetch_activity_heatmap(cls, user_id1, user_id2, date_range):
        return []

    @classmethod
    async def fetch_message_counts(cls, user_id1, user_id2, date_range):
        return 6, 3

    @classmethod
    async def fetch_conversation_types(cls, user_id1, user_id2):
        return [ConversationTypeDistribution(type="direct", count=1, percentage=100.0)]


@pytest.fixture
def service():
    FakeCommunicationRepository.calls = []
    return CommunicationAnalyticsService(repository=FakeCommunicationRepository)


class TestResponseIntervals:
    def test_reply_from_other_participant(self):
        messages = [
            _msg("c1", "alice", "2024-01-01T10:00:00Z"),
            _msg("c1", "bob", "2024-01-01T10:02:00Z"),
            _msg("c1", "alice", "2024-01-01T10:12:00Z"),
        ]

        assert response_intervals(messages) == [600.0, 120.0]

    def test_consecutive_messages_from_same_sender_use_next_reply(self):
        messages = [
            _msg("c1", "alice", "2024-01-01T10:00:00Z"),
            _msg("c1", "alice", "2024-01-01T10:01:00Z"),
            _msg("c1", "bob", "2024-01-01T10:03:00Z"),
        ]

        assert sorted(response_intervals(messages)) == [120.0, 180.0]

    def test_conversations_are_independent(self):
        messages = [
            _msg("c1", "alice", "2024-01-01T10:00:00Z"),
            _msg("c2", "bob", "2024-01-01T10:01:00Z"),
        ]

        assert response_intervals(messages) == []

    def test_simultaneous_messages_are_not_responses(self):
        messages = [
            _msg("c1", "alice", "2024-01-01T10:00:00Z"),
            _msg("c1", "bob", "2024-01-01T10:00:00Z"),
        ]

        assert response_intervals(messages) == []


class TestResponseTimeAnalysis:
    def test_empty_is_zero(self):
        analysis = analyze_response_times([])

        assert analysis.avg_response_time == 0.0
        assert analysis.median_response_time == 0.0
        assert [bucket.count for bucket in analysis.distribution] == [0] * len(RESPONSE_TIME_BANDS)

    def test_band_assignment(self):
        analysis = analyze_response_times([30, 60, 299, 901, 7200, 30000])
        counts = {bucket.range: bucket.count for bucket in analysis.distribution}

        assert counts == {
            "<1 min": 1,
            "1-5 min": 2,
            "5-15 min": 0,
            "15-30 min": 1,
            "30-60 min": 0,
            "1-2 hrs": 0,
            "2-6 hrs": 1,
            ">6 hrs": 1,
        }

    def test_mean_and_median(self):
        analysis = analyze_response_times([10, 20, 90])

        assert analysis.avg_response_time == pytest.approx(40.0)
        assert analysis.median_response_time == 20.0


class TestTalkListenRatio:
    def test_zero_total_is_even_split(self):
        ratio = talk_listen_ratio(0, 0)

        assert ratio.user1_percentage == ratio.user2_percentage == 50.0

    @pytest.mark.parametrize("counts", [(1, 0), (3, 7), (1, 2), (999, 1)])
    def test_percentages_sum_to_hundred(self, counts):
        ratio = talk_listen_ratio(*counts)

        assert ratio.user1_percentage + ratio.user2_percentage == pytest.approx(100.0)


class TestCommunicationAnalyticsService:
    @pytest.mark.asyncio
    async def test_missing_user_fails_before_other_queries(self, service):
        with pytest.raises(UserNotFound) as exc_info:
            await service.get_communication_data("alice", "zed", window=PageWindow(1, 50))

        assert exc_info.value.message == "One or both users not found"
        assert FakeCommunicationRepository.calls == ["users"]

    @pytest.mark.asyncio
    async def test_caller_order_is_restored(self, service):
        forward = await service.get_pair_communication("alice", "bob", window=PageWindow(1, 50))
        reverse = await service.get_pair_communication("bob", "alice", window=PageWindow(1, 50))

        assert forward.user1.user_id == "alice"
        assert forward.communication_stats.user1_messages == 6
        assert reverse.user1.user_id == "bob"
        assert reverse.communication_stats.user1_messages == 3
        assert reverse.shared_conversations[0].user1_message_count == 3
        assert reverse.pagination.total == 9

    @pytest.mark.asyncio
    async def test_aggregated_metrics(self, service):
        data = await service.get_pair_analytics("bob", "alice", granularity=Granularity.WEEKLY)

        assert data.talk_to_listen_ratio.user1_messages == 3
        assert data.talk_to_listen_ratio.user2_messages == 6
        assert data.frequency[0].user1_messages == 3
        assert data.response_time.avg_response_time == 30.0
        assert data.conversation_types[0].percentage == 100.0

    @pytest.mark.asyncio
    async def test_any_sub_query_failure_fails_the_response(self, service, monkeypatch):
        async def broken(*args):
            raise QueryFailed("communications.frequency", RuntimeError("timeout"))

        monkeypatch.setattr(FakeCommunicationRepository, "fetch_frequency", broken)

        with pytest.raises(QueryFailed) as exc_info:
            await service.get_pair_analytics("alice", "bob")

        assert exc_info.value.details == "timeout"
