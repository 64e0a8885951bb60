"""
Tests for the conversation stores.

The Redis store is exercised against a small in-test async fake that
implements the handful of commands the store uses.
"""

import pytest

from contextual_interviewer.memory.conversation_store import (
    CONTEXT_KEY_PREFIX,
    InMemoryConversationStore,
    RedisConversationStore,
)
from contextual_interviewer.schemas import (
    CandidateProfile,
    Message,
    MessageRole,
    Question,
    QuestionCategory,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeRedis:
    """Minimal async stand-in for a redis.asyncio client."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.closed = False

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.values[key] = value
        self.ttls[key] = ttl
        return True

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def expire(self, key: str, ttl: int) -> bool:
        if key not in self.values:
            return False
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return 1 if self.values.pop(key, None) is not None else 0

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


def interviewer(text: str, category: QuestionCategory, follow_up: bool = False) -> Message:
    return Message.from_question(
        Question(id=f"q-{text}", text=text, category=category, is_follow_up=follow_up)
    )


def candidate(text: str) -> Message:
    return Message(role=MessageRole.CANDIDATE, text=text)


@pytest.fixture
def profile() -> CandidateProfile:
    return CandidateProfile(skills=["Python", "SQL"], projects=["Chatbot"], domain="Data Engineering")


class TestInMemoryConversationStore:
    """Tests for InMemoryConversationStore."""

    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def store(self, clock: FakeClock) -> InMemoryConversationStore:
        return InMemoryConversationStore(ttl_seconds=60, clock=clock)

    @pytest.mark.asyncio
    async def test_init_and_read(self, store: InMemoryConversationStore, profile: CandidateProfile) -> None:
        await store.init("s-1", profile, focus=profile.domain, max_questions=11)

        context = await store.read("s-1")

        assert context is not None
        assert context.candidate_profile == profile
        assert context.interview_focus == "Data Engineering"
        assert context.max_questions == 11
        assert context.current_topic == "introduction"
        assert context.transcript == []

    @pytest.mark.asyncio
    async def test_transcript_round_trip(self, store: InMemoryConversationStore, profile: CandidateProfile) -> None:
        await store.init("s-1", profile)
        messages = [
            interviewer("Tell me about yourself.", QuestionCategory.INTRODUCTION),
            candidate("I build data pipelines."),
            interviewer("How do you use Python?", QuestionCategory.TECHNICAL),
            candidate("Mostly for ETL jobs."),
        ]
        for message in messages:
            await store.append("s-1", message)

        context = await store.read("s-1")

        assert context is not None
        assert [m.text for m in context.transcript] == [m.text for m in messages]
        assert [m.timestamp for m in context.transcript] == [m.timestamp for m in messages]
        assert context.transcript[2].category == QuestionCategory.TECHNICAL
        assert context.questions_asked == 2

    @pytest.mark.asyncio
    async def test_topic_history_tracks_main_questions(
        self,
        store: InMemoryConversationStore,
        profile: CandidateProfile,
    ) -> None:
        await store.init("s-1", profile)
        await store.append("s-1", interviewer("Intro?", QuestionCategory.INTRODUCTION))
        await store.append("s-1", interviewer("Python?", QuestionCategory.TECHNICAL))
        await store.append("s-1", interviewer("More?", QuestionCategory.FOLLOW_UP, follow_up=True))
        await store.append("s-1", interviewer("Chatbot?", QuestionCategory.PROJECT_SPECIFIC))
        await store.append("s-1", interviewer("SQL?", QuestionCategory.TECHNICAL))

        context = await store.read("s-1")

        assert context is not None
        assert context.current_topic == "technical"
        assert context.topic_history == ["introduction", "technical", "project-specific"]
        assert context.questions_asked == 5

    @pytest.mark.asyncio
    async def test_context_expires_after_ttl(
        self,
        store: InMemoryConversationStore,
        clock: FakeClock,
        profile: CandidateProfile,
    ) -> None:
        await store.init("s-1", profile)

        clock.now += 59
        assert await store.read("s-1") is not None

        clock.now += 1
        assert await store.read("s-1") is None

    @pytest.mark.asyncio
    async def test_writes_and_touch_refresh_ttl(
        self,
        store: InMemoryConversationStore,
        clock: FakeClock,
        profile: CandidateProfile,
    ) -> None:
        await store.init("s-1", profile)

        clock.now += 50
        await store.append("s-1", candidate("Still here."))
        clock.now += 50
        assert await store.read("s-1") is not None

        await store.touch("s-1")
        clock.now += 50
        assert await store.read("s-1") is not None

    @pytest.mark.asyncio
    async def test_append_to_missing_session_is_noop(self, store: InMemoryConversationStore) -> None:
        await store.append("missing", candidate("Hello?"))

        assert await store.read("missing") is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store: InMemoryConversationStore, profile: CandidateProfile) -> None:
        await store.init("s-1", profile)

        await store.delete("s-1")
        await store.delete("s-1")

        assert await store.read("s-1") is None

    @pytest.mark.asyncio
    async def test_mark_complete(self, store: InMemoryConversationStore, profile: CandidateProfile) -> None:
        await store.init("s-1", profile)

        await store.mark_complete("s-1")
        context = await store.read("s-1")

        assert context is not None
        assert context.is_complete

    @pytest.mark.asyncio
    async def test_stats(self, store: InMemoryConversationStore, profile: CandidateProfile) -> None:
        await store.init("s-1", profile)
        await store.append("s-1", interviewer("Intro?", QuestionCategory.INTRODUCTION))
        await store.append("s-1", candidate("a" * 10))
        await store.append("s-1", interviewer("Python?", QuestionCategory.TECHNICAL))
        await store.append("s-1", candidate("b" * 21))

        stats = await store.stats("s-1")

        assert stats is not None
        assert stats.total_messages == 4
        assert stats.questions_asked == 2
        assert stats.average_response_length == 16
        assert stats.topics_covered == ["technical", "introduction"]
        assert stats.duration_seconds >= 0
        assert await store.stats("missing") is None


class TestRedisConversationStore:
    """Tests for RedisConversationStore."""

    @pytest.fixture
    def redis(self) -> FakeRedis:
        return FakeRedis()

    @pytest.fixture
    def store(self, redis: FakeRedis) -> RedisConversationStore:
        return RedisConversationStore(ttl_seconds=3600, client=redis)

    @pytest.mark.asyncio
    async def test_context_stored_as_single_key_with_ttl(
        self,
        store: RedisConversationStore,
        redis: FakeRedis,
        profile: CandidateProfile,
    ) -> None:
        await store.init("s-1", profile)
        await store.append("s-1", interviewer("Intro?", QuestionCategory.INTRODUCTION))

        key = f"{CONTEXT_KEY_PREFIX}s-1"
        assert list(redis.values) == [key]
        assert redis.ttls[key] == 3600

        context = await store.read("s-1")
        assert context is not None
        assert context.questions_asked == 1

    @pytest.mark.asyncio
    async def test_delete_and_close(self, store: RedisConversationStore, redis: FakeRedis, profile: CandidateProfile) -> None:
        await store.init("s-1", profile)

        await store.delete("s-1")
        await store.close()

        assert await store.read("s-1") is None
        assert redis.closed

    @pytest.mark.asyncio
    async def test_ping(self, store: RedisConversationStore) -> None:
        assert await store.ping() is True

    def test_requires_url_or_client(self) -> None:
        with pytest.raises(ValueError):
            RedisConversationStore()
