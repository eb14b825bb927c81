"""
Pytest fixtures for Agora backend tests.

Service tests run against in-memory repositories that honour the same
contracts as the SQLAlchemy ones (unique vote key, whole-row cache upsert).
"""

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_DB", "agora_test")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("SEED_VOTE_TYPES", "false")

from models.profile import Profile  # noqa: E402
from models.results_cache import VoteResultsCache  # noqa: E402
from models.similarity import SuggestionMethod, SuggestionStatus, TopicSimilaritySuggestion  # noqa: E402
from models.topic import Topic  # noqa: E402
from models.vote import Vote  # noqa: E402
from models.vote_type import VoteTypeConfig  # noqa: E402
from services.demographics import DemographicJoiner  # noqa: E402
from services.results_service import ResultsService  # noqa: E402
from services.topic_service import TopicService  # noqa: E402
from services.vote_service import VoteService  # noqa: E402


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# In-memory repositories
# =============================================================================


class InMemoryVoteTypeRepository:
    def __init__(self) -> None:
        self.rows: dict[str, VoteTypeConfig] = {}

    def add(self, name: str, default_config: dict[str, Any], is_active: bool = True) -> VoteTypeConfig:
        vote_type = VoteTypeConfig(
            id=str(uuid4()),
            name=name,
            display_name=name.replace("_", " ").title(),
            description=None,
            default_config=default_config,
            config_schema={},
            is_active=is_active,
            version=1,
        )
        self.rows[vote_type.id] = vote_type
        return vote_type

    async def get_by_id(self, vote_type_id: str) -> Optional[VoteTypeConfig]:
        return self.rows.get(vote_type_id)

    async def get_by_name(self, name: str) -> Optional[VoteTypeConfig]:
        return next((vt for vt in self.rows.values() if vt.name == name), None)

    async def list_active(self) -> list[VoteTypeConfig]:
        return sorted((vt for vt in self.rows.values() if vt.is_active), key=lambda vt: vt.name)

    async def create(self, name: str, display_name: str, default_config: dict, **kwargs: Any) -> VoteTypeConfig:
        return self.add(name, default_config)


class InMemoryTopicRepository:
    def __init__(self, vote_types: InMemoryVoteTypeRepository) -> None:
        self.vote_types = vote_types
        self.rows: dict[str, Topic] = {}
        self._clock = utcnow() - timedelta(days=1)

    def _next_created_at(self) -> datetime:
        # Strictly increasing so creation order is stable
        self._clock += timedelta(seconds=1)
        return self._clock

    async def get_by_id(self, topic_id: str) -> Optional[Topic]:
        return self.rows.get(topic_id)

    async def create(
        self,
        title: str,
        vote_type_id: str,
        vote_config: dict[str, Any],
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        require_verification: bool = False,
        min_verification_level: str = "none",
        expires_at: Optional[datetime] = None,
        is_active: bool = True,
    ) -> Topic:
        topic = Topic(
            id=str(uuid4()),
            title=title,
            description=description,
            vote_type_id=vote_type_id,
            vote_type=self.vote_types.rows[vote_type_id],
            vote_config=vote_config,
            created_by=created_by,
            require_verification=require_verification,
            min_verification_level=min_verification_level,
            expires_at=expires_at,
            is_active=is_active,
            is_closed=False,
            linked_topic_id=None,
            view_count=0,
            vote_count=0,
            created_at=self._next_created_at(),
        )
        self.rows[topic.id] = topic
        return topic

    async def update(self, topic_id: str, update_fields: dict[str, Any]) -> Optional[Topic]:
        topic = self.rows.get(topic_id)
        if topic is None:
            return None
        for field, value in update_fields.items():
            setattr(topic, field, value)
        topic.updated_at = utcnow()
        return topic

    async def list_topics(
        self,
        created_by: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        order_by: str = "created_at",
        descending: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Topic]:
        topics = list(self.rows.values())
        if created_by:
            topics = [t for t in topics if t.created_by == created_by]
        if is_active is not None:
            topics = [t for t in topics if t.is_active == is_active]
        if search:
            topics = [t for t in topics if search.lower() in t.title.lower()]
        topics.sort(key=lambda t: getattr(t, order_by), reverse=descending)
        return topics[offset : offset + limit]

    async def find_by_title(self, title: str, exclude_id: Optional[str] = None, limit: int = 5) -> list[Topic]:
        matches = [
            t
            for t in sorted(self.rows.values(), key=lambda t: t.created_at)
            if t.is_active and title.lower() in t.title.lower() and t.id != exclude_id
        ]
        return matches[:limit]

    async def set_vote_count(self, topic_id: str, vote_count: int) -> bool:
        topic = self.rows.get(topic_id)
        if topic is None:
            return False
        topic.vote_count = vote_count
        return True

    async def increment_view_count(self, topic_id: str) -> bool:
        topic = self.rows.get(topic_id)
        if topic is None:
            return False
        topic.view_count += 1
        return True

    async def link(self, topic_id: str, linked_topic_id: str) -> bool:
        topic = self.rows.get(topic_id)
        if topic is None:
            return False
        topic.linked_topic_id = linked_topic_id
        topic.is_active = False
        return True


class InMemoryVoteRepository:
    def __init__(self) -> None:
        self.rows: dict[tuple[str, str], Vote] = {}
        # profile_id -> demographics row (SimpleNamespace-like objects)
        self.demographics: dict[str, Any] = {}
        self.demographics_error: Optional[Exception] = None

    async def upsert(
        self,
        topic_id: str,
        profile_id: str,
        vote_data: dict[str, Any],
        is_verified_vote: bool = False,
        verification_level: str = "none",
    ) -> Vote:
        now = utcnow()
        key = (topic_id, profile_id)
        vote = self.rows.get(key)
        if vote is None:
            vote = Vote(
                id=str(uuid4()),
                topic_id=topic_id,
                profile_id=profile_id,
                created_at=now,
            )
            self.rows[key] = vote
        vote.vote_data = vote_data
        vote.is_verified_vote = is_verified_vote
        vote.verification_level = verification_level
        vote.updated_at = now
        return vote

    async def get(self, topic_id: str, profile_id: str) -> Optional[Vote]:
        return self.rows.get((topic_id, profile_id))

    async def list_by_topic(self, topic_id: str, verified_only: bool = False) -> list[Vote]:
        return [
            v
            for (t_id, _), v in self.rows.items()
            if t_id == topic_id and (v.is_verified_vote or not verified_only)
        ]

    async def count_by_topic(self, topic_id: str) -> int:
        return len(await self.list_by_topic(topic_id))

    async def delete(self, topic_id: str, profile_id: str) -> bool:
        return self.rows.pop((topic_id, profile_id), None) is not None

    async def list_voter_demographics(self, topic_id: str) -> list[Any]:
        if self.demographics_error is not None:
            raise self.demographics_error
        return [
            self.demographics[v.profile_id]
            for v in await self.list_by_topic(topic_id)
            if v.profile_id in self.demographics
        ]


class InMemoryResultsCacheRepository:
    def __init__(self) -> None:
        self.rows: dict[str, VoteResultsCache] = {}
        self.upsert_calls = 0
        self.fail_upsert: Optional[Exception] = None

    async def get_by_topic(self, topic_id: str) -> Optional[VoteResultsCache]:
        return self.rows.get(topic_id)

    async def upsert(self, topic_id: str, **values: Any) -> VoteResultsCache:
        self.upsert_calls += 1
        if self.fail_upsert is not None:
            raise self.fail_upsert
        row = VoteResultsCache(id=str(uuid4()), topic_id=topic_id, **values)
        self.rows[topic_id] = row
        return row

    async def delete_by_topic(self, topic_id: str) -> bool:
        return self.rows.pop(topic_id, None) is not None


class InMemorySimilarityRepository:
    def __init__(self, topics: InMemoryTopicRepository) -> None:
        self.topics = topics
        self.rows: dict[str, TopicSimilaritySuggestion] = {}

    async def get_by_id(self, suggestion_id: str) -> Optional[TopicSimilaritySuggestion]:
        return self.rows.get(suggestion_id)

    async def create(
        self,
        topic_id: str,
        similar_topic_id: str,
        similarity_score: float = 0.8,
        suggestion_method: SuggestionMethod = SuggestionMethod.MANUAL,
    ) -> TopicSimilaritySuggestion:
        suggestion = TopicSimilaritySuggestion(
            id=str(uuid4()),
            topic_id=topic_id,
            similar_topic_id=similar_topic_id,
            similar_topic=self.topics.rows.get(similar_topic_id),
            similarity_score=similarity_score,
            suggestion_method=suggestion_method.value,
            status=SuggestionStatus.PENDING.value,
            created_at=utcnow(),
        )
        self.rows[suggestion.id] = suggestion
        return suggestion

    async def list_pending(self, topic_id: str) -> list[TopicSimilaritySuggestion]:
        return [
            s
            for s in self.rows.values()
            if s.topic_id == topic_id and s.status == SuggestionStatus.PENDING.value
        ]

    async def set_status(
        self,
        suggestion: TopicSimilaritySuggestion,
        status: SuggestionStatus,
        reviewed_by: str,
    ) -> TopicSimilaritySuggestion:
        suggestion.status = status.value
        suggestion.reviewed_by = reviewed_by
        suggestion.reviewed_at = utcnow()
        return suggestion


class InMemoryProfileRepository:
    def __init__(self) -> None:
        self.rows: dict[str, Profile] = {}

    def add(self, is_verified: bool = False, verification_level: str = "none") -> Profile:
        profile = Profile(
            id=str(uuid4()),
            username=f"user-{len(self.rows) + 1}",
            is_verified=is_verified,
            verification_level=verification_level,
        )
        self.rows[profile.id] = profile
        return profile

    async def get_by_id(self, profile_id: str) -> Optional[Profile]:
        return self.rows.get(profile_id)


class InMemoryStore:
    """All repositories plus the services wired around them."""

    def __init__(self) -> None:
        self.vote_types = InMemoryVoteTypeRepository()
        self.topics = InMemoryTopicRepository(self.vote_types)
        self.votes = InMemoryVoteRepository()
        self.cache = InMemoryResultsCacheRepository()
        self.suggestions = InMemorySimilarityRepository(self.topics)
        self.profiles = InMemoryProfileRepository()

        self.yes_no = self.vote_types.add("yes_no", {"options": ["yes", "no"]})
        self.multiple_choice = self.vote_types.add(
            "multiple_choice", {"options": ["Red", "Green", "Blue"]}
        )
        self.rating = self.vote_types.add("rating", {"min_value": 1, "max_value": 5, "step": 1})
        self.open_ended = self.vote_types.add("open_ended", {"max_length": 200})

        self.results_service = ResultsService(
            topics=self.topics,
            votes=self.votes,
            cache=self.cache,
            demographics=DemographicJoiner(self.votes),
        )
        self.vote_service = VoteService(
            topics=self.topics,
            votes=self.votes,
            results=self.results_service,
        )
        self.topic_service = TopicService(
            topics=self.topics,
            vote_types=self.vote_types,
            suggestions=self.suggestions,
        )

    async def add_topic(self, title: str = "Is this a good question?", vote_type: Optional[VoteTypeConfig] = None, **kwargs: Any) -> Topic:
        vote_type = vote_type or self.yes_no
        vote_config = kwargs.pop("vote_config", dict(vote_type.default_config))
        return await self.topics.create(
            title=title,
            vote_type_id=vote_type.id,
            vote_config=vote_config,
            **kwargs,
        )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    """In-memory repositories with services wired around them."""
    return InMemoryStore()


@pytest.fixture
async def app() -> Any:
    """Create FastAPI application for testing."""
    from main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def db_session() -> AsyncMock:
    """Request session handed to endpoints that commit."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
async def client(
    app: Any, store: InMemoryStore, db_session: AsyncMock
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with services backed by the in-memory store."""
    from db.session import get_db
    from api.deps import (
        get_profile_repository,
        get_results_service,
        get_topic_service,
        get_vote_service,
    )

    app.dependency_overrides[get_results_service] = lambda: store.results_service
    app.dependency_overrides[get_vote_service] = lambda: store.vote_service
    app.dependency_overrides[get_topic_service] = lambda: store.topic_service
    app.dependency_overrides[get_profile_repository] = lambda: store.profiles

    async def override_get_db() -> AsyncGenerator[AsyncMock, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.begin_nested = MagicMock()
    return session
