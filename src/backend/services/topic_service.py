"""
Topic management and duplicate detection.

New topics are checked against existing active topics by a case-insensitive
title substring match; each hit is stored as a pending similarity suggestion
that a reviewer can accept (merging the new topic into the old one) or
reject.
"""

from typing import Optional

import structlog

from core.exceptions import (
    InvalidLinkError,
    InvalidVoteConfigError,
    SuggestionAlreadyReviewedError,
    SuggestionNotFoundError,
    TopicNotFoundError,
    VoteTypeNotFoundError,
)
from models.similarity import SuggestionMethod, SuggestionStatus, TopicSimilaritySuggestion
from models.topic import Topic
from models.vote_type import VoteTypeConfig
from repositories.similarity_repository import SimilarityRepository
from repositories.topic_repository import TopicRepository
from repositories.vote_type_repository import VoteTypeRepository
from schemas.topic import TopicCreate, TopicUpdate
from services.vote_service import validate_vote_config

logger = structlog.get_logger(__name__)

SIMILAR_TOPICS_LIMIT = 5
DEFAULT_SIMILARITY_SCORE = 0.8


class TopicService:
    """Service for topics, vote types and similarity suggestions."""

    def __init__(
        self,
        topics: TopicRepository,
        vote_types: VoteTypeRepository,
        suggestions: SimilarityRepository,
    ):
        self.topics = topics
        self.vote_types = vote_types
        self.suggestions = suggestions

    async def get_vote_types(self) -> list[VoteTypeConfig]:
        return await self.vote_types.list_active()

    async def get_topic(self, topic_id: str) -> Topic:
        topic = await self.topics.get_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)
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
        return await self.topics.list_topics(
            created_by=created_by,
            is_active=is_active,
            search=search,
            order_by=order_by,
            descending=descending,
            limit=limit,
            offset=offset,
        )

    async def increment_view_count(self, topic_id: str) -> None:
        await self.topics.increment_view_count(topic_id)

    async def find_similar_topics(self, title: str, exclude_id: Optional[str] = None) -> list[Topic]:
        """
        Find active topics whose title contains ``title`` (any case).

        At most SIMILAR_TOPICS_LIMIT results, in creation order.
        """
        title = title.strip()
        if not title:
            return []
        return await self.topics.find_by_title(
            title,
            exclude_id=exclude_id,
            limit=SIMILAR_TOPICS_LIMIT,
        )

    async def create_topic(self, data: TopicCreate) -> tuple[Topic, list[Topic]]:
        """
        Create a topic and record suggestions for its near-duplicates.

        vote_config falls back to the vote type's default_config.

        Returns:
            The new topic and the similar topics that were found.

        Raises:
            VoteTypeNotFoundError: If the vote type is unknown or inactive.
            InvalidVoteConfigError: If vote_config does not fit the vote type.
        """
        vote_type = await self.vote_types.get_by_id(data.vote_type_id)
        if vote_type is None or not vote_type.is_active:
            raise VoteTypeNotFoundError(data.vote_type_id)

        vote_config = data.vote_config
        if vote_config is None:
            vote_config = dict(vote_type.default_config or {})
        validate_vote_config(vote_type.kind, vote_config)

        topic = await self.topics.create(
            title=data.title.strip(),
            description=data.description,
            vote_type_id=vote_type.id,
            vote_config=vote_config,
            created_by=data.created_by,
            require_verification=data.require_verification,
            min_verification_level=data.min_verification_level.value,
            expires_at=data.expires_at,
        )

        similar = await self.find_similar_topics(topic.title, exclude_id=topic.id)
        for candidate in similar:
            await self.suggestions.create(
                topic_id=topic.id,
                similar_topic_id=candidate.id,
                similarity_score=DEFAULT_SIMILARITY_SCORE,
                suggestion_method=SuggestionMethod.MANUAL,
            )

        logger.info(
            "topic_created",
            topic_id=topic.id,
            vote_type=vote_type.name,
            similar_topics=len(similar),
        )
        return topic, similar

    async def update_topic(self, topic_id: str, data: TopicUpdate) -> Topic:
        """
        Apply the fields present in ``data`` to a topic.

        The vote type cannot change, and vote_config is frozen once the topic
        has votes so stored payloads keep matching it.

        Raises:
            TopicNotFoundError: If the topic does not exist.
            InvalidVoteConfigError: If vote_config does not fit the vote type
                or the topic already has votes.
        """
        topic = await self.get_topic(topic_id)

        changes = data.model_dump(exclude_unset=True)
        # Only these columns may be cleared
        changes = {
            field: value
            for field, value in changes.items()
            if value is not None or field in ("description", "expires_at")
        }

        if "title" in changes:
            changes["title"] = changes["title"].strip()
        if "min_verification_level" in changes:
            changes["min_verification_level"] = data.min_verification_level.value
        if "vote_config" in changes and changes["vote_config"] != topic.vote_config:
            if topic.vote_count:
                raise InvalidVoteConfigError("vote_config cannot change once votes have been cast")
            validate_vote_config(topic.vote_kind, changes["vote_config"])

        if not changes:
            return topic

        updated = await self.topics.update(topic_id, changes)
        if updated is None:
            raise TopicNotFoundError(topic_id)

        logger.info("topic_updated", topic_id=topic_id, fields=sorted(changes))
        return updated

    async def create_similarity_suggestion(
        self,
        topic_id: str,
        similar_topic_id: str,
        score: float = DEFAULT_SIMILARITY_SCORE,
        method: SuggestionMethod = SuggestionMethod.MANUAL,
    ) -> TopicSimilaritySuggestion:
        if topic_id == similar_topic_id:
            raise InvalidLinkError("A topic cannot be similar to itself")
        await self.get_topic(topic_id)
        await self.get_topic(similar_topic_id)
        return await self.suggestions.create(
            topic_id=topic_id,
            similar_topic_id=similar_topic_id,
            similarity_score=score,
            suggestion_method=method,
        )

    async def get_similarity_suggestions(self, topic_id: str) -> list[TopicSimilaritySuggestion]:
        """Pending suggestions for a topic."""
        return await self.suggestions.list_pending(topic_id)

    async def review_suggestion(
        self,
        suggestion_id: str,
        reviewer_id: str,
        accept: bool,
    ) -> TopicSimilaritySuggestion:
        """
        Accept or reject a pending suggestion.

        Accepting links the suggestion's topic into the similar topic.
        """
        suggestion = await self.suggestions.get_by_id(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFoundError(suggestion_id)
        if suggestion.status != SuggestionStatus.PENDING.value:
            raise SuggestionAlreadyReviewedError(
                f"Suggestion {suggestion_id} is already {suggestion.status}"
            )

        if accept:
            await self.link_topics(suggestion.topic_id, suggestion.similar_topic_id)

        status = SuggestionStatus.ACCEPTED if accept else SuggestionStatus.REJECTED
        suggestion = await self.suggestions.set_status(suggestion, status, reviewer_id)

        logger.info(
            "suggestion_reviewed",
            suggestion_id=suggestion_id,
            status=status.value,
            reviewer_id=reviewer_id,
        )
        return suggestion

    async def link_topics(self, topic_id: str, linked_topic_id: str) -> Topic:
        """
        Merge a topic into another: set linked_topic_id and deactivate it.

        Votes on the source topic are kept and its results stay readable.
        """
        if topic_id == linked_topic_id:
            raise InvalidLinkError("A topic cannot be linked to itself")

        topic = await self.get_topic(topic_id)
        target = await self.get_topic(linked_topic_id)
        if target.linked_topic_id == topic.id:
            raise InvalidLinkError("Target topic is already linked to this topic")

        await self.topics.link(topic.id, target.id)

        logger.info("topics_linked", topic_id=topic.id, linked_topic_id=target.id)
        return topic
