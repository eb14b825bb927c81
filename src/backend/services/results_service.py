"""
Vote results caching.

Each topic has one materialized results row. Reads serve it while it is
younger than the freshness window and recompute it otherwise; every vote
cast recomputes it immediately.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from core.exceptions import TopicNotFoundError
from models.results_cache import VoteResultsCache
from models.topic import Topic
from repositories.results_cache_repository import ResultsCacheRepository
from repositories.topic_repository import TopicRepository
from repositories.vote_repository import VoteRepository
from services.aggregation import aggregate, infer_vote_kind
from services.demographics import DemographicJoiner

logger = structlog.get_logger(__name__)

RESULTS_FRESHNESS_WINDOW = timedelta(milliseconds=60_000)


def is_stale(cached: VoteResultsCache, now: Optional[datetime] = None) -> bool:
    """True once the row is strictly older than the freshness window."""
    now = now or datetime.now(timezone.utc)
    last_calculated = cached.last_calculated
    if last_calculated is None:
        return True
    if last_calculated.tzinfo is None:
        last_calculated = last_calculated.replace(tzinfo=timezone.utc)
    return now - last_calculated > RESULTS_FRESHNESS_WINDOW


class ResultsService:
    """Service for reading and recomputing per-topic results."""

    def __init__(
        self,
        topics: TopicRepository,
        votes: VoteRepository,
        cache: ResultsCacheRepository,
        demographics: DemographicJoiner,
    ):
        self.topics = topics
        self.votes = votes
        self.cache = cache
        self.demographics = demographics

    async def get_results(self, topic_id: str, force_recalculate: bool = False) -> VoteResultsCache:
        """
        Get a topic's results, recomputing when forced, missing or stale.

        Raises:
            TopicNotFoundError: If a recompute is needed and the topic is gone.
        """
        if force_recalculate:
            return await self.recalculate(topic_id)

        cached = await self.cache.get_by_topic(topic_id)
        if cached is None:
            logger.debug("results_cache_miss", topic_id=topic_id)
            return await self.recalculate(topic_id)

        if is_stale(cached):
            logger.debug("results_cache_stale", topic_id=topic_id, last_calculated=str(cached.last_calculated))
            return await self.recalculate(topic_id)

        return cached

    async def recalculate(self, topic_id: str, topic: Optional[Topic] = None) -> VoteResultsCache:
        """Rebuild the topic's results row from its votes and replace it."""
        if topic is None:
            topic = await self.topics.get_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)

        votes = await self.votes.list_by_topic(topic_id)
        verified = [vote for vote in votes if vote.is_verified_vote]

        kind = topic.vote_kind
        if kind is not None:
            mismatched = [vote.id for vote in votes if infer_vote_kind(vote.vote_data or {}) is not kind]
            if mismatched:
                logger.warning(
                    "results_payload_mismatch",
                    topic_id=topic_id,
                    expected_kind=kind.value,
                    vote_ids=mismatched,
                )

        demographics = await self.demographics.breakdown(topic_id)

        row = await self.cache.upsert(
            topic_id=topic_id,
            all_votes=aggregate(votes, kind),
            verified_votes=aggregate(verified, kind),
            demographic_breakdown=demographics.breakdown,
            vote_count_all=len(votes),
            vote_count_verified=len(verified),
            last_calculated=datetime.now(timezone.utc),
        )

        logger.info(
            "results_recalculated",
            topic_id=topic_id,
            vote_count_all=len(votes),
            vote_count_verified=len(verified),
            demographics_ok=demographics.ok,
        )
        return row

    async def clear(self, topic_id: str) -> bool:
        """Drop a topic's results row; the next read rebuilds it."""
        return await self.cache.delete_by_topic(topic_id)
