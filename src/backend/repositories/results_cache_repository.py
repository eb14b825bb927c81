"""
Results cache repository.

A cache row is only ever written whole: upsert replaces every column.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.results_cache import VoteResultsCache


class ResultsCacheRepository:
    """Repository for per-topic results snapshots."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_topic(self, topic_id: str) -> Optional[VoteResultsCache]:
        result = await self.db.execute(
            select(VoteResultsCache).where(VoteResultsCache.topic_id == topic_id)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        topic_id: str,
        all_votes: dict[str, Any],
        verified_votes: dict[str, Any],
        demographic_breakdown: dict[str, Any],
        vote_count_all: int,
        vote_count_verified: int,
        last_calculated: datetime,
    ) -> VoteResultsCache:
        """Write the topic's snapshot, replacing any previous one."""
        values = {
            "all_votes": all_votes,
            "verified_votes": verified_votes,
            "demographic_breakdown": demographic_breakdown,
            "vote_count_all": vote_count_all,
            "vote_count_verified": vote_count_verified,
            "last_calculated": last_calculated,
        }
        stmt = (
            insert(VoteResultsCache)
            .values(id=str(uuid4()), topic_id=topic_id, **values)
            .on_conflict_do_update(index_elements=["topic_id"], set_=values)
            .returning(VoteResultsCache)
            .execution_options(populate_existing=True)
        )

        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def delete_by_topic(self, topic_id: str) -> bool:
        result = await self.db.execute(
            delete(VoteResultsCache).where(VoteResultsCache.topic_id == topic_id)
        )
        return (getattr(result, "rowcount", 0) or 0) > 0
