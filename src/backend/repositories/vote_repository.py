"""
Vote repository for database operations.

Votes are keyed on (topic_id, profile_id); casting again overwrites the
existing row through INSERT ... ON CONFLICT DO UPDATE.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.profile import ProfileDemographics
from models.vote import Vote


class VoteRepository:
    """Repository for vote database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(
        self,
        topic_id: str,
        profile_id: str,
        vote_data: dict[str, Any],
        is_verified_vote: bool = False,
        verification_level: str = "none",
    ) -> Vote:
        """
        Insert a vote or overwrite the voter's existing one.

        The verification snapshot is replaced along with the payload, and
        updated_at moves forward; created_at keeps the first cast time.
        """
        now = datetime.now(timezone.utc)
        stmt = insert(Vote).values(
            id=str(uuid4()),
            topic_id=topic_id,
            profile_id=profile_id,
            vote_data=vote_data,
            is_verified_vote=is_verified_vote,
            verification_level=verification_level,
            created_at=now,
            updated_at=now,
        )
        stmt = (
            stmt.on_conflict_do_update(
                index_elements=["topic_id", "profile_id"],
                set_={
                    "vote_data": stmt.excluded.vote_data,
                    "is_verified_vote": stmt.excluded.is_verified_vote,
                    "verification_level": stmt.excluded.verification_level,
                    "updated_at": now,
                },
            )
            .returning(Vote)
            .execution_options(populate_existing=True)
        )

        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def get(self, topic_id: str, profile_id: str) -> Optional[Vote]:
        """Get a voter's current vote on a topic."""
        result = await self.db.execute(
            select(Vote).where(
                and_(
                    Vote.topic_id == topic_id,
                    Vote.profile_id == profile_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def list_by_topic(self, topic_id: str, verified_only: bool = False) -> list[Vote]:
        """Get all votes on a topic in cast order."""
        query = select(Vote).where(Vote.topic_id == topic_id)
        if verified_only:
            query = query.where(Vote.is_verified_vote.is_(True))
        query = query.order_by(Vote.created_at.asc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_by_topic(self, topic_id: str) -> int:
        """Get total vote count for a topic."""
        result = await self.db.execute(
            select(func.count(Vote.id)).where(Vote.topic_id == topic_id)
        )
        return result.scalar() or 0

    async def delete(self, topic_id: str, profile_id: str) -> bool:
        """Delete a voter's vote. Returns False when there was none."""
        result = await self.db.execute(
            delete(Vote).where(
                and_(
                    Vote.topic_id == topic_id,
                    Vote.profile_id == profile_id,
                )
            )
        )
        return (getattr(result, "rowcount", 0) or 0) > 0

    async def list_voter_demographics(self, topic_id: str) -> list[Any]:
        """
        Get the demographics row of every voter on a topic.

        Voters without a demographics row are left out. Runs in a SAVEPOINT
        so a failure does not abort the caller's transaction.

        Returns rows with age_range, gender and location_country.
        """
        query = (
            select(
                ProfileDemographics.age_range,
                ProfileDemographics.gender,
                ProfileDemographics.location_country,
            )
            .select_from(Vote)
            .join(ProfileDemographics, ProfileDemographics.profile_id == Vote.profile_id)
            .where(Vote.topic_id == topic_id)
        )

        async with self.db.begin_nested():
            result = await self.db.execute(query)
            return list(result.all())
