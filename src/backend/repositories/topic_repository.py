"""
Topic repository for database operations.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.topic import Topic


class TopicRepository:
    """Repository for topic database operations."""

    ORDERABLE_COLUMNS = {"created_at", "vote_count", "view_count"}

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, topic_id: str) -> Optional[Topic]:
        """Get a topic by ID with its vote type."""
        result = await self.db.execute(select(Topic).where(Topic.id == topic_id))
        return result.scalar_one_or_none()

    async def create(
        self,
        title: str,
        vote_type_id: str,
        vote_config: dict[str, Any],
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        require_verification: bool = False,
        min_verification_level: str = "none",
        expires_at: Optional[Any] = None,
    ) -> Topic:
        """Create a new active topic."""
        topic = Topic(
            id=str(uuid4()),
            title=title,
            description=description,
            vote_type_id=vote_type_id,
            vote_config=vote_config,
            created_by=created_by,
            require_verification=require_verification,
            min_verification_level=min_verification_level,
            expires_at=expires_at,
            is_active=True,
            is_closed=False,
            view_count=0,
            vote_count=0,
        )

        self.db.add(topic)
        await self.db.flush()
        await self.db.refresh(topic)

        return topic

    async def update(self, topic_id: str, update_fields: dict[str, Any]) -> Optional[Topic]:
        """Update a topic with the given fields and bump updated_at."""
        topic = await self.get_by_id(topic_id)
        if not topic:
            return None

        for field, value in update_fields.items():
            if hasattr(topic, field):
                setattr(topic, field, value)
        topic.updated_at = datetime.now(timezone.utc)

        await self.db.flush()
        await self.db.refresh(topic)

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
        """List topics with optional filters and pagination."""
        query = select(Topic)

        if created_by:
            query = query.where(Topic.created_by == created_by)

        if is_active is not None:
            query = query.where(Topic.is_active.is_(is_active))

        if search:
            query = query.where(Topic.title.icontains(search, autoescape=True))

        if order_by not in self.ORDERABLE_COLUMNS:
            order_by = "created_at"
        column = getattr(Topic, order_by)
        query = query.order_by(column.desc() if descending else column.asc())
        query = query.offset(offset).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_by_title(
        self,
        title: str,
        exclude_id: Optional[str] = None,
        limit: int = 5,
    ) -> list[Topic]:
        """
        Find active topics whose title contains ``title``, ignoring case.

        LIKE wildcards in ``title`` are matched literally.
        """
        query = select(Topic).where(
            Topic.title.icontains(title, autoescape=True),
            Topic.is_active.is_(True),
        )
        if exclude_id:
            query = query.where(Topic.id != exclude_id)
        query = query.order_by(Topic.created_at.asc()).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def set_vote_count(self, topic_id: str, vote_count: int) -> bool:
        """Overwrite the denormalized vote counter."""
        result = await self.db.execute(
            update(Topic).where(Topic.id == topic_id).values(vote_count=vote_count)
        )
        return self._get_rowcount(result) > 0

    async def increment_view_count(self, topic_id: str) -> bool:
        """Atomically bump the view counter."""
        result = await self.db.execute(
            update(Topic).where(Topic.id == topic_id).values(view_count=Topic.view_count + 1)
        )
        return self._get_rowcount(result) > 0

    async def link(self, topic_id: str, linked_topic_id: str) -> bool:
        """Point a topic at its replacement and deactivate it."""
        result = await self.db.execute(
            update(Topic)
            .where(Topic.id == topic_id)
            .values(linked_topic_id=linked_topic_id, is_active=False)
        )
        return self._get_rowcount(result) > 0
