"""
Vote type repository for database operations.
"""

from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.vote_type import VoteTypeConfig


class VoteTypeRepository:
    """Repository for vote type configs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, vote_type_id: str) -> Optional[VoteTypeConfig]:
        result = await self.db.execute(
            select(VoteTypeConfig).where(VoteTypeConfig.id == vote_type_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[VoteTypeConfig]:
        result = await self.db.execute(
            select(VoteTypeConfig).where(VoteTypeConfig.name == name)
        )
        return result.scalar_one_or_none()

    async def list_active(self) -> list[VoteTypeConfig]:
        """Active vote types ordered by name."""
        result = await self.db.execute(
            select(VoteTypeConfig)
            .where(VoteTypeConfig.is_active.is_(True))
            .order_by(VoteTypeConfig.name.asc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        name: str,
        display_name: str,
        default_config: dict[str, Any],
        description: Optional[str] = None,
        config_schema: Optional[dict[str, Any]] = None,
    ) -> VoteTypeConfig:
        vote_type = VoteTypeConfig(
            id=str(uuid4()),
            name=name,
            display_name=display_name,
            description=description,
            default_config=default_config,
            config_schema=config_schema or {},
            is_active=True,
            version=1,
        )
        self.db.add(vote_type)
        await self.db.flush()
        return vote_type
