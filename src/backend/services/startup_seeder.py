"""
Startup seeding of reference data.

Safe to run on every start: only missing vote types are inserted.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_session_factory
from repositories.vote_type_repository import VoteTypeRepository

logger = structlog.get_logger(__name__)


BUILT_IN_VOTE_TYPES = [
    {
        "name": "yes_no",
        "display_name": "Yes / No",
        "description": "A simple yes or no answer.",
        "default_config": {"options": ["yes", "no"]},
        "config_schema": {
            "type": "object",
            "properties": {"options": {"type": "array", "items": {"type": "string"}}},
        },
    },
    {
        "name": "multiple_choice",
        "display_name": "Multiple Choice",
        "description": "Pick one of several options.",
        "default_config": {"options": ["Option 1", "Option 2"]},
        "config_schema": {
            "type": "object",
            "properties": {"options": {"type": "array", "items": {"type": "string"}, "minItems": 2}},
            "required": ["options"],
        },
    },
    {
        "name": "rating",
        "display_name": "Rating",
        "description": "A number on a fixed scale.",
        "default_config": {"min_value": 1, "max_value": 5, "step": 1},
        "config_schema": {
            "type": "object",
            "properties": {
                "min_value": {"type": "number"},
                "max_value": {"type": "number"},
                "step": {"type": "number", "exclusiveMinimum": 0},
            },
        },
    },
    {
        "name": "open_ended",
        "display_name": "Open Ended",
        "description": "A free-text response.",
        "default_config": {"max_length": 1000},
        "config_schema": {
            "type": "object",
            "properties": {"max_length": {"type": "integer", "minimum": 1}},
        },
    },
]


async def seed_vote_types(db: AsyncSession) -> int:
    """Insert built-in vote types that do not exist yet. Returns how many were added."""
    repo = VoteTypeRepository(db)
    created = 0
    for vote_type in BUILT_IN_VOTE_TYPES:
        if await repo.get_by_name(vote_type["name"]) is not None:
            continue
        await repo.create(**vote_type)
        created += 1
    return created


async def seed_all() -> None:
    """Seed all reference data in its own transaction."""
    async with get_session_factory()() as session:
        created = await seed_vote_types(session)
        await session.commit()
    logger.info("vote_types_seeded", created=created)
