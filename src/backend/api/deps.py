"""
Shared dependencies for API endpoints.

Each request gets services built around its own database session.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_db
from repositories.profile_repository import ProfileRepository
from repositories.results_cache_repository import ResultsCacheRepository
from repositories.similarity_repository import SimilarityRepository
from repositories.topic_repository import TopicRepository
from repositories.vote_repository import VoteRepository
from repositories.vote_type_repository import VoteTypeRepository
from services.demographics import DemographicJoiner
from services.results_service import ResultsService
from services.topic_service import TopicService
from services.vote_service import VoteService


def build_results_service(db: AsyncSession) -> ResultsService:
    votes = VoteRepository(db)
    return ResultsService(
        topics=TopicRepository(db),
        votes=votes,
        cache=ResultsCacheRepository(db),
        demographics=DemographicJoiner(votes),
    )


async def get_results_service(db: AsyncSession = Depends(get_db)) -> ResultsService:
    return build_results_service(db)


async def get_vote_service(db: AsyncSession = Depends(get_db)) -> VoteService:
    return VoteService(
        topics=TopicRepository(db),
        votes=VoteRepository(db),
        results=build_results_service(db),
    )


async def get_topic_service(db: AsyncSession = Depends(get_db)) -> TopicService:
    return TopicService(
        topics=TopicRepository(db),
        vote_types=VoteTypeRepository(db),
        suggestions=SimilarityRepository(db),
    )


async def get_profile_repository(db: AsyncSession = Depends(get_db)) -> ProfileRepository:
    return ProfileRepository(db)
