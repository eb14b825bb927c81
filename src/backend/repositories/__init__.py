"""Repository modules for database access."""

from repositories.profile_repository import ProfileRepository
from repositories.results_cache_repository import ResultsCacheRepository
from repositories.similarity_repository import SimilarityRepository
from repositories.topic_repository import TopicRepository
from repositories.vote_repository import VoteRepository
from repositories.vote_type_repository import VoteTypeRepository

__all__ = [
    "ProfileRepository",
    "ResultsCacheRepository",
    "SimilarityRepository",
    "TopicRepository",
    "VoteRepository",
    "VoteTypeRepository",
]
