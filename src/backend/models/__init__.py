"""Database models module."""

from models.profile import Profile, ProfileDemographics, VerificationLevel
from models.results_cache import VoteResultsCache
from models.similarity import SuggestionMethod, SuggestionStatus, TopicSimilaritySuggestion
from models.topic import Topic
from models.vote import Vote
from models.vote_type import VoteKind, VoteTypeConfig

__all__ = [
    "Profile",
    "ProfileDemographics",
    "VerificationLevel",
    "VoteResultsCache",
    "SuggestionMethod",
    "SuggestionStatus",
    "TopicSimilaritySuggestion",
    "Topic",
    "Vote",
    "VoteKind",
    "VoteTypeConfig",
]
