"""Schemas module initialization."""

from schemas.results import DemographicBreakdown, VoteResults
from schemas.topic import (
    SimilaritySuggestionRead,
    SuggestionReview,
    TopicCreate,
    TopicCreated,
    TopicLinkRequest,
    TopicRead,
    TopicUpdate,
    VoteTypeRead,
)
from schemas.vote import VoteCastRequest, VotePayload, VoteRead, VoteResponse

__all__ = [
    "DemographicBreakdown",
    "VoteResults",
    "SimilaritySuggestionRead",
    "SuggestionReview",
    "TopicCreate",
    "TopicCreated",
    "TopicLinkRequest",
    "TopicRead",
    "TopicUpdate",
    "VoteTypeRead",
    "VoteCastRequest",
    "VotePayload",
    "VoteRead",
    "VoteResponse",
]
