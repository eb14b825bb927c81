"""
Schema converter functions.

Centralized helpers for converting SQLAlchemy models to Pydantic schemas.
"""

from typing import TYPE_CHECKING

from schemas.results import DemographicBreakdown, VoteResults
from schemas.topic import SimilaritySuggestionRead, TopicRead

if TYPE_CHECKING:
    from models.results_cache import VoteResultsCache
    from models.similarity import TopicSimilaritySuggestion
    from models.topic import Topic


def topic_model_to_schema(topic: "Topic") -> TopicRead:
    """Convert a Topic model to a TopicRead schema."""
    return TopicRead(
        id=str(topic.id),
        title=topic.title,
        description=topic.description,
        vote_type_id=str(topic.vote_type_id),
        vote_type=topic.vote_type.name if topic.vote_type else None,
        vote_config=topic.vote_config or {},
        require_verification=topic.require_verification,
        min_verification_level=topic.min_verification_level,
        expires_at=topic.expires_at,
        is_active=topic.is_active,
        is_closed=topic.is_closed,
        linked_topic_id=str(topic.linked_topic_id) if topic.linked_topic_id else None,
        view_count=topic.view_count or 0,
        vote_count=topic.vote_count or 0,
        created_by=str(topic.created_by) if topic.created_by else None,
        created_at=topic.created_at,
    )


def suggestion_model_to_schema(suggestion: "TopicSimilaritySuggestion") -> SimilaritySuggestionRead:
    """Convert a similarity suggestion, embedding the similar topic when loaded."""
    return SimilaritySuggestionRead(
        id=str(suggestion.id),
        topic_id=str(suggestion.topic_id),
        similar_topic_id=str(suggestion.similar_topic_id),
        similarity_score=suggestion.similarity_score,
        suggestion_method=suggestion.suggestion_method,
        status=suggestion.status,
        reviewed_by=str(suggestion.reviewed_by) if suggestion.reviewed_by else None,
        reviewed_at=suggestion.reviewed_at,
        created_at=suggestion.created_at,
        similar_topic=(
            topic_model_to_schema(suggestion.similar_topic) if suggestion.similar_topic else None
        ),
    )


def results_model_to_schema(cache: "VoteResultsCache") -> VoteResults:
    """Convert a VoteResultsCache row to the public results schema."""
    return VoteResults(
        topic_id=str(cache.topic_id),
        all_votes=cache.all_votes or {},
        verified_votes=cache.verified_votes or {},
        demographic_breakdown=DemographicBreakdown(**(cache.demographic_breakdown or {})),
        last_calculated=cache.last_calculated,
        vote_count_all=cache.vote_count_all or 0,
        vote_count_verified=cache.vote_count_verified or 0,
    )
