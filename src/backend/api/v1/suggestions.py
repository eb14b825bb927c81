"""
Similarity suggestion review endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_topic_service
from db.session import get_db
from schemas.converters import suggestion_model_to_schema
from schemas.topic import SimilaritySuggestionRead, SuggestionReview
from services.topic_service import TopicService

router = APIRouter()


@router.post("/{suggestion_id}/review", response_model=SimilaritySuggestionRead)
async def review_suggestion(
    suggestion_id: str,
    review: SuggestionReview,
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
    db: AsyncSession = Depends(get_db),
) -> SimilaritySuggestionRead:
    """
    Accept or reject a pending suggestion.

    Accepting links the suggested duplicate into the existing topic.
    """
    suggestion = await topic_service.review_suggestion(
        suggestion_id,
        reviewer_id=review.reviewer_id,
        accept=review.accept,
    )
    await db.commit()

    return suggestion_model_to_schema(suggestion)
