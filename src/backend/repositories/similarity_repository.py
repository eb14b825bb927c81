"""
Similarity suggestion repository.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.similarity import SuggestionMethod, SuggestionStatus, TopicSimilaritySuggestion


class SimilarityRepository:
    """Repository for topic similarity suggestions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, suggestion_id: str) -> Optional[TopicSimilaritySuggestion]:
        result = await self.db.execute(
            select(TopicSimilaritySuggestion).where(TopicSimilaritySuggestion.id == suggestion_id)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        topic_id: str,
        similar_topic_id: str,
        similarity_score: float = 0.8,
        suggestion_method: SuggestionMethod = SuggestionMethod.MANUAL,
    ) -> TopicSimilaritySuggestion:
        suggestion = TopicSimilaritySuggestion(
            id=str(uuid4()),
            topic_id=topic_id,
            similar_topic_id=similar_topic_id,
            similarity_score=similarity_score,
            suggestion_method=suggestion_method.value,
            status=SuggestionStatus.PENDING.value,
        )
        self.db.add(suggestion)
        await self.db.flush()
        return suggestion

    async def list_pending(self, topic_id: str) -> list[TopicSimilaritySuggestion]:
        """Pending suggestions for a topic, strongest first."""
        result = await self.db.execute(
            select(TopicSimilaritySuggestion)
            .where(
                and_(
                    TopicSimilaritySuggestion.topic_id == topic_id,
                    TopicSimilaritySuggestion.status == SuggestionStatus.PENDING.value,
                )
            )
            .order_by(TopicSimilaritySuggestion.similarity_score.desc())
        )
        return list(result.scalars().all())

    async def set_status(
        self,
        suggestion: TopicSimilaritySuggestion,
        status: SuggestionStatus,
        reviewed_by: str,
    ) -> TopicSimilaritySuggestion:
        """Record a reviewer decision."""
        suggestion.status = status.value
        suggestion.reviewed_by = reviewed_by
        suggestion.reviewed_at = datetime.now(timezone.utc)
        await self.db.flush()
        return suggestion
