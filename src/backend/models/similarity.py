"""
Candidate duplicate topic pairings.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, Float, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base
from db.types import GUID
from models.topic import Topic


class SuggestionMethod(str, Enum):
    """How a similarity suggestion was produced."""

    AI = "ai"
    MANUAL = "manual"  # Title substring match at topic creation
    USER_REPORT = "user_report"


class SuggestionStatus(str, Enum):
    """Review state of a suggestion."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TopicSimilaritySuggestion(Base):
    """
    A topic flagged as a possible duplicate of another.

    Only reviewers change the status; accepting a suggestion links
    topic_id into similar_topic_id.
    """

    __tablename__ = "topic_similarity_suggestions"

    __table_args__ = (
        UniqueConstraint("topic_id", "similar_topic_id", name="uq_similarity_pair"),
    )

    id: Mapped[str] = mapped_column(
        GUID,
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    topic_id: Mapped[str] = mapped_column(
        GUID,
        ForeignKey("topics.id", ondelete="CASCADE"),
        index=True,
    )
    similar_topic_id: Mapped[str] = mapped_column(
        GUID,
        ForeignKey("topics.id", ondelete="CASCADE"),
        index=True,
    )

    similarity_score: Mapped[float] = mapped_column(Float, default=0.8)
    suggestion_method: Mapped[str] = mapped_column(
        String(20),
        default=SuggestionMethod.MANUAL.value,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=SuggestionStatus.PENDING.value,
        index=True,
    )

    reviewed_by: Mapped[Optional[str]] = mapped_column(GUID, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    similar_topic: Mapped[Topic] = relationship(
        "Topic",
        foreign_keys=[similar_topic_id],
        lazy="joined",
    )
