"""
Vote model for PostgreSQL storage.

One row per (topic, voter). Re-voting overwrites the row in place.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.types import GUID, JSONDocument


class Vote(Base):
    """
    A voter's current vote on a topic.

    vote_data holds exactly one of {answer}, {choice}, {rating}, {response}
    depending on the topic's vote type.

    is_verified_vote and verification_level are snapshots taken when the
    vote was cast; later changes to the voter's profile do not reclassify
    past votes.
    """

    __tablename__ = "votes"

    __table_args__ = (
        UniqueConstraint("topic_id", "profile_id", name="uq_votes_topic_profile"),
        Index("ix_votes_topic_verified", "topic_id", "is_verified_vote"),
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
    profile_id: Mapped[str] = mapped_column(GUID, index=True)

    vote_data: Mapped[dict] = mapped_column(JSONDocument)

    # Verification snapshot at cast time
    is_verified_vote: Mapped[bool] = mapped_column(Boolean, default=False)
    verification_level: Mapped[str] = mapped_column(String(20), default="none")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
