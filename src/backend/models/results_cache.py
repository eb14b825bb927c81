"""
Materialized vote results per topic.

Strictly a cache: every column can be recomputed from votes, topics and
profile demographics, and the row is always replaced as a whole.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.types import GUID, JSONDocument


class VoteResultsCache(Base):
    """Aggregates for all votes and verified-only votes of one topic."""

    __tablename__ = "vote_results_cache"

    id: Mapped[str] = mapped_column(
        GUID,
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    topic_id: Mapped[str] = mapped_column(
        GUID,
        ForeignKey("topics.id", ondelete="CASCADE"),
        unique=True,
        index=True,
    )

    all_votes: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    verified_votes: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    # {"by_age": {...}, "by_gender": {...}, "by_location": {...}}
    demographic_breakdown: Mapped[dict] = mapped_column(JSONDocument, default=dict)

    last_calculated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    vote_count_all: Mapped[int] = mapped_column(Integer, default=0)
    vote_count_verified: Mapped[int] = mapped_column(Integer, default=0)
