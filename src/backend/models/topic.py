"""
Topic model for PostgreSQL storage.

A topic is a poll question with a vote type, its configuration, and
denormalized vote and view counters.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base
from db.types import GUID, JSONDocument
from models.vote_type import VoteKind, VoteTypeConfig


class Topic(Base):
    """
    Poll question.

    vote_count mirrors the number of Vote rows and is rewritten after every
    cast. A topic merged into another as a duplicate is deactivated and
    points at its replacement through linked_topic_id; its votes are kept.
    """

    __tablename__ = "topics"

    __table_args__ = (
        # Default listing: active topics, newest first
        Index("ix_topics_active_created", "is_active", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        GUID,
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # Owned by the external profile store, no FK enforced here
    created_by: Mapped[Optional[str]] = mapped_column(GUID, nullable=True, index=True)

    title: Mapped[str] = mapped_column(String(300), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    vote_type_id: Mapped[str] = mapped_column(
        GUID,
        ForeignKey("vote_type_configs.id"),
        index=True,
    )
    vote_config: Mapped[dict] = mapped_column(JSONDocument, default=dict)

    # Voting requirements
    require_verification: Mapped[bool] = mapped_column(Boolean, default=False)
    min_verification_level: Mapped[str] = mapped_column(String(20), default="none")
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False)
    linked_topic_id: Mapped[Optional[str]] = mapped_column(
        GUID,
        ForeignKey("topics.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Denormalized counters
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    vote_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    vote_type: Mapped[VoteTypeConfig] = relationship("VoteTypeConfig", lazy="joined")

    @property
    def vote_kind(self) -> Optional[VoteKind]:
        """Payload variant this topic's votes carry (None for custom types)."""
        return self.vote_type.kind if self.vote_type else None

    @property
    def is_expired(self) -> bool:
        """Check if the topic has passed its expiry time."""
        if not self.expires_at:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expires_at

    @property
    def accepts_votes(self) -> bool:
        return self.is_active and not self.is_closed and not self.is_expired
