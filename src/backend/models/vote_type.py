"""
Vote type model.

A vote type names the shape of a vote payload and carries the default
configuration that seeds a new topic's vote_config.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.types import GUID, JSONDocument


class VoteKind(str, Enum):
    """Built-in vote types and the payload field each one carries."""

    YES_NO = "yes_no"  # {"answer": "yes"}
    MULTIPLE_CHOICE = "multiple_choice"  # {"choice": "Option 1"}
    RATING = "rating"  # {"rating": 4}
    OPEN_ENDED = "open_ended"  # {"response": "free text"}

    @property
    def payload_field(self) -> str:
        return _PAYLOAD_FIELDS[self]

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["VoteKind"]:
        """Resolve a vote type name, returning None for custom types."""
        try:
            return cls(name)
        except ValueError:
            return None


_PAYLOAD_FIELDS = {
    VoteKind.YES_NO: "answer",
    VoteKind.MULTIPLE_CHOICE: "choice",
    VoteKind.RATING: "rating",
    VoteKind.OPEN_ENDED: "response",
}


class VoteTypeConfig(Base):
    """Named vote schema with its default topic configuration."""

    __tablename__ = "vote_type_configs"

    id: Mapped[str] = mapped_column(
        GUID,
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # JSON schema for vote_config, and the config new topics start from
    config_schema: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    default_config: Mapped[dict] = mapped_column(JSONDocument, default=dict)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    version: Mapped[int] = mapped_column(Integer, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def kind(self) -> Optional[VoteKind]:
        return VoteKind.from_name(self.name)
