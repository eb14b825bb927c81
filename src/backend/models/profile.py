"""
Read-only mirrors of the external profile store.

Profiles and their demographics are written by the account service; this
service only reads them to snapshot verification and build breakdowns.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.types import GUID


class VerificationLevel(str, Enum):
    """Identity verification tiers, weakest first."""

    NONE = "none"
    EMAIL = "email"
    PHONE = "phone"
    ID = "id"
    FULL = "full"

    @property
    def rank(self) -> int:
        return list(VerificationLevel).index(self)

    @classmethod
    def parse(cls, value: Optional[str]) -> "VerificationLevel":
        """Parse a stored level, treating unknown values as NONE."""
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


class Profile(Base):
    """Voter profile."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        GUID,
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verification_level: Mapped[str] = mapped_column(
        String(20),
        default=VerificationLevel.NONE.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )


class ProfileDemographics(Base):
    """Optional demographic data, at most one row per profile."""

    __tablename__ = "profile_demographics"

    id: Mapped[str] = mapped_column(
        GUID,
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    profile_id: Mapped[str] = mapped_column(
        GUID,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        unique=True,
        index=True,
    )

    age_range: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    location_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location_region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    education_level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    employment_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    income_range: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
