"""
Topic-related Pydantic schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class VerificationLevelEnum(str, Enum):
    """Minimum verification a topic can require."""

    NONE = "none"
    EMAIL = "email"
    PHONE = "phone"
    ID = "id"
    FULL = "full"


class TopicOrderBy(str, Enum):
    CREATED_AT = "created_at"
    VOTE_COUNT = "vote_count"
    VIEW_COUNT = "view_count"


class VoteTypeRead(BaseModel):
    """Available vote type."""

    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    default_config: dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class TopicCreate(BaseModel):
    """Schema for creating a topic."""

    title: str = Field(..., min_length=3, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    vote_type_id: str
    vote_config: Optional[dict[str, Any]] = Field(
        None, description="Defaults to the vote type's default_config"
    )
    require_verification: bool = False
    min_verification_level: VerificationLevelEnum = VerificationLevelEnum.NONE
    expires_at: Optional[datetime] = None
    created_by: Optional[str] = None


class TopicUpdate(BaseModel):
    """Editable topic fields; only fields present in the request change."""

    title: Optional[str] = Field(None, min_length=3, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    vote_config: Optional[dict[str, Any]] = None
    require_verification: Optional[bool] = None
    min_verification_level: Optional[VerificationLevelEnum] = None
    expires_at: Optional[datetime] = None
    is_closed: Optional[bool] = None


class TopicRead(BaseModel):
    """Schema for topic responses."""

    id: str
    title: str
    description: Optional[str] = None
    vote_type_id: str
    vote_type: Optional[str] = Field(None, description="Vote type name")
    vote_config: dict[str, Any] = Field(default_factory=dict)
    require_verification: bool = False
    min_verification_level: str = "none"
    expires_at: Optional[datetime] = None
    is_active: bool
    is_closed: bool = False
    linked_topic_id: Optional[str] = None
    view_count: int = 0
    vote_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class TopicCreated(BaseModel):
    """A new topic plus the near-duplicates found for it."""

    topic: TopicRead
    similar_topics: list[TopicRead] = Field(default_factory=list)


class TopicLinkRequest(BaseModel):
    """Merge a topic into another one."""

    linked_topic_id: str


class SimilaritySuggestionRead(BaseModel):
    """Candidate duplicate pairing."""

    id: str
    topic_id: str
    similar_topic_id: str
    similarity_score: float
    suggestion_method: str
    status: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    similar_topic: Optional[TopicRead] = None


class SuggestionReview(BaseModel):
    """Reviewer decision on a suggestion."""

    reviewer_id: str
    accept: bool
