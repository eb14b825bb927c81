"""
Vote-related Pydantic schemas.

Vote payloads are a tagged union on ``kind``; the stored ``vote_data`` drops
the tag and keeps the single field the kind carries.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from models.vote_type import VoteKind


class _VotePayloadBase(BaseModel):
    kind: str

    @property
    def vote_kind(self) -> VoteKind:
        return VoteKind(self.kind)

    @property
    def value(self) -> Any:
        return getattr(self, self.vote_kind.payload_field)

    def to_vote_data(self) -> dict[str, Any]:
        """Persisted shape, e.g. {"answer": "yes"}."""
        return {self.vote_kind.payload_field: self.value}


class YesNoVote(_VotePayloadBase):
    """Answer to a yes/no topic."""

    kind: Literal["yes_no"] = "yes_no"
    answer: str = Field(..., min_length=1, max_length=100)


class ChoiceVote(_VotePayloadBase):
    """Selected option of a multiple choice topic."""

    kind: Literal["multiple_choice"] = "multiple_choice"
    choice: str = Field(..., min_length=1, max_length=300)


class RatingVote(_VotePayloadBase):
    """Numeric rating."""

    kind: Literal["rating"] = "rating"
    rating: Union[int, float]


class OpenEndedVote(_VotePayloadBase):
    """Free-text response."""

    kind: Literal["open_ended"] = "open_ended"
    response: str = Field(..., min_length=1)


VotePayload = Annotated[
    Union[YesNoVote, ChoiceVote, RatingVote, OpenEndedVote],
    Field(discriminator="kind"),
]


class VoteCastRequest(BaseModel):
    """Schema for casting (or replacing) a vote."""

    topic_id: str
    profile_id: str
    vote: VotePayload


class VoteRead(BaseModel):
    """A stored vote."""

    id: str
    topic_id: str
    profile_id: str
    vote_data: dict[str, Any]
    is_verified_vote: bool
    verification_level: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class VoteResponse(BaseModel):
    """Response after successfully casting a vote."""

    success: bool
    message: str
    vote: VoteRead
