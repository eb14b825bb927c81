"""
Results schemas.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class DemographicBreakdown(BaseModel):
    """Voter counts per demographic bucket."""

    by_age: dict[str, int] = Field(default_factory=dict)
    by_gender: dict[str, int] = Field(default_factory=dict)
    by_location: dict[str, int] = Field(default_factory=dict)


class VoteResults(BaseModel):
    """
    Cached results for a topic.

    The aggregate shape depends on the vote type: answer/choice counts for
    yes_no and multiple_choice, {average, distribution, count} for rating,
    {responses, count} for open_ended.
    """

    topic_id: str
    all_votes: dict[str, Any] = Field(default_factory=dict)
    verified_votes: dict[str, Any] = Field(default_factory=dict)
    demographic_breakdown: DemographicBreakdown = Field(default_factory=DemographicBreakdown)
    last_calculated: datetime
    vote_count_all: int = 0
    vote_count_verified: int = 0

    model_config = {"from_attributes": True}
