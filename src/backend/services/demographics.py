"""
Demographic breakdown of a topic's voters.

Breakdowns are best-effort: a failed lookup yields empty buckets, but the
failure is reported on the result instead of being hidden.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from repositories.vote_repository import VoteRepository

logger = structlog.get_logger(__name__)

# Breakdown key -> demographics column
BUCKETS = {
    "by_age": "age_range",
    "by_gender": "gender",
    "by_location": "location_country",
}


def empty_breakdown() -> dict[str, dict[str, int]]:
    return {bucket: {} for bucket in BUCKETS}


def build_breakdown(rows: Iterable[Any]) -> dict[str, dict[str, int]]:
    """
    Count voters per age range, gender and country.

    A field that is missing on a voter's row adds to no bucket; there is no
    "unknown" bucket.
    """
    breakdown = empty_breakdown()
    for row in rows:
        for bucket, column in BUCKETS.items():
            value = getattr(row, column, None)
            if value:
                counts = breakdown[bucket]
                counts[value] = counts.get(value, 0) + 1
    return breakdown


@dataclass(frozen=True)
class DemographicsResult:
    """Breakdown plus the fetch error, if any."""

    breakdown: dict[str, dict[str, int]] = field(default_factory=empty_breakdown)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DemographicJoiner:
    """Joins each vote on a topic with its voter's demographics."""

    def __init__(self, votes: VoteRepository):
        self.votes = votes

    async def breakdown(self, topic_id: str) -> DemographicsResult:
        try:
            rows = await self.votes.list_voter_demographics(topic_id)
        except SQLAlchemyError as e:
            logger.warning("demographics_fetch_failed", topic_id=topic_id, error=str(e))
            return DemographicsResult(error=str(e))

        return DemographicsResult(breakdown=build_breakdown(rows))
