"""
Vote casting.

A cast upserts the voter's single vote on the topic, rewrites the topic's
vote counter, and recomputes the topic's results before returning so the
next read already sees the new vote.
"""

import math
from typing import Any, Optional

import structlog

from core.exceptions import (
    InvalidVoteConfigError,
    InvalidVotePayloadError,
    TopicClosedError,
    TopicNotFoundError,
    VerificationRequiredError,
)
from models.profile import VerificationLevel
from models.topic import Topic
from models.vote import Vote
from models.vote_type import VoteKind
from repositories.topic_repository import TopicRepository
from repositories.vote_repository import VoteRepository
from schemas.vote import VotePayload
from services.results_service import ResultsService

logger = structlog.get_logger(__name__)


def check_verification(topic: Topic, is_verified: bool, verification_level: str) -> None:
    """
    Ensure the voter's verification snapshot satisfies the topic.

    Raises:
        VerificationRequiredError: If the topic requires more than the voter has.
    """
    if topic.require_verification and not is_verified:
        raise VerificationRequiredError("This topic only accepts votes from verified users")

    required = VerificationLevel.parse(topic.min_verification_level)
    actual = VerificationLevel.parse(verification_level)
    if actual.rank < required.rank:
        raise VerificationRequiredError(
            f"This topic requires verification level '{required.value}' or higher"
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_vote_config(kind: Optional[VoteKind], config: dict[str, Any]) -> None:
    """
    Check a topic's vote_config against its vote type.

    Keys the kind does not use are left alone; custom vote types are not
    checked.

    Raises:
        InvalidVoteConfigError: If a parameter has the wrong type or range.
    """
    if kind in (VoteKind.YES_NO, VoteKind.MULTIPLE_CHOICE):
        if "options" not in config:
            if kind is VoteKind.MULTIPLE_CHOICE:
                raise InvalidVoteConfigError("Multiple choice topics need 'options'")
            return
        options = config["options"]
        if (
            not isinstance(options, list)
            or not options
            or not all(isinstance(option, str) and option.strip() for option in options)
        ):
            raise InvalidVoteConfigError("'options' must be a non-empty list of strings")
        if len(set(options)) != len(options):
            raise InvalidVoteConfigError("'options' must not repeat")
        if kind is VoteKind.MULTIPLE_CHOICE and len(options) < 2:
            raise InvalidVoteConfigError("Multiple choice topics need at least 2 options")

    elif kind is VoteKind.RATING:
        for key in ("min_value", "max_value", "step"):
            if key in config and not _is_number(config[key]):
                raise InvalidVoteConfigError(f"'{key}' must be a number")
        min_value = config.get("min_value", 1)
        max_value = config.get("max_value", 5)
        if min_value >= max_value:
            raise InvalidVoteConfigError("'min_value' must be less than 'max_value'")
        if config.get("step", 1) <= 0:
            raise InvalidVoteConfigError("'step' must be greater than 0")

    elif kind is VoteKind.OPEN_ENDED:
        if "max_length" in config:
            max_length = config["max_length"]
            if not isinstance(max_length, int) or isinstance(max_length, bool) or max_length < 1:
                raise InvalidVoteConfigError("'max_length' must be a positive integer")


def validate_vote_payload(topic: Topic, payload: VotePayload) -> None:
    """
    Check a payload against the topic's vote type and vote_config.

    Raises:
        InvalidVotePayloadError: If kind or value do not fit the topic.
    """
    kind = topic.vote_kind
    if kind is None or payload.vote_kind is not kind:
        expected = kind.value if kind else "a custom vote type"
        raise InvalidVotePayloadError(
            f"Topic expects {expected} votes, got {payload.kind}"
        )

    config = topic.vote_config or {}

    if kind in (VoteKind.YES_NO, VoteKind.MULTIPLE_CHOICE):
        options = config.get("options")
        if options and payload.value not in options:
            raise InvalidVotePayloadError(f"'{payload.value}' is not one of the topic's options")

    elif kind is VoteKind.RATING:
        rating = payload.value
        min_value = config.get("min_value", 1)
        max_value = config.get("max_value", 5)
        step = config.get("step", 1)
        if not min_value <= rating <= max_value:
            raise InvalidVotePayloadError(f"Rating must be between {min_value} and {max_value}")
        if step:
            steps = (rating - min_value) / step
            if not math.isclose(steps, round(steps), abs_tol=1e-9):
                raise InvalidVotePayloadError(f"Rating must move in steps of {step}")

    elif kind is VoteKind.OPEN_ENDED:
        response = payload.value
        if not response.strip():
            raise InvalidVotePayloadError("Response cannot be empty")
        max_length = config.get("max_length")
        if max_length and len(response) > max_length:
            raise InvalidVotePayloadError(f"Response cannot exceed {max_length} characters")


class VoteService:
    """Service for casting and reading votes."""

    def __init__(
        self,
        topics: TopicRepository,
        votes: VoteRepository,
        results: ResultsService,
    ):
        self.topics = topics
        self.votes = votes
        self.results = results

    async def cast_vote(
        self,
        topic_id: str,
        profile_id: str,
        payload: VotePayload,
        is_verified: bool = False,
        verification_level: str = "none",
    ) -> Vote:
        """
        Cast or replace a voter's vote on a topic.

        Raises:
            TopicNotFoundError: Topic does not exist.
            TopicClosedError: Topic is inactive, closed or expired.
            VerificationRequiredError: Voter is not verified enough.
            InvalidVotePayloadError: Payload does not fit the topic.
        """
        topic = await self.topics.get_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)

        if not topic.accepts_votes:
            raise TopicClosedError("This topic is not accepting votes")

        check_verification(topic, is_verified, verification_level)
        validate_vote_payload(topic, payload)

        vote = await self.votes.upsert(
            topic_id=topic_id,
            profile_id=profile_id,
            vote_data=payload.to_vote_data(),
            is_verified_vote=is_verified,
            verification_level=verification_level,
        )

        vote_count = await self.votes.count_by_topic(topic_id)
        await self.topics.set_vote_count(topic_id, vote_count)

        await self.results.recalculate(topic_id, topic=topic)

        logger.info(
            "vote_cast",
            topic_id=topic_id,
            kind=payload.kind,
            is_verified=is_verified,
            vote_count=vote_count,
        )
        return vote

    async def get_vote(self, topic_id: str, profile_id: str) -> Optional[Vote]:
        return await self.votes.get(topic_id, profile_id)

    async def get_topic_votes(self, topic_id: str, verified_only: bool = False) -> list[Vote]:
        return await self.votes.list_by_topic(topic_id, verified_only=verified_only)
