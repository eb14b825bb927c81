"""
Tests for vote casting.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import (
    InvalidVoteConfigError,
    InvalidVotePayloadError,
    TopicClosedError,
    TopicNotFoundError,
    VerificationRequiredError,
)
from models.vote_type import VoteKind
from schemas.vote import ChoiceVote, OpenEndedVote, RatingVote, YesNoVote
from services.vote_service import validate_vote_config


@pytest.mark.unit
class TestCastVote:
    """Test VoteService.cast_vote."""

    async def test_first_cast_creates_vote(self, store) -> None:
        topic = await store.add_topic()

        vote = await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))

        assert vote.vote_data == {"answer": "yes"}
        assert vote.is_verified_vote is False
        assert topic.vote_count == 1

    async def test_second_cast_replaces_first(self, store) -> None:
        topic = await store.add_topic()

        await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))
        await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="no"))

        votes = await store.vote_service.get_topic_votes(topic.id)
        assert len(votes) == 1
        assert votes[0].vote_data == {"answer": "no"}
        assert topic.vote_count == 1

    async def test_recast_replaces_verification_snapshot(self, store) -> None:
        topic = await store.add_topic()

        await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))
        vote = await store.vote_service.cast_vote(
            topic.id,
            "profile-1",
            YesNoVote(answer="yes"),
            is_verified=True,
            verification_level="phone",
        )

        assert vote.is_verified_vote is True
        assert vote.verification_level == "phone"

    async def test_cast_refreshes_results(self, store) -> None:
        topic = await store.add_topic()
        await store.vote_service.cast_vote(topic.id, "a", YesNoVote(answer="yes"), is_verified=True, verification_level="email")
        await store.vote_service.cast_vote(topic.id, "b", YesNoVote(answer="yes"))
        await store.vote_service.cast_vote(topic.id, "c", YesNoVote(answer="no"))

        results = await store.results_service.get_results(topic.id)

        assert results.all_votes == {"yes": 2, "no": 1}
        assert results.verified_votes == {"yes": 1}
        assert results.vote_count_all == 3
        assert results.vote_count_verified == 1

    async def test_vote_count_tracks_distinct_voters(self, store) -> None:
        topic = await store.add_topic()
        for profile_id in ("a", "b", "a", "c", "b"):
            await store.vote_service.cast_vote(topic.id, profile_id, YesNoVote(answer="yes"))

        assert topic.vote_count == 3

    async def test_unknown_topic(self, store) -> None:
        with pytest.raises(TopicNotFoundError):
            await store.vote_service.cast_vote("missing", "profile-1", YesNoVote(answer="yes"))

    async def test_closed_topic_rejects_votes(self, store) -> None:
        topic = await store.add_topic()
        topic.is_closed = True

        with pytest.raises(TopicClosedError):
            await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))
        assert await store.vote_service.get_vote(topic.id, "profile-1") is None

    async def test_inactive_topic_rejects_votes(self, store) -> None:
        topic = await store.add_topic(is_active=False)

        with pytest.raises(TopicClosedError):
            await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))

    async def test_expired_topic_rejects_votes(self, store) -> None:
        topic = await store.add_topic(expires_at=datetime.now(timezone.utc) - timedelta(minutes=1))

        with pytest.raises(TopicClosedError):
            await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))

    async def test_failed_results_write_propagates(self, store) -> None:
        topic = await store.add_topic()
        store.cache.fail_upsert = RuntimeError("cache unavailable")

        with pytest.raises(RuntimeError):
            await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))


@pytest.mark.unit
class TestVerification:
    """Test topic verification requirements."""

    async def test_unverified_voter_rejected(self, store) -> None:
        topic = await store.add_topic(require_verification=True)

        with pytest.raises(VerificationRequiredError):
            await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))

    async def test_verified_voter_accepted(self, store) -> None:
        topic = await store.add_topic(require_verification=True)

        vote = await store.vote_service.cast_vote(
            topic.id,
            "profile-1",
            YesNoVote(answer="yes"),
            is_verified=True,
            verification_level="email",
        )

        assert vote.is_verified_vote is True

    async def test_level_below_minimum_rejected(self, store) -> None:
        topic = await store.add_topic(min_verification_level="phone")

        with pytest.raises(VerificationRequiredError, match="phone"):
            await store.vote_service.cast_vote(
                topic.id,
                "profile-1",
                YesNoVote(answer="yes"),
                is_verified=True,
                verification_level="email",
            )

    async def test_level_above_minimum_accepted(self, store) -> None:
        topic = await store.add_topic(min_verification_level="phone")

        vote = await store.vote_service.cast_vote(
            topic.id,
            "profile-1",
            YesNoVote(answer="no"),
            is_verified=True,
            verification_level="full",
        )

        assert vote.verification_level == "full"


@pytest.mark.unit
class TestPayloadValidation:
    """Test payloads against the topic's vote type and config."""

    async def test_kind_mismatch(self, store) -> None:
        topic = await store.add_topic()

        with pytest.raises(InvalidVotePayloadError, match="yes_no"):
            await store.vote_service.cast_vote(topic.id, "profile-1", RatingVote(rating=4))

    async def test_answer_not_in_options(self, store) -> None:
        topic = await store.add_topic()

        with pytest.raises(InvalidVotePayloadError):
            await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="maybe"))

    async def test_choice_in_options(self, store) -> None:
        topic = await store.add_topic("Favourite colour", vote_type=store.multiple_choice)

        vote = await store.vote_service.cast_vote(topic.id, "profile-1", ChoiceVote(choice="Green"))

        assert vote.vote_data == {"choice": "Green"}

    async def test_choice_not_in_options(self, store) -> None:
        topic = await store.add_topic("Favourite colour", vote_type=store.multiple_choice)

        with pytest.raises(InvalidVotePayloadError):
            await store.vote_service.cast_vote(topic.id, "profile-1", ChoiceVote(choice="Purple"))

    @pytest.mark.parametrize("rating", [0, 6, 2.5])
    async def test_rating_out_of_range_or_off_step(self, store, rating) -> None:
        topic = await store.add_topic("Rate it", vote_type=store.rating)

        with pytest.raises(InvalidVotePayloadError):
            await store.vote_service.cast_vote(topic.id, "profile-1", RatingVote(rating=rating))

    async def test_rating_with_half_steps(self, store) -> None:
        topic = await store.add_topic(
            "Rate it",
            vote_type=store.rating,
            vote_config={"min_value": 0, "max_value": 10, "step": 0.5},
        )

        vote = await store.vote_service.cast_vote(topic.id, "profile-1", RatingVote(rating=7.5))

        assert vote.vote_data == {"rating": 7.5}

    async def test_open_ended_blank_response(self, store) -> None:
        topic = await store.add_topic("Thoughts?", vote_type=store.open_ended)

        with pytest.raises(InvalidVotePayloadError):
            await store.vote_service.cast_vote(topic.id, "profile-1", OpenEndedVote(response="   "))

    async def test_open_ended_too_long(self, store) -> None:
        topic = await store.add_topic("Thoughts?", vote_type=store.open_ended)

        with pytest.raises(InvalidVotePayloadError, match="200"):
            await store.vote_service.cast_vote(topic.id, "profile-1", OpenEndedVote(response="x" * 201))

    async def test_custom_vote_type_rejects_builtin_payloads(self, store) -> None:
        custom = store.vote_types.add("ranked_choice", {})
        topic = await store.add_topic("Rank these", vote_type=custom)

        with pytest.raises(InvalidVotePayloadError):
            await store.vote_service.cast_vote(topic.id, "profile-1", YesNoVote(answer="yes"))


@pytest.mark.unit
class TestVoteConfigValidation:
    """Test validate_vote_config."""

    @pytest.mark.parametrize(
        "kind,config",
        [
            (VoteKind.YES_NO, {"options": ["yes", "no"]}),
            (VoteKind.YES_NO, {}),
            (VoteKind.MULTIPLE_CHOICE, {"options": ["Red", "Green"]}),
            (VoteKind.RATING, {"min_value": 0, "max_value": 10, "step": 0.5}),
            (VoteKind.RATING, {}),
            (VoteKind.OPEN_ENDED, {"max_length": 500}),
            (VoteKind.OPEN_ENDED, {}),
            (None, {"anything": "goes"}),
        ],
    )
    def test_valid_configs(self, kind, config) -> None:
        validate_vote_config(kind, config)

    @pytest.mark.parametrize(
        "kind,config",
        [
            (VoteKind.YES_NO, {"options": "yes/no"}),
            (VoteKind.YES_NO, {"options": []}),
            (VoteKind.YES_NO, {"options": ["yes", 1]}),
            (VoteKind.YES_NO, {"options": ["yes", "  "]}),
            (VoteKind.MULTIPLE_CHOICE, {}),
            (VoteKind.MULTIPLE_CHOICE, {"options": ["Only"]}),
            (VoteKind.MULTIPLE_CHOICE, {"options": ["Red", "Red"]}),
            (VoteKind.RATING, {"min_value": "1"}),
            (VoteKind.RATING, {"max_value": True}),
            (VoteKind.RATING, {"min_value": 5, "max_value": 5}),
            (VoteKind.RATING, {"min_value": 10}),
            (VoteKind.RATING, {"step": 0}),
            (VoteKind.RATING, {"step": -1}),
            (VoteKind.OPEN_ENDED, {"max_length": 0}),
            (VoteKind.OPEN_ENDED, {"max_length": "100"}),
            (VoteKind.OPEN_ENDED, {"max_length": 10.5}),
            (VoteKind.OPEN_ENDED, {"max_length": True}),
        ],
    )
    def test_invalid_configs(self, kind, config) -> None:
        with pytest.raises(InvalidVoteConfigError):
            validate_vote_config(kind, config)
