"""
Domain exceptions raised by the voting services.

Endpoints translate these into HTTP responses; persistence errors are not
wrapped and propagate as SQLAlchemy exceptions.
"""


class VotingError(Exception):
    """Base exception for voting and topic operations."""

    pass


class TopicNotFoundError(VotingError):
    """The requested topic does not exist."""

    def __init__(self, topic_id: str):
        super().__init__(f"Topic {topic_id} not found")
        self.topic_id = topic_id


class SuggestionNotFoundError(VotingError):
    """The requested similarity suggestion does not exist."""

    def __init__(self, suggestion_id: str):
        super().__init__(f"Similarity suggestion {suggestion_id} not found")
        self.suggestion_id = suggestion_id


class TopicClosedError(VotingError):
    """Topic is inactive, closed, or expired and accepts no votes."""

    pass


class VerificationRequiredError(VotingError):
    """Voter's verification does not meet the topic's requirement."""

    pass


class InvalidVotePayloadError(VotingError):
    """Vote payload does not match the topic's vote type or configuration."""

    pass


class InvalidLinkError(VotingError):
    """Topics cannot be linked as requested."""

    pass


class SuggestionAlreadyReviewedError(VotingError):
    """Suggestion has already been accepted or rejected."""

    pass


class VoteTypeNotFoundError(VotingError):
    """The requested vote type does not exist or is inactive."""

    def __init__(self, vote_type_id: str):
        super().__init__(f"Vote type {vote_type_id} not found")
        self.vote_type_id = vote_type_id


class InvalidVoteConfigError(VotingError):
    """Topic vote_config is not consistent with its vote type."""

    pass
