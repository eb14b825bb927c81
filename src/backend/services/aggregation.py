"""
Vote aggregation.

Pure functions that turn a topic's votes into the summary stored in the
results cache. The strategy is chosen from the topic's vote kind, never from
the shape of whichever vote happens to come first.
"""

from collections import Counter
from typing import Any, Iterable, Mapping, Optional, Sequence

from models.vote_type import VoteKind


def _vote_data(vote: Any) -> Mapping[str, Any]:
    """Accept Vote rows or bare payload dicts."""
    data = vote.vote_data if hasattr(vote, "vote_data") else vote
    return data if isinstance(data, Mapping) else {}


def _field_values(votes: Iterable[Any], field: str) -> list[Any]:
    values = []
    for vote in votes:
        data = _vote_data(vote)
        if field in data:
            values.append(data[field])
    return values


def _rating_key(rating: Any) -> str:
    # 4.0 and 4 land in the same bucket
    if isinstance(rating, float) and rating.is_integer():
        rating = int(rating)
    return str(rating)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def tally(values: Iterable[Any]) -> dict[str, int]:
    """Count occurrences of each distinct value, keyed by its string form."""
    return dict(Counter(str(value) for value in values))


def summarize_ratings(ratings: Sequence[Any]) -> dict[str, Any]:
    """Average, per-value distribution and count of numeric ratings."""
    numeric = [r for r in ratings if _is_number(r)]
    if not numeric:
        return {"average": None, "distribution": {}, "count": 0}
    return {
        "average": sum(numeric) / len(numeric),
        "distribution": dict(Counter(_rating_key(r) for r in numeric)),
        "count": len(numeric),
    }


def collect_responses(responses: Sequence[Any]) -> dict[str, Any]:
    """Free-text responses in vote order."""
    return {"responses": list(responses), "count": len(responses)}


def aggregate(votes: Sequence[Any], kind: Optional[VoteKind]) -> dict[str, Any]:
    """
    Summarize votes of one topic.

    - no votes: ``{}``
    - yes_no: ``{"yes": 2, "no": 1}`` (any answer value gets its own key)
    - multiple_choice: ``{"Option A": 3, ...}``
    - rating: ``{"average": 3.5, "distribution": {"3": 1, "4": 1}, "count": 2}``
    - open_ended: ``{"responses": [...], "count": n}``
    - unknown kind: ``{"count": n}``

    Votes whose payload lacks the kind's field are left out of the detail.
    """
    if not votes:
        return {}

    if kind is None:
        return {"count": len(votes)}

    values = _field_values(votes, kind.payload_field)

    if kind in (VoteKind.YES_NO, VoteKind.MULTIPLE_CHOICE):
        return tally(values)
    if kind is VoteKind.RATING:
        return summarize_ratings(values)
    if kind is VoteKind.OPEN_ENDED:
        return collect_responses(values)

    return {"count": len(votes)}


def infer_vote_kind(vote_data: Mapping[str, Any]) -> Optional[VoteKind]:
    """Classify a stored payload by the field it carries."""
    for kind in VoteKind:
        if kind.payload_field in vote_data:
            return kind
    return None
