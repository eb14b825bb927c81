"""
Vote endpoints.

One vote per voter per topic: casting again replaces the previous vote.
Authentication happens upstream; the verification snapshot stored with the
vote is read from the voter's profile at cast time.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_profile_repository, get_vote_service
from db.session import get_db
from repositories.profile_repository import ProfileRepository
from schemas.vote import VoteCastRequest, VoteRead, VoteResponse
from services.vote_service import VoteService

router = APIRouter()


@router.post("", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
async def cast_vote(
    vote_data: VoteCastRequest,
    vote_service: Annotated[VoteService, Depends(get_vote_service)],
    profiles: Annotated[ProfileRepository, Depends(get_profile_repository)],
    db: AsyncSession = Depends(get_db),
) -> VoteResponse:
    """
    Cast a vote on a topic.

    Requirements:
    - Topic must be active, open and not expired
    - Payload kind must match the topic's vote type
    - Voter must meet the topic's verification requirement

    The vote and the recomputed results are committed before the response
    is sent.
    """
    profile = await profiles.get_by_id(vote_data.profile_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    vote = await vote_service.cast_vote(
        topic_id=vote_data.topic_id,
        profile_id=vote_data.profile_id,
        payload=vote_data.vote,
        is_verified=profile.is_verified,
        verification_level=profile.verification_level,
    )
    await db.commit()

    return VoteResponse(
        success=True,
        message="Vote recorded successfully",
        vote=VoteRead.model_validate(vote),
    )


@router.get("/{topic_id}/{profile_id}", response_model=VoteRead)
async def get_vote(
    topic_id: str,
    profile_id: str,
    vote_service: Annotated[VoteService, Depends(get_vote_service)],
) -> VoteRead:
    """Get a voter's current vote on a topic."""
    vote = await vote_service.get_vote(topic_id, profile_id)
    if vote is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vote not found",
        )
    return VoteRead.model_validate(vote)
