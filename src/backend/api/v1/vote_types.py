"""
Vote type endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import get_topic_service
from schemas.topic import VoteTypeRead
from services.topic_service import TopicService

router = APIRouter()


@router.get("", response_model=list[VoteTypeRead])
async def list_vote_types(
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
) -> list[VoteTypeRead]:
    """Active vote types with the config new topics start from."""
    vote_types = await topic_service.get_vote_types()
    return [VoteTypeRead.model_validate(vt) for vt in vote_types]
