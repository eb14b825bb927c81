"""
Topic endpoints: listing, creation with duplicate detection, editing,
results, similarity suggestions and linking.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_results_service, get_topic_service
from db.session import get_db
from schemas.converters import (
    results_model_to_schema,
    suggestion_model_to_schema,
    topic_model_to_schema,
)
from schemas.results import VoteResults
from schemas.topic import (
    SimilaritySuggestionRead,
    TopicCreate,
    TopicCreated,
    TopicLinkRequest,
    TopicOrderBy,
    TopicRead,
    TopicUpdate,
)
from services.results_service import ResultsService
from services.topic_service import TopicService

router = APIRouter()


@router.get("", response_model=list[TopicRead])
async def list_topics(
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
    created_by: Optional[str] = None,
    is_active: Optional[bool] = True,
    search: Optional[str] = Query(None, max_length=300),
    order_by: TopicOrderBy = TopicOrderBy.CREATED_AT,
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[TopicRead]:
    """List topics, active ones by default."""
    topics = await topic_service.list_topics(
        created_by=created_by,
        is_active=is_active,
        search=search,
        order_by=order_by.value,
        descending=direction == "desc",
        limit=limit,
        offset=offset,
    )
    return [topic_model_to_schema(t) for t in topics]


@router.post("", response_model=TopicCreated, status_code=status.HTTP_201_CREATED)
async def create_topic(
    data: TopicCreate,
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
    db: AsyncSession = Depends(get_db),
) -> TopicCreated:
    """
    Create a topic.

    Active topics whose title contains the new title are returned and
    recorded as pending similarity suggestions.
    """
    topic, similar = await topic_service.create_topic(data)
    await db.commit()

    return TopicCreated(
        topic=topic_model_to_schema(topic),
        similar_topics=[topic_model_to_schema(t) for t in similar],
    )


@router.get("/similar", response_model=list[TopicRead])
async def find_similar_topics(
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
    title: str = Query(..., min_length=1, max_length=300),
    exclude_id: Optional[str] = None,
) -> list[TopicRead]:
    """Possible duplicates for a title being typed (at most 5)."""
    topics = await topic_service.find_similar_topics(title, exclude_id=exclude_id)
    return [topic_model_to_schema(t) for t in topics]


@router.get("/{topic_id}", response_model=TopicRead)
async def get_topic(
    topic_id: str,
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
    db: AsyncSession = Depends(get_db),
) -> TopicRead:
    """Get a topic and count the view."""
    topic = await topic_service.get_topic(topic_id)
    await topic_service.increment_view_count(topic_id)
    await db.commit()

    return topic_model_to_schema(topic)


@router.patch("/{topic_id}", response_model=TopicRead)
async def update_topic(
    topic_id: str,
    data: TopicUpdate,
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
    db: AsyncSession = Depends(get_db),
) -> TopicRead:
    """
    Edit a topic.

    Only the fields sent are changed. vote_config is checked against the
    topic's vote type and cannot change once the topic has votes.
    """
    topic = await topic_service.update_topic(topic_id, data)
    await db.commit()

    return topic_model_to_schema(topic)


@router.get("/{topic_id}/results", response_model=VoteResults)
async def get_topic_results(
    topic_id: str,
    results_service: Annotated[ResultsService, Depends(get_results_service)],
    force: bool = False,
    db: AsyncSession = Depends(get_db),
) -> VoteResults:
    """
    Get cached results for a topic.

    Results are recomputed when missing, older than 60 seconds, or when
    ``force`` is set.
    """
    cache = await results_service.get_results(topic_id, force_recalculate=force)
    # A recompute rewrites the cache row
    await db.commit()

    return results_model_to_schema(cache)


@router.get("/{topic_id}/suggestions", response_model=list[SimilaritySuggestionRead])
async def get_similarity_suggestions(
    topic_id: str,
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
) -> list[SimilaritySuggestionRead]:
    """Pending duplicate suggestions for a topic."""
    suggestions = await topic_service.get_similarity_suggestions(topic_id)
    return [suggestion_model_to_schema(s) for s in suggestions]


@router.post("/{topic_id}/link", response_model=TopicRead)
async def link_topic(
    topic_id: str,
    data: TopicLinkRequest,
    topic_service: Annotated[TopicService, Depends(get_topic_service)],
    db: AsyncSession = Depends(get_db),
) -> TopicRead:
    """Merge a topic into another; the source topic is deactivated."""
    topic = await topic_service.link_topics(topic_id, data.linked_topic_id)
    await db.commit()

    return topic_model_to_schema(topic)
