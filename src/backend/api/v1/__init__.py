"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.suggestions import router as suggestions_router
from api.v1.topics import router as topics_router
from api.v1.vote_types import router as vote_types_router
from api.v1.votes import router as votes_router

router = APIRouter()

router.include_router(vote_types_router, prefix="/vote-types", tags=["Vote Types"])
router.include_router(topics_router, prefix="/topics", tags=["Topics"])
router.include_router(votes_router, prefix="/votes", tags=["Votes"])
router.include_router(
    suggestions_router,
    prefix="/suggestions",
    tags=["Similarity Suggestions"],
)
