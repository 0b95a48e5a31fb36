"""API routes for browsing published roadmaps."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from learnmap.database import get_db
from learnmap.schemas.roadmap import PublicRoadmapPage
from learnmap.services.browse import DEFAULT_PAGE_SIZE, list_public_roadmaps

router = APIRouter()


@router.get("/public/roadmaps", response_model=PublicRoadmapPage)
async def browse_roadmaps(
    q: Optional[str] = Query(default=None),
    sort: str = Query(default="newest"),
    page: int = Query(default=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
    topic: Optional[str] = Query(default=None, description="Topic slug"),
    db: Session = Depends(get_db),
):
    """Browse published roadmaps.

    Args:
        q: Title search
        sort: newest, oldest, title_asc, title_desc or verified
        page: 1-based page number
        page_size: Items per page (max 50)
        topic: Topic slug filter
        db: Database session

    Returns:
        Page of roadmaps with topic chips
    """
    return await list_public_roadmaps(
        db, q=q, sort=sort, page=page, page_size=page_size, topic=topic
    )
