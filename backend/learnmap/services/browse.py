"""Public roadmap listing with topic chips."""

import math
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from learnmap.models.roadmap import Roadmap
from learnmap.models.roadmap_topic import RoadmapTopic
from learnmap.models.topic import Topic
from learnmap.schemas.roadmap import PublicRoadmap, PublicRoadmapPage, TopicChip
from learnmap.services.topics.store import TopicAssociationStore, authoritative_filter

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50
CHIPS_PER_ROADMAP = 5

SORT_ORDERS = {
    "newest": (Roadmap.published_at.desc(), Roadmap.id.desc()),
    "oldest": (Roadmap.published_at.asc(), Roadmap.id.asc()),
    "title_asc": (Roadmap.title.asc(), Roadmap.id.asc()),
    "title_desc": (Roadmap.title.desc(), Roadmap.id.desc()),
    "verified": (Roadmap.verified.desc(), Roadmap.published_at.desc(), Roadmap.id.desc()),
}


async def list_public_roadmaps(
    db: Session,
    q: Optional[str] = None,
    sort: str = "newest",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    topic: Optional[str] = None,
) -> PublicRoadmapPage:
    """List published roadmaps.

    Args:
        db: Database session
        q: Case-insensitive title search
        sort: One of ``SORT_ORDERS``; unknown values sort newest first
        page: 1-based page number
        page_size: Items per page, clamped to 1..50
        topic: Only roadmaps labeled with this topic slug

    Returns:
        One page of roadmaps with up to five topic chips each
    """
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)

    query = db.query(Roadmap).filter(Roadmap.published == True)
    if q:
        query = query.filter(Roadmap.title.ilike(f"%{q.strip()}%"))
    if topic:
        labeled = (
            select(RoadmapTopic.roadmap_id)
            .join(Topic, Topic.id == RoadmapTopic.topic_id)
            .where(
                func.lower(Topic.slug) == topic.strip().lower(),
                authoritative_filter(),
            )
        )
        query = query.filter(Roadmap.id.in_(labeled))

    total = query.count()
    order = SORT_ORDERS.get((sort or "newest").lower(), SORT_ORDERS["newest"])
    roadmaps = (
        query.options(joinedload(Roadmap.user))
        .order_by(*order)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    labels = await TopicAssociationStore(db).labels_for_roadmaps(
        [r.id for r in roadmaps], CHIPS_PER_ROADMAP
    )
    items = [
        PublicRoadmap(
            id=r.id,
            user_id=r.user_id,
            title=r.title,
            slug=r.slug,
            published_at=r.published_at,
            verified=bool(r.verified),
            author_name=r.user.name if r.user else None,
            topics=[
                TopicChip(slug=l.slug, name=l.name, is_primary=l.is_primary)
                for l in labels.get(r.id, [])
            ],
        )
        for r in roadmaps
    ]
    return PublicRoadmapPage(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=max(math.ceil(total / page_size), 1),
    )
