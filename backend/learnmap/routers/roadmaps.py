"""Roadmap creation, classification and topic label routes."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from learnmap.database import get_db
from learnmap.dependencies import require_user_id
from learnmap.exceptions import NotFoundError, TransientStoreError
from learnmap.models.roadmap import Roadmap, RoadmapProgress
from learnmap.models.user import User
from learnmap.schemas.classification import (
    AuthorLabelsRequest,
    ClassifyRequest,
    ClassifyResponse,
    TopicLabels,
)
from learnmap.schemas.roadmap import RoadmapCreate, RoadmapCreated
from learnmap.services.topics.catalog import normalize_text
from learnmap.services.topics.labeling import classify_roadmap
from learnmap.services.topics.store import TopicAssociationStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _slugify(title: str, roadmap_id: int) -> str:
    base = "-".join(normalize_text(title).split()[:8]) or "roadmap"
    return f"{base}-{roadmap_id}"


def _get_roadmap(db: Session, roadmap_id: int) -> Roadmap:
    roadmap = db.query(Roadmap).filter(Roadmap.id == roadmap_id).first()
    if not roadmap:
        raise NotFoundError(f"Roadmap {roadmap_id} not found")
    return roadmap


@router.post("", response_model=RoadmapCreated, status_code=201)
async def create_roadmap(
    payload: RoadmapCreate,
    user_id: int = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    """Create a roadmap and label it with AI topics right away."""
    if db.query(User).filter(User.id == user_id).first() is None:
        raise NotFoundError(f"User {user_id} not found")

    roadmap = Roadmap(
        user_id=user_id,
        title=payload.title,
        summary=payload.summary,
        content={"milestones": [m.model_dump() for m in payload.milestones]},
        published=payload.published,
        published_at=datetime.utcnow() if payload.published else None,
        progress=RoadmapProgress(percent=0),
    )
    db.add(roadmap)
    db.flush()
    if payload.published:
        roadmap.slug = _slugify(payload.title, roadmap.id)
    db.commit()
    db.refresh(roadmap)

    try:
        await classify_roadmap(db, roadmap.id)
    except TransientStoreError:
        # The roadmap exists; labels can be rebuilt via /classify
        logger.warning("Roadmap %s saved without topic labels", roadmap.id)

    return RoadmapCreated.model_validate(roadmap)


@router.post("/{roadmap_id}/classify", response_model=ClassifyResponse)
async def reclassify_roadmap(
    roadmap_id: int,
    payload: Optional[ClassifyRequest] = Body(default=None),
    db: Session = Depends(get_db),
):
    """Classify a roadmap again and replace its AI labels.

    Args:
        roadmap_id: Roadmap ID
        payload: Optional title, summary and milestones overriding stored text
        db: Database session

    Returns:
        The stored classification
    """
    result = await classify_roadmap(db, roadmap_id, payload)
    return ClassifyResponse(labels=result)


@router.get("/{roadmap_id}/topics", response_model=TopicLabels)
async def get_roadmap_topics(roadmap_id: int, db: Session = Depends(get_db)):
    """Topic labels of the current roadmap, author selection first."""
    _get_roadmap(db, roadmap_id)
    labels = await TopicAssociationStore(db).get_labels(roadmap_id)
    return TopicLabels(topics=labels)


@router.post("/{roadmap_id}/topics")
async def set_roadmap_topics(
    roadmap_id: int,
    payload: AuthorLabelsRequest,
    user_id: int = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    """Replace the author's topic selection. Only the owner may do this."""
    roadmap = _get_roadmap(db, roadmap_id)
    if roadmap.user_id != user_id:
        raise NotFoundError(f"Roadmap {roadmap_id} not found")

    await TopicAssociationStore(db).replace_author_labels(
        roadmap_id, payload.topic_ids, payload.primary_id
    )
    return {"ok": True}
