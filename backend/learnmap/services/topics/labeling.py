"""Classifying roadmaps and storing the resulting AI labels."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from learnmap.exceptions import NotFoundError
from learnmap.models.roadmap import Roadmap
from learnmap.schemas.classification import (
    ClassificationInput,
    ClassificationResult,
    ClassifyRequest,
)
from learnmap.services.app_settings import load_app_settings
from learnmap.services.topics.catalog import get_catalog_cache
from learnmap.services.topics.classifier import HeuristicClassifier
from learnmap.services.topics.store import TopicAssociationStore

logger = logging.getLogger(__name__)


def build_input(roadmap: Roadmap, override: Optional[ClassifyRequest] = None) -> ClassificationInput:
    """Combine request-supplied text with what is stored on the roadmap.

    A request title replaces the stored text entirely. Without one, the
    stored title is used and the stored summary and milestone topics fill in
    whatever the request leaves out.
    """
    if override is not None and override.title:
        return ClassificationInput(
            title=override.title,
            summary=override.summary or "",
            milestone_topics=override.milestones or [],
        )
    override = override or ClassifyRequest()
    return ClassificationInput(
        title=roadmap.title or "",
        summary=override.summary or roadmap.summary or "",
        milestone_topics=(
            override.milestones
            if override.milestones is not None
            else roadmap.milestone_topics()
        ),
    )


async def classify_roadmap(
    db: Session,
    roadmap_id: int,
    override: Optional[ClassifyRequest] = None,
    version_id: Optional[int] = None,
) -> ClassificationResult:
    """Classify a roadmap and replace its AI labels.

    Args:
        db: Database session
        roadmap_id: Roadmap ID
        override: Text supplied by the caller instead of the stored text
        version_id: Version scope, or None for the current roadmap

    Returns:
        The stored ClassificationResult

    Raises:
        NotFoundError: If the roadmap does not exist
    """
    roadmap = db.query(Roadmap).filter(Roadmap.id == roadmap_id).first()
    if roadmap is None:
        raise NotFoundError(f"Roadmap {roadmap_id} not found")

    app_settings = load_app_settings(db)
    classifier = HeuristicClassifier(
        get_catalog_cache().get(db),
        app_settings.classifier,
    )
    result = classifier.classify(build_input(roadmap, override))

    store = TopicAssociationStore(db)
    await store.replace_ai_labels(roadmap_id, version_id, result)
    logger.info(
        "Classified roadmap %s: primary=%s secondary=%s",
        roadmap_id,
        result.primary,
        result.secondary,
    )
    return result
