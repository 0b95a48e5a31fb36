"""Topic association store: AI and author labels per roadmap scope."""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, exists, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, joinedload

from learnmap.exceptions import (
    EmptySelection,
    InvalidTopics,
    LearnmapError,
    NotFoundError,
    TransientStoreError,
)
from learnmap.models.roadmap import Roadmap
from learnmap.models.roadmap_topic import LabelSource, RoadmapTopic
from learnmap.models.topic import Topic
from learnmap.schemas.classification import ClassificationResult, TopicLabel
from learnmap.services.topics.catalog import get_catalog_cache
from learnmap.services.topics.seed import ensure_topics

logger = logging.getLogger(__name__)

AUTHOR_CONFIDENCE = 0.9
DEFAULT_SECONDARY_CONFIDENCE = 0.5


def _label_sort_key(row: RoadmapTopic):
    topic = row.topic
    return (
        not row.is_primary,
        -(row.confidence or 0.0),
        topic.position if topic is not None else 0,
        row.topic_id,
    )


def authoritative_labels(rows: Iterable[RoadmapTopic]) -> List[RoadmapTopic]:
    """Pick the label set shown for one scope.

    Author rows, when present, replace the AI rows entirely; the two sets are
    never merged, so a scope never shows two primaries. The result is
    ordered primary first, then by confidence descending.
    """
    rows = list(rows)
    author = [r for r in rows if r.source == LabelSource.AUTHOR]
    chosen = author or [r for r in rows if r.source == LabelSource.AI]
    return sorted(chosen, key=_label_sort_key)


def authoritative_filter():
    """SQL condition selecting the label rows shown for current roadmaps.

    Same rule as ``authoritative_labels``: unversioned rows only, and AI
    rows drop out for any roadmap that has author rows.
    """
    author = aliased(RoadmapTopic)
    has_author = exists().where(
        author.roadmap_id == RoadmapTopic.roadmap_id,
        author.version_id.is_(None),
        author.source == LabelSource.AUTHOR,
    )
    return and_(
        RoadmapTopic.version_id.is_(None),
        or_(RoadmapTopic.source == LabelSource.AUTHOR, ~has_author),
    )


def to_topic_label(row: RoadmapTopic) -> TopicLabel:
    """Convert an association row (with its topic loaded) to a label."""
    return TopicLabel(
        id=row.topic.id,
        slug=row.topic.slug,
        name=row.topic.name,
        is_primary=bool(row.is_primary),
        confidence=row.confidence or 0.0,
        source=row.source or LabelSource.AI,
    )


class TopicAssociationStore:
    """Atomic replacement and retrieval of roadmap topic labels.

    Every mutation runs in one transaction that first locks the roadmap row,
    so replacements for the same roadmap are serialized while different
    roadmaps proceed independently. Readers see the old label set until the
    commit and the new one afterwards.
    """

    def __init__(self, db: Session):
        """Initialize the store.

        Args:
            db: Database session
        """
        self.db = db

    def _scope(self, query, roadmap_id: int, version_id: Optional[int]):
        query = query.filter(RoadmapTopic.roadmap_id == roadmap_id)
        if version_id is None:
            return query.filter(RoadmapTopic.version_id.is_(None))
        return query.filter(RoadmapTopic.version_id == version_id)

    def _lock_roadmap(self, roadmap_id: int) -> Roadmap:
        roadmap = (
            self.db.query(Roadmap)
            .filter(Roadmap.id == roadmap_id)
            .with_for_update()
            .first()
        )
        if roadmap is None:
            raise NotFoundError(f"Roadmap {roadmap_id} not found")
        return roadmap

    async def replace_ai_labels(
        self,
        roadmap_id: int,
        version_id: Optional[int],
        result: ClassificationResult,
    ) -> None:
        """Replace the AI labels of a scope with a classification result.

        Topics the author already selected in this scope keep their author
        row; the AI row for them is not written.

        Args:
            roadmap_id: Roadmap ID
            version_id: Version ID, or None for the current roadmap
            result: Classifier output

        Raises:
            NotFoundError: If the roadmap does not exist
            TransientStoreError: If the database fails; nothing is changed
        """
        slugs = [s.lower() for s in result.slugs()]
        try:
            self._lock_roadmap(roadmap_id)
            created = ensure_topics(self.db, slugs, commit=False)
            topics = {
                t.slug.lower(): t
                for t in self.db.query(Topic).filter(func.lower(Topic.slug).in_(slugs))
            }

            self._scope(self.db.query(RoadmapTopic), roadmap_id, version_id).filter(
                RoadmapTopic.source == LabelSource.AI
            ).delete()

            authored = {
                topic_id
                for (topic_id,) in self._scope(
                    self.db.query(RoadmapTopic.topic_id), roadmap_id, version_id
                ).filter(RoadmapTopic.source == LabelSource.AUTHOR)
            }

            rows = [(result.primary, result.confidence.primary, True)]
            rows.extend(
                (
                    slug,
                    result.confidence.secondary.get(slug, DEFAULT_SECONDARY_CONFIDENCE),
                    False,
                )
                for slug in result.secondary
            )
            written = 0
            for slug, confidence, is_primary in rows:
                topic = topics.get(slug.lower())
                if topic is None or topic.id in authored:
                    continue
                self.db.add(RoadmapTopic(
                    roadmap_id=roadmap_id,
                    version_id=version_id,
                    topic_id=topic.id,
                    confidence=confidence,
                    is_primary=is_primary,
                    source=LabelSource.AI,
                ))
                written += 1

            self.db.commit()
        except LearnmapError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to store AI labels for roadmap %s", roadmap_id)
            raise TransientStoreError(
                f"Could not store AI labels for roadmap {roadmap_id}"
            ) from exc

        if created:
            get_catalog_cache().invalidate()
        logger.info(
            "Stored %s AI labels for roadmap %s (primary=%s, skipped=%s)",
            written,
            roadmap_id,
            result.primary,
            len(rows) - written,
        )

    async def replace_author_labels(
        self,
        roadmap_id: int,
        topic_ids: Iterable[int],
        primary_id: Optional[int] = None,
    ) -> None:
        """Replace the author's topic selection for the current roadmap.

        Args:
            roadmap_id: Roadmap ID
            topic_ids: Selected topic IDs
            primary_id: Topic to mark primary; ignored unless selected

        Raises:
            EmptySelection: If no topics are selected
            InvalidTopics: If any topic ID is unknown
            NotFoundError: If the roadmap does not exist
            TransientStoreError: If the database fails; nothing is changed
        """
        selected = list(dict.fromkeys(topic_ids))
        if not selected:
            logger.warning("Rejected empty topic selection for roadmap %s", roadmap_id)
            raise EmptySelection()

        try:
            self._lock_roadmap(roadmap_id)
            known = {
                topic_id
                for (topic_id,) in self.db.query(Topic.id).filter(Topic.id.in_(selected))
            }
            unknown = set(selected) - known
            if unknown:
                logger.warning(
                    "Rejected unknown topics %s for roadmap %s", sorted(unknown), roadmap_id
                )
                raise InvalidTopics(unknown)

            self.db.query(RoadmapTopic).filter(
                RoadmapTopic.roadmap_id == roadmap_id,
                RoadmapTopic.source == LabelSource.AUTHOR,
            ).delete()
            # Author rows take over the scope/topic key from any AI row
            self._scope(self.db.query(RoadmapTopic), roadmap_id, None).filter(
                RoadmapTopic.source == LabelSource.AI,
                RoadmapTopic.topic_id.in_(selected),
            ).delete()

            for topic_id in selected:
                self.db.add(RoadmapTopic(
                    roadmap_id=roadmap_id,
                    version_id=None,
                    topic_id=topic_id,
                    confidence=AUTHOR_CONFIDENCE,
                    is_primary=primary_id is not None and topic_id == primary_id,
                    source=LabelSource.AUTHOR,
                ))

            self.db.commit()
        except LearnmapError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to store author labels for roadmap %s", roadmap_id)
            raise TransientStoreError(
                f"Could not store author labels for roadmap {roadmap_id}"
            ) from exc

        logger.info("Stored %s author labels for roadmap %s", len(selected), roadmap_id)

    async def get_labels(
        self,
        roadmap_id: int,
        version_id: Optional[int] = None,
    ) -> List[TopicLabel]:
        """Return the authoritative labels of a scope.

        Args:
            roadmap_id: Roadmap ID
            version_id: Version ID, or None for the current roadmap

        Returns:
            Labels ordered primary first, then by confidence descending
        """
        try:
            rows = self._scope(
                self.db.query(RoadmapTopic).options(joinedload(RoadmapTopic.topic)),
                roadmap_id,
                version_id,
            ).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientStoreError(
                f"Could not load labels for roadmap {roadmap_id}"
            ) from exc
        return [to_topic_label(row) for row in authoritative_labels(rows)]

    async def labels_for_roadmaps(
        self,
        roadmap_ids: Iterable[int],
        limit_per_roadmap: Optional[int] = None,
    ) -> Dict[int, List[TopicLabel]]:
        """Authoritative labels of the current scope of several roadmaps.

        Args:
            roadmap_ids: Roadmap IDs
            limit_per_roadmap: Keep at most this many labels per roadmap

        Returns:
            Mapping of roadmap ID to its labels; unlabeled roadmaps are absent
        """
        roadmap_ids = list(roadmap_ids)
        if not roadmap_ids:
            return {}
        try:
            rows = (
                self.db.query(RoadmapTopic)
                .options(joinedload(RoadmapTopic.topic))
                .filter(
                    RoadmapTopic.roadmap_id.in_(roadmap_ids),
                    RoadmapTopic.version_id.is_(None),
                )
                .all()
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientStoreError("Could not load roadmap labels") from exc

        by_roadmap: Dict[int, List[RoadmapTopic]] = defaultdict(list)
        for row in rows:
            by_roadmap[row.roadmap_id].append(row)
        return {
            roadmap_id: [
                to_topic_label(row)
                for row in authoritative_labels(group)[:limit_per_roadmap]
            ]
            for roadmap_id, group in by_roadmap.items()
        }
