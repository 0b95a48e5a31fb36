"""Dashboard feeds built from roadmaps, progress and topic associations."""

import asyncio
import logging
from typing import Callable, List, Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session, contains_eager, joinedload

from learnmap.models.roadmap import Roadmap, RoadmapProgress
from learnmap.models.roadmap_topic import RoadmapTopic
from learnmap.models.topic import Topic
from learnmap.schemas.roadmap import RoadmapSummary
from learnmap.schemas.settings import FeedSettings
from learnmap.schemas.topic import Topic as TopicSchema
from learnmap.services.topics.store import authoritative_filter

logger = logging.getLogger(__name__)


def to_summary(roadmap: Roadmap) -> RoadmapSummary:
    """Convert a roadmap (user and progress loaded) to a feed card."""
    user = roadmap.user
    progress = roadmap.progress
    return RoadmapSummary(
        id=roadmap.id,
        title=roadmap.title,
        slug=roadmap.slug,
        verified=bool(roadmap.verified),
        published=bool(roadmap.published),
        author_name=user.name if user else None,
        author_image=user.image if user else None,
        progress_percent=progress.percent if progress else None,
        progress_updated_at=progress.updated_at if progress else None,
        created_at=roadmap.created_at,
    )


class RecommendationAggregator:
    """Read-only dashboard feeds.

    Each feed opens its own session and runs in a worker thread, so the
    feeds can be awaited concurrently. A failing feed is logged and yields
    an empty list instead of failing the whole dashboard.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        feeds: Optional[FeedSettings] = None,
    ):
        """Initialize the aggregator.

        Args:
            session_factory: Callable returning a new database session
            feeds: Feed size limits (defaults when omitted)
        """
        self.session_factory = session_factory
        self.feeds = feeds or FeedSettings()

    async def popular(self) -> List[RoadmapSummary]:
        """Newest published roadmaps."""
        return await self._run("popular", self._popular)

    async def trending_topics(self) -> List[TopicSchema]:
        """Topics attached to the most distinct roadmaps."""
        return await self._run("trending_topics", self._trending_topics)

    async def in_progress(self, user_id: Optional[int]) -> List[RoadmapSummary]:
        """The user's started but unfinished roadmaps, latest progress first."""
        if user_id is None:
            return []
        return await self._run("in_progress", self._in_progress, user_id)

    async def for_you(self, user_id: Optional[int]) -> List[RoadmapSummary]:
        """Other users' published roadmaps sharing a topic with the user's own."""
        if user_id is None:
            return []
        return await self._run("for_you", self._for_you, user_id)

    async def _run(self, feed: str, query, *args) -> list:
        try:
            return await asyncio.to_thread(self._with_session, query, *args)
        except Exception:
            logger.exception("Feed %s failed; returning an empty list", feed)
            return []

    def _with_session(self, query, *args) -> list:
        db = self.session_factory()
        try:
            return query(db, *args)
        finally:
            db.close()

    def _popular(self, db: Session) -> List[RoadmapSummary]:
        roadmaps = (
            db.query(Roadmap)
            .options(joinedload(Roadmap.user), joinedload(Roadmap.progress))
            .filter(Roadmap.published == True)
            .order_by(Roadmap.created_at.desc(), Roadmap.id.desc())
            .limit(self.feeds.popular_limit)
            .all()
        )
        return [to_summary(r) for r in roadmaps]

    def _trending_topics(self, db: Session) -> List[TopicSchema]:
        roadmap_count = func.count(distinct(RoadmapTopic.roadmap_id)).label("roadmap_count")
        rows = (
            db.query(Topic, roadmap_count)
            .join(RoadmapTopic, RoadmapTopic.topic_id == Topic.id)
            .filter(authoritative_filter())
            .group_by(Topic.id)
            .order_by(roadmap_count.desc(), Topic.position, Topic.id)
            .limit(self.feeds.trending_limit)
            .all()
        )
        return [TopicSchema.model_validate(topic) for topic, _count in rows]

    def _in_progress(self, db: Session, user_id: int) -> List[RoadmapSummary]:
        roadmaps = (
            db.query(Roadmap)
            .join(RoadmapProgress, RoadmapProgress.roadmap_id == Roadmap.id)
            .options(contains_eager(Roadmap.progress), joinedload(Roadmap.user))
            .filter(
                Roadmap.user_id == user_id,
                RoadmapProgress.percent > 0,
                RoadmapProgress.percent < 100,
            )
            .order_by(RoadmapProgress.updated_at.desc(), Roadmap.id.desc())
            .limit(self.feeds.in_progress_limit)
            .all()
        )
        return [to_summary(r) for r in roadmaps]

    def _for_you(self, db: Session, user_id: int) -> List[RoadmapSummary]:
        # Hop 1: topics of the user's own roadmaps
        own_ids = [rid for (rid,) in db.query(Roadmap.id).filter(Roadmap.user_id == user_id)]
        if not own_ids:
            return []
        topic_ids = [
            tid
            for (tid,) in db.query(RoadmapTopic.topic_id)
            .filter(RoadmapTopic.roadmap_id.in_(own_ids), authoritative_filter())
            .distinct()
        ]
        if not topic_ids:
            return []

        # Hop 2: other published roadmaps carrying any of those topics
        sharing = select(RoadmapTopic.roadmap_id).where(
            RoadmapTopic.topic_id.in_(topic_ids), authoritative_filter()
        )
        roadmaps = (
            db.query(Roadmap)
            .options(joinedload(Roadmap.user), joinedload(Roadmap.progress))
            .filter(
                Roadmap.id.in_(sharing),
                Roadmap.published == True,
                Roadmap.user_id != user_id,
            )
            .order_by(Roadmap.created_at.desc(), Roadmap.id.desc())
            .limit(self.feeds.for_you_limit)
            .all()
        )
        return [to_summary(r) for r in roadmaps]
