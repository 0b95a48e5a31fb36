"""Roadmap topic association model."""
import enum

from sqlalchemy import (
    Boolean,
    Column,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from learnmap.database import Base


class LabelSource(str, enum.Enum):
    """Provenance of a topic label."""

    AI = "ai"
    AUTHOR = "author"


class RoadmapTopic(Base):
    """Topic label attached to a roadmap scope."""

    __tablename__ = "roadmap_topics"
    __table_args__ = (
        UniqueConstraint(
            "roadmap_id", "version_id", "topic_id", name="uq_roadmap_topics_scope_topic"
        ),
        # NULL versions never collide in the constraint above
        Index(
            "uq_roadmap_topics_current_topic",
            "roadmap_id",
            "topic_id",
            unique=True,
            postgresql_where=text("version_id IS NULL"),
            sqlite_where=text("version_id IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    roadmap_id = Column(
        Integer,
        ForeignKey("roadmaps.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # NULL is the current, unversioned roadmap
    version_id = Column(Integer, nullable=True)
    topic_id = Column(Integer, ForeignKey("topics.id"), nullable=False, index=True)
    confidence = Column(Float, nullable=False, default=0.0)
    is_primary = Column(Boolean, default=False, nullable=False)
    source = Column(
        Enum(
            LabelSource,
            name="label_source",
            values_callable=lambda members: [m.value for m in members],
        ),
        default=LabelSource.AI,
        nullable=False,
    )

    # Relationships
    roadmap = relationship("Roadmap", back_populates="topics")
    topic = relationship("Topic")
