"""Roadmap and progress models."""
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from learnmap.database import Base


class Roadmap(Base):
    """Study roadmap owned by a user."""

    __tablename__ = "roadmaps"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    slug = Column(String(255), nullable=True, unique=True)
    summary = Column(Text, nullable=True)
    content = Column(JSON, nullable=True)
    published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime, nullable=True)
    verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="roadmaps")
    progress = relationship(
        "RoadmapProgress",
        back_populates="roadmap",
        uselist=False,
        cascade="all, delete-orphan",
    )
    topics = relationship(
        "RoadmapTopic",
        back_populates="roadmap",
        cascade="all, delete-orphan",
    )

    def milestone_topics(self) -> list[str]:
        """Return the milestone topic strings stored in the roadmap content."""
        content = self.content if isinstance(self.content, dict) else {}
        milestones = content.get("milestones")
        if not isinstance(milestones, list):
            return []
        return [
            m["topic"]
            for m in milestones
            if isinstance(m, dict) and isinstance(m.get("topic"), str) and m["topic"]
        ]


class RoadmapProgress(Base):
    """Completion state of a roadmap."""

    __tablename__ = "roadmap_progress"

    id = Column(Integer, primary_key=True, index=True)
    roadmap_id = Column(
        Integer,
        ForeignKey("roadmaps.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    percent = Column(Float, default=0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    roadmap = relationship("Roadmap", back_populates="progress")
