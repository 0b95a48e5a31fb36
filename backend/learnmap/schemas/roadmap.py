"""Roadmap, feed and browse schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from learnmap.schemas.topic import Topic


class Milestone(BaseModel):
    """Milestone of a roadmap; only the topic matters for classification."""

    model_config = ConfigDict(extra="allow")

    topic: str | None = None


class RoadmapCreate(BaseModel):
    """Schema for creating a roadmap."""

    title: str = Field(min_length=1)
    summary: str | None = None
    milestones: list[Milestone] = []
    published: bool = False


class RoadmapCreated(BaseModel):
    """Schema returned after a roadmap is created and classified."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str | None = None
    published: bool
    created_at: datetime


class RoadmapSummary(BaseModel):
    """Roadmap card shown in dashboard feeds."""

    id: int
    title: str
    slug: str | None = None
    verified: bool = False
    published: bool = False
    author_name: str | None = None
    author_image: str | None = None
    progress_percent: float | None = None
    progress_updated_at: datetime | None = None
    created_at: datetime | None = None


class DashboardSummary(BaseModel):
    """All dashboard feeds."""

    popular: list[RoadmapSummary] = []
    topics: list[Topic] = []
    in_progress: list[RoadmapSummary] = []
    for_you: list[RoadmapSummary] = []


class TopicChip(BaseModel):
    """Compact topic label used in listings."""

    slug: str
    name: str
    is_primary: bool


class PublicRoadmap(BaseModel):
    """Published roadmap in the browse listing."""

    id: int
    user_id: int
    title: str
    slug: str | None = None
    published_at: datetime | None = None
    verified: bool = False
    author_name: str | None = None
    topics: list[TopicChip] = []


class PublicRoadmapPage(BaseModel):
    """One page of the browse listing."""

    items: list[PublicRoadmap]
    total: int
    page: int
    page_size: int
    total_pages: int
