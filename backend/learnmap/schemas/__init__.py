"""Pydantic schemas for API request/response."""
from learnmap.schemas.topic import Topic
from learnmap.schemas.classification import (
    AuthorLabelsRequest,
    ClassificationConfidence,
    ClassificationInput,
    ClassificationResult,
    ClassifyRequest,
    ClassifyResponse,
    TopicLabel,
    TopicLabels,
)
from learnmap.schemas.roadmap import (
    DashboardSummary,
    PublicRoadmap,
    PublicRoadmapPage,
    RoadmapCreate,
    RoadmapCreated,
    RoadmapSummary,
    TopicChip,
)
from learnmap.schemas.settings import AppSettings, ClassifierSettings, FeedSettings

__all__ = [
    "Topic",
    "AuthorLabelsRequest",
    "ClassificationConfidence",
    "ClassificationInput",
    "ClassificationResult",
    "ClassifyRequest",
    "ClassifyResponse",
    "TopicLabel",
    "TopicLabels",
    "DashboardSummary",
    "PublicRoadmap",
    "PublicRoadmapPage",
    "RoadmapCreate",
    "RoadmapCreated",
    "RoadmapSummary",
    "TopicChip",
    "AppSettings",
    "ClassifierSettings",
    "FeedSettings",
]
