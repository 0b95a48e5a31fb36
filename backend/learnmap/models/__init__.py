"""SQLAlchemy models."""
from learnmap.models.user import User
from learnmap.models.topic import Topic
from learnmap.models.roadmap import Roadmap, RoadmapProgress
from learnmap.models.roadmap_topic import LabelSource, RoadmapTopic
from learnmap.models.app_settings import AppSettings

__all__ = [
    "User",
    "Topic",
    "Roadmap",
    "RoadmapProgress",
    "LabelSource",
    "RoadmapTopic",
    "AppSettings",
]
