"""Classification and topic label schemas."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnmap.models.roadmap_topic import LabelSource


def _text_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


class ClassificationInput(BaseModel):
    """Descriptive text of a roadmap. Missing or malformed fields read as empty."""

    title: str = ""
    summary: str = ""
    milestone_topics: list[str] = []

    @field_validator("title", "summary", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text_or_empty(value)

    @field_validator("milestone_topics", mode="before")
    @classmethod
    def _coerce_milestones(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str)]


class ClassificationConfidence(BaseModel):
    """Confidence for the primary topic and each secondary topic."""

    primary: float
    secondary: dict[str, float] = {}


class ClassificationResult(BaseModel):
    """Primary and secondary topic slugs for one roadmap."""

    primary: str
    secondary: list[str] = []
    confidence: ClassificationConfidence

    def slugs(self) -> list[str]:
        """Primary slug followed by secondary slugs."""
        return [self.primary, *self.secondary]


class ClassifyRequest(BaseModel):
    """Optional text overriding what is stored on the roadmap."""

    title: str | None = None
    summary: str | None = None
    milestones: list[str] | None = None


class ClassifyResponse(BaseModel):
    """Response of a (re)classification."""

    ok: bool = True
    labels: ClassificationResult


class TopicLabel(BaseModel):
    """Topic chip attached to a roadmap."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    name: str
    is_primary: bool
    confidence: float
    source: LabelSource


class TopicLabels(BaseModel):
    """Labels of one roadmap scope."""

    topics: list[TopicLabel]


class AuthorLabelsRequest(BaseModel):
    """Author-curated topic selection."""

    topic_ids: list[int] = Field(default_factory=list)
    primary_id: int | None = None
