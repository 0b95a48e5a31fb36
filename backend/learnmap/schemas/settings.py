"""Settings schemas."""
from pydantic import BaseModel, Field


class ClassifierSettings(BaseModel):
    """Heuristic classifier tunables stored in the database."""

    title_weight: float = Field(default=2.0, gt=0)
    summary_weight: float = Field(default=1.0, gt=0)
    milestone_weight: float = Field(default=1.0, gt=0)
    confidence_smoothing: float = Field(
        default=2.0,
        gt=0,
        description="k in score / (score + k)",
    )
    max_secondary: int = Field(default=4, ge=0, le=10)
    fallback_confidence: float = Field(
        default=0.1,
        gt=0,
        lt=1,
        description="Confidence reported for the default topic when nothing matches",
    )


class FeedSettings(BaseModel):
    """Dashboard feed sizes stored in the database."""

    popular_limit: int = Field(default=12, ge=1, le=100)
    trending_limit: int = Field(default=8, ge=1, le=100)
    in_progress_limit: int = Field(default=8, ge=1, le=100)
    for_you_limit: int = Field(default=12, ge=1, le=100)


class AppSettings(BaseModel):
    """Top-level application settings."""

    classifier: ClassifierSettings = ClassifierSettings()
    feeds: FeedSettings = FeedSettings()
