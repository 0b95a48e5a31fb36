"""Deterministic keyword classifier for roadmaps."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from learnmap.schemas.classification import (
    ClassificationConfidence,
    ClassificationInput,
    ClassificationResult,
)
from learnmap.schemas.settings import ClassifierSettings
from learnmap.services.topics.catalog import BUILTIN_CATALOG, TopicCatalog, normalize_text

# Confidence never reaches 1.0 for a finite score
MAX_CONFIDENCE = 0.9999
CONFIDENCE_DECIMALS = 4


@dataclass(frozen=True)
class TopicScore:
    """Weighted hit count of one topic."""

    slug: str
    score: float
    order: int


def confidence_for(score: float, smoothing: float) -> float:
    """Map a positive score to (0, 1) as ``score / (score + k)``.

    The value is rounded to four decimals and capped at ``MAX_CONFIDENCE``.
    Both steps are non-decreasing, so a higher score never yields a lower
    confidence; two topics with equal score get equal confidence.
    """
    if score <= 0:
        return 0.0
    value = round(score / (score + smoothing), CONFIDENCE_DECIMALS)
    return min(value, MAX_CONFIDENCE)


class HeuristicClassifier:
    """Assign a primary topic and ranked secondary topics to roadmap text."""

    def __init__(
        self,
        catalog: TopicCatalog = BUILTIN_CATALOG,
        settings: Optional[ClassifierSettings] = None,
    ):
        """Initialize the classifier.

        Args:
            catalog: Topic catalog to score against
            settings: Weights and limits (defaults when omitted)
        """
        self.catalog = catalog
        self.settings = settings or ClassifierSettings()

    def score(self, data: ClassificationInput) -> List[TopicScore]:
        """Score every catalog topic and rank them.

        Each field is normalized on its own and weighted; a title hit counts
        ``title_weight`` times. Ties keep catalog order.
        """
        fields = (
            (data.title, self.settings.title_weight),
            (data.summary, self.settings.summary_weight),
            (" \n ".join(data.milestone_topics), self.settings.milestone_weight),
        )
        totals: Dict[str, float] = {}
        for text, weight in fields:
            for slug, hits in self.catalog.count_matches(normalize_text(text)).items():
                totals[slug] = totals.get(slug, 0.0) + hits * weight

        scores = [
            TopicScore(slug=topic.slug, score=totals.get(topic.slug, 0.0), order=index)
            for index, topic in enumerate(self.catalog.topics)
        ]
        scores.sort(key=lambda s: (-s.score, s.order))
        return scores

    def classify(self, data: ClassificationInput) -> ClassificationResult:
        """Classify roadmap text.

        Args:
            data: Title, summary and milestone topics

        Returns:
            ClassificationResult; the default topic with the fallback
            confidence when nothing in the text matches
        """
        ranked = [s for s in self.score(data) if s.score > 0]
        if not ranked:
            return ClassificationResult(
                primary=self.catalog.default_slug,
                secondary=[],
                confidence=ClassificationConfidence(
                    primary=self.settings.fallback_confidence,
                    secondary={},
                ),
            )

        top, rest = ranked[0], ranked[1:self.settings.max_secondary + 1]
        smoothing = self.settings.confidence_smoothing
        return ClassificationResult(
            primary=top.slug,
            secondary=[s.slug for s in rest],
            confidence=ClassificationConfidence(
                primary=confidence_for(top.score, smoothing),
                secondary={s.slug: confidence_for(s.score, smoothing) for s in rest},
            ),
        )


def classify(
    title: Any = "",
    summary: Any = "",
    milestone_topics: Optional[Sequence[Any]] = None,
    *,
    catalog: TopicCatalog = BUILTIN_CATALOG,
    settings: Optional[ClassifierSettings] = None,
) -> ClassificationResult:
    """Classify roadmap text against a catalog.

    Missing or non-string fields are treated as empty.
    """
    data = ClassificationInput.model_validate({
        "title": title,
        "summary": summary,
        "milestone_topics": milestone_topics,
    })
    return HeuristicClassifier(catalog, settings).classify(data)
