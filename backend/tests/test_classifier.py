"""Tests for the heuristic topic classifier."""
import pytest

from learnmap.schemas.classification import ClassificationInput
from learnmap.schemas.settings import ClassifierSettings
from learnmap.services.topics.catalog import TopicCatalog, TopicDef
from learnmap.services.topics.classifier import (
    MAX_CONFIDENCE,
    HeuristicClassifier,
    classify,
    confidence_for,
)


def test_frontend_roadmap():
    result = classify(
        title="Belajar React dan Next.js",
        summary="Membangun UI modern",
        milestone_topics=["HTML & CSS", "React Hooks"],
    )
    assert result.primary == "frontend"
    assert result.secondary == []
    assert 0 < result.confidence.primary < 1


@pytest.mark.parametrize("title, summary, milestones", [
    ("", "", []),
    ("   ", "\n\t", ["  "]),
    (None, None, None),
    ("Knitting for beginners", "", []),
])
def test_no_match_falls_back_to_default_topic(title, summary, milestones):
    result = classify(title=title, summary=summary, milestone_topics=milestones)
    assert result.primary == "other"
    assert result.secondary == []
    assert result.confidence.primary == 0.1
    assert result.confidence.secondary == {}


def test_fallback_confidence_is_configurable():
    result = classify(title="", settings=ClassifierSettings(fallback_confidence=0.25))
    assert result.confidence.primary == 0.25


def test_classification_is_deterministic():
    kwargs = dict(
        title="Fullstack web with Docker",
        summary="React frontend, SQL database, CI/CD pipeline",
        milestone_topics=["Kubernetes", "API design"],
    )
    assert classify(**kwargs) == classify(**kwargs)


def test_primary_is_never_repeated_in_secondary():
    result = classify(
        title="Backend API with Node.js",
        summary="SQL database, docker deploys and a bit of react",
        milestone_topics=["Authentication", "Kubernetes", "Figma"],
    )
    assert result.primary == "backend"
    assert result.primary not in result.secondary
    assert len(set(result.secondary)) == len(result.secondary)
    assert set(result.confidence.secondary) == set(result.secondary)


def test_primary_confidence_is_highest():
    result = classify(
        title="Docker and Kubernetes",
        summary="Deploy a react app and its api",
    )
    assert result.primary == "devops"
    for slug in result.secondary:
        assert result.confidence.primary >= result.confidence.secondary[slug]
    secondary = [result.confidence.secondary[s] for s in result.secondary]
    assert secondary == sorted(secondary, reverse=True)


def test_secondary_topics_are_capped():
    text = "react api docker figma startup flutter"
    assert len(classify(summary=text).secondary) == 4

    result = classify(summary=text, settings=ClassifierSettings(max_secondary=1))
    assert result.secondary == ["backend"]

    result = classify(summary=text, settings=ClassifierSettings(max_secondary=0))
    assert result.primary == "frontend"
    assert result.secondary == []


def test_title_outweighs_summary():
    result = classify(title="Docker", summary="react")
    assert result.primary == "devops"
    assert result.secondary == ["frontend"]


def test_ties_keep_catalog_order():
    result = classify(summary="docker react")
    assert result.primary == "frontend"
    assert result.secondary == ["devops"]
    assert result.confidence.primary == result.confidence.secondary["devops"]


def test_overlapping_phrases_both_count():
    result = classify(title="Mobile apps with React Native")
    assert result.primary == "mobile"
    assert result.secondary == ["frontend"]


def test_more_evidence_never_lowers_confidence():
    base = classify(summary="docker")
    more = classify(summary="docker docker kubernetes")
    assert more.primary == base.primary == "devops"
    assert more.confidence.primary > base.confidence.primary


def test_malformed_fields_are_ignored():
    result = classify(title=123, summary={"x": 1}, milestone_topics=["docker", 7, None])
    assert result.primary == "devops"
    assert result.confidence.primary == pytest.approx(0.3333)

    assert classify(milestone_topics="docker").primary == "other"


def test_substrings_do_not_match():
    assert classify(title="Building apiary guides").primary == "other"


def test_uses_given_catalog_and_settings():
    catalog = TopicCatalog(
        [TopicDef("gardening", "Gardening", ("compost",)), TopicDef("other", "Other")]
    )
    settings = ClassifierSettings(confidence_smoothing=1.0)
    classifier = HeuristicClassifier(catalog, settings)

    result = classifier.classify(ClassificationInput(summary="Compost basics"))

    assert result.primary == "gardening"
    assert result.confidence.primary == 0.5


def test_score_ranks_every_topic():
    classifier = HeuristicClassifier()
    scores = classifier.score(ClassificationInput(title="docker", summary="sql"))
    assert [s.slug for s in scores[:2]] == ["devops", "backend"]
    assert scores[0].score == 2.0
    assert scores[1].score == 1.0
    assert len(scores) == len(classifier.catalog)


def test_confidence_for():
    assert confidence_for(0, 2.0) == 0.0
    assert confidence_for(2, 2.0) == 0.5
    assert confidence_for(1, 2.0) == 0.3333
    assert confidence_for(10 ** 9, 2.0) == MAX_CONFIDENCE
    assert confidence_for(3, 2.0) <= confidence_for(4, 2.0)


def test_bare_ai_and_ml_match_ai_ml():
    assert classify(title="Belajar AI").primary == "ai-ml"
    assert classify(summary="ML untuk pemula").primary == "ai-ml"
