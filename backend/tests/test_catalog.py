"""Tests for the topic catalog, its cache and seeding."""
from learnmap.models.topic import Topic
from learnmap.services.topics.catalog import (
    BUILTIN_CATALOG,
    TOPIC_LIST,
    TopicCatalog,
    TopicDef,
    get_catalog_cache,
    normalize_text,
)
from learnmap.services.topics.seed import (
    ensure_topics,
    get_topic_by_slug,
    list_topics,
    seed_topics,
)


def test_normalize_text_strips_punctuation_and_case():
    assert normalize_text("  Belajar React dan Next.js!  ") == "belajar react dan next js"
    assert normalize_text("CI/CD_pipeline") == "ci cd pipeline"
    assert normalize_text(None) == ""


def test_topic_phrases_are_normalized_and_deduplicated():
    ai_ml = BUILTIN_CATALOG.get("ai-ml")
    phrases = ai_ml.phrases()
    assert phrases[0] == "ai ml"
    assert phrases.count("ai ml") == 1
    assert "machine learning" in phrases


def test_lookups_are_case_insensitive():
    assert BUILTIN_CATALOG.get("FRONTEND").slug == "frontend"
    assert BUILTIN_CATALOG.resolve("Next.JS").slug == "frontend"
    assert BUILTIN_CATALOG.resolve("Soft Skills").slug == "soft-skills"
    assert BUILTIN_CATALOG.resolve("nonexistent") is None
    assert "Backend" in BUILTIN_CATALOG


def test_shared_alias_belongs_to_first_topic_only():
    catalog = TopicCatalog([
        TopicDef("alpha", "Alpha", ("shared phrase",)),
        TopicDef("beta", "Beta", ("shared phrase", "gamma")),
    ])
    counts = catalog.count_matches(normalize_text("Shared phrase and gamma"))
    assert counts == {"alpha": 1, "beta": 1}


def test_matches_whole_tokens_only():
    assert BUILTIN_CATALOG.count_matches(normalize_text("building an apiary")) == {}
    counts = BUILTIN_CATALOG.count_matches(normalize_text("api api server"))
    assert counts == {"backend": 3}


def test_default_topic_never_matches():
    assert BUILTIN_CATALOG.count_matches(normalize_text("other stuff")) == {}


def test_cache_falls_back_to_builtin_catalog_for_empty_table(db):
    catalog = get_catalog_cache().get(db)
    assert [t.slug for t in catalog.topics] == [t.slug for t in TOPIC_LIST]


def test_cache_reuses_catalog_until_invalidated(db, topics):
    cache = get_catalog_cache()
    first = cache.get(db)
    assert cache.get(db) is first

    topics["frontend"].aliases = topics["frontend"].aliases + ["svelte"]
    db.commit()
    assert cache.get(db) is first

    cache.invalidate()
    reloaded = cache.get(db)
    assert reloaded is not first
    assert reloaded.version == cache.version
    assert reloaded.resolve("svelte").slug == "frontend"


def test_seed_topics_is_idempotent(db):
    assert seed_topics(db) == len(TOPIC_LIST)
    assert seed_topics(db) == 0
    assert db.query(Topic).count() == len(TOPIC_LIST)


def test_ensure_topics_creates_missing_without_overwriting(db):
    db.add(Topic(slug="frontend", name="Web UI", aliases=[], position=1))
    db.commit()

    created = ensure_topics(db, ["frontend", "other", "Quantum-Computing"])

    assert created == ["other", "quantum-computing"]
    assert get_topic_by_slug(db, "frontend").name == "Web UI"
    assert get_topic_by_slug(db, "other").name == "Other"
    assert get_topic_by_slug(db, "quantum-computing").name == "Quantum Computing"
    assert ensure_topics(db, ["other", "quantum-computing"]) == []


def test_list_topics_seeds_lazily_in_catalog_order(db):
    topics = list_topics(db)
    assert [t.slug for t in topics] == [t.slug for t in TOPIC_LIST]


def test_get_topic_by_slug_ignores_case(db, topics):
    assert get_topic_by_slug(db, "FrontEnd").id == topics["frontend"].id
    assert get_topic_by_slug(db, "missing") is None


def test_ensure_topics_on_empty_table_creates_builtin_catalog(db):
    created = ensure_topics(db, ["frontend", "quantum"])

    builtin = [t.slug for t in TOPIC_LIST]
    assert created == builtin + ["quantum"]
    assert [t.slug for t in list_topics(db)] == builtin + ["quantum"]
    assert get_topic_by_slug(db, "quantum").position == len(TOPIC_LIST)
