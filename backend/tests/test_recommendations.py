"""Tests for the dashboard feeds."""
import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from learnmap.models.roadmap_topic import LabelSource
from learnmap.schemas.settings import FeedSettings
from learnmap.services.recommendations import RecommendationAggregator

from conftest import make_roadmap, make_user, tag


def titles(items):
    return [item.title for item in items]


def test_for_you_follows_shared_topics(db, topics, session_factory):
    ayu = make_user(db, "Ayu")
    budi = make_user(db, "Budi")
    citra = make_user(db, "Citra")

    mine = make_roadmap(db, ayu, "My API", published=True)
    tag(db, mine, topics["backend"])
    tag(db, mine, topics["devops"], primary=False)

    shared = make_roadmap(db, budi, "Budi Backend", published=True, minutes=1)
    tag(db, shared, topics["backend"])
    newer = make_roadmap(db, citra, "Citra Infra", published=True, minutes=2)
    tag(db, newer, topics["devops"])
    draft = make_roadmap(db, budi, "Budi Draft", minutes=3)
    tag(db, draft, topics["backend"])
    unrelated = make_roadmap(db, citra, "Citra Design", published=True, minutes=4)
    tag(db, unrelated, topics["design"])

    aggregator = RecommendationAggregator(session_factory)
    feed = asyncio.run(aggregator.for_you(ayu.id))

    assert titles(feed) == ["Citra Infra", "Budi Backend"]
    assert feed[1].author_name == "Budi"


def test_for_you_without_topics_is_empty(db, topics, session_factory):
    ayu = make_user(db)
    make_roadmap(db, ayu, "Untagged")
    other = make_roadmap(db, make_user(db, "Budi"), "Other", published=True)
    tag(db, other, topics["frontend"])

    aggregator = RecommendationAggregator(session_factory)
    assert asyncio.run(aggregator.for_you(ayu.id)) == []
    assert asyncio.run(aggregator.for_you(make_user(db, "New").id)) == []


def test_in_progress_excludes_unstarted_and_finished(db, session_factory):
    ayu = make_user(db)
    make_roadmap(db, ayu, "Not started", percent=0)
    make_roadmap(db, ayu, "Halfway", percent=45, progress_minutes=5)
    make_roadmap(db, ayu, "Almost", percent=90, progress_minutes=10)
    make_roadmap(db, ayu, "Done", percent=100, progress_minutes=20)
    make_roadmap(db, ayu, "No progress row")
    make_roadmap(db, make_user(db, "Budi"), "Someone else's", percent=50)

    feed = asyncio.run(RecommendationAggregator(session_factory).in_progress(ayu.id))

    assert titles(feed) == ["Almost", "Halfway"]
    assert feed[1].progress_percent == 45


def test_anonymous_user_gets_empty_personal_feeds(db, topics, session_factory):
    roadmap = make_roadmap(db, make_user(db), "Public", published=True, percent=30)
    tag(db, roadmap, topics["frontend"])

    aggregator = RecommendationAggregator(session_factory)
    assert asyncio.run(aggregator.in_progress(None)) == []
    assert asyncio.run(aggregator.for_you(None)) == []


def test_popular_lists_newest_published_first(db, session_factory):
    ayu = make_user(db)
    make_roadmap(db, ayu, "Old", published=True, minutes=0)
    make_roadmap(db, ayu, "Private", minutes=5)
    make_roadmap(db, ayu, "Middle", published=True, minutes=10)
    make_roadmap(db, ayu, "New", published=True, minutes=20)

    assert titles(asyncio.run(RecommendationAggregator(session_factory).popular())) == [
        "New", "Middle", "Old"
    ]

    limited = RecommendationAggregator(session_factory, FeedSettings(popular_limit=2))
    assert titles(asyncio.run(limited.popular())) == ["New", "Middle"]


def test_trending_topics_count_distinct_roadmaps(db, topics, session_factory):
    ayu = make_user(db)
    first = make_roadmap(db, ayu, "One")
    second = make_roadmap(db, ayu, "Two")
    third = make_roadmap(db, ayu, "Three")

    for roadmap in (first, second, third):
        tag(db, roadmap, topics["data"])
    for roadmap in (first, second):
        tag(db, roadmap, topics["design"], primary=False)
    tag(db, third, topics["frontend"], primary=False)
    tag(db, first, topics["business"], primary=False)

    feed = asyncio.run(RecommendationAggregator(session_factory).trending_topics())

    # frontend and business tie on one roadmap; catalog order decides
    assert [t.slug for t in feed] == ["data", "design", "frontend", "business"]


def test_failing_feed_yields_empty_list(caplog):
    def broken_session():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    aggregator = RecommendationAggregator(broken_session)

    assert asyncio.run(aggregator.popular()) == []
    assert asyncio.run(aggregator.for_you(1)) == []
    assert "Feed popular failed" in caplog.text


def test_feeds_can_run_concurrently(db, topics, session_factory):
    ayu = make_user(db)
    budi = make_user(db, "Budi")
    mine = make_roadmap(db, ayu, "Mine", published=True, percent=60)
    tag(db, mine, topics["mobile"])
    theirs = make_roadmap(db, budi, "Theirs", published=True, minutes=1)
    tag(db, theirs, topics["mobile"])

    aggregator = RecommendationAggregator(session_factory)

    async def gather_all():
        return await asyncio.gather(
            aggregator.popular(),
            aggregator.trending_topics(),
            aggregator.in_progress(ayu.id),
            aggregator.for_you(ayu.id),
        )

    popular, trending, in_progress, for_you = asyncio.run(gather_all())

    assert titles(popular) == ["Theirs", "Mine"]
    assert [t.slug for t in trending] == ["mobile"]
    assert titles(in_progress) == ["Mine"]
    assert titles(for_you) == ["Theirs"]


@pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
def test_feeds_ignore_ai_labels_overridden_by_the_author(db, topics, session_factory):
    ayu = make_user(db, "Ayu")
    budi = make_user(db, "Budi")

    mine = make_roadmap(db, ayu, "Mine")
    tag(db, mine, topics["frontend"])
    tag(db, mine, topics["backend"], source=LabelSource.AUTHOR)

    stale = make_roadmap(db, budi, "Stale frontend", published=True, minutes=1)
    tag(db, stale, topics["frontend"])
    tag(db, stale, topics["design"], source=LabelSource.AUTHOR)
    shared = make_roadmap(db, budi, "Budi Backend", published=True, minutes=2)
    tag(db, shared, topics["backend"])

    aggregator = RecommendationAggregator(session_factory)

    assert titles(asyncio.run(aggregator.for_you(ayu.id))) == ["Budi Backend"]
    trending = asyncio.run(aggregator.trending_topics())
    assert [t.slug for t in trending] == ["backend", "design"]
