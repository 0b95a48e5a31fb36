"""Shared fixtures: a throwaway SQLite database per test."""
import os
from datetime import datetime, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from learnmap import models  # noqa: F401
from learnmap.database import Base, get_db
from learnmap.dependencies import get_session_factory
from learnmap.models.roadmap import Roadmap, RoadmapProgress
from learnmap.models.roadmap_topic import LabelSource, RoadmapTopic
from learnmap.models.topic import Topic
from learnmap.models.user import User
from learnmap.services.topics.catalog import get_catalog_cache
from learnmap.services.topics.seed import seed_topics

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
def fresh_catalog_cache():
    """The catalog cache is process-wide; every test gets its own database."""
    get_catalog_cache().invalidate()
    yield
    get_catalog_cache().invalidate()


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'learnmap.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def topics(db):
    """Seeded catalog keyed by slug."""
    seed_topics(db)
    return {t.slug: t for t in db.query(Topic).all()}


@pytest.fixture
def client(session_factory):
    from learnmap.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, name="Ayu"):
    user = User(name=name)
    db.add(user)
    db.commit()
    return user


def make_roadmap(
    db,
    user,
    title="Roadmap",
    *,
    published=False,
    percent=None,
    minutes=0,
    progress_minutes=None,
    milestones=None,
    summary=None,
):
    """Create a roadmap whose created_at is BASE_TIME + minutes."""
    created = BASE_TIME + timedelta(minutes=minutes)
    roadmap = Roadmap(
        user_id=user.id,
        title=title,
        summary=summary,
        content={"milestones": [{"topic": m} for m in (milestones or [])]},
        published=published,
        published_at=created if published else None,
        created_at=created,
    )
    if percent is not None:
        updated = BASE_TIME + timedelta(
            minutes=progress_minutes if progress_minutes is not None else minutes
        )
        roadmap.progress = RoadmapProgress(percent=percent, updated_at=updated)
    db.add(roadmap)
    db.commit()
    return roadmap


def tag(db, roadmap, topic, *, primary=True, confidence=0.8, source=LabelSource.AI):
    """Attach a topic label row directly."""
    db.add(RoadmapTopic(
        roadmap_id=roadmap.id,
        version_id=None,
        topic_id=topic.id,
        confidence=confidence,
        is_primary=primary,
        source=source,
    ))
    db.commit()
