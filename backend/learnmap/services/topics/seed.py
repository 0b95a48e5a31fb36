"""Persisting the topic catalog."""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from learnmap.models.topic import Topic
from learnmap.services.topics.catalog import (
    BUILTIN_TOPICS,
    TOPIC_LIST,
    get_catalog_cache,
)

logger = logging.getLogger(__name__)


def _name_from_slug(slug: str) -> str:
    return " ".join(part.capitalize() for part in slug.split("-") if part) or slug


def seed_topics(db: Session) -> int:
    """Upsert every built-in topic, refreshing name, aliases and position.

    Args:
        db: Database session

    Returns:
        Number of topics created
    """
    existing = {t.slug: t for t in db.query(Topic).all()}
    created = 0
    for position, topic_def in enumerate(TOPIC_LIST):
        row = existing.get(topic_def.slug)
        if row is None:
            db.add(Topic(
                slug=topic_def.slug,
                name=topic_def.name,
                aliases=list(topic_def.aliases),
                position=position,
            ))
            created += 1
        else:
            row.name = topic_def.name
            row.aliases = list(topic_def.aliases)
            row.position = position
    db.commit()
    get_catalog_cache().invalidate()
    logger.info("Seeded topics: %s (%s new)", len(TOPIC_LIST), created)
    return created


def ensure_topics(db: Session, slugs: Iterable[str], *, commit: bool = True) -> List[str]:
    """Create catalog entries for slugs that do not exist yet.

    Existing topics are never modified. Known slugs take their definition
    from the built-in catalog; unknown ones get a name derived from the slug,
    no aliases and a position after the built-in topics. On an empty table
    the whole built-in catalog is created as well.

    Args:
        db: Database session
        slugs: Topic slugs that must exist
        commit: Commit the session; pass False to stay inside the caller's
            transaction; the caller then invalidates the catalog cache
            after its commit

    Returns:
        Slugs that were created
    """
    wanted: List[str] = []
    for slug in slugs:
        key = slug.strip().lower()
        if key and key not in wanted:
            wanted.append(key)
    if not wanted:
        return []

    # An empty table gets the whole built-in catalog
    if db.query(Topic.id).first() is None:
        wanted = [t.slug for t in TOPIC_LIST] + [s for s in wanted if s not in BUILTIN_TOPICS]

    have = {
        slug.lower()
        for (slug,) in db.query(Topic.slug).filter(func.lower(Topic.slug).in_(wanted))
    }
    missing = [s for s in wanted if s not in have]
    if not missing:
        return []

    next_position = max(
        db.query(func.max(Topic.position)).scalar() or 0, len(TOPIC_LIST) - 1
    ) + 1
    builtin_order = {t.slug: i for i, t in enumerate(TOPIC_LIST)}
    for slug in missing:
        topic_def = BUILTIN_TOPICS.get(slug)
        if topic_def is not None:
            position = builtin_order[slug]
            name, aliases = topic_def.name, list(topic_def.aliases)
        else:
            position = next_position
            next_position += 1
            name, aliases = _name_from_slug(slug), []
        db.add(Topic(slug=slug, name=name, aliases=aliases, position=position))

    if commit:
        db.commit()
        get_catalog_cache().invalidate()
    else:
        db.flush()
    logger.info("Created missing topics: %s", ", ".join(missing))
    return missing


def list_topics(db: Session) -> List[Topic]:
    """Return catalog topics in catalog order, seeding an empty table first."""
    topics = db.query(Topic).order_by(Topic.position, Topic.id).all()
    if not topics:
        seed_topics(db)
        topics = db.query(Topic).order_by(Topic.position, Topic.id).all()
    return topics


def get_topic_by_slug(db: Session, slug: str) -> Optional[Topic]:
    """Case-insensitive topic lookup."""
    return (
        db.query(Topic)
        .filter(func.lower(Topic.slug) == slug.strip().lower())
        .first()
    )
