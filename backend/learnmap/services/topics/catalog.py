"""Topic catalog and its pre-normalized phrase index.

The built-in catalog is small and manually curated. Each topic contributes
its slug (hyphens read as spaces), its display name and its aliases as match
phrases. All phrases are normalized once when a ``TopicCatalog`` is built, so
classifying a roadmap never re-normalizes the catalog.
"""

import logging
import re
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from learnmap.models.topic import Topic

logger = logging.getLogger(__name__)

DEFAULT_TOPIC_SLUG = "other"

_NON_WORD = re.compile(r"[\W_]+")


def normalize_text(text: Optional[str]) -> str:
    """Lower-case text, turn punctuation into spaces and collapse whitespace.

    Args:
        text: Raw text (``None`` reads as empty)

    Returns:
        Normalized text, tokens separated by single spaces
    """
    if not text:
        return ""
    return " ".join(_NON_WORD.sub(" ", text.lower()).split())


@dataclass(frozen=True)
class TopicDef:
    """Catalog entry: stable slug, display name and alias keywords."""

    slug: str
    name: str
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    def phrases(self) -> List[str]:
        """Normalized match phrases in declaration order, without duplicates."""
        seen = []
        for raw in (self.slug.replace("-", " "), self.name, *self.aliases):
            phrase = normalize_text(raw)
            if phrase and phrase not in seen:
                seen.append(phrase)
        return seen


TOPIC_LIST: Tuple[TopicDef, ...] = (
    TopicDef("programming", "Programming", ("coding", "pemrograman", "software development")),
    TopicDef("frontend", "Frontend", ("ui", "ux", "react", "next.js", "html", "css", "tailwind")),
    TopicDef("backend", "Backend", ("api", "node.js", "server", "database", "sql", "authentication")),
    TopicDef("data", "Data", ("data science", "analysis", "analytics", "etl", "bi")),
    TopicDef("devops", "DevOps", ("ci/cd", "docker", "kubernetes", "infra", "observability")),
    TopicDef("ai-ml", "AI/ML", ("ai", "ml", "machine learning", "deep learning", "nlp", "computer vision", "llm", "genai")),
    TopicDef("mobile", "Mobile", ("android", "ios", "react native", "flutter", "kotlin", "swift")),
    TopicDef("design", "Design", ("ui design", "ux design", "figma", "typography")),
    TopicDef("business", "Business", ("startup", "strategy", "marketing", "sales")),
    TopicDef("finance", "Finance", ("investment", "trading", "akuntansi", "financial")),
    TopicDef("agriculture", "Agriculture", ("pertanian", "agri", "hortikultura", "agro")),
    TopicDef("health", "Health", ("kesehatan", "medis", "nutrition", "fitness")),
    TopicDef("education", "Education", ("pengajaran", "pedagogi", "kurikulum")),
    TopicDef("soft-skills", "Soft Skills", ("komunikasi", "leadership", "manajemen waktu")),
    TopicDef(DEFAULT_TOPIC_SLUG, "Other", ()),
)

BUILTIN_TOPICS: Dict[str, TopicDef] = {t.slug: t for t in TOPIC_LIST}


class TopicCatalog:
    """Immutable, pre-normalized lookup structure over an ordered topic list.

    A normalized phrase belongs to exactly one topic: the first topic in
    catalog order that declares it. If two topics share an alias, only the
    earlier one ever scores for it, so reordering or editing overlapping
    aliases can move roadmaps between topics.

    The default topic is a fallback only and owns no phrases.
    """

    def __init__(
        self,
        topics: Iterable[TopicDef],
        *,
        default_slug: str = DEFAULT_TOPIC_SLUG,
        version: int = 0,
    ):
        """Build the phrase index.

        Args:
            topics: Topic definitions in catalog order
            default_slug: Slug reported when nothing matches
            version: Cache version this catalog was built for
        """
        self.topics: Tuple[TopicDef, ...] = tuple(topics)
        self.default_slug = default_slug.lower()
        self.version = version
        self._by_slug: Dict[str, TopicDef] = {}
        self._order: Dict[str, int] = {}
        for index, topic in enumerate(self.topics):
            key = topic.slug.lower()
            if key not in self._by_slug:
                self._by_slug[key] = topic
                self._order[key] = index

        self._phrase_owner: Dict[str, str] = {}
        for topic in self.topics:
            if topic.slug.lower() == self.default_slug:
                continue
            for phrase in topic.phrases():
                if phrase in self._phrase_owner:
                    if self._phrase_owner[phrase] != topic.slug:
                        logger.debug(
                            "Phrase %r already owned by %s; ignored for %s",
                            phrase,
                            self._phrase_owner[phrase],
                            topic.slug,
                        )
                    continue
                self._phrase_owner[phrase] = topic.slug

        # First token -> [(phrase tokens, owner slug)]
        self._index: Dict[str, List[Tuple[Tuple[str, ...], str]]] = defaultdict(list)
        for phrase, slug in self._phrase_owner.items():
            tokens = tuple(phrase.split(" "))
            self._index[tokens[0]].append((tokens, slug))

    @classmethod
    def from_rows(cls, rows: Iterable[Topic], *, version: int = 0) -> "TopicCatalog":
        """Build a catalog from ``Topic`` rows already in catalog order."""
        defs = [
            TopicDef(
                slug=row.slug,
                name=row.name,
                aliases=tuple(a for a in (row.aliases or []) if isinstance(a, str)),
            )
            for row in rows
        ]
        return cls(defs, version=version)

    def __len__(self) -> int:
        return len(self.topics)

    def __contains__(self, slug: object) -> bool:
        return isinstance(slug, str) and slug.lower() in self._by_slug

    def get(self, slug: str) -> Optional[TopicDef]:
        """Case-insensitive lookup by slug."""
        return self._by_slug.get(slug.lower())

    def resolve(self, keyword: str) -> Optional[TopicDef]:
        """Map a slug, name or alias (any case or punctuation) to its topic."""
        topic = self.get(keyword.strip())
        if topic is not None:
            return topic
        owner = self._phrase_owner.get(normalize_text(keyword))
        return self._by_slug.get(owner.lower()) if owner else None

    def order_of(self, slug: str) -> int:
        """Catalog position of a slug; unknown slugs sort last."""
        return self._order.get(slug.lower(), len(self.topics))

    def count_matches(self, normalized: str) -> Dict[str, int]:
        """Count whole-phrase occurrences per topic in normalized text.

        Args:
            normalized: Output of ``normalize_text``

        Returns:
            Mapping of topic slug to number of phrase hits
        """
        counts: Dict[str, int] = defaultdict(int)
        if not normalized:
            return counts
        tokens = normalized.split(" ")
        for i, token in enumerate(tokens):
            for phrase_tokens, slug in self._index.get(token, ()):
                if tuple(tokens[i:i + len(phrase_tokens)]) == phrase_tokens:
                    counts[slug] += 1
        return counts


BUILTIN_CATALOG = TopicCatalog(TOPIC_LIST)


class CatalogCache:
    """Process-wide cache of the database catalog with versioned reload.

    Readers share one immutable ``TopicCatalog``. Writers that change the
    ``topics`` table call ``invalidate()``; the next reader rebuilds.
    """

    def __init__(self):
        """Initialize an empty cache."""
        self._lock = threading.Lock()
        self._version = 0
        self._catalog: Optional[TopicCatalog] = None

    @property
    def version(self) -> int:
        return self._version

    def get(self, db: Session) -> TopicCatalog:
        """Return the current catalog, rebuilding it after invalidation.

        Args:
            db: Database session used only on a rebuild

        Returns:
            Catalog built from the ``topics`` table, or the built-in catalog
            while the table is empty
        """
        catalog = self._catalog
        if catalog is not None and catalog.version == self._version:
            return catalog

        with self._lock:
            catalog = self._catalog
            if catalog is not None and catalog.version == self._version:
                return catalog
            rows = db.query(Topic).order_by(Topic.position, Topic.id).all()
            if rows:
                catalog = TopicCatalog.from_rows(rows, version=self._version)
            else:
                catalog = TopicCatalog(TOPIC_LIST, version=self._version)
            logger.info(
                "Loaded topic catalog v%s (%s topics)", catalog.version, len(catalog)
            )
            self._catalog = catalog
            return catalog

    def invalidate(self) -> None:
        """Mark the cached catalog stale."""
        with self._lock:
            self._version += 1


# Global cache instance
_catalog_cache = CatalogCache()


def get_catalog_cache() -> CatalogCache:
    """Get the global catalog cache."""
    return _catalog_cache
