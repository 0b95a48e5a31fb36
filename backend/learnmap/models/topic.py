"""Topic model."""
from sqlalchemy import JSON, Column, Integer, String

from learnmap.database import Base


class Topic(Base):
    """Canonical subject-matter category used for roadmap classification."""

    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    aliases = Column(JSON, nullable=False, default=list)
    position = Column(Integer, default=0, nullable=False)
