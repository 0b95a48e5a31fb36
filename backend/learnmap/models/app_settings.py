"""Application settings model."""
from datetime import datetime
from sqlalchemy import JSON, Column, DateTime, Integer

from learnmap.database import Base


class AppSettings(Base):
    """Persisted classifier and feed tunables."""

    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True)
    settings_json = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
