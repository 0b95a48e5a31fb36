"""User model."""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from learnmap.database import Base


class User(Base):
    """Roadmap owner. Accounts are managed by the authentication service."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=True)
    image = Column(String(1024), nullable=True)

    roadmaps = relationship("Roadmap", back_populates="user")
