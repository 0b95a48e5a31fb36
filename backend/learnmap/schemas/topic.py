"""Topic schemas."""
from pydantic import BaseModel, ConfigDict


class Topic(BaseModel):
    """Schema for topic response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    name: str
    aliases: list[str] = []
