"""Topics API router."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnmap.database import get_db
from learnmap.schemas.topic import Topic as TopicSchema
from learnmap.services.topics.seed import list_topics

router = APIRouter()


@router.get("", response_model=list[TopicSchema])
def list_all_topics(db: Session = Depends(get_db)):
    """List catalog topics, seeding the built-in catalog on first use."""
    return list_topics(db)
