"""Dashboard API router."""
import asyncio
from typing import Callable, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnmap.database import get_db
from learnmap.dependencies import get_session_factory, get_user_id
from learnmap.schemas.roadmap import DashboardSummary
from learnmap.services.app_settings import load_app_settings
from learnmap.services.recommendations import RecommendationAggregator

router = APIRouter()


@router.get("/dashboard/summary", response_model=DashboardSummary)
async def dashboard_summary(
    user_id: Optional[int] = Depends(get_user_id),
    db: Session = Depends(get_db),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """Popular roadmaps, trending topics and the user's personal feeds."""
    aggregator = RecommendationAggregator(session_factory, load_app_settings(db).feeds)
    popular, topics, in_progress, for_you = await asyncio.gather(
        aggregator.popular(),
        aggregator.trending_topics(),
        aggregator.in_progress(user_id),
        aggregator.for_you(user_id),
    )
    return DashboardSummary(
        popular=popular,
        topics=topics,
        in_progress=in_progress,
        for_you=for_you,
    )
