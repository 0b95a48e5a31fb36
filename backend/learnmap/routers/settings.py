"""Settings API router."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnmap.database import get_db
from learnmap.schemas.settings import AppSettings
from learnmap.services.app_settings import load_app_settings, save_app_settings

router = APIRouter()


@router.get("/settings", response_model=AppSettings)
def get_settings(db: Session = Depends(get_db)):
    """Return persisted classifier and feed settings or defaults."""
    return load_app_settings(db)


@router.put("/settings", response_model=AppSettings)
def update_settings(payload: AppSettings, db: Session = Depends(get_db)):
    """Upsert classifier and feed settings."""
    try:
        return save_app_settings(db, payload)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to save settings: {exc}")
