"""Loading and saving persisted application settings."""
import logging
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy.orm import Session

from learnmap.models.app_settings import AppSettings as AppSettingsModel
from learnmap.schemas.settings import AppSettings as AppSettingsSchema

logger = logging.getLogger(__name__)


def load_app_settings(db: Session) -> AppSettingsSchema:
    """Return persisted settings, or defaults when none are stored or valid."""
    record = db.query(AppSettingsModel).first()
    if not record:
        return AppSettingsSchema()
    try:
        return AppSettingsSchema.model_validate(record.settings_json or {})
    except ValidationError:
        logger.warning("Stored application settings are invalid; using defaults")
        return AppSettingsSchema()


def save_app_settings(db: Session, payload: AppSettingsSchema) -> AppSettingsSchema:
    """Upsert the settings document."""
    record = db.query(AppSettingsModel).first()
    if record is None:
        record = AppSettingsModel(id=1, settings_json=payload.model_dump())
        db.add(record)
    else:
        record.settings_json = payload.model_dump()
    record.updated_at = datetime.utcnow()
    db.commit()
    return payload
