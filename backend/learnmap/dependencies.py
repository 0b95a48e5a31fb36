"""Shared FastAPI dependencies."""
from typing import Callable, Optional

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from learnmap.database import SessionLocal


def get_user_id(x_user_id: Optional[int] = Header(default=None)) -> Optional[int]:
    """User id forwarded by the authentication layer; None when anonymous."""
    return x_user_id


def require_user_id(x_user_id: Optional[int] = Header(default=None)) -> int:
    """User id forwarded by the authentication layer; 401 when anonymous."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


def get_session_factory() -> Callable[[], Session]:
    """Factory for sessions opened outside the request session."""
    return SessionLocal
