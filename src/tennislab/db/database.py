"""Database helpers for TennisLab."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from tennislab.config import get_settings

settings = get_settings()
engine = create_engine(str(settings.database_url), future=True, echo=False)
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)

__all__ = ["engine", "SessionLocal", "init_db"]


def init_db() -> None:
    """Create tables that do not exist yet."""

    from tennislab.db.models import Base

    Base.metadata.create_all(bind=engine)
