"""ORM models for TennisLab."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base declarative class."""


class PredictionDraft(Base):
    """Serialized in-progress prediction for one match, keyed like the browser session store."""

    __tablename__ = "prediction_drafts"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    match_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
