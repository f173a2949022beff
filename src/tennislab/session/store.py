"""Session-scoped storage for predictions that have not been submitted yet."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from tennislab.config import get_settings
from tennislab.db.models import PredictionDraft
from tennislab.predictions.types import PredictionOptions

logger = logging.getLogger(__name__)


def session_key(match_id: str, namespace: str | None = None) -> str:
    namespace = namespace or get_settings().session_namespace
    return f"{namespace}_{match_id}"


class PredictionSessionStore(Protocol):
    def get(self, match_id: str) -> PredictionOptions | None: ...

    def set(self, match_id: str, prediction: PredictionOptions) -> None: ...

    def delete(self, match_id: str) -> None: ...


def _decode(key: str, raw: str | None) -> PredictionOptions | None:
    if not raw:
        return None
    try:
        return PredictionOptions.from_dict(json.loads(raw))
    except (ValueError, TypeError, AttributeError) as exc:
        logger.warning("Failed to load %s from session store: %s", key, exc)
        return None


class InMemorySessionStore:
    """Dict-backed store keyed by ``"{namespace}_{match_id}"``."""

    def __init__(self, namespace: str | None = None) -> None:
        self.namespace = namespace or get_settings().session_namespace
        self._items: dict[str, str] = {}

    def _key(self, match_id: str) -> str:
        return session_key(str(match_id), self.namespace)

    def get(self, match_id: str) -> PredictionOptions | None:
        key = self._key(match_id)
        return _decode(key, self._items.get(key))

    def set(self, match_id: str, prediction: PredictionOptions) -> None:
        self._items[self._key(match_id)] = json.dumps(prediction.to_wire())

    def delete(self, match_id: str) -> None:
        self._items.pop(self._key(match_id), None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class SqlSessionStore:
    """Store drafts in the ``prediction_drafts`` table."""

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        namespace: str | None = None,
    ) -> None:
        if session_factory is None:
            from tennislab.db.database import SessionLocal

            session_factory = SessionLocal
        self.session_factory = session_factory
        self.namespace = namespace or get_settings().session_namespace

    def _key(self, match_id: str) -> str:
        return session_key(str(match_id), self.namespace)

    def get(self, match_id: str) -> PredictionOptions | None:
        key = self._key(match_id)
        with self.session_factory() as session:
            draft = session.get(PredictionDraft, key)
            return _decode(key, draft.payload if draft else None)

    def set(self, match_id: str, prediction: PredictionOptions) -> None:
        key = self._key(match_id)
        with self.session_factory() as session:
            draft = session.get(PredictionDraft, key) or PredictionDraft(key=key, match_id=str(match_id))
            draft.payload = json.dumps(prediction.to_wire())
            session.add(draft)
            session.commit()

    def delete(self, match_id: str) -> None:
        with self.session_factory() as session:
            draft = session.get(PredictionDraft, self._key(match_id))
            if draft is not None:
                session.delete(draft)
                session.commit()

    def keys(self) -> list[str]:
        with self.session_factory() as session:
            stmt = select(PredictionDraft.key).where(PredictionDraft.key.startswith(f"{self.namespace}_"))
            return sorted(session.execute(stmt).scalars().all())
