"""Draft session store tests."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tennislab.db.models import Base
from tennislab.predictions.types import PredictionOptions
from tennislab.session.store import InMemorySessionStore, SqlSessionStore, session_key


def _sql_store(namespace: str = "drafts") -> SqlSessionStore:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, class_=Session, expire_on_commit=False)
    return SqlSessionStore(session_factory=factory, namespace=namespace)


def test_session_key_uses_namespace() -> None:
    assert session_key("42", "tennislab_form_predictions") == "tennislab_form_predictions_42"


def test_in_memory_round_trip_and_delete() -> None:
    store = InMemorySessionStore(namespace="ns")
    prediction = PredictionOptions(winner="Rafael Nadal", set1_tiebreak_score="7-5")
    store.set("7", prediction)
    assert store.keys() == ["ns_7"]
    assert store.get("7") == prediction
    store.delete("7")
    assert store.get("7") is None
    store.delete("7")


def test_corrupt_entry_is_ignored(caplog) -> None:
    store = InMemorySessionStore(namespace="ns")
    store._items["ns_9"] = "{not json"
    assert store.get("9") is None
    assert "Failed to load ns_9" in caplog.text


def test_sql_store_upserts_and_deletes() -> None:
    store = _sql_store()
    store.set("1", PredictionOptions(winner="Roger Federer"))
    store.set("1", PredictionOptions(winner="Roger Federer", match_result="0-2"))
    store.set("2", PredictionOptions(winner="Rafael Nadal"))
    assert store.get("1").match_result == "0-2"
    assert store.keys() == ["drafts_1", "drafts_2"]
    store.delete("1")
    assert store.get("1") is None
    assert store.keys() == ["drafts_2"]
