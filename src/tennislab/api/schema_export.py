"""OpenAPI export that also carries the payloads posted to the bet service."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic.json_schema import models_json_schema

from tennislab.api.server import app
from tennislab.betting.ports import ParlayBetRequest, SingleBetRequest
from tennislab.predictions.codec import StructuredPrediction

logger = logging.getLogger(__name__)

REF_TEMPLATE = "#/components/schemas/{model}"
BET_SERVICE_MODELS = (SingleBetRequest, ParlayBetRequest, StructuredPrediction)


def bet_service_schemas() -> dict[str, Any]:
    """Camel-case JSON schemas of the bodies sent to ``/bets`` and ``/parlays``."""

    _, schema = models_json_schema(
        [(model, "serialization") for model in BET_SERVICE_MODELS],
        by_alias=True,
        ref_template=REF_TEMPLATE,
    )
    return schema.get("$defs", {})


def build_openapi(public_base_url: str | None = None) -> dict[str, Any]:
    # app.openapi() caches its result, so work on a copy
    schema = copy.deepcopy(app.openapi())
    components = schema.setdefault("components", {}).setdefault("schemas", {})
    components.update(bet_service_schemas())
    if public_base_url:
        schema["servers"] = [{"url": public_base_url.rstrip("/")}]
    return schema


def write_openapi(path: Path, public_base_url: str | None = None) -> Path:
    schema = build_openapi(public_base_url)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(jsonable_encoder(schema), indent=2))
    logger.info("OpenAPI schema with %d components written to %s", len(schema["components"]["schemas"]), path)
    return path
