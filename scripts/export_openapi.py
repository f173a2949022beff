"""Write the TennisLab API schema, bet-service payloads included, for the bet-resolution service."""

from __future__ import annotations

import logging
from pathlib import Path

from tennislab.api.schema_export import write_openapi
from tennislab.config import get_settings

OUTPUT_PATH = Path("api_spec/openapi.json")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    path = write_openapi(OUTPUT_PATH, settings.public_api_base_url or None)
    print(f"OpenAPI schema written to {path}")


if __name__ == "__main__":  # pragma: no cover
    main()
