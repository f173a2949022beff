"""Run the TennisLab API under uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from tennislab.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    logger.info("Serving TennisLab API on %s:%s", settings.api_host, settings.api_port)
    uvicorn.run(
        "tennislab.api.server:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
