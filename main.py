from __future__ import annotations

import logging

import uvicorn
from rich.logging import RichHandler

from pagespeed_analyzer.api import create_app
from pagespeed_analyzer.config import load_settings

logger = logging.getLogger("pagespeed_analyzer")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


settings = load_settings()
configure_logging(settings.log_level)
app = create_app(settings)


def run() -> None:
    if settings.is_production:
        logger.info("APP_ENV=production: not starting the local listener, the host serves main:app.")
        return
    logger.info("Server running on http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
