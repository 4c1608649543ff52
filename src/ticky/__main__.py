"""Entry point for running Ticky via ``python -m ticky``."""

from __future__ import annotations

import uvicorn

from .config import load_settings
from .logging_setup import setup_logging


def main() -> None:
    """Start the FastAPI-powered Ticky server."""

    settings = load_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "ticky.api:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
