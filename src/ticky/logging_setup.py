"""Root logger configuration for the Ticky server."""

import logging


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    root.addHandler(handler)

    # Per-request access lines are noise; keep warnings/errors.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
