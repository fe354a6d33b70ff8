from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Minimal logging configuration for this repo.

    Notes:
    - stdlib logging only; Uvicorn already configures handlers, this sets levels for our package.
    - Set `RS_LOG_LEVEL=DEBUG` (or INFO/WARNING/ERROR) to control verbosity.
    - Token values are never logged at any level.
    """

    normalized = level.upper()
    logging.getLogger("resource_server").setLevel(normalized)
    # Ensure child loggers under resource_server.* inherit this level.
    logging.getLogger("resource_server").propagate = True
