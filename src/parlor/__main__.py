"""Entry point for running Parlor via ``python -m parlor``."""

from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    """Start the FastAPI-powered Parlor game server."""

    host = os.environ.get("PARLOR_HOST", "0.0.0.0")
    port = int(os.environ.get("PARLOR_PORT", "8000"))
    level = os.environ.get("PARLOR_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    uvicorn.run("parlor.ui:app", host=host, port=port, reload=False, log_level=level.lower())


if __name__ == "__main__":
    main()
