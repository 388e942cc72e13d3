# Use postponed evaluation of annotations so type hints don't require importing types at runtime.
from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

# `uvicorn` runs the FastAPI application as an ASGI server during local development.
import uvicorn
import os

from trainbuilder.api.app import create_app
from trainbuilder.config.loader import load_config


def main() -> None:
    # Read the typed application config (storage dir, starting budget, dev mode, logging).
    config = load_config()

    app = create_app(config)

    # The browser client talks to this server directly; keep it on localhost unless told otherwise.
    host = os.getenv("TRAINBUILDER_HOST", "127.0.0.1")
    port = int(os.getenv("TRAINBUILDER_PORT", "3000"))
    timeout_keep_alive = int(os.getenv("TRAINBUILDER_TIMEOUT_KEEP_ALIVE", "75"))
    timeout_graceful_shutdown = int(os.getenv("TRAINBUILDER_TIMEOUT_GRACEFUL_SHUTDOWN", "30"))

    uvicorn.run(
        app,
        host=host,
        port=port,
        timeout_keep_alive=timeout_keep_alive,
        timeout_graceful_shutdown=timeout_graceful_shutdown,
    )


if __name__ == "__main__":
    main()
