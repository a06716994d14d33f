"""Serverless entrypoint exposing the charter broker ASGI app."""

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from charter_broker.api.asgi import app  # noqa: E402

__all__ = ["app"]
