"""Vercel entrypoint exposing the advisor ASGI app."""

import sys
from pathlib import Path

_SRC = Path(__file__).resolve().parent.parent / "src"
if str(_SRC) not in sys.path:
    sys.path.append(str(_SRC))

from nutrition_advisor.api.asgi import app  # noqa: E402

__all__ = ["app"]
