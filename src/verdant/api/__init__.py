"""HTTP surface of the governance system (FastAPI)."""

from verdant.api.server import create_app, main

__all__ = ["create_app", "main"]
