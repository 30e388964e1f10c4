"""HTTP surface of the content risk service."""

from .router import router
from .server import create_app

__all__ = ["router", "create_app"]
