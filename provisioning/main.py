"""
ASGI entry point.

    uvicorn provisioning.main:app --host 0.0.0.0 --port 8000
"""

from .api.main import app

__all__ = ["app"]
