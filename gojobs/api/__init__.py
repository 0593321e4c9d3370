"""HTTP API for the job board"""

from .app import create_app

__all__ = ["create_app"]
