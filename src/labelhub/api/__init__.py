"""HTTP transport for the labelhub core."""
from .app import app, create_app

__all__ = ["app", "create_app"]
