"""Web shell for the repository visualizer."""

from .server import create_app, start_server

__all__ = ["create_app", "start_server"]
