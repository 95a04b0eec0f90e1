"""
Web layer - aiohttp server, handlers and Jinja2 templates.
"""

from .server import create_app, start_web_server

__all__ = ["create_app", "start_web_server"]
