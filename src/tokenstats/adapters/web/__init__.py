"""
Web Adapter - FastAPI HTTP Layer

This package contains the FastAPI app factory, routes and middleware.
"""

from tokenstats.adapters.web.server import create_app

__all__ = ["create_app"]
