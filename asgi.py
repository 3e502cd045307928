"""
asgi.py -- ASGI entry point for NotesVault.

Run with:  uvicorn asgi:app --reload

Presentation (pages, styling, the admin UI) is served elsewhere and talks to
this app only through the /api/v1 routes.
"""

from api.main import app

__all__ = ["app"]
