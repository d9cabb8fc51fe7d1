"""API routes for the celestask_svc application.

This package contains all FastAPI route definitions organized by domain.
"""

from .import_export_routes import import_export_router

__all__ = ["import_export_router"]
