"""
Reports router package.
"""

from .reports_router import router

__all__ = ["router"]
