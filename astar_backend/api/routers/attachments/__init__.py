"""
Attachments router package.
"""

from .attachments_router import router

__all__ = ["router"]
