"""
Property types router package.
"""

from .property_types_router import router

__all__ = ["router"]
