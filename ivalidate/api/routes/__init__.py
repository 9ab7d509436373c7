"""API route modules."""

from . import refine, validate

__all__ = ["refine", "validate"]
