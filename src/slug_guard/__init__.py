"""Slug Guard - blog posts with slugs that stay in sync with their titles."""

__version__ = "1.0.0"
__author__ = "Slug Guard Contributors"

from slug_guard.config import RollbackPolicy, Settings

__all__ = ["RollbackPolicy", "Settings", "__version__"]
