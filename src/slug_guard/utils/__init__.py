"""Utility modules for Slug Guard."""

from slug_guard.utils.logger import setup_logging

__all__ = ["setup_logging"]
