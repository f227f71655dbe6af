"""Allow running as `python -m slug_guard`."""

from slug_guard.cli import app

app()
