"""Blog post entity."""

from __future__ import annotations

from typing import ClassVar

from slug_guard.core.entity import Entity, Field
from slug_guard.core.validation import Rule, length_of, presence_of


class Post(Entity):
    """A blog post addressed in URLs by its slug."""

    title = Field()
    body = Field()
    slug = Field()

    # Column the URL identifier is read from
    slug_field: ClassVar[str] = "slug"

    # Slug is not validated directly, it is kept in sync with title
    rules: list[Rule] = [
        presence_of("title"),
        length_of("title", 200),
        presence_of("body"),
    ]

    def to_param(self) -> str | None:
        """
        URL identifier for links and form actions.

        While a slug change is pending the previous slug is used (the record
        is still stored under it). Falls back to the id.
        """
        change = self.changes.get(self.slug_field)
        if change is not None:
            param = change.previous or change.current
        else:
            param = self.read_attribute(self.slug_field)
        if param:
            return str(param)
        return str(self.id) if self.id is not None else None
