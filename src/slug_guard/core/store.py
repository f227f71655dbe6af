"""
Post Store - validate-then-persist protocol over SQLite.

Each save runs one validation pass (with the slug hooks installed), then
writes the row and takes the saved values as the new snapshot. A failed
pass leaves the entity with its errors and a rolled-back slug.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from slug_guard.config import Settings
from slug_guard.connectors.sqlite import SQLiteConnector
from slug_guard.core.entity import Entity
from slug_guard.core.synchronizer import SlugSynchronizer
from slug_guard.core.validation import ValidationPipeline
from slug_guard.models import Post


logger = logging.getLogger(__name__)


class RecordInvalid(Exception):
    """Raised by save_or_raise when validation fails."""

    def __init__(self, record: Entity) -> None:
        self.record = record
        messages = "; ".join(record.errors.full_messages())
        super().__init__(f"Validation failed: {messages}")


class RecordNotFound(LookupError):
    """Raised when no post matches a slug or id."""

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(f"Post '{identifier}' not found")


class PostStore:
    """
    Persistence for Post entities.

    Example:
        with PostStore(SQLiteConnector(":memory:"), Settings()) as store:
            post = store.create(title="My First Post", body="...")
            post.slug  # "my-first-post"

            store.update(post, title="")  # False
            post.slug  # still "my-first-post"
    """

    def __init__(
        self,
        connector: SQLiteConnector,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the store and create its table if needed.

        Args:
            connector: SQLite connector (not read-only)
            settings: Application settings (defaults if omitted)
        """
        self.settings = settings or Settings()
        self.connector = connector
        self.table = self.settings.database.table

        options = self.settings.slugs
        if options.source_field not in Post.field_names:
            raise ValueError(f"Post has no field {options.source_field!r}")
        if options.slug_field != Post.slug_field:
            raise ValueError(
                f"Post keeps its slug in {Post.slug_field!r}, not {options.slug_field!r}"
            )
        self.slug_field = options.slug_field

        self.synchronizer = SlugSynchronizer.from_options(
            options,
            slug_exists=self.slug_taken,
        )
        self.pipeline = ValidationPipeline(rules=list(Post.rules))
        self.synchronizer.install(self.pipeline)

        created = self.connector.ensure_table(
            self.table,
            {name: "TEXT" for name in Post.field_names},
            unique=[self.slug_field],
        )
        if created:
            logger.debug("Created table %s", self.table)

    @classmethod
    def open(cls, settings: Settings) -> "PostStore":
        """Open (creating if needed) the database configured in settings."""
        connector = SQLiteConnector(settings.database.path, create=True)
        return cls(connector, settings)

    def close(self) -> None:
        self.connector.close()

    def __enter__(self) -> "PostStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def valid(self, post: Post) -> bool:
        """Run a validation pass without persisting."""
        return self.pipeline.run(post)

    def save(self, post: Post) -> bool:
        """
        Validate and persist a post.

        Args:
            post: New or persisted post

        Returns:
            True if saved, False if validation (or the slug index) rejected it
        """
        if not self.pipeline.run(post):
            logger.debug("Save rejected: %s", post.errors.to_dict())
            return False

        try:
            self._write(post)
        except sqlite3.IntegrityError as e:
            if self.slug_field not in str(e):
                raise
            # Another writer took the slug between the lookup and the write
            logger.warning(
                "Slug %r already taken on write",
                post.slug,
                extra={"slug_event": "conflict", "entity_id": post.id, "field": self.slug_field},
            )
            post.errors.add(self.slug_field, "has already been taken")
            self.synchronizer.reconcile_slug(post)
            return False

        post.changes_applied()
        return True

    def save_or_raise(self, post: Post) -> Post:
        """Save a post or raise RecordInvalid."""
        if not self.save(post):
            raise RecordInvalid(post)
        return post

    def create(self, **attributes: Any) -> Post:
        """Build and save a post. Check post.persisted / post.errors."""
        post = Post(**attributes)
        self.save(post)
        return post

    def update(self, post: Post, **attributes: Any) -> bool:
        """Assign attributes and save."""
        post.assign_attributes(attributes)
        return self.save(post)

    def delete(self, post: Post) -> None:
        if post.id is None:
            return
        self.connector.delete_row(self.table, post.id)
        post.id = None

    def find(self, identifier: str | int) -> Post:
        """
        Find a post by slug, falling back to its numeric id.

        Raises:
            RecordNotFound: No post matches
        """
        post = self.find_by_slug(str(identifier))
        if post is not None:
            return post

        try:
            row_id = int(identifier)
        except (TypeError, ValueError):
            raise RecordNotFound(identifier) from None

        row = self.connector.find_row(self.table, "id", row_id)
        if row is None:
            raise RecordNotFound(identifier)
        return Post.from_row(row)

    def find_by_slug(self, slug: str) -> Post | None:
        row = self.connector.find_row(self.table, self.slug_field, slug)
        return Post.from_row(row) if row else None

    def all(self) -> list[Post]:
        return [Post.from_row(row) for row in self.connector.fetch_all(self.table)]

    def slug_taken(self, candidate: str, entity: Entity) -> bool:
        """Whether another stored post already uses candidate."""
        return self.connector.exists(
            self.table,
            self.slug_field,
            candidate,
            exclude_id=entity.id,
        )

    def _write(self, post: Post) -> None:
        values = {name: post.read_attribute(name) for name in Post.field_names}
        if post.id is None:
            post.id = self.connector.insert_row(self.table, values)
            logger.debug("Inserted post %s (%s)", post.id, post.slug)
        else:
            changed = {name: values[name] for name in post.changes}
            self.connector.update_row(self.table, post.id, changed)
            logger.debug("Updated post %s: %s", post.id, sorted(changed))
