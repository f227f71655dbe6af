"""
Slug Synchronizer - keep a derived slug consistent with its source field.

Registers two hooks around a validation pass:
- prepare_slug (before validation): speculatively regenerate the slug
  when the source field changed or the slug is empty
- reconcile_slug (after validation): roll the speculative slug back when
  the pass failed on the source or slug field, and drop it from the
  change set so nothing downstream sees a pending slug change
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Callable

from slug_guard.config import RollbackPolicy, SlugOptions
from slug_guard.core.entity import Entity
from slug_guard.core.slugify import slugify as default_slugify
from slug_guard.core.validation import ValidationPipeline


logger = logging.getLogger(__name__)

# Uniqueness lookup: (candidate, entity) -> taken by another record?
SlugExists = Callable[[str, Entity], bool]


@dataclass(frozen=True)
class SlugFieldConfig:
    """Field names and transform, resolved once per entity type."""

    source_field: str = "title"
    slug_field: str = "slug"
    slugify: Callable[[str], str] = default_slugify


class SlugSynchronizer:
    """
    Stateless pair of validation hooks for one entity type.

    Example:
        pipeline = ValidationPipeline(rules=[presence_of("title")])
        synchronizer = SlugSynchronizer(SlugFieldConfig("title", "slug"))
        synchronizer.install(pipeline)

        post.title = ""
        pipeline.run(post)      # False
        post.slug               # last accepted slug
        "slug" in post.changes  # False
    """

    def __init__(
        self,
        config: SlugFieldConfig | None = None,
        slug_exists: SlugExists | None = None,
        separator: str = "-",
        rollback_policy: RollbackPolicy = RollbackPolicy.RELEVANT_FIELDS,
    ) -> None:
        """
        Initialize the synchronizer.

        Args:
            config: Source/slug field names and slugify transform
            slug_exists: Optional uniqueness lookup against the store
            separator: Joins a conflicting candidate and its random suffix
            rollback_policy: Which validation errors trigger a rollback
        """
        self.config = config or SlugFieldConfig()
        self.slug_exists = slug_exists
        self.separator = separator
        self.rollback_policy = rollback_policy

    @classmethod
    def from_options(
        cls,
        options: SlugOptions,
        slug_exists: SlugExists | None = None,
    ) -> "SlugSynchronizer":
        """Build a synchronizer from the slugs section of Settings."""
        transform = partial(
            default_slugify,
            separator=options.separator,
            max_length=options.max_length,
        )
        config = SlugFieldConfig(
            source_field=options.source_field,
            slug_field=options.slug_field,
            slugify=transform,
        )
        return cls(
            config,
            slug_exists=slug_exists,
            separator=options.separator,
            rollback_policy=options.rollback_policy,
        )

    def install(self, pipeline: ValidationPipeline) -> None:
        """Register the hooks on a pipeline. Installing twice is a no-op."""
        if self.prepare_slug not in pipeline.before_validate:
            pipeline.before_validate.append(self.prepare_slug)
        if self.reconcile_slug not in pipeline.after_validate:
            pipeline.after_validate.append(self.reconcile_slug)

    def should_regenerate(self, entity: Entity) -> bool:
        """
        Decide whether prepare_slug recomputes the slug.

        True when the slug is empty, when the source field has a pending
        change, or when a pending slug was not derived from the current
        source value. A slug already derived from the current source is kept.
        """
        cfg = self.config
        slug = entity.read_attribute(cfg.slug_field)
        if not slug:
            return True

        # A pending slug must come from the current source, even when the
        # source was reverted to its stored value
        if cfg.slug_field in entity.changes:
            base = cfg.slugify(entity.read_attribute(cfg.source_field) or "")
            return not self._derived_from(slug, base)

        return cfg.source_field in entity.changes

    def prepare_slug(self, entity: Entity) -> None:
        """Speculatively regenerate the slug before validation."""
        if not self.should_regenerate(entity):
            return

        cfg = self.config
        source = entity.read_attribute(cfg.source_field) or ""
        slug = self.dedupe(cfg.slugify(source), entity)
        current = entity.read_attribute(cfg.slug_field)

        logger.debug(
            "Regenerated %s %r -> %r from %s %r",
            cfg.slug_field,
            current,
            slug,
            cfg.source_field,
            source,
            extra={
                "slug_event": "regenerate",
                "entity_id": entity.id,
                "field": cfg.slug_field,
                "previous": current,
                "current": slug,
            },
        )
        entity.write_attribute(cfg.slug_field, slug)

    def reconcile_slug(self, entity: Entity) -> None:
        """Roll back a speculative slug after a failed validation pass."""
        cfg = self.config
        if cfg.slug_field not in entity.changes:
            return
        if not self._should_roll_back(entity):
            return

        speculative = entity.read_attribute(cfg.slug_field)
        previous = entity.changes.previous_value_of(cfg.slug_field)
        entity.write_attribute(cfg.slug_field, previous, track=False)
        entity.changes.remove(cfg.slug_field)

        logger.info(
            "Rolled back %s %r -> %r after failed validation (%s)",
            cfg.slug_field,
            speculative,
            previous,
            ", ".join(entity.errors),
            extra={
                "slug_event": "rollback",
                "entity_id": entity.id,
                "field": cfg.slug_field,
                "previous": speculative,
                "current": previous,
            },
        )

    def dedupe(self, candidate: str, entity: Entity) -> str:
        """
        Make a candidate unique.

        A free, non-empty candidate is used as is. Otherwise a random UUID is
        appended (a blank candidate becomes just the UUID).

        Args:
            candidate: Slugified source value
            entity: Entity the slug is for (excluded from the lookup)

        Returns:
            Slug to assign
        """
        if candidate and not self._taken(candidate, entity):
            return candidate

        parts = [candidate, str(uuid.uuid4())]
        return self.separator.join(part for part in parts if part)

    def _taken(self, candidate: str, entity: Entity) -> bool:
        if self.slug_exists is None:
            return False
        return self.slug_exists(candidate, entity)

    def _should_roll_back(self, entity: Entity) -> bool:
        errors = entity.errors
        if self.rollback_policy == RollbackPolicy.ANY_ERROR:
            return bool(errors)
        return self.config.source_field in errors or self.config.slug_field in errors

    def _derived_from(self, slug: str, base: str) -> bool:
        """Whether slug is base itself or base with a conflict suffix."""
        if slug == base:
            return True

        if base:
            prefix = base + self.separator
            if not slug.startswith(prefix):
                return False
            suffix = slug[len(prefix):]
        else:
            suffix = slug

        try:
            uuid.UUID(suffix)
        except ValueError:
            return False
        return True
