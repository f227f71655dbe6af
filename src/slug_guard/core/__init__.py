"""Core components: entities, validation, slug synchronization, storage."""

from slug_guard.core.entity import ChangeSet, Entity, ErrorSet, Field, FieldChange
from slug_guard.core.slugify import slugify
from slug_guard.core.synchronizer import SlugFieldConfig, SlugSynchronizer
from slug_guard.core.validation import ValidationPipeline, length_of, presence_of

__all__ = [
    "ChangeSet",
    "Entity",
    "ErrorSet",
    "Field",
    "FieldChange",
    "SlugFieldConfig",
    "SlugSynchronizer",
    "ValidationPipeline",
    "length_of",
    "presence_of",
    "slugify",
]
