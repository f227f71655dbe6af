"""
Validation pipeline.

A validation pass is an explicit sequence of stages:
1. before_validate hooks (in registration order)
2. field rules, each adding messages to entity.errors
3. after_validate hooks (in registration order)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from slug_guard.core.entity import Entity, ErrorSet


# Hooks and rules both operate on the entity in place
Hook = Callable[[Entity], None]
Rule = Callable[[Entity], None]


@dataclass
class ValidationPipeline:
    """
    Ordered pre-validation hooks, field rules and post-validation hooks.

    Example:
        pipeline = ValidationPipeline(rules=[presence_of("title")])
        pipeline.before_validate.append(my_hook)

        if not pipeline.run(post):
            print(post.errors.full_messages())
    """

    before_validate: list[Hook] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)
    after_validate: list[Hook] = field(default_factory=list)

    def validate(self, entity: Entity) -> ErrorSet:
        """
        Run one validation pass.

        Args:
            entity: Entity to validate

        Returns:
            The entity's error set, repopulated by this pass
        """
        entity.errors.clear()

        for hook in self.before_validate:
            hook(entity)

        for rule in self.rules:
            rule(entity)

        for hook in self.after_validate:
            hook(entity)

        return entity.errors

    def run(self, entity: Entity) -> bool:
        """Validate and report whether the pass produced no errors."""
        return not self.validate(entity)


def presence_of(field_name: str, message: str = "can't be blank") -> Rule:
    """Rule: the field must not be None, empty or whitespace-only."""

    def rule(entity: Entity) -> None:
        value = entity.read_attribute(field_name)
        if value is None or (isinstance(value, str) and not value.strip()):
            entity.errors.add(field_name, message)

    return rule


def length_of(
    field_name: str,
    maximum: int,
    message: str = "is too long (maximum is {count} characters)",
) -> Rule:
    """Rule: string value must not exceed maximum characters. None is skipped."""

    def rule(entity: Entity) -> None:
        value = entity.read_attribute(field_name)
        if value is not None and len(str(value)) > maximum:
            entity.errors.add(field_name, message.format(count=maximum))

    return rule
