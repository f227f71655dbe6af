"""
Entity base with change tracking and per-field errors.

Provides the in-memory record model the slug synchronizer works on:
- Field descriptors routed through read/write helpers
- A change set of {previous, current} pairs since the last snapshot
- An error set populated by a validation pass
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Iterator, Self


@dataclass
class FieldChange:
    """A pending change to a single field."""

    previous: Any
    current: Any

    def as_pair(self) -> list[Any]:
        return [self.previous, self.current]


class ChangeSet:
    """
    Fields mutated since the last persisted snapshot.

    Example:
        changes = ChangeSet()
        changes.record("title", "Old", "New")

        changes.previous_value_of("title")  # "Old"
        changes.remove("title")
    """

    def __init__(self) -> None:
        self._changes: dict[str, FieldChange] = {}

    def record(self, field: str, previous: Any, current: Any) -> None:
        """
        Record a write to a field.

        The first write keeps the snapshot value as "previous". A write that
        restores the snapshot value drops the entry.

        Args:
            field: Field name
            previous: Snapshot value before this write
            current: Newly written value
        """
        existing = self._changes.get(field)
        if existing is not None:
            previous = existing.previous

        if current == previous:
            self._changes.pop(field, None)
        else:
            self._changes[field] = FieldChange(previous=previous, current=current)

    def previous_value_of(self, field: str) -> Any:
        """Snapshot value of a changed field (None if unchanged)."""
        change = self._changes.get(field)
        return change.previous if change else None

    def remove(self, field: str) -> None:
        """Forget any pending change to a field."""
        self._changes.pop(field, None)

    def clear(self) -> None:
        self._changes.clear()

    def to_dict(self) -> dict[str, list[Any]]:
        """Changes as {field: [previous, current]}."""
        return {name: change.as_pair() for name, change in self._changes.items()}

    def __contains__(self, field: object) -> bool:
        return field in self._changes

    def __getitem__(self, field: str) -> FieldChange:
        return self._changes[field]

    def get(self, field: str) -> FieldChange | None:
        return self._changes.get(field)

    def __iter__(self) -> Iterator[str]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __repr__(self) -> str:
        return f"ChangeSet({self.to_dict()!r})"


class ErrorSet:
    """Per-field validation failure messages."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, []).append(message)

    def __getitem__(self, field: str) -> list[str]:
        return list(self._errors.get(field, []))

    def __contains__(self, field: object) -> bool:
        return bool(self._errors.get(field))  # type: ignore[call-overload]

    def __bool__(self) -> bool:
        return any(self._errors.values())

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._errors.values())

    def __iter__(self) -> Iterator[str]:
        return (name for name, messages in self._errors.items() if messages)

    def clear(self) -> None:
        self._errors.clear()

    def full_messages(self) -> list[str]:
        """Messages prefixed with a humanized field name, e.g. "Title can't be blank"."""
        messages: list[str] = []
        for name, field_messages in self._errors.items():
            label = name.replace("_", " ").capitalize()
            messages.extend(f"{label} {message}" for message in field_messages)
        return messages

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(messages) for name, messages in self._errors.items() if messages}

    def __repr__(self) -> str:
        return f"ErrorSet({self.to_dict()!r})"


class Field:
    """Descriptor declaring a tracked entity attribute."""

    def __init__(self) -> None:
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Entity | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.read_attribute(self.name)

    def __set__(self, instance: Entity, value: Any) -> None:
        instance.write_attribute(self.name, value)


class Entity:
    """
    Base record with tracked fields.

    Subclasses declare fields with the Field descriptor:

        class Post(Entity):
            title = Field()
            slug = Field()

        post = Post(title="Hello")
        post.changes.to_dict()   # {"title": [None, "Hello"]}
        post.changes_applied()
        post.changes.to_dict()   # {}
    """

    field_names: ClassVar[tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        names: list[str] = []
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, Field) and name not in names:
                    names.append(name)
        cls.field_names = tuple(names)

    def __init__(self, **attributes: Any) -> None:
        self.id: int | None = None
        self._snapshot: dict[str, Any] = {name: None for name in self.field_names}
        self._attributes: dict[str, Any] = dict(self._snapshot)
        self.changes = ChangeSet()
        self.errors = ErrorSet()
        self.assign_attributes(attributes)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        """Build a persisted entity with no pending changes."""
        entity = cls()
        entity.id = row.get("id")
        for name in cls.field_names:
            entity.write_attribute(name, row.get(name), track=False)
        entity.changes_applied()
        return entity

    @property
    def persisted(self) -> bool:
        return self.id is not None

    def read_attribute(self, name: str) -> Any:
        return self._attributes[name]

    def write_attribute(self, name: str, value: Any, track: bool = True) -> None:
        """
        Write a field value.

        Args:
            name: Field name
            value: New value
            track: Record the write in the change set
        """
        if name not in self._attributes:
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        self._attributes[name] = value
        if track:
            self.changes.record(name, self._snapshot[name], value)

    def assign_attributes(self, attributes: dict[str, Any]) -> None:
        for name, value in attributes.items():
            self.write_attribute(name, value)

    def changes_applied(self) -> None:
        """Take the current values as the new snapshot."""
        self._snapshot = dict(self._attributes)
        self.changes.clear()

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._attributes.items())
        return f"{type(self).__name__}(id={self.id!r}, {fields})"
