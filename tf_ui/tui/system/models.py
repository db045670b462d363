from __future__ import annotations

import itertools
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from tf_common.errors import AccessorError

T = TypeVar("T")

_ids = itertools.count(1)


def next_id() -> int:
    """Process-unique field id used to address deferred results."""
    return next(_ids)


@dataclass(frozen=True)
class Option(Generic[T]):
    """A selectable option: display key, underlying value, preselection."""

    key: str
    value: T
    selected: bool = False

    @classmethod
    def of(cls, *values: T) -> list["Option[T]"]:
        return [cls(key=str(value), value=value) for value in values]

    def with_selected(self, selected: bool) -> "Option[T]":
        return Option(key=self.key, value=self.value, selected=selected)

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class FieldPosition:
    """Where a field sits within its group and the group within the form."""

    group: int = 0
    field: int = 0
    first_field: int = 0
    last_field: int = 0
    group_count: int = 1
    first_group: int = 0
    last_group: int = 0

    def is_first(self) -> bool:
        return self.field == self.first_field and self.group == self.first_group

    def is_last(self) -> bool:
        return self.field == self.last_field and self.group == self.last_group


@runtime_checkable
class Accessor(Protocol[T]):
    def get(self) -> T: ...

    def set(self, value: T) -> None: ...


class EmbeddedAccessor(Generic[T]):
    """Keeps the value on the field itself."""

    def __init__(self, value: T | None = None) -> None:
        self._value = value

    def get(self) -> T | None:
        return self._value

    def set(self, value: T) -> None:
        self._value = value


class Ref(Generic[T]):
    """Caller-owned mutable box a field writes its committed value into."""

    __slots__ = ("value",)

    def __init__(self, value: T | None = None) -> None:
        self.value = value

    def get(self) -> T | None:
        return self.value

    def set(self, value: T) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


class AttributeAccessor(Generic[T]):
    """Binds a field to ``obj.<name>``."""

    def __init__(self, obj: Any, name: str) -> None:
        if not hasattr(obj, name):
            raise AccessorError(
                f"{type(obj).__name__} has no attribute {name!r} to bind to",
                context={"type": type(obj).__name__, "attribute": name},
            )
        self._obj = obj
        self._name = name

    def get(self) -> T:
        return getattr(self._obj, self._name)

    def set(self, value: T) -> None:
        setattr(self._obj, self._name, value)


class ItemAccessor(Generic[T]):
    """Binds a field to ``mapping[key]``."""

    def __init__(self, mapping: MutableMapping[str, Any], key: str) -> None:
        if not isinstance(mapping, MutableMapping):
            raise AccessorError(
                f"Cannot bind to item {key!r} of {type(mapping).__name__}",
                context={"type": type(mapping).__name__, "key": key},
            )
        self._mapping = mapping
        self._key = key

    def get(self) -> T | None:
        return self._mapping.get(self._key)

    def set(self, value: T) -> None:
        self._mapping[self._key] = value


def resolve_accessor(value: Any, default: Any = None) -> Accessor[Any]:
    """Turn the ``value=`` argument of a field into an accessor."""
    if value is None:
        return EmbeddedAccessor(default)
    if isinstance(value, Accessor):
        return value
    raise AccessorError(
        "Field value must be a Ref or an accessor with get()/set()",
        context={"type": type(value).__name__},
    )
