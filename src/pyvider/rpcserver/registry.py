"""
Ordered type registries.

`TypeRegistry` keeps an ordered list of `(type, options)` entries. Order is
caller visible and always equals the order of the last committed mutation;
positional operations target the first entry whose type is the given type.
The interceptor and hook registries are built on it.
"""

from __future__ import annotations

from typing import Any, ClassVar

from attrs import define, field, frozen

from pyvider.telemetry import logger

from pyvider.rpcserver.exception import NotFoundError


@frozen
class RegistryEntry:
    """A registered type together with the options it is instantiated with."""

    type: type = field()
    options: dict[str, Any] = field(factory=dict)


@define(slots=False)
class TypeRegistry:
    """
    Ordered registry of types and their constructor options.

    Duplicate types are permitted; `insert_before`, `insert_after` and
    `remove` operate on the first match. A lookup that fails raises
    `not_found_error` without touching the registry.
    """

    not_found_error: ClassVar[type[NotFoundError]] = NotFoundError
    kind: ClassVar[str] = "type"

    _entries: list[RegistryEntry] = field(init=False, factory=list)

    def add(self, klass: type, options: dict[str, Any] | None = None) -> None:
        """
        Append a type to the end of the registry.

        Args:
            klass: The type to register
            options: Options the type is instantiated with
        """
        self._entries.append(self._entry(klass, options))
        logger.debug(f"🧱➕ Added {self.kind} {klass.__name__}", extra={"count": len(self._entries)})

    def insert_before(
        self, before: type, klass: type, options: dict[str, Any] | None = None
    ) -> None:
        """
        Insert a type immediately before the first entry of `before`.

        Raises:
            NotFoundError: If `before` is not registered
        """
        position = self._index_of(before)
        self._entries.insert(position, self._entry(klass, options))
        logger.debug(f"🧱↖️ Inserted {self.kind} {klass.__name__} before {before.__name__}")

    def insert_after(
        self, after: type, klass: type, options: dict[str, Any] | None = None
    ) -> None:
        """
        Insert a type immediately after the first entry of `after`.

        Raises:
            NotFoundError: If `after` is not registered
        """
        position = self._index_of(after)
        self._entries.insert(position + 1, self._entry(klass, options))
        logger.debug(f"🧱↘️ Inserted {self.kind} {klass.__name__} after {after.__name__}")

    def remove(self, klass: type) -> None:
        """
        Remove the first entry of a type.

        Raises:
            NotFoundError: If `klass` is not registered
        """
        del self._entries[self._index_of(klass)]
        logger.debug(f"🧱➖ Removed {self.kind} {klass.__name__}", extra={"count": len(self._entries)})

    def clear(self) -> None:
        self._entries.clear()
        logger.debug(f"🧱🧹 Cleared {self.kind} registry")

    def list(self) -> list[type]:
        """Registered types, in order, without their options."""
        return [entry.type for entry in self._entries]

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries)

    def count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, klass: object) -> bool:
        return any(entry.type is klass for entry in self._entries)

    def _entry(self, klass: type, options: dict[str, Any] | None) -> RegistryEntry:
        return RegistryEntry(type=klass, options=dict(options or {}))

    def _index_of(self, klass: type) -> int:
        for position, entry in enumerate(self._entries):
            if entry.type is klass:
                return position
        name = getattr(klass, "__name__", repr(klass))
        logger.error(f"🧱❌ {self.kind.capitalize()} {name} not found in registry")
        raise self.not_found_error(f"{self.kind.capitalize()} {name} not found in registry")

# 🐍🏗️🛎️
