"""Application-layer ports describing adapter and object responsibilities.

Purpose
-------
Define the structural contracts the provider chain and the object store rely
on, so concrete providers and object kinds stay replaceable.

Contents
--------
* :class:`SourceProvider` – a named origin of key/value pairs.
* :class:`FileLoader` – parses a structured document into a mapping.
* :class:`Object` – typed, named, mutable bag of field values.
* :class:`Descriptor` – static schema and factory for one object type.

System Role
-----------
These protocols enforce dependency inversion: adapters and domain objects
implement them, the application layer only talks to the abstractions. They
are runtime checkable so contract tests can assert conformance.
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class SourceProvider(Protocol):
    """Origin of key/value configuration data.

    Keys are matched case-insensitively; ``dump`` returns them case-folded.
    A failed ``reload`` raises :class:`xvals.domain.errors.SourceUnavailable`
    and leaves the previously held values untouched.
    """

    name: str

    def value(self, key: str) -> str:
        """Return the value stored under *key* or raise ``NotFound``."""

    def dump(self) -> dict[str, str]:
        """Return a snapshot of every key/value pair."""

    def reload(self) -> None:
        """Re-acquire the underlying data."""


@runtime_checkable
class FileLoader(Protocol):
    """Parse a structured configuration file into a mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path* and return a mapping or raise ``InvalidFormat``/``NotFound``."""


@runtime_checkable
class Object(Protocol):
    """Materialised instance of a descriptor's schema."""

    name: str

    def type(self) -> str:
        """Return the upper-case type tag."""

    def fields(self) -> dict[str, str]:
        """Return every declared field with its current value."""

    def get(self, field_name: str) -> str:
        """Return one field value or raise ``InvalidField``."""

    def set(self, field_name: str, value: str) -> None:
        """Assign one field value or raise ``InvalidField``."""


@runtime_checkable
class Descriptor(Protocol):
    """Static knowledge about one object type."""

    def type(self) -> str:
        """Return the upper-case type tag."""

    def fields(self) -> tuple[str, ...]:
        """Return the recognised field names in declared order."""

    def construct(self) -> Object:
        """Return a new blank object bound to this type."""
