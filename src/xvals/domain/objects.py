"""Descriptor-driven objects materialised from composite keys.

Purpose
-------
Hold the data-only building blocks of the object store: the generic object
that any flat-record schema can use, its descriptor, and the identity helpers
shared by every object kind. The module is pure domain code (no I/O).

Contents
--------
* :func:`normalize` – the single case normalisation applied to type tags,
  field names, and object names when they are compared.
* :func:`object_key` / :func:`split_object_key` – identity strings of the form
  ``TYPE+NAME`` used by :meth:`ObjectStore.objects`.
* :class:`GenericObject` – mutable bag of declared fields.
* :class:`GenericDescriptor` / :func:`generic_descriptor` – declare a new
  object type from a tag and a field list.

System Role
-----------
:class:`xvals.application.store.ObjectStore` constructs objects through
descriptors and routes ``(field, value)`` pairs into them. The built-in
:mod:`xvals.domain.endpoint` schema follows the same contract with a dedicated
dataclass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from .errors import InvalidField

_TOKEN = re.compile(r"^[A-Z0-9_]+$")
_KEY_SEPARATOR = "+"


def normalize(token: str) -> str:
    """Return *token* in the canonical comparison case.

    Examples
    --------
    >>> normalize("Server_CACert")
    'SERVER_CACERT'
    """

    return token.upper()


def normalize_key(key: str) -> str:
    """Return the lookup form of a provider key.

    Keys that differ only in case, including ``ß`` against ``SS``, share one
    lookup form across every provider.

    Examples
    --------
    >>> normalize_key("Straße"), normalize_key("STRASSE")
    ('strasse', 'strasse')
    """

    return str(key).casefold()


def object_key(type_tag: str, name: str) -> str:
    """Return the identity string of the object ``(type_tag, name)``.

    Examples
    --------
    >>> object_key("ep", "MyService")
    'EP+MYSERVICE'
    """

    return f"{normalize(type_tag)}{_KEY_SEPARATOR}{normalize(name)}"


def split_object_key(key: str) -> tuple[str, str]:
    """Split an identity string produced by :func:`object_key`.

    A key without separator is a bare type tag. Names never contain ``+``
    because composite keys cannot carry it through the environment, so more
    than one separator means the key is malformed.

    Examples
    --------
    >>> split_object_key("EP+MYSERVICE")
    ('EP', 'MYSERVICE')
    >>> split_object_key("EP")
    ('EP', '')
    >>> split_object_key("A+B+C")
    ('', '')
    """

    parts = key.split(_KEY_SEPARATOR)
    if len(parts) == 1:
        return parts[0], ""
    if len(parts) == 2:
        return parts[0], parts[1]
    return "", ""


def validate_token(token: str, *, kind: str) -> str:
    """Return the normalised *token* or raise ``ValueError`` when unusable in keys."""

    normalized = normalize(token)
    if not normalized or not _TOKEN.match(normalized):
        raise ValueError(f"Invalid {kind} {token!r}: use letters, digits and underscores only")
    if normalized.startswith("_") or normalized.endswith("_"):
        raise ValueError(f"Invalid {kind} {token!r}: must not start or end with an underscore")
    return normalized


@dataclass(eq=True)
class GenericObject:
    """Object whose schema is nothing more than a type tag and field list.

    Unset declared fields read as ``""``; undeclared fields raise
    :class:`InvalidField` on both ``get`` and ``set``.

    Examples
    --------
    >>> person = generic_descriptor("TO", ["name", "age"]).construct()
    >>> person.set("Name", "John")
    >>> person.get("NAME"), person.get("age")
    ('John', '')
    >>> person.fields()
    {'NAME': 'John', 'AGE': ''}
    """

    type_tag: str
    declared: tuple[str, ...]
    name: str = ""
    values: dict[str, str] = field(default_factory=dict)

    def type(self) -> str:
        return self.type_tag

    def fields(self) -> dict[str, str]:
        return {name: self.values.get(name, "") for name in self.declared}

    def get(self, field_name: str) -> str:
        key = self._check(field_name)
        return self.values.get(key, "")

    def set(self, field_name: str, value: str) -> None:
        key = self._check(field_name)
        self.values[key] = value

    def _check(self, field_name: str) -> str:
        key = normalize(field_name)
        if key not in self.declared:
            raise InvalidField(f"field {field_name} is not valid for type {self.type_tag}")
        return key


class GenericDescriptor:
    """Descriptor that builds :class:`GenericObject` instances.

    Why
    ----
    New flat-record schemas can be declared purely by data, without writing a
    dedicated object class.
    """

    def __init__(self, type_tag: str, field_names: Iterable[str]) -> None:
        self._type = validate_token(type_tag, kind="type tag")
        declared: list[str] = []
        for name in field_names:
            normalized = validate_token(name, kind="field name")
            if normalized in declared:
                raise ValueError(f"Duplicate field {name!r} for type {self._type}")
            declared.append(normalized)
        if not declared:
            raise ValueError(f"Type {self._type} must declare at least one field")
        self._fields = tuple(declared)

    def type(self) -> str:
        return self._type

    def fields(self) -> tuple[str, ...]:
        return self._fields

    def construct(self) -> GenericObject:
        return GenericObject(type_tag=self._type, declared=self._fields)

    def __repr__(self) -> str:
        return f"GenericDescriptor({self._type!r}, {list(self._fields)!r})"


def generic_descriptor(type_tag: str, field_names: Iterable[str]) -> GenericDescriptor:
    """Declare a generic object type from *type_tag* and *field_names*.

    Examples
    --------
    >>> descriptor = generic_descriptor("to", ["name", "age", "phone", "email"])
    >>> descriptor.type(), descriptor.fields()
    ('TO', ('NAME', 'AGE', 'PHONE', 'EMAIL'))
    """

    return GenericDescriptor(type_tag, field_names)
