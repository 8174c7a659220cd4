"""Object store: composite key decomposition and object materialisation.

Purpose
-------
Rebuild typed, named objects from a flat key/value namespace. Every key of the
form ``TYPE_NAME_FIELD`` whose ``TYPE`` and ``FIELD`` belong to a registered
descriptor is routed into the object identified by ``(TYPE, NAME)``; the
object is created the first time any of its fields is seen.

Contents
    - ``ReloadSummary``: counts reported by :meth:`ObjectStore.reload`.
    - ``ObjectStore``: descriptor registry, object registry, and the
      decomposition algorithm.

Decomposition
-------------
``NAME`` may contain underscores and there is no escaping, so a key is split
by trying registered descriptors in registration order: the upper-cased key
must start with ``TYPE_``; the remainder must end with ``_FIELD`` for one of
the descriptor's fields, tried longest first so ``SERVER_CACERT`` is never
mistaken for a shorter field that happens to be its suffix. The first
descriptor yielding a non-empty name wins. Registration rejects type tags
whose prefixes overlap, so at most one descriptor can ever match.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ..domain.errors import AmbiguousDescriptor, NotFound, UnknownType
from ..domain.objects import normalize, object_key
from ..observability import log_debug, log_info
from .ports import Descriptor, Object


@dataclass(frozen=True, slots=True)
class ReloadSummary:
    """Outcome of one :meth:`ObjectStore.reload` pass.

    Attributes
    ----------
    applied:
        Keys routed into an object field.
    skipped:
        Keys that did not decompose against any registered descriptor. They
        are expected: the namespace mixes object fields with plain settings.
    """

    applied: int
    skipped: int


@dataclass(frozen=True, slots=True)
class _Registration:
    descriptor: Descriptor
    type_tag: str
    candidates: tuple[str, ...]


class ObjectStore:
    """Registry of descriptors and the objects materialised from them.

    Examples
    --------
    >>> from xvals.domain.objects import generic_descriptor
    >>> store = ObjectStore()
    >>> store.add_descriptor(generic_descriptor("TO", ["name", "age", "phone", "email"]))
    >>> store.reload({"to_object1_name": "John", "to_object1_age": "44", "unrelated": "x"})
    ReloadSummary(applied=2, skipped=1)
    >>> person = store.get("to", "object1")
    >>> person.get("name"), person.get("email")
    ('John', '')
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._registrations: dict[str, _Registration] = {}
        self._objects: dict[str, Object] = {}

    def add_descriptor(self, descriptor: Descriptor) -> None:
        """Register *descriptor*; re-registering the same tag replaces the previous one."""

        type_tag = normalize(descriptor.type())
        candidates = tuple(sorted((normalize(name) for name in descriptor.fields()), key=len, reverse=True))
        with self._lock:
            for existing in self._registrations:
                if existing != type_tag and _prefixes_overlap(existing, type_tag):
                    raise AmbiguousDescriptor(
                        f"type tag {type_tag} overlaps registered tag {existing}; keys would decompose ambiguously"
                    )
            self._registrations[type_tag] = _Registration(descriptor, type_tag, candidates)
        log_debug("descriptor_registered", source="store", path=None, type=type_tag, fields=len(candidates))

    def descriptors(self) -> tuple[Descriptor, ...]:
        with self._lock:
            return tuple(registration.descriptor for registration in self._registrations.values())

    def new(self, type_tag: str, name: str) -> Object:
        """Construct and register a blank object, replacing any object with the same identity."""

        with self._lock:
            registration = self._registrations.get(normalize(type_tag))
            if registration is None:
                raise UnknownType(f"don't know how to create an object from type {type_tag}")
            obj = registration.descriptor.construct()
            obj.name = name
            self._objects[object_key(registration.type_tag, name)] = obj
            return obj

    def get(self, type_tag: str, name: str) -> Object:
        key = object_key(type_tag, name)
        with self._lock:
            try:
                return self._objects[key]
            except KeyError:
                raise NotFound(f"object with key {key} not found") from None

    def objects(self) -> Mapping[str, Object]:
        """Return a read-only snapshot keyed by :func:`xvals.domain.objects.object_key`."""

        with self._lock:
            return MappingProxyType(dict(self._objects))

    def objects_of(self, type_tag: str) -> dict[str, Object]:
        """Return the objects of one type keyed by their names."""

        wanted = normalize(type_tag)
        with self._lock:
            return {obj.name: obj for obj in self._objects.values() if normalize(obj.type()) == wanted}

    def clear(self) -> None:
        """Forget every materialised object; descriptors stay registered."""

        with self._lock:
            self._objects.clear()

    def decompose(self, key: str) -> tuple[str, str, str] | None:
        """Split *key* into ``(type, name, field)`` or return ``None`` when it is not an object key.

        The name keeps the caller's spelling; type and field are upper-cased.

        Examples
        --------
        >>> from xvals.domain.endpoint import ENDPOINT_DESCRIPTOR
        >>> store = ObjectStore()
        >>> store.add_descriptor(ENDPOINT_DESCRIPTOR)
        >>> store.decompose("ep_my_service_server_cacert")
        ('EP', 'my_service', 'SERVER_CACERT')
        >>> store.decompose("ep_address") is None
        True
        """

        upper = normalize(key)
        with self._lock:
            registrations = tuple(self._registrations.values())
        for registration in registrations:
            prefix = registration.type_tag + "_"
            if not upper.startswith(prefix):
                continue
            remainder = upper[len(prefix) :]
            for field_name in registration.candidates:
                suffix = "_" + field_name
                if remainder.endswith(suffix):
                    name_length = len(remainder) - len(suffix)
                    break
            else:
                continue
            if name_length == 0:
                continue
            return registration.type_tag, _original_name(key, upper, len(prefix), name_length), field_name
        return None

    def reload(self, kv: Mapping[str, str], *, fresh: bool = False) -> ReloadSummary:
        """Route every decomposable entry of *kv* into its object.

        Objects are created on first sight and updated in place afterwards.
        Keys that do not decompose are skipped and counted. With
        ``fresh=True`` the objects are rebuilt from *kv* alone and swapped in
        as one set, so objects whose keys vanished are dropped and readers
        never observe a partially rebuilt store.
        """

        applied = 0
        skipped = 0
        with self._lock:
            target: dict[str, Object] = {} if fresh else self._objects
            for key, value in kv.items():
                parts = self.decompose(key)
                if parts is None:
                    skipped += 1
                    continue
                type_tag, name, field_name = parts
                identity = object_key(type_tag, name)
                obj = target.get(identity)
                if obj is None:
                    obj = self._registrations[type_tag].descriptor.construct()
                    obj.name = name
                    target[identity] = obj
                obj.set(field_name, value)
                applied += 1
            self._objects = target
            total = len(target)
        log_info(
            "objects_reloaded", source="store", path=None, applied=applied, skipped=skipped, objects=total, fresh=fresh
        )
        return ReloadSummary(applied=applied, skipped=skipped)


def _prefixes_overlap(left: str, right: str) -> bool:
    """Return ``True`` when one tag's ``TAG_`` prefix starts the other's."""

    left_prefix, right_prefix = left + "_", right + "_"
    return left_prefix.startswith(right_prefix) or right_prefix.startswith(left_prefix)


def _original_name(key: str, upper: str, start: int, length: int) -> str:
    """Slice the name out of *key*, falling back to the upper-cased form.

    Upper-casing can change the length of some characters (``ß`` → ``SS``);
    offsets into the original key are only valid when it did not.
    """

    source = key if len(key) == len(upper) else upper
    return source[start : start + length]
