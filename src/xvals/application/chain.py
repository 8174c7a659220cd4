"""Application-layer value resolution across prioritised providers.

Purpose
-------
Answer "what is the current value of key K" from an ordered list of source
providers, and produce the merged snapshot the object store consumes. The
module is free of I/O; providers do the reading.

Contents
    - ``ProviderChain``: append-only list with point lookups and merged dumps.
    - ``parse_bool`` / ``parse_int``: strict converters used by the typed
      lookups.

Precedence
----------
The first provider appended has the highest priority. Point lookups scan in
append order; ``dump`` applies providers from lowest to highest priority so
the result agrees with point lookups on every key.
"""

from __future__ import annotations

import re
import threading
from typing import Iterable

from ..domain.errors import NotFound, ParseError, SourceUnavailable
from ..domain.objects import normalize_key
from ..observability import log_debug, log_error
from .ports import SourceProvider

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_bool(text: str) -> bool:
    """Parse *text* strictly as a boolean.

    Examples
    --------
    >>> parse_bool("T"), parse_bool("false")
    (True, False)
    >>> parse_bool("trUe")
    Traceback (most recent call last):
    ...
    xvals.domain.errors.ParseError: invalid boolean 'trUe'
    """

    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ParseError(f"invalid boolean {text!r}")


def parse_int(text: str) -> int:
    """Parse *text* strictly as a base-10 integer (no whitespace, no underscores).

    Examples
    --------
    >>> parse_int("-42")
    -42
    >>> parse_int("1_000")
    Traceback (most recent call last):
    ...
    xvals.domain.errors.ParseError: invalid integer '1_000'
    """

    if not _INTEGER.fullmatch(text):
        raise ParseError(f"invalid integer {text!r}")
    return int(text)


class ProviderChain:
    """Ordered, append-only collection of source providers.

    Examples
    --------
    >>> from xvals.adapters.mapping.default import MapProvider
    >>> chain = ProviderChain([MapProvider({"name": "John"}), MapProvider({"name": "Jane", "age": "44"})])
    >>> chain.value("NAME"), chain.int_value("age")
    ('John', 44)
    >>> chain.dump() == {"name": "John", "age": "44"}
    True
    """

    def __init__(self, providers: Iterable[SourceProvider] = ()) -> None:
        self._lock = threading.RLock()
        self._providers: list[SourceProvider] = list(providers)

    @property
    def providers(self) -> tuple[SourceProvider, ...]:
        with self._lock:
            return tuple(self._providers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)

    def append(self, provider: SourceProvider) -> SourceProvider:
        """Add *provider* with lower priority than every provider already present."""

        with self._lock:
            self._providers.append(provider)
            position = len(self._providers)
        log_debug("provider_registered", source=provider.name, path=None, priority=position)
        return provider

    def has_value(self, key: str) -> bool:
        try:
            self.value(key)
        except NotFound:
            return False
        return True

    def value(self, key: str) -> str:
        """Return the value from the highest-priority provider that has *key*."""

        lookup = normalize_key(key)
        for provider in self.providers:
            try:
                return provider.value(lookup)
            except NotFound:
                continue
        raise NotFound(f"key not found {key}")

    def value_or(self, key: str, default: str) -> str:
        try:
            return self.value(key)
        except NotFound:
            return default

    def bool_value(self, key: str) -> bool:
        return parse_bool(self.value(key))

    def bool_value_or(self, key: str, default: bool) -> bool:
        try:
            return self.bool_value(key)
        except (NotFound, ParseError):
            return default

    def int_value(self, key: str) -> int:
        return parse_int(self.value(key))

    def int_value_or(self, key: str, default: int) -> int:
        try:
            return self.int_value(key)
        except (NotFound, ParseError):
            return default

    def dump(self) -> dict[str, str]:
        """Return all values merged so higher-priority providers win collisions."""

        merged: dict[str, str] = {}
        for provider in reversed(self.providers):
            merged.update(provider.dump())
        return merged

    def dump_with_origin(self) -> dict[str, str]:
        """Return, for every key in :meth:`dump`, the name of the provider that supplied it."""

        origin: dict[str, str] = {}
        for provider in reversed(self.providers):
            for key in provider.dump():
                origin[key] = provider.name
        return origin

    def reload(self) -> None:
        """Reload every provider, raising one ``SourceUnavailable`` listing all failures.

        Every provider is attempted; a failing provider keeps its previous data
        and does not prevent the others from refreshing.
        """

        failures: list[str] = []
        for provider in self.providers:
            try:
                provider.reload()
            except SourceUnavailable as exc:
                log_error("provider_reload_failed", source=provider.name, path=None, error=str(exc))
                failures.append(f"{provider.name}: {exc}")
        if failures:
            raise SourceUnavailable("; ".join(failures))
