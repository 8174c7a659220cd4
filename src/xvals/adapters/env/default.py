"""Environment variable provider.

Purpose
-------
Expose a snapshot of the process environment as a source provider. The
snapshot is taken on ``reload``; later changes to the environment are only
visible after the next reload.

Key behaviours
--------------
* Keys are case-folded (``HOME`` → ``home``).
* A failing injected source raises :class:`SourceUnavailable`; the previous
  snapshot stays in place.
* The value is everything after the first ``=``; an entry without ``=`` is
  kept with an empty value.
* The environment can be injected (a mapping or raw ``NAME=VALUE`` entries)
  for deterministic tests.
* Emits ``provider_reloaded`` debug events via :mod:`xvals.observability`.
"""

from __future__ import annotations

import os
from typing import Callable, Iterable, Mapping, Union

from ...domain.errors import SourceUnavailable
from ...domain.objects import normalize_key
from ...observability import log_debug, log_error
from ..mapping.default import MapProvider

EnvironSource = Union[Mapping[str, str], Iterable[str], Callable[[], Union[Mapping[str, str], Iterable[str]]]]


def parse_environ_entries(entries: Iterable[str]) -> dict[str, str]:
    """Parse raw ``NAME=VALUE`` entries into a case-folded mapping.

    Examples
    --------
    >>> parse_environ_entries(["HOME=/root", "FOO", "URL=a=b"])
    {'home': '/root', 'foo': '', 'url': 'a=b'}
    """

    collected: dict[str, str] = {}
    for entry in entries:
        key, separator, value = entry.partition("=")
        if not key:
            continue
        collected[normalize_key(key)] = value if separator else ""
    return collected


class EnvProvider(MapProvider):
    """Serve values from the process environment.

    Parameters
    ----------
    environ:
        ``None`` reads :data:`os.environ` on every reload. A mapping or an
        iterable of raw entries is used as-is; a zero-argument callable is
        invoked on every reload and may return either form.
    """

    def __init__(self, environ: EnvironSource | None = None, *, name: str = "env") -> None:
        super().__init__(name=name)
        self._environ = environ

    def reload(self) -> None:
        try:
            source = self._environ() if callable(self._environ) else self._environ
            if source is None:
                source = os.environ
            if isinstance(source, Mapping):
                snapshot = {normalize_key(key): str(value) for key, value in source.items()}
            else:
                snapshot = parse_environ_entries(source)
        except Exception as exc:
            log_error("provider_reload_failed", source=self.name, path=None, error=str(exc))
            raise SourceUnavailable(f"failed to read environment for {self.name}: {exc}") from exc
        self._replace(snapshot)
        log_debug("provider_reloaded", source=self.name, path=None, keys=len(snapshot))
