"""Flat configuration file provider.

Purpose
-------
Serve the key/value pairs of a single structured document, for example::

    ep_staffan_address: localhost:12345
    ep_staffan_tls: none
    log_level: debug

Key behaviours
--------------
* The path is made absolute at construction so later ``chdir`` calls do not
  change what ``reload`` reads.
* The format follows the file suffix (see
  :func:`xvals.adapters.file_loaders.structured.loader_for`).
* Only flat documents are accepted; scalar values are rendered to strings.
* A failed reload raises :class:`SourceUnavailable` and keeps the values from
  the last successful reload.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ...domain.errors import InvalidFormat, NotFound, SourceUnavailable
from ...observability import log_debug, log_error
from ..file_loaders.structured import loader_for
from ..mapping.default import MapProvider


def ensure_flat(data: Mapping[str, object], *, path: str) -> Mapping[str, object]:
    """Reject documents whose values are mappings or lists.

    Examples
    --------
    >>> ensure_flat({"a": 1}, path="demo")
    {'a': 1}
    >>> ensure_flat({"a": {"b": 1}}, path="demo")
    Traceback (most recent call last):
    ...
    xvals.domain.errors.InvalidFormat: File demo: value of 'a' must be a scalar
    """

    for key, value in data.items():
        if isinstance(value, (Mapping, list, tuple, set)):
            raise InvalidFormat(f"File {path}: value of {key!r} must be a scalar")
    return data


class ConfigFileProvider(MapProvider):
    """Serve values read from one flat YAML, JSON, or TOML file."""

    def __init__(self, path: str | Path, *, name: str | None = None) -> None:
        self.path = str(Path(path).absolute())
        super().__init__(name=name or f"file:{self.path}")

    def reload(self) -> None:
        try:
            data = ensure_flat(loader_for(self.path).load(self.path), path=self.path)
        except (NotFound, InvalidFormat, OSError) as exc:
            log_error("provider_reload_failed", source=self.name, path=self.path, error=str(exc))
            raise SourceUnavailable(f"failed to reload {self.path}: {exc}") from exc
        self._replace(data)
        log_debug("provider_reloaded", source=self.name, path=self.path, keys=len(data))
