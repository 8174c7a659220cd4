"""Structured document loaders used by the file and profile providers.

Purpose
-------
Convert on-disk YAML, JSON, and TOML artifacts into Python mappings. The
loaders are small wrappers around ``yaml.safe_load``/``json``/``tomllib`` so
error handling and logging live in one place; deciding what the mapping
means (flat values, profiles) is left to the providers.

Contents
--------
* :class:`BaseFileLoader` – shared file reading and mapping validation.
* :class:`YAMLFileLoader` / :class:`JSONFileLoader` / :class:`TOMLFileLoader`.
* :func:`loader_for` – suffix-based selection (YAML for unknown suffixes,
  matching the historical YAML-only file format).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    format = "binary"

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when it is not a regular file."""

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("config_file_read", source="file", path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Return *data* when it is a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping([1], path="demo")
        Traceback (most recent call last):
        ...
        xvals.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data

    def _invalid(self, path: str, exc: Exception) -> InvalidFormat:
        log_error("config_file_invalid", source="file", path=path, format=self.format, error=str(exc))
        return InvalidFormat(f"Invalid {self.format.upper()} in {path}: {exc}")

    def _loaded(self, data: object, path: str) -> Mapping[str, object]:
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", source="file", path=path, format=self.format, keys=len(result))
        return result


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents; an empty document is an empty mapping.

    Examples
    --------
    >>> from tempfile import NamedTemporaryFile
    >>> tmp = NamedTemporaryFile('w', suffix='.yaml', delete=False, encoding='utf-8')
    >>> _ = tmp.write('ep_api_address: localhost:1')
    >>> tmp.close()
    >>> YAMLFileLoader().load(tmp.name)["ep_api_address"]
    'localhost:1'
    >>> Path(tmp.name).unlink()
    """

    format = "yaml"

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            raise self._invalid(path, exc) from exc
        return self._loaded({} if data is None else data, path)


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format = "json"

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._loaded(data, path)


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    format = "toml"

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        return self._loaded(data, path)


_LOADERS: dict[str, BaseFileLoader] = {
    ".json": JSONFileLoader(),
    ".toml": TOMLFileLoader(),
    ".yaml": YAMLFileLoader(),
    ".yml": YAMLFileLoader(),
}


def loader_for(path: str | Path) -> BaseFileLoader:
    """Return the loader matching the suffix of *path*.

    Examples
    --------
    >>> loader_for("settings.json").format, loader_for("ctx.yml").format, loader_for("values").format
    ('json', 'yaml', 'yaml')
    """

    return _LOADERS.get(Path(path).suffix.lower(), _LOADERS[".yaml"])
