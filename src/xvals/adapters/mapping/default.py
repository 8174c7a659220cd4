"""In-memory mapping provider.

Purpose
-------
Implement :class:`xvals.application.ports.SourceProvider` over a fixed
mapping. It is also the storage base for the environment and profile
providers, which differ only in how ``reload`` fills the mapping.

Key behaviours
--------------
* Keys are case-folded on the way in, so lookups are case-insensitive.
* Values are stored as given when already strings; other scalars are rendered
  with :func:`render_scalar`.
* ``reload`` is a no-op: the mapping never changes.
"""

from __future__ import annotations

from typing import Mapping

from ...domain.errors import NotFound
from ...domain.objects import normalize_key


def render_scalar(value: object) -> str:
    """Render a parsed scalar the way it would be written in a flat config file.

    Examples
    --------
    >>> render_scalar(True), render_scalar(None), render_scalar(8080), render_scalar("x")
    ('true', '', '8080', 'x')
    """

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def normalize_mapping(source: Mapping[str, object]) -> dict[str, str]:
    """Return *source* with case-folded keys and rendered values."""

    return {normalize_key(key): render_scalar(value) for key, value in source.items()}


class MapProvider:
    """Serve values from a mapping supplied at construction time.

    Examples
    --------
    >>> provider = MapProvider({"Name": "John", "port": 8080})
    >>> provider.value("NAME"), provider.value("port")
    ('John', '8080')
    >>> provider.dump()
    {'name': 'John', 'port': '8080'}
    """

    def __init__(self, values: Mapping[str, object] | None = None, *, name: str = "map") -> None:
        self.name = name
        self._values: dict[str, str] = normalize_mapping(values or {})

    def value(self, key: str) -> str:
        try:
            return self._values[normalize_key(key)]
        except KeyError:
            raise NotFound(f"failed to retrieve key {key} from {self.name}") from None

    def dump(self) -> dict[str, str]:
        return dict(self._values)

    def reload(self) -> None:
        return None

    def _replace(self, values: Mapping[str, object]) -> None:
        """Swap the held values in one assignment so readers never see a partial set."""

        self._values = normalize_mapping(values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, keys={len(self._values)})"
