"""Multi-profile file provider.

Purpose
-------
Serve the values of the *current* profile of a document shaped like::

    current_profile: staging
    profiles:
      staging:
        ep_api_address: staging.internal:443
      production:
        ep_api_address: api.example.com:443

Switching environments is then a one-line edit followed by ``reload``.

Key behaviours
--------------
* Read or parse failures raise :class:`SourceUnavailable`; the values of the
  last successful reload stay in place.
* The selection and its values are replaced in one step once the document
  has parsed.
* A ``current_profile`` that names no profile is not an error: the provider
  holds an empty value set and logs ``profile_missing``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ...domain.errors import InvalidFormat, NotFound, SourceUnavailable
from ...observability import log_debug, log_error
from ..file.default import ensure_flat
from ..file_loaders.structured import loader_for
from ..mapping.default import MapProvider, normalize_mapping

CURRENT_PROFILE_KEY = "current_profile"
PROFILES_KEY = "profiles"


def parse_profile_document(data: Mapping[str, object], *, path: str) -> tuple[str, dict[str, Mapping[str, object]]]:
    """Return ``(current_profile, profiles)`` from a parsed profile document.

    Examples
    --------
    >>> parse_profile_document({"current_profile": "p1", "profiles": {"p1": {"key1": "val1"}}}, path="demo")
    ('p1', {'p1': {'key1': 'val1'}})
    """

    current = data.get(CURRENT_PROFILE_KEY)
    current_name = "" if current is None else str(current)
    raw_profiles = data.get(PROFILES_KEY) or {}
    if not isinstance(raw_profiles, Mapping):
        raise InvalidFormat(f"File {path}: {PROFILES_KEY!r} must be a mapping")
    profiles: dict[str, Mapping[str, object]] = {}
    for profile_name, values in raw_profiles.items():
        if values is None:
            values = {}
        if not isinstance(values, Mapping):
            raise InvalidFormat(f"File {path}: profile {profile_name!r} must be a mapping")
        profiles[str(profile_name)] = ensure_flat(values, path=path)
    return current_name, profiles


class ProfileProvider(MapProvider):
    """Serve values from the currently selected profile of a profile file."""

    def __init__(self, path: str | Path, *, name: str | None = None) -> None:
        self.path = str(Path(path).absolute())
        self.current_profile = ""
        self._profile_names: tuple[str, ...] = ()
        super().__init__(name=name or f"profile:{self.path}")

    def profiles(self) -> tuple[str, ...]:
        """Return the profile names found by the last successful reload."""

        return self._profile_names

    def reload(self) -> None:
        try:
            document = loader_for(self.path).load(self.path)
            current, profiles = parse_profile_document(document, path=self.path)
        except (NotFound, InvalidFormat, OSError) as exc:
            log_error("provider_reload_failed", source=self.name, path=self.path, error=str(exc))
            raise SourceUnavailable(f"failed to reload profile file {self.path}: {exc}") from exc

        selected = profiles.get(current)
        values = normalize_mapping(selected if selected is not None else {})
        self._values, self.current_profile, self._profile_names = values, current, tuple(profiles)
        if selected is None:
            log_error("profile_missing", source=self.name, path=self.path, profile=current)
            return
        log_debug("provider_reloaded", source=self.name, path=self.path, profile=current, keys=len(values))
