"""Composition root for ``xvals``.

Purpose
-------
Wire source providers, the provider chain, and the object store into one
explicit :class:`Context` that applications construct and pass around. A
process-wide default context, wrapped by module-level functions, exists only
for the outermost application boundary (scripts, the CLI, ``main``).

Contents
--------
* :class:`Context` – registration (``with_*``), value resolution, and object
  materialisation for one chain/store pair.
* :func:`default_context` / :func:`reset_default_context` – lazily built
  process-wide context with the Endpoint descriptor registered.
* Module-level helpers mirroring :class:`Context` methods on the default
  context (``with_environment``, ``value``, ``reload_objects``, ...).

Precedence
----------
Registration order is priority order: the first registered provider wins.
Every ``with_*`` call performs the provider's initial reload before appending
it; when that reload fails the error propagates and the chain is unchanged.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Mapping, TypeVar

from .adapters.dotenv.default import DotEnvProvider
from .adapters.env.default import EnvironSource, EnvProvider
from .adapters.file.default import ConfigFileProvider
from .adapters.mapping.default import MapProvider
from .adapters.profile.default import ProfileProvider
from .application.chain import ProviderChain
from .application.ports import Descriptor, Object, SourceProvider
from .application.store import ObjectStore, ReloadSummary
from .domain.endpoint import ENDPOINT_DESCRIPTOR, TP_ENDPOINT, Endpoint
from .domain.errors import XvalsError
from .observability import log_info

P = TypeVar("P", bound=SourceProvider)


class Context:
    """One provider chain plus one object store.

    Examples
    --------
    >>> ctx = Context()
    >>> _ = ctx.with_map({"ep_api_address": "localhost:8443", "ep_api_tls": "server", "debug": "true"})
    >>> ctx.with_object(ENDPOINT_DESCRIPTOR)
    >>> ctx.reload_objects()
    ReloadSummary(applied=2, skipped=1)
    >>> ctx.get_endpoint("api").address, ctx.bool_value("debug")
    ('localhost:8443', True)
    """

    def __init__(self, chain: ProviderChain | None = None, store: ObjectStore | None = None) -> None:
        self.chain = chain if chain is not None else ProviderChain()
        self.store = store if store is not None else ObjectStore()

    # Provider registration

    def add_provider(self, provider: P) -> P:
        """Reload *provider* once and append it at the lowest priority."""

        provider.reload()
        self.chain.append(provider)
        return provider

    def with_map(self, values: Mapping[str, object], *, name: str = "map") -> MapProvider:
        return self.add_provider(MapProvider(values, name=name))

    def with_environment(self, environ: EnvironSource | None = None) -> EnvProvider:
        return self.add_provider(EnvProvider(environ))

    def with_config_file(self, path: str | Path) -> ConfigFileProvider:
        return self.add_provider(ConfigFileProvider(path))

    def with_profile(self, path: str | Path) -> ProfileProvider:
        return self.add_provider(ProfileProvider(path))

    def with_dotenv(self, path: str | Path) -> DotEnvProvider:
        return self.add_provider(DotEnvProvider(path))

    # Value resolution

    def has_value(self, key: str) -> bool:
        return self.chain.has_value(key)

    def value(self, key: str) -> str:
        return self.chain.value(key)

    def value_or(self, key: str, default: str) -> str:
        return self.chain.value_or(key, default)

    def bool_value(self, key: str) -> bool:
        return self.chain.bool_value(key)

    def bool_value_or(self, key: str, default: bool) -> bool:
        return self.chain.bool_value_or(key, default)

    def int_value(self, key: str) -> int:
        return self.chain.int_value(key)

    def int_value_or(self, key: str, default: int) -> int:
        return self.chain.int_value_or(key, default)

    def dump(self) -> dict[str, str]:
        return self.chain.dump()

    def dump_with_origin(self) -> dict[str, str]:
        return self.chain.dump_with_origin()

    def reload(self) -> None:
        """Reload every registered provider (see :meth:`ProviderChain.reload`)."""

        self.chain.reload()

    # Objects

    def with_object(self, descriptor: Descriptor) -> None:
        self.store.add_descriptor(descriptor)

    def reload_objects(self, *, fresh: bool = False) -> ReloadSummary:
        """Materialise objects from the merged chain dump.

        With ``fresh=True`` the object set is rebuilt from the dump and replaces
        the previous one in a single step; objects whose keys disappeared from
        every source are gone afterwards.
        """

        summary = self.store.reload(self.chain.dump(), fresh=fresh)
        log_info("context_objects_reloaded", source="context", path=None, fresh=fresh, skipped=summary.skipped)
        return summary

    def objects(self) -> Mapping[str, Object]:
        return self.store.objects()

    def get_object(self, type_tag: str, name: str) -> Object:
        return self.store.get(type_tag, name)

    def new_object(self, type_tag: str, name: str) -> Object:
        return self.store.new(type_tag, name)

    def get_endpoint(self, name: str) -> Endpoint:
        """Return the endpoint called *name*; ``NotFound`` when it was never materialised."""

        obj = self.store.get(TP_ENDPOINT, name)
        if not isinstance(obj, Endpoint):
            raise XvalsError(f"could not interpret {name} as an Endpoint")
        return obj


_DEFAULT: Context | None = None
_DEFAULT_LOCK = threading.Lock()


def default_context() -> Context:
    """Return the process-wide context, creating it with the Endpoint descriptor on first use."""

    global _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = Context()
            _DEFAULT.with_object(ENDPOINT_DESCRIPTOR)
        return _DEFAULT


def reset_default_context() -> None:
    """Discard the process-wide context; the next call to :func:`default_context` rebuilds it."""

    global _DEFAULT
    with _DEFAULT_LOCK:
        _DEFAULT = None


def with_map(values: Mapping[str, object]) -> MapProvider:
    return default_context().with_map(values)


def with_environment(environ: EnvironSource | None = None) -> EnvProvider:
    return default_context().with_environment(environ)


def with_config_file(path: str | Path) -> ConfigFileProvider:
    return default_context().with_config_file(path)


def with_profile(path: str | Path) -> ProfileProvider:
    return default_context().with_profile(path)


def with_dotenv(path: str | Path) -> DotEnvProvider:
    return default_context().with_dotenv(path)


def with_object(descriptor: Descriptor) -> None:
    default_context().with_object(descriptor)


def has_value(key: str) -> bool:
    return default_context().has_value(key)


def value(key: str) -> str:
    return default_context().value(key)


def value_or(key: str, default: str) -> str:
    return default_context().value_or(key, default)


def bool_value(key: str) -> bool:
    return default_context().bool_value(key)


def bool_value_or(key: str, default: bool) -> bool:
    return default_context().bool_value_or(key, default)


def int_value(key: str) -> int:
    return default_context().int_value(key)


def int_value_or(key: str, default: int) -> int:
    return default_context().int_value_or(key, default)


def dump() -> dict[str, str]:
    return default_context().dump()


def dump_with_origin() -> dict[str, str]:
    return default_context().dump_with_origin()


def reload() -> None:
    default_context().reload()


def reload_objects(*, fresh: bool = False) -> ReloadSummary:
    return default_context().reload_objects(fresh=fresh)


def objects() -> Mapping[str, Object]:
    return default_context().objects()


def get_object(type_tag: str, name: str) -> Object:
    return default_context().get_object(type_tag, name)


def new_object(type_tag: str, name: str) -> Object:
    return default_context().new_object(type_tag, name)


def get_endpoint(name: str) -> Endpoint:
    return default_context().get_endpoint(name)
