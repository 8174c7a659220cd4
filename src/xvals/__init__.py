"""Public package surface for ``xvals``.

Values come from a chain of prioritised providers (maps, the environment,
flat files, profile files, dotenv files); typed objects such as endpoints are
materialised from composite ``TYPE_NAME_FIELD`` keys. Applications build a
:class:`Context`; the module-level helpers operate on a process-wide default
context for scripts and entry points.
"""

from __future__ import annotations

from .adapters.dotenv.default import DotEnvProvider
from .adapters.env.default import EnvProvider
from .adapters.file.default import ConfigFileProvider
from .adapters.mapping.default import MapProvider
from .adapters.profile.default import ProfileProvider
from .adapters.tls.default import (
    HTTPClientInfo,
    client_ssl_context,
    http_client_info,
    server_listener,
    server_ssl_context,
)
from .application.chain import ProviderChain
from .application.ports import Descriptor, Object, SourceProvider
from .application.store import ObjectStore, ReloadSummary
from .core import (
    Context,
    bool_value,
    bool_value_or,
    default_context,
    dump,
    dump_with_origin,
    get_endpoint,
    get_object,
    has_value,
    int_value,
    int_value_or,
    new_object,
    objects,
    reload,
    reload_objects,
    reset_default_context,
    value,
    value_or,
    with_config_file,
    with_dotenv,
    with_environment,
    with_map,
    with_object,
    with_profile,
)
from .domain.endpoint import ENDPOINT_DESCRIPTOR, ENDPOINT_FIELDS, TP_ENDPOINT, Endpoint, EndpointDescriptor
from .domain.errors import (
    AmbiguousDescriptor,
    InvalidField,
    InvalidFormat,
    NotFound,
    ParseError,
    SourceUnavailable,
    TLSConfigError,
    UnknownType,
    XvalsError,
)
from .domain.objects import GenericDescriptor, GenericObject, generic_descriptor, object_key, split_object_key
from .observability import bind_trace_id, get_logger

__all__ = [
    "AmbiguousDescriptor",
    "ConfigFileProvider",
    "Context",
    "Descriptor",
    "DotEnvProvider",
    "ENDPOINT_DESCRIPTOR",
    "ENDPOINT_FIELDS",
    "Endpoint",
    "EndpointDescriptor",
    "EnvProvider",
    "GenericDescriptor",
    "GenericObject",
    "HTTPClientInfo",
    "InvalidField",
    "InvalidFormat",
    "MapProvider",
    "NotFound",
    "Object",
    "ObjectStore",
    "ParseError",
    "ProfileProvider",
    "ProviderChain",
    "ReloadSummary",
    "SourceProvider",
    "SourceUnavailable",
    "TLSConfigError",
    "TP_ENDPOINT",
    "UnknownType",
    "XvalsError",
    "bind_trace_id",
    "bool_value",
    "bool_value_or",
    "client_ssl_context",
    "default_context",
    "dump",
    "dump_with_origin",
    "generic_descriptor",
    "get_endpoint",
    "get_logger",
    "get_object",
    "has_value",
    "http_client_info",
    "int_value",
    "int_value_or",
    "new_object",
    "object_key",
    "objects",
    "reload",
    "reload_objects",
    "reset_default_context",
    "server_listener",
    "server_ssl_context",
    "split_object_key",
    "value",
    "value_or",
    "with_config_file",
    "with_dotenv",
    "with_environment",
    "with_map",
    "with_object",
    "with_profile",
]
