"""Built-in Endpoint schema.

Purpose
-------
Describe one side of a client/server connection, including optional TLS
material, as an object the store can materialise from keys such as
``EP_MYSERVICE_SERVER_CACERT``.

Field semantics
---------------
* ``ADDRESS`` – ``host:port``.
* ``TLS`` – ``none`` (or empty), ``server``, or ``mtls``; compared
  case-insensitively.
* ``SERVER_CACERT`` – CA that signed the server certificate: a file path, PEM
  content, or ``external`` when the CA is already in the system trust store.
* ``SERVER_CERT`` / ``SERVER_KEY`` – server key pair (path or PEM).
* ``CLIENT_CACERT`` – CA that signed client certificates (mTLS only).
* ``CLIENT_CERT`` / ``CLIENT_KEY`` – client key pair (mTLS only).
* ``PATH`` – URL path used by HTTP clients.

A client only needs ``SERVER_CACERT`` (plus its own key pair for mTLS) and a
server only needs its key pair (plus ``CLIENT_CACERT`` for mTLS), so the same
values serve both sides. The TLS and socket wiring lives in
:mod:`xvals.adapters.tls`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, TextIO

from .errors import InvalidField, TLSConfigError
from .objects import normalize

TP_ENDPOINT: Final[str] = "EP"

ENDPOINT_FIELDS: Final[tuple[str, ...]] = (
    "ADDRESS",
    "TLS",
    "SERVER_CACERT",
    "SERVER_CERT",
    "SERVER_KEY",
    "CLIENT_CACERT",
    "CLIENT_CERT",
    "CLIENT_KEY",
    "PATH",
)

TLS_NONE: Final[str] = "none"
TLS_SERVER: Final[str] = "server"
TLS_MUTUAL: Final[str] = "mtls"

_ATTRIBUTES: Final[dict[str, str]] = {name: name.lower() for name in ENDPOINT_FIELDS}


@dataclass
class Endpoint:
    """Materialised endpoint; attribute names are the lower-cased field names.

    Examples
    --------
    >>> ep = Endpoint(address="localhost:8443", tls="mTLS")
    >>> ep.get("Address"), ep.use_tls(), ep.tls_mode()
    ('localhost:8443', True, 'mtls')
    """

    address: str = ""
    tls: str = ""
    server_cacert: str = ""
    server_cert: str = ""
    server_key: str = ""
    client_cacert: str = ""
    client_cert: str = ""
    client_key: str = ""
    path: str = ""
    name: str = ""

    def type(self) -> str:
        return TP_ENDPOINT

    def fields(self) -> dict[str, str]:
        return {name: getattr(self, attribute) for name, attribute in _ATTRIBUTES.items()}

    def get(self, field_name: str) -> str:
        return getattr(self, _attribute(field_name))

    def set(self, field_name: str, value: str) -> None:
        setattr(self, _attribute(field_name), value)

    def tls_mode(self) -> str:
        """Return the normalised TLS mode, raising :class:`TLSConfigError` when unknown."""

        mode = self.tls.strip().lower() or TLS_NONE
        if mode not in (TLS_NONE, TLS_SERVER, TLS_MUTUAL):
            raise TLSConfigError(f"unknown TLS mode {self.tls!r} for endpoint {self.name or '<unnamed>'}")
        return mode

    def use_tls(self) -> bool:
        """Return ``True`` when the endpoint expects server or mutual TLS."""

        return self.tls.strip().lower() in (TLS_SERVER, TLS_MUTUAL)

    def to_dict(self) -> dict[str, str]:
        """Return the field values keyed by lower-case field name."""

        return {attribute: getattr(self, attribute) for attribute in _ATTRIBUTES.values()}

    def write(self, stream: TextIO, name: str | None = None) -> None:
        """Write the endpoint as ``EP_<NAME>_<FIELD>=<value>`` lines to *stream*.

        Examples
        --------
        >>> import io
        >>> buffer = io.StringIO()
        >>> Endpoint(address="localhost:1", name="api").write(buffer)
        >>> buffer.getvalue().splitlines()[:2]
        ['EP_API_ADDRESS=localhost:1', 'EP_API_TLS=']
        """

        label = normalize(name if name is not None else self.name)
        for field_name, value in self.fields().items():
            stream.write(f"{TP_ENDPOINT}_{label}_{field_name}={value}\n")


def _attribute(field_name: str) -> str:
    try:
        return _ATTRIBUTES[normalize(field_name)]
    except KeyError:
        raise InvalidField(f"field {field_name} is not valid for an endpoint") from None


class EndpointDescriptor:
    """Descriptor registering :class:`Endpoint` under the ``EP`` tag."""

    def type(self) -> str:
        return TP_ENDPOINT

    def fields(self) -> tuple[str, ...]:
        return ENDPOINT_FIELDS

    def construct(self) -> Endpoint:
        return Endpoint()

    def __repr__(self) -> str:
        return "EndpointDescriptor()"


ENDPOINT_DESCRIPTOR: Final[EndpointDescriptor] = EndpointDescriptor()
"""Shared descriptor instance; registered on the default context."""
