"""TLS and socket helpers driven by :class:`xvals.domain.endpoint.Endpoint` fields.

Purpose
-------
Turn one endpoint into ready-to-use client or server transport settings:
``ssl.SSLContext`` objects, an HTTP base URL, and a listening socket. This is
the outermost adapter ring; the object store never imports it.

Certificate and key fields hold either a path to a PEM file or the PEM text
itself. ``SERVER_CACERT`` may also be the token ``external``, meaning the CA
is already present in the system trust store.

Contents
--------
* :func:`file_or_content` – resolve a path-or-content field to bytes.
* :func:`client_ssl_context` / :func:`server_ssl_context`.
* :class:`HTTPClientInfo` / :func:`http_client_info`.
* :func:`split_host_port` / :func:`listen_address` / :func:`server_listener`.
"""

from __future__ import annotations

import os
import socket
import ssl
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, NamedTuple
from urllib.parse import urlunsplit

from ...domain.endpoint import TLS_MUTUAL, TLS_NONE, Endpoint
from ...domain.errors import TLSConfigError
from ...observability import log_debug

EXTERNAL_CA = "external"


def _is_file(value: str) -> bool:
    try:
        return bool(value) and os.path.isfile(value)
    except (OSError, ValueError):
        return False


def file_or_content(value: str) -> bytes:
    """Return the contents of *value* when it names a regular file, else *value* itself.

    Examples
    --------
    >>> file_or_content("-----BEGIN CERTIFICATE-----")[:5]
    b'-----'
    """

    if _is_file(value):
        return Path(value).read_bytes()
    return value.encode("utf-8")


@contextmanager
def _material_path(value: str) -> Iterator[str]:
    """Yield a filesystem path holding *value*, writing inline PEM to a private temp file."""

    if _is_file(value):
        yield value
        return
    with tempfile.TemporaryDirectory(prefix="xvals-") as directory:
        target = Path(directory) / "material.pem"
        target.write_text(value, encoding="utf-8")
        target.chmod(0o600)
        yield str(target)


def _load_key_pair(context: ssl.SSLContext, certificate: str, key: str, *, role: str) -> None:
    if not certificate or not key:
        raise TLSConfigError(f"{role} TLS requires both a {role} certificate and a {role} key")
    with _material_path(certificate) as certfile, _material_path(key) as keyfile:
        try:
            context.load_cert_chain(certfile, keyfile)
        except (ssl.SSLError, OSError) as exc:
            raise TLSConfigError(f"failed to load {role} key pair: {exc}") from exc


def _load_ca(context: ssl.SSLContext, value: str, *, role: str) -> None:
    try:
        pem = file_or_content(value).decode("ascii")
        context.load_verify_locations(cadata=pem)
    except (ssl.SSLError, ValueError, OSError) as exc:
        raise TLSConfigError(f"failed to add {role} CA certificate to the trust store: {exc}") from exc


def client_ssl_context(endpoint: Endpoint) -> ssl.SSLContext | None:
    """Return the client-side context for *endpoint*, or ``None`` when TLS is off.

    ``server`` and ``mtls`` need ``SERVER_CACERT``; the system trust store is
    always included. ``mtls`` also loads ``CLIENT_CERT``/``CLIENT_KEY``.
    """

    mode = endpoint.tls_mode()
    if mode == TLS_NONE:
        return None
    server_ca = endpoint.server_cacert.strip()
    if not server_ca:
        raise TLSConfigError("server TLS requires a valid server CA certificate")
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if server_ca != EXTERNAL_CA:
        _load_ca(context, server_ca, role="server")
    if mode == TLS_MUTUAL:
        _load_key_pair(context, endpoint.client_cert, endpoint.client_key, role="client")
    log_debug("tls_client_context", source="tls", path=None, endpoint=endpoint.name, mode=mode)
    return context


def server_ssl_context(endpoint: Endpoint) -> ssl.SSLContext | None:
    """Return the server-side context for *endpoint*, or ``None`` when TLS is off.

    ``server`` and ``mtls`` load ``SERVER_CERT``/``SERVER_KEY``; ``mtls`` also
    requires ``CLIENT_CACERT`` and demands a client certificate.
    """

    mode = endpoint.tls_mode()
    if mode == TLS_NONE:
        return None
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    _load_key_pair(context, endpoint.server_cert, endpoint.server_key, role="server")
    if mode == TLS_MUTUAL:
        client_ca = endpoint.client_cacert.strip()
        if not client_ca:
            raise TLSConfigError("client CA cert required for mTLS")
        _load_ca(context, client_ca, role="client")
        context.verify_mode = ssl.CERT_REQUIRED
    log_debug("tls_server_context", source="tls", path=None, endpoint=endpoint.name, mode=mode)
    return context


class HTTPClientInfo(NamedTuple):
    """Base URL plus the TLS context an HTTP client should use (``None`` for plain HTTP)."""

    url: str
    ssl_context: ssl.SSLContext | None


def http_client_info(endpoint: Endpoint) -> HTTPClientInfo:
    """Return the base URL and client TLS context for *endpoint*.

    Examples
    --------
    >>> http_client_info(Endpoint(address="localhost:8080", path="api/v1"))
    HTTPClientInfo(url='http://localhost:8080/api/v1', ssl_context=None)
    """

    context = client_ssl_context(endpoint)
    scheme = "https" if context is not None else "http"
    return HTTPClientInfo(urlunsplit((scheme, endpoint.address, endpoint.path, "", "")), context)


def split_host_port(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6]:port``) into its parts.

    Examples
    --------
    >>> split_host_port("localhost:8443"), split_host_port("[::1]:53"), split_host_port(":80")
    (('localhost', 8443), ('::1', 53), ('', 80))
    """

    if address.startswith("["):
        host, bracket, rest = address[1:].partition("]")
        if not bracket or not rest.startswith(":"):
            raise TLSConfigError(f"malformed address in endpoint {address!r}")
        port_text = rest[1:]
    else:
        host, separator, port_text = address.rpartition(":")
        if not separator or ":" in host:
            raise TLSConfigError(f"malformed address in endpoint {address!r}")
    if not port_text.isdigit() or int(port_text) > 65535:
        raise TLSConfigError(f"malformed port in endpoint address {address!r}")
    return host, int(port_text)


def listen_address(endpoint: Endpoint, all_interfaces: bool = False) -> tuple[str, int]:
    """Return the ``(host, port)`` a server for *endpoint* should bind."""

    host, port = split_host_port(endpoint.address)
    return ("" if all_interfaces else host), port


def server_listener(endpoint: Endpoint, all_interfaces: bool = False, *, backlog: int | None = None) -> socket.socket:
    """Open a TCP listener for *endpoint*, TLS-wrapped when the endpoint uses TLS.

    The TLS context is built before binding so configuration errors never
    leave a bound socket behind. Bind failures propagate as :class:`OSError`.
    """

    context = server_ssl_context(endpoint)
    host, port = listen_address(endpoint, all_interfaces)
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    listener = socket.create_server((host, port), family=family, backlog=backlog)
    log_debug("listener_opened", source="tls", path=None, endpoint=endpoint.name, address=listener.getsockname())
    if context is None:
        return listener
    return context.wrap_socket(listener, server_side=True)
