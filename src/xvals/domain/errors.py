"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by providers, the object store, the
composition root, and consuming applications. The hierarchy lives in the
domain layer so every outer ring may depend on it without creating cycles.

Contents
--------
* :class:`XvalsError` – umbrella base class for every library failure.
* :class:`NotFound` – key absent from all providers, or object absent from the
  store.
* :class:`ParseError` – value present but not convertible to bool/int.
* :class:`InvalidField` – field name not declared by an object's descriptor.
* :class:`UnknownType` – no descriptor registered for a type tag.
* :class:`AmbiguousDescriptor` – a type tag would make key decomposition
  ambiguous.
* :class:`SourceUnavailable` – a provider could not re-acquire its data.
* :class:`InvalidFormat` – structured loaders could not parse a document.
* :class:`TLSConfigError` – endpoint material unusable for TLS/network setup.

System Role
-----------
All failures are values raised to the immediate caller. Only the object
store's permissive key scan swallows conditions, and it reports how many keys
it skipped instead.
"""

from __future__ import annotations


class XvalsError(Exception):
    """Base type for all exceptions emitted by ``xvals``.

    Callers that do not need fine-grained handling catch this single type.
    """


class NotFound(XvalsError, KeyError):
    """Raised when a key, object, or backing resource does not exist.

    Why
    ----
    Missing configuration surfaces at the point of use so the caller decides
    between a default and an abort. Subclassing :class:`KeyError` keeps
    ``except KeyError`` call sites working.
    """

    def __str__(self) -> str:
        # KeyError quotes its argument; keep messages readable.
        return str(self.args[0]) if self.args else ""


class ParseError(XvalsError, ValueError):
    """Raised when a present value cannot be converted to the requested type."""


class InvalidField(XvalsError, KeyError):
    """Raised by ``get``/``set`` for a field the object's type does not declare."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownType(XvalsError, LookupError):
    """Raised when no descriptor is registered for the requested type tag."""


class AmbiguousDescriptor(XvalsError, ValueError):
    """Raised at registration when a type tag overlaps an existing tag's key prefix.

    Why
    ----
    With tags ``EP`` and ``EP_X`` a key such as ``EP_X_A_ADDRESS`` would split
    two ways; rejecting the registration keeps decomposition deterministic.
    """


class SourceUnavailable(XvalsError):
    """Raised when a provider's backing source cannot be read or parsed.

    Providers keep the data they held before the failed reload.
    """


class InvalidFormat(XvalsError):
    """Raised when an input artifact cannot be parsed into structured data.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`) and the
    dotenv parser.
    """


class TLSConfigError(XvalsError):
    """Raised when endpoint fields cannot be turned into TLS or socket settings."""
