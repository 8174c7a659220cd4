"""`.env` file provider.

Purpose
-------
Serve ``KEY=VALUE`` lines from a dotenv file with the same flat, case-folded
key semantics as the environment provider, so secrets kept beside a project
can take part in the chain.

Contents
--------
* :class:`DotEnvProvider` – provider bound to one file path.
* :func:`parse_dotenv` / :func:`_strip_quotes` – strict line parser.

Key behaviours
--------------
* Blank lines and ``#`` comments are ignored; an optional ``export`` prefix
  is accepted.
* Surrounding quotes and trailing `` # comment`` fragments are stripped.
* A line without ``=`` makes the whole file invalid; the provider keeps its
  previous values and raises :class:`SourceUnavailable`.
"""

from __future__ import annotations

from pathlib import Path

from ...domain.errors import InvalidFormat, SourceUnavailable
from ...domain.objects import normalize_key
from ...observability import log_debug, log_error
from ..mapping.default import MapProvider


class DotEnvProvider(MapProvider):
    """Serve values parsed from a dotenv file.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> path = Path(tmp.name) / '.env'
    >>> _ = path.write_text('EP_API_ADDRESS=localhost:1\\nTOKEN="s3cret"\\n', encoding='utf-8')
    >>> provider = DotEnvProvider(path)
    >>> provider.reload()
    >>> provider.value('token')
    's3cret'
    >>> tmp.cleanup()
    """

    def __init__(self, path: str | Path, *, name: str | None = None) -> None:
        self.path = str(Path(path).absolute())
        super().__init__(name=name or f"dotenv:{self.path}")

    def reload(self) -> None:
        try:
            data = parse_dotenv(Path(self.path))
        except (InvalidFormat, OSError) as exc:
            log_error("provider_reload_failed", source=self.name, path=self.path, error=str(exc))
            raise SourceUnavailable(f"failed to reload {self.path}: {exc}") from exc
        self._replace(data)
        log_debug("provider_reloaded", source=self.name, path=self.path, keys=len(data))


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse *path* into a flat mapping, raising ``InvalidFormat`` on malformed lines."""

    result: dict[str, str] = {}
    with path.open("r", encoding="utf-8") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export ") :].lstrip()
            if "=" not in line:
                raise InvalidFormat(f"Malformed line {line_number} in {path}")
            key, value = line.split("=", 1)
            key = key.strip()
            if not key:
                raise InvalidFormat(f"Empty key on line {line_number} in {path}")
            result[normalize_key(key)] = _strip_quotes(value.strip())
    return result


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from ``value``.

    Examples
    --------
    >>> _strip_quotes('"token"')
    'token'
    >>> _strip_quotes("value # comment")
    'value'
    """

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    if value.startswith("#"):
        return ""
    if " #" in value:
        return value.split(" #", 1)[0].strip()
    return value
