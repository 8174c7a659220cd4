from __future__ import annotations

from pathlib import Path

import pytest

from tests.support import write
from xvals.adapters.dotenv.default import DotEnvProvider, parse_dotenv
from xvals.domain.errors import InvalidFormat, SourceUnavailable

DOTENV = """\
# endpoint settings
EP_API_ADDRESS=localhost:8443
export EP_API_TLS=server
TOKEN="s3cret # not a comment"
QUOTED='single'
INLINE=value # trailing comment
EMPTY=

URL=http://h/?a=b
"""


def test_parse_dotenv(tmp_path: Path) -> None:
    parsed = parse_dotenv(write(tmp_path / ".env", DOTENV))
    assert parsed == {
        "ep_api_address": "localhost:8443",
        "ep_api_tls": "server",
        "token": "s3cret # not a comment",
        "quoted": "single",
        "inline": "value",
        "empty": "",
        "url": "http://h/?a=b",
    }


def test_malformed_line(tmp_path: Path) -> None:
    with pytest.raises(InvalidFormat, match="line 2"):
        parse_dotenv(write(tmp_path / ".env", "A=1\nBROKEN\n"))


def test_provider_reload(tmp_path: Path) -> None:
    provider = DotEnvProvider(write(tmp_path / ".env", DOTENV))
    provider.reload()
    assert provider.name.startswith("dotenv:")
    assert provider.value("EP_API_TLS") == "server"


def test_failed_reload_keeps_previous_values(tmp_path: Path) -> None:
    path = write(tmp_path / ".env", "A=1\n")
    provider = DotEnvProvider(path)
    provider.reload()
    write(path, "=missing key\n")
    with pytest.raises(SourceUnavailable):
        provider.reload()
    assert provider.value("a") == "1"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SourceUnavailable):
        DotEnvProvider(tmp_path / ".env").reload()
