from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from xvals.adapters.env.default import EnvProvider
from xvals.adapters.mapping.default import MapProvider
from xvals.application.chain import ProviderChain, parse_bool, parse_int
from xvals.domain.errors import NotFound, ParseError, SourceUnavailable

FIXTURE = {
    "name": "John",
    "phone": "12345",
    "home": "trUe",
    "not-home": "false",
}

KEYS = st.text(alphabet="abcdefghij_", min_size=1, max_size=6)
VALUES = st.text(max_size=8)
MAPPINGS = st.dictionaries(KEYS, VALUES, max_size=6)


class FailingProvider(MapProvider):
    def __init__(self, values=None) -> None:
        super().__init__(values, name="failing")
        self.attempts = 0

    def reload(self) -> None:
        self.attempts += 1
        raise SourceUnavailable("disk on fire")


def test_map_fixture_lookups() -> None:
    chain = ProviderChain([MapProvider(FIXTURE)])
    assert chain.value("name") == "John"
    assert chain.value("phone") == "12345"
    assert chain.int_value("phone") == 12345
    with pytest.raises(ParseError):
        chain.bool_value("home")
    assert chain.bool_value("not-home") is False
    with pytest.raises(NotFound):
        chain.value("lastname")


def test_lookup_is_case_insensitive() -> None:
    chain = ProviderChain([MapProvider({"Name": "John"})])
    assert chain.value("NAME") == "John"
    assert chain.has_value("nAmE")


def test_parse_error_is_distinct_from_not_found() -> None:
    chain = ProviderChain([MapProvider({"count": "many"})])
    with pytest.raises(ParseError):
        chain.int_value("count")
    with pytest.raises(NotFound):
        chain.int_value("missing")


def test_defaults() -> None:
    chain = ProviderChain([MapProvider({"count": "many", "flag": "1"})])
    assert chain.value_or("missing", "fallback") == "fallback"
    assert chain.int_value_or("count", 7) == 7
    assert chain.int_value_or("missing", 3) == 3
    assert chain.bool_value_or("flag", False) is True
    assert chain.bool_value_or("missing", True) is True


def test_first_registered_provider_wins() -> None:
    chain = ProviderChain()
    chain.append(MapProvider({"name": "John"}))
    chain.append(EnvProvider(["NAME=Jane", "OTHER=x"]))
    chain.providers[1].reload()
    assert chain.value("name") == "John"
    assert chain.dump()["name"] == "John"
    assert chain.value("other") == "x"


def test_dump_with_origin_names_the_winning_provider() -> None:
    chain = ProviderChain([MapProvider({"a": "1"}, name="high"), MapProvider({"a": "2", "b": "3"}, name="low")])
    assert chain.dump_with_origin() == {"a": "high", "b": "low"}


def test_empty_chain() -> None:
    chain = ProviderChain()
    assert chain.dump() == {}
    assert not chain.has_value("anything")
    assert len(chain) == 0


def test_reload_attempts_every_provider_and_reports_failures() -> None:
    environ = {"KEY": "old"}
    env = EnvProvider(lambda: environ)
    failing = FailingProvider({"stale": "kept"})
    chain = ProviderChain([failing, env])
    env.reload()
    environ["KEY"] = "new"
    with pytest.raises(SourceUnavailable, match="failing: disk on fire"):
        chain.reload()
    assert failing.attempts == 1
    assert chain.value("key") == "new"
    assert chain.value("stale") == "kept"


@pytest.mark.parametrize("text", ["1", "t", "T", "TRUE", "true", "True"])
def test_parse_bool_true(text) -> None:
    assert parse_bool(text) is True


@pytest.mark.parametrize("text", ["0", "f", "F", "FALSE", "false", "False"])
def test_parse_bool_false(text) -> None:
    assert parse_bool(text) is False


@pytest.mark.parametrize("text", ["trUe", "yes", "", " true", "2"])
def test_parse_bool_rejects(text) -> None:
    with pytest.raises(ParseError):
        parse_bool(text)


@pytest.mark.parametrize(("text", "expected"), [("0", 0), ("-7", -7), ("+12", 12), ("007", 7)])
def test_parse_int_accepts(text, expected) -> None:
    assert parse_int(text) == expected


@pytest.mark.parametrize("text", ["", " 1", "1 ", "1_000", "1.0", "0x10", "12\n", "-"])
def test_parse_int_rejects(text) -> None:
    with pytest.raises(ParseError):
        parse_int(text)


@given(MAPPINGS, MAPPINGS)
def test_dump_agrees_with_point_lookups(high, low) -> None:
    chain = ProviderChain([MapProvider(high), MapProvider(low)])
    merged = chain.dump()
    assert set(merged) == {key.lower() for key in (*high, *low)}
    for key, value in merged.items():
        assert chain.value(key) == value
    for key, value in high.items():
        assert merged[key.lower()] == value


def test_case_folding_matches_across_providers() -> None:
    chain = ProviderChain([MapProvider({"STRASSE": "main"}), EnvProvider(["GRÜẞE=hi"])])
    chain.providers[1].reload()
    assert chain.value("straße") == "main"
    assert chain.value("Strasse") == "main"
    assert chain.value("grüsse") == "hi"


def test_reload_continues_after_a_broken_environment_source() -> None:
    def broken() -> dict[str, str]:
        raise RuntimeError("environ unavailable")

    later = EnvProvider({"LATER": "1"})
    chain = ProviderChain([EnvProvider(broken), later])
    with pytest.raises(SourceUnavailable, match="environ unavailable"):
        chain.reload()
    assert chain.value("later") == "1"
