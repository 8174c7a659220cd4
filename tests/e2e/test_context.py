"""End-to-end scenarios through :class:`xvals.Context` and the default-context helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

import xvals
from tests.support import ENDPOINT_VARS, PEOPLE, TO_FIELDS, write, write_profiles, write_values
from xvals import Context, Endpoint, NotFound, ReloadSummary, SourceUnavailable, XvalsError


def test_first_registered_source_wins() -> None:
    ctx = Context()
    ctx.with_map({"name": "John"})
    ctx.with_environment(["NAME=Jane", "HOME=/root"])
    assert ctx.value("name") == "John"
    assert ctx.value("home") == "/root"
    assert ctx.dump_with_origin() == {"name": "map", "home": "env"}


def test_every_source_kind_in_one_chain(tmp_path: Path) -> None:
    ctx = Context()
    ctx.with_map({"ep_api_tls": "none"}, name="overrides")
    ctx.with_config_file(write_values(tmp_path / "values.yaml", {"ep_api_address": "file:1", "workers": 8}))
    ctx.with_profile(write_profiles(tmp_path / "profiles.yaml", "dev", {"dev": {"ep_api_address": "profile:1", "ep_api_path": "/v1"}}))
    ctx.with_dotenv(write(tmp_path / ".env", "EP_API_PATH=/dotenv\nDEBUG=true\n"))
    ctx.with_environment({"DEBUG": "false", "WORKERS": "1"})

    assert ctx.int_value("workers") == 8
    assert ctx.bool_value("debug") is True
    ctx.with_object(xvals.ENDPOINT_DESCRIPTOR)
    ctx.reload_objects()
    endpoint = ctx.get_endpoint("API")
    assert (endpoint.address, endpoint.tls, endpoint.path) == ("file:1", "none", "/v1")


def test_failing_initial_reload_leaves_chain_unchanged(tmp_path: Path) -> None:
    ctx = Context()
    ctx.with_map({"a": "1"})
    with pytest.raises(SourceUnavailable):
        ctx.with_config_file(tmp_path / "absent.yaml")
    assert len(ctx.chain) == 1


def test_reload_refreshes_file_sources(tmp_path: Path) -> None:
    path = write_values(tmp_path / "values.yaml", {"ep_api_address": "old:1"})
    ctx = Context()
    ctx.with_config_file(path)
    ctx.with_object(xvals.ENDPOINT_DESCRIPTOR)
    ctx.reload_objects()
    write_values(path, {"ep_api_address": "new:2"})
    ctx.reload()
    ctx.reload_objects()
    assert ctx.get_endpoint("api").address == "new:2"


def test_fresh_reload_drops_vanished_objects() -> None:
    environ = dict(ENDPOINT_VARS)
    ctx = Context()
    ctx.with_environment(lambda: environ)
    ctx.with_object(xvals.ENDPOINT_DESCRIPTOR)
    ctx.reload_objects()
    environ.clear()
    ctx.reload()
    ctx.reload_objects()
    assert ctx.get_endpoint("ep1").address == "Address"
    assert ctx.reload_objects(fresh=True) == ReloadSummary(applied=0, skipped=0)
    with pytest.raises(NotFound):
        ctx.get_endpoint("ep1")


def test_generic_objects_through_context() -> None:
    ctx = Context()
    ctx.with_map(PEOPLE)
    ctx.with_object(xvals.generic_descriptor("TO", TO_FIELDS))
    assert ctx.reload_objects() == ReloadSummary(applied=9, skipped=0)
    assert ctx.get_object("to", "object2").get("name") == "Lisa"
    created = ctx.new_object("to", "kalle")
    assert ctx.objects()["TO+KALLE"] is created


def test_get_endpoint_rejects_foreign_object() -> None:
    ctx = Context()
    ctx.with_map({"ep_api_address": "h:1"})
    ctx.with_object(xvals.generic_descriptor("EP", ["address"]))
    ctx.reload_objects()
    with pytest.raises(XvalsError, match="Endpoint"):
        ctx.get_endpoint("api")


def test_default_context_helpers() -> None:
    xvals.with_map({"ep_api_address": "localhost:1", "retries": "3"})
    xvals.with_environment({"RETRIES": "9", "VERBOSE": "t"})
    assert xvals.int_value("retries") == 3
    assert xvals.bool_value("verbose") is True
    assert xvals.int_value_or("absent", 5) == 5
    assert xvals.bool_value_or("absent", False) is False
    assert xvals.value_or("absent", "x") == "x"
    assert xvals.has_value("RETRIES")
    assert xvals.dump()["retries"] == "3"
    assert xvals.dump_with_origin()["verbose"] == "env"
    xvals.reload()
    assert xvals.reload_objects() == ReloadSummary(applied=1, skipped=2)
    assert isinstance(xvals.get_endpoint("api"), Endpoint)
    assert xvals.get_object("ep", "api").get("address") == "localhost:1"
    assert list(xvals.objects()) == ["EP+API"]
    assert xvals.default_context() is xvals.default_context()


def test_default_context_reset_forgets_sources() -> None:
    xvals.with_map({"a": "1"})
    xvals.reset_default_context()
    assert not xvals.has_value("a")
    with pytest.raises(NotFound):
        xvals.value("a")


def test_default_context_knows_endpoints_only() -> None:
    with pytest.raises(xvals.UnknownType):
        xvals.new_object("TO", "x")
    xvals.with_object(xvals.generic_descriptor("TO", TO_FIELDS))
    assert xvals.new_object("TO", "x").type() == "TO"


class _ObservingProvider(xvals.MapProvider):
    """Map provider that looks up an endpoint every time the chain is dumped."""

    def __init__(self, values, ctx: Context) -> None:
        super().__init__(values, name="observing")
        self.ctx = ctx
        self.seen: list[str] = []

    def dump(self) -> dict[str, str]:
        try:
            self.seen.append(self.ctx.get_endpoint("api").address)
        except NotFound:
            self.seen.append("<missing>")
        return super().dump()


def test_fresh_object_reload_never_exposes_an_empty_store() -> None:
    ctx = Context()
    provider = _ObservingProvider({"ep_api_address": "h:1"}, ctx)
    ctx.add_provider(provider)
    ctx.with_object(xvals.ENDPOINT_DESCRIPTOR)
    ctx.reload_objects()
    provider.seen.clear()
    ctx.reload_objects(fresh=True)
    assert provider.seen == ["h:1"]
    assert ctx.get_endpoint("api").address == "h:1"
