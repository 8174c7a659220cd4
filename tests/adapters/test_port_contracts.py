"""Default adapters and object kinds must satisfy the application-layer ports."""

from __future__ import annotations

from pathlib import Path

from tests.support import write, write_profiles
from xvals.adapters.dotenv.default import DotEnvProvider
from xvals.adapters.env.default import EnvProvider
from xvals.adapters.file.default import ConfigFileProvider
from xvals.adapters.file_loaders.structured import JSONFileLoader, TOMLFileLoader, YAMLFileLoader
from xvals.adapters.mapping.default import MapProvider
from xvals.adapters.profile.default import ProfileProvider
from xvals.application import ports
from xvals.domain.endpoint import ENDPOINT_DESCRIPTOR
from xvals.domain.objects import generic_descriptor


def test_providers_fulfil_source_provider(tmp_path: Path) -> None:
    providers = [
        MapProvider({"a": "1"}),
        EnvProvider({"A": "1"}),
        ConfigFileProvider(write(tmp_path / "values.yaml", "a: 1\n")),
        ProfileProvider(write_profiles(tmp_path / "profiles.yaml", "p", {"p": {"a": "1"}})),
        DotEnvProvider(write(tmp_path / ".env", "A=1\n")),
    ]
    for provider in providers:
        assert isinstance(provider, ports.SourceProvider)
        provider.reload()
        assert provider.value("A") == "1"
        assert provider.dump() == {"a": "1"}
        assert isinstance(provider.name, str) and provider.name


def test_loaders_fulfil_file_loader() -> None:
    for loader in (YAMLFileLoader(), JSONFileLoader(), TOMLFileLoader()):
        assert isinstance(loader, ports.FileLoader)


def test_descriptors_and_objects_fulfil_ports() -> None:
    for descriptor in (ENDPOINT_DESCRIPTOR, generic_descriptor("TO", ["name"])):
        assert isinstance(descriptor, ports.Descriptor)
        obj = descriptor.construct()
        assert isinstance(obj, ports.Object)
        assert obj.type() == descriptor.type()
        assert set(obj.fields()) == set(descriptor.fields())
