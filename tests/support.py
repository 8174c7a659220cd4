"""Shared helpers for the test-suite.

Kept deliberately small: writing value files and profile documents is the
only setup most scenarios need.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

import yaml

TO_FIELDS = ("name", "age", "phone", "email")

PEOPLE = {
    "to_object1_name": "John",
    "to_object1_age": "44",
    "to_object1_phone": "122",
    "to_object2_name": "Lisa",
    "to_object2_age": "52",
    "to_object2_phone": "123",
    "to_object3_name": "Andrew",
    "to_object3_age": "12",
    "to_object3_phone": "124",
}

ENDPOINT_VARS = {
    "ep_ep1_Address": "Address",
    "ep_ep1_TLS": "TLS",
    "ep_ep1_Server_CACert": "ServerCACert",
    "ep_ep1_Server_Cert": "ServerCert",
    "ep_ep1_Server_Key": "ServerKey",
    "ep_ep1_Client_CACert": "ClientCACert",
    "ep_ep1_Client_Cert": "ClientCert",
    "ep_ep1_Client_Key": "ClientKey",
}


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_values(path: Path, values: Mapping[str, object]) -> Path:
    """Write *values* as a flat YAML document."""

    return write(path, yaml.safe_dump(dict(values), sort_keys=False))


def write_profiles(path: Path, current: str, profiles: Mapping[str, Mapping[str, str]]) -> Path:
    """Write a profile document selecting *current*."""

    document = {"current_profile": current, "profiles": {name: dict(values) for name, values in profiles.items()}}
    return write(path, yaml.safe_dump(document, sort_keys=False))
