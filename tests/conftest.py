"""
Shared pytest fixtures for customhook tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import click.testing as _click_testing
import pytest as _pytest

# =============================================================================
# Environment isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def isolated_env(tmp_path: _pathlib.Path) -> _typing.Iterator[dict[str, str]]:
    """Strip CUSTOMHOOK_* variables and point the user config dir at tmp_path."""
    env = {k: v for k, v in _os.environ.items() if not k.startswith("CUSTOMHOOK_")}
    env["CUSTOMHOOK_CONFIG_DIR"] = str(tmp_path / "user-config")
    with _mock.patch.dict(_os.environ, env, clear=True):
        yield env


@_pytest.fixture(autouse=True)
def reset_customhook_logger() -> _typing.Iterator[None]:
    """Undo logging setup done by CLI invocations."""
    logger = _logging.getLogger("customhook")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)


@_pytest.fixture
def cli_runner() -> _click_testing.CliRunner:
    """Click runner sharing the isolated environment."""
    return _click_testing.CliRunner()


# =============================================================================
# Sample documents
# =============================================================================

DOMAIN_XML = b"""<domain type="kvm">
  <name>testvmi</name>
  <memory unit="KiB">1048576</memory>
  <os>
    <type arch="x86_64" machine="q35">hvm</type>
  </os>
  <devices>
    <emulator>/usr/bin/qemu-system-x86_64</emulator>
    <interface type="bridge">
      <source bridge="br0"/>
    </interface>
  </devices>
</domain>
"""


@_pytest.fixture
def domain_xml() -> bytes:
    """A small libvirt domain definition."""
    return DOMAIN_XML


def make_vmi(annotations: dict[str, str] | None = None, **metadata: _typing.Any) -> bytes:
    """Build a VM instance JSON payload with the given annotations."""
    meta: dict[str, _typing.Any] = {"name": "testvmi", "namespace": "default"}
    meta.update(metadata)
    if annotations is not None:
        meta["annotations"] = annotations
    payload = {
        "apiVersion": "kubevirt.io/v1",
        "kind": "VirtualMachineInstance",
        "metadata": meta,
        "spec": {"domain": {"devices": {}}},
    }
    return _json.dumps(payload).encode("utf-8")


@_pytest.fixture
def vmi_factory() -> _typing.Callable[..., bytes]:
    """Factory for VM instance JSON payloads."""
    return make_vmi
