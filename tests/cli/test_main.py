"""Tests for the customhook CLI."""

import json as _json
import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import click.testing as _click_testing
import pytest as _pytest
import yaml as _yaml

import customhook
import customhook.cli as cli
import customhook.config as config


@_pytest.fixture
def domain_file(tmp_path: _pathlib.Path, domain_xml: bytes) -> _pathlib.Path:
    path = tmp_path / "domain.xml"
    path.write_bytes(domain_xml)
    return path


def _write(path: _pathlib.Path, data: bytes) -> _pathlib.Path:
    path.write_bytes(data)
    return path


class TestCLIBasics:
    """Top-level group behavior."""

    def test_help(self, cli_runner: _click_testing.CliRunner) -> None:
        """--help lists the commands."""
        result = cli_runner.invoke(cli.cli, ["--help"])
        assert result.exit_code == 0
        assert "merge" in result.output
        assert "info" in result.output
        assert "config" in result.output

    def test_version(self, cli_runner: _click_testing.CliRunner) -> None:
        """--version prints the package version."""
        result = cli_runner.invoke(cli.cli, ["--version"])
        assert result.exit_code == 0
        assert customhook.__version__ in result.output

    def test_missing_config_file(
        self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path
    ) -> None:
        """A --config file that does not exist is reported."""
        result = cli_runner.invoke(cli.cli, ["--config", str(tmp_path / "nope.yaml"), "info"])
        assert result.exit_code == 1
        assert "file not found" in result.output

    def test_invalid_config_value(
        self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path
    ) -> None:
        """Invalid values in a config file are reported."""
        path = tmp_path / "bad.yaml"
        path.write_text("hook:\n  version: v9\n")
        result = cli_runner.invoke(cli.cli, ["--config", str(path), "info"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestMergeCommand:
    """Tests for `customhook merge`."""

    def test_set_to_output_file(
        self,
        cli_runner: _click_testing.CliRunner,
        domain_file: _pathlib.Path,
        tmp_path: _pathlib.Path,
    ) -> None:
        """--set overrides are applied and written to -o."""
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli.cli,
            ["merge", str(domain_file), "--set", "devices.disk.driver=qemu", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        written = out.read_bytes()
        assert written.endswith(b"\n")
        assert b"<disk><driver>qemu</driver></disk>" in written

    def test_stdin_to_stdout(self, cli_runner: _click_testing.CliRunner) -> None:
        """'-' reads the document from stdin."""
        result = cli_runner.invoke(
            cli.cli,
            ["--log-level", "error", "merge", "-", "--set", "name=vm1"],
            input=b"<domain/>",
        )
        assert result.exit_code == 0, result.output
        assert result.output == "<domain><name>vm1</name></domain>\n"

    def test_vmi_annotations(
        self,
        cli_runner: _click_testing.CliRunner,
        tmp_path: _pathlib.Path,
        vmi_factory: _typing.Callable[..., bytes],
    ) -> None:
        """Annotation overrides come from --vmi; --set runs after them."""
        vmi = _write(
            tmp_path / "vmi.json",
            vmi_factory({"custom.kubevirt.io/name": "from-vmi", "custom.kubevirt.io/uuid": "u1"}),
        )
        domain = _write(tmp_path / "domain.xml", b"<domain/>")
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli.cli,
            ["merge", str(domain), "--vmi", str(vmi), "--set", "name=from-cli", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == b"<domain><name>from-cli</name><uuid>u1</uuid></domain>\n"

    def test_prefix_option(
        self,
        cli_runner: _click_testing.CliRunner,
        tmp_path: _pathlib.Path,
        vmi_factory: _typing.Callable[..., bytes],
    ) -> None:
        """--prefix selects annotations under another prefix."""
        vmi = _write(tmp_path / "vmi.json", vmi_factory({"x.io/name": "vm1"}))
        domain = _write(tmp_path / "domain.xml", b"<domain/>")
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli.cli,
            ["merge", str(domain), "--vmi", str(vmi), "--prefix", "x.io/", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == b"<domain><name>vm1</name></domain>\n"

    def test_indent_from_environment(
        self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path
    ) -> None:
        """merge.indent can be set through the environment."""
        domain = _write(tmp_path / "domain.xml", b"<domain/>")
        out = tmp_path / "out.xml"
        with _mock.patch.dict(_os.environ, {"CUSTOMHOOK_MERGE__INDENT": "true"}):
            result = cli_runner.invoke(
                cli.cli, ["merge", str(domain), "--set", "name=vm", "-o", str(out)]
            )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == b"<domain>\n  <name>vm</name>\n</domain>\n"

    def test_no_indent_flag_beats_config(
        self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path
    ) -> None:
        """--no-indent overrides the configured value."""
        conf = tmp_path / "conf.yaml"
        conf.write_text("merge:\n  indent: true\n")
        domain = _write(tmp_path / "domain.xml", b"<domain/>")
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli.cli,
            ["--config", str(conf), "merge", str(domain), "--set", "name=vm", "--no-indent",
             "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == b"<domain><name>vm</name></domain>\n"

    def test_report(self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path) -> None:
        """--report lists applied and skipped overrides."""
        domain = _write(tmp_path / "domain.xml", b"<domain><disk/><disk/></domain>")
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli.cli,
            ["--log-level", "error", "merge", str(domain), "--set", "name=vm1",
             "--set", "disk=x", "--report", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert "applied: name=vm1" in result.output
        assert "skipped: disk=x (" in result.output
        assert "repeated elements" in result.output

    def test_skip_is_logged(self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path) -> None:
        """Skipped overrides are logged with the sidecar component."""
        domain = _write(tmp_path / "domain.xml", b"<domain><disk/><disk/></domain>")
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli.cli, ["merge", str(domain), "--set", "disk.driver=x", "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert "[custom-hook-sidecar]" in result.output
        assert "Failed to set value 'x' to path disk.driver" in result.output

    def test_malformed_domain(self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path) -> None:
        """A malformed document exits with an error."""
        domain = _write(tmp_path / "domain.xml", b"<domain>")
        result = cli_runner.invoke(
            cli.cli, ["--log-level", "error", "merge", str(domain), "--set", "name=vm"]
        )
        assert result.exit_code == 1
        assert "not well-formed" in result.output

    def test_unensurable_path(self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path) -> None:
        """A parent path that cannot be created exits with an error."""
        domain = _write(tmp_path / "domain.xml", b"<domain><disk/><disk/></domain>")
        result = cli_runner.invoke(
            cli.cli, ["--log-level", "error", "merge", str(domain), "--set", "disk.driver.name=x"]
        )
        assert result.exit_code == 1
        assert "repeated elements" in result.output

    def test_invalid_vmi(self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path) -> None:
        """An undecodable VMI exits with an error."""
        domain = _write(tmp_path / "domain.xml", b"<domain/>")
        vmi = _write(tmp_path / "vmi.json", b"not json")
        result = cli_runner.invoke(cli.cli, ["merge", str(domain), "--vmi", str(vmi)])
        assert result.exit_code == 1
        assert "Failed to unmarshal" in result.output

    def test_bad_assignment(self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path) -> None:
        """--set without '=' is a usage error."""
        domain = _write(tmp_path / "domain.xml", b"<domain/>")
        result = cli_runner.invoke(cli.cli, ["merge", str(domain), "--set", "novalue"])
        assert result.exit_code == 2
        assert "PATH=VALUE" in result.output


class TestInfoCommand:
    """Tests for `customhook info`."""

    def test_default(self, cli_runner: _click_testing.CliRunner) -> None:
        """Info JSON uses the configured version."""
        result = cli_runner.invoke(cli.cli, ["--log-level", "error", "info"])
        assert result.exit_code == 0, result.output
        assert _json.loads(result.output) == {
            "name": "custom",
            "versions": ["v1alpha2"],
            "hookPoints": [{"name": "OnDefineDomain", "priority": 0}],
        }

    def test_hook_version_option(self, cli_runner: _click_testing.CliRunner) -> None:
        """--hook-version changes the advertised version."""
        result = cli_runner.invoke(
            cli.cli, ["--log-level", "error", "info", "--hook-version", "v1alpha1"]
        )
        assert result.exit_code == 0, result.output
        assert _json.loads(result.output)["versions"] == ["v1alpha1"]

    def test_unknown_hook_version(self, cli_runner: _click_testing.CliRunner) -> None:
        """Unsupported versions are rejected by the option."""
        result = cli_runner.invoke(cli.cli, ["info", "--hook-version", "v2"])
        assert result.exit_code == 2


class TestConfigCommand:
    """Tests for `customhook config`."""

    def test_overview(self, cli_runner: _click_testing.CliRunner) -> None:
        """Without a subcommand an overview is printed."""
        result = cli_runner.invoke(cli.cli, ["config"])
        assert result.exit_code == 0, result.output
        assert "Hook Version: v1alpha2" in result.output
        assert "Annotation Prefix: custom.kubevirt.io/" in result.output

    def test_show_yaml(self, cli_runner: _click_testing.CliRunner) -> None:
        """config show prints the effective configuration as YAML."""
        result = cli_runner.invoke(cli.cli, ["config", "show"])
        assert result.exit_code == 0, result.output
        expected = config.Settings.construct_without_dotenv().to_display_dict()
        assert _yaml.safe_load(result.output) == expected

    def test_show_json_section(self, cli_runner: _click_testing.CliRunner) -> None:
        """--json --section prints one section as JSON."""
        result = cli_runner.invoke(cli.cli, ["config", "show", "--json", "--section", "merge"])
        assert result.exit_code == 0, result.output
        assert _json.loads(result.output) == {"merge": {"sort_overrides": False, "indent": False}}

    def test_show_reflects_config_file(
        self, cli_runner: _click_testing.CliRunner, tmp_path: _pathlib.Path
    ) -> None:
        """Values from --config appear in config show."""
        conf = tmp_path / "conf.yaml"
        conf.write_text("hook:\n  annotation_prefix: custom.example.io/\n")
        result = cli_runner.invoke(
            cli.cli, ["--config", str(conf), "config", "show", "--json", "--section", "hook"]
        )
        assert result.exit_code == 0, result.output
        assert _json.loads(result.output)["hook"]["annotation_prefix"] == "custom.example.io/"

    def test_unknown_section(self, cli_runner: _click_testing.CliRunner) -> None:
        """Unknown sections are an error."""
        result = cli_runner.invoke(cli.cli, ["config", "show", "--section", "nope"])
        assert result.exit_code == 1
        assert "Unknown section: nope" in result.output
