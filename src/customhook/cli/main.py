"""
Main CLI entry point for customhook.

Provides the command-line interface using Click. The hook callbacks can be
exercised offline: `merge` runs the domain rewrite on files and `info`
prints what the hook would register.
"""

import json as _json
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic
import yaml as _yaml

import customhook
import customhook.config as config
import customhook.domain as domain
import customhook.hooks as hooks
import customhook.logging as logging
import customhook.overrides as overrides

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _load_settings(config_file: _pathlib.Path | None) -> config.Settings:
    try:
        return config.Settings.load(config_file)
    except config.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"Invalid configuration: {e}") from e


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(customhook.__version__, "-v", "--version", prog_name="customhook")
@_click.option(
    "--config",
    "config_file",
    type=_click.Path(dir_okay=False, path_type=_pathlib.Path),
    default=None,
    help="YAML config file applied on top of the user config",
)
@_click.option(
    "--log-level",
    type=_click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (default: from config)",
)
@_click.pass_context
def cli(
    ctx: _click.Context,
    config_file: _pathlib.Path | None,
    log_level: str | None,
) -> None:
    """
    customhook - domain XML override hook sidecar.

    Rewrites a VM's domain XML from dotted-path annotations such as
    custom.kubevirt.io/devices.disk.driver=qemu.

    \b
    Examples:
        customhook merge domain.xml --vmi vmi.json
        customhook merge domain.xml --set devices.disk.driver=qemu
        customhook info --hook-version v1alpha1
        customhook config show --json
    """
    settings = _load_settings(config_file)

    if log_level:
        settings.logging.level = log_level.lower()  # type: ignore[assignment]

    logging.configure_logging(settings.logging.level, settings.logging.component)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@_click.argument("domain_xml", type=_click.File("rb"))
@_click.option(
    "--vmi",
    "vmi_file",
    type=_click.File("rb"),
    default=None,
    help="VM instance JSON whose annotations provide overrides",
)
@_click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="PATH=VALUE",
    help="Extra override, applied after annotation overrides (repeatable)",
)
@_click.option("--prefix", type=str, default=None, help="Annotation prefix selecting overrides")
@_click.option(
    "--sort/--no-sort",
    "sort_overrides",
    default=None,
    help="Apply annotation overrides sorted by path",
)
@_click.option("--indent/--no-indent", default=None, help="Pretty-print the merged document")
@_click.option("--report", is_flag=True, help="Print applied and skipped overrides to stderr")
@_click.option(
    "-o",
    "--output",
    type=_click.File("wb"),
    default="-",
    help="Write the merged document here (default: stdout)",
)
@_click.pass_context
def merge(
    ctx: _click.Context,
    domain_xml: _typing.BinaryIO,
    vmi_file: _typing.BinaryIO | None,
    assignments: tuple[str, ...],
    prefix: str | None,
    sort_overrides: bool | None,
    indent: bool | None,
    report: bool,
    output: _typing.BinaryIO,
) -> None:
    """Apply overrides to DOMAIN_XML ('-' reads stdin).

    \b
    Examples:
        customhook merge domain.xml --vmi vmi.json -o merged.xml
        customhook merge - --set devices.emulator=/usr/bin/qemu < domain.xml
    """
    settings: config.Settings = ctx.obj["settings"]

    requested: list[domain.Override] = []
    if vmi_file is not None:
        try:
            vmi = overrides.load_vmi(vmi_file.read())
        except overrides.InvalidVMIError as e:
            raise _click.ClickException(str(e)) from e
        requested.extend(
            overrides.extract_overrides(
                vmi.annotations,
                prefix or settings.hook.annotation_prefix,
                sort=settings.merge.sort_overrides if sort_overrides is None else sort_overrides,
            )
        )

    try:
        requested.extend(overrides.parse_assignments(assignments))
    except ValueError as e:
        raise _click.BadParameter(str(e), param_hint="--set") from e

    merger = domain.PathMerger(indent=settings.merge.indent if indent is None else indent)
    try:
        result = merger.merge_with_report(domain_xml.read(), requested)
    except domain.MergeError as e:
        raise _click.ClickException(str(e)) from e

    output.write(result.document)
    output.write(b"\n")

    if report:
        for applied in result.applied:
            _click.echo(f"applied: {applied.path}={applied.value}", err=True)
        for skipped in result.skipped:
            _click.echo(
                f"skipped: {skipped.override.path}={skipped.override.value} ({skipped.reason})",
                err=True,
            )


@cli.command()
@_click.option(
    "--hook-version",
    type=_click.Choice(sorted(v.value for v in hooks.HookVersion)),
    default=None,
    help="Hook API version to advertise (default: from config)",
)
@_click.pass_context
def info(ctx: _click.Context, hook_version: str | None) -> None:
    """Print the hook's Info result as JSON."""
    settings: config.Settings = ctx.obj["settings"]
    service = hooks.HookService(
        name=settings.hook.name,
        version=hook_version or settings.hook.version,
        annotation_prefix=settings.hook.annotation_prefix,
    )
    _click.echo(_json.dumps(service.info().to_dict(), indent=2))


@cli.group(name="config", invoke_without_command=True)
@_click.pass_context
def config_cmd(ctx: _click.Context) -> None:
    """Configuration commands.

    Without a subcommand, shows a configuration overview.
    """
    if ctx.invoked_subcommand is None:
        settings: config.Settings = ctx.obj["settings"]
        _click.echo("customhook Configuration:")
        _click.echo(f"  Hook Name: {settings.hook.name}")
        _click.echo(f"  Hook Version: {settings.hook.version}")
        _click.echo(f"  Annotation Prefix: {settings.hook.annotation_prefix}")
        _click.echo(f"  Sort Overrides: {settings.merge.sort_overrides}")
        _click.echo(f"  Log Level: {settings.logging.level}")
        _click.echo("\nRun 'customhook config show' for full configuration details.")


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--section", type=str, default=None, help="Show specific section only")
@_click.pass_context
def config_show(ctx: _click.Context, as_json: bool, section: str | None) -> None:
    """Show effective configuration from all sources.

    \b
    Examples:
        customhook config show                  # YAML
        customhook config show --json           # JSON
        customhook config show --section hook   # One section
    """
    settings: config.Settings = ctx.obj["settings"]
    full_config = settings.to_display_dict()

    if section:
        if section not in full_config:
            raise _click.ClickException(f"Unknown section: {section}")
        full_config = {section: full_config[section]}

    if as_json:
        _click.echo(_json.dumps(full_config, indent=2))
    else:
        _click.echo(_yaml.dump(full_config, default_flow_style=False, sort_keys=False), nl=False)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="customhook")


if __name__ == "__main__":
    main()
