"""CLI commands for configuration management."""

import json
import shutil
import sys
from typing import Any

import click  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from toggl_cli.core.config import ConfigManager

console = Console()
error_console = Console(stderr=True)

MASK = "********"
SECRET_KEYS = frozenset({"general.api_token"})


def _config_manager(ctx: click.Context) -> ConfigManager:
    obj = ctx.find_object(dict) or {}
    return obj.get("config") or ConfigManager()


def _masked(key: str, value: Any) -> Any:
    return MASK if key in SECRET_KEYS and value is not None else value


def _default(key: str) -> Any:
    node: Any = ConfigManager.DEFAULT_CONFIG
    for part in key.split("."):
        node = node.get(part) if isinstance(node, dict) else None
    return node


def parse_value(key: str, text: str) -> Any:
    """Turn command line text into a typed value for ``key``.

    'null' clears any setting. Settings whose default is text (durations,
    names) are otherwise kept verbatim. For the rest 'true'/'false',
    integers and comma-separated integer lists are recognised.
    """
    lowered = text.strip().lower()
    if lowered == "null":
        return None
    if key in SECRET_KEYS or isinstance(_default(key), str):
        return text

    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    try:
        if "," in lowered:
            return [int(part) for part in lowered.split(",") if part.strip()]
        return int(lowered)
    except ValueError:
        return text


@click.group()  # type: ignore[misc]
def config() -> None:
    """Manage toggl-cli configuration.

    Configuration is stored in ~/.toggl-cli/config.yml unless --config is given.
    """


@config.command("show")  # type: ignore[misc]
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show all settings (the API token is masked).

    Example:
        toggl-cli config show --json
    """
    config_mgr = _config_manager(ctx)

    if as_json:
        data = config_mgr.to_dict()
        for key in SECRET_KEYS:
            section, name = key.split(".")
            data[section][name] = _masked(key, data[section].get(name))
        print(json.dumps(data, indent=2))
        return

    table = Table(title="toggl-cli Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Default", style="dim")
    for key in config_mgr.get_all_keys():
        value = _masked(key, config_mgr.get(key))
        table.add_row(key, str(value), "" if value == _default(key) else str(_default(key)))

    console.print(table)
    console.print(f"\nConfig file: {config_mgr.config_path}")


@config.command("get")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_get(ctx: click.Context, key: str) -> None:
    """Print one setting.

    Example:
        toggl-cli config get report.daily_limit
    """
    value = _config_manager(ctx).get(key)
    if value is None:
        error_console.print(f"[red]Error:[/red] Configuration key '{key}' is not set")
        sys.exit(1)

    value = _masked(key, value)
    if isinstance(value, (dict, list)):
        print(json.dumps(value, indent=2))
    else:
        print(value)


@config.command("set")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.argument("value")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Change one setting.

    Use 'true'/'false' for flags, 'null' to clear a value and
    comma-separated numbers for the weekend (Monday=0).

    Example:
        toggl-cli config set report.daily_limit 9h
        toggl-cli config set report.weekend 5,6
        toggl-cli config set general.timezone Europe/Berlin
    """
    config_mgr = _config_manager(ctx)
    parsed = parse_value(key, value)
    try:
        config_mgr.set(key, parsed)
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    console.print(f"[green]✓[/green] Set {key} = {_masked(key, parsed)}", highlight=False)


@config.command("reset")  # type: ignore[misc]
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_reset(ctx: click.Context, yes: bool) -> None:
    """Restore the default settings (the old file is kept as a backup).

    Example:
        toggl-cli config reset --yes
    """
    config_mgr = _config_manager(ctx)
    if not yes and not click.confirm("Reset all settings to their defaults?"):
        console.print("Cancelled")
        return

    if config_mgr.config_path.exists():
        backup_path = config_mgr.config_path.with_suffix(".yml.backup")
        shutil.copy(config_mgr.config_path, backup_path)
        console.print(f"Backed up current config to {backup_path}")

    config_mgr.reset()
    console.print("[green]✓[/green] Configuration reset to defaults")


@config.command("path")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_path(ctx: click.Context) -> None:
    """Print the configuration file path."""
    print(_config_manager(ctx).config_path)
