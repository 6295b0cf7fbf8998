"""CLI entry point: the PreToolUse hook plus a few inspection commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from cmdswap.config import settings
from cmdswap.dependencies import get_coordinator
from cmdswap.engine.config_loader import save_replacer_config
from cmdswap.engine.coordinator import TranslationCoordinator
from cmdswap.exceptions import ConfigurationError
from cmdswap.logging_config import configure_logging
from cmdswap.schemas.config import ReplacerConfig
from cmdswap.schemas.hook import PRE_TOOL_USE, HookInput, HookOutput

logger = logging.getLogger("cmdswap")


@click.group()
@click.version_option(version="0.1.0")
@click.option("--log-level", default=None, help="Override CMDSWAP_LOG_LEVEL.")
def cli(log_level: str | None):
    """cmdswap - run faster equivalents of common shell commands."""
    # stdout carries the hook's JSON reply; logs go to stderr
    configure_logging(log_level or settings.log_level, stream=sys.stderr)


def _coordinator() -> TranslationCoordinator:
    try:
        return get_coordinator()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc


def _passthrough() -> None:
    click.echo(HookOutput().to_json())


@cli.command()
def hook():
    """Read a PreToolUse envelope on stdin and reply with a JSON decision.

    The original command is always approved. When a safe translation exists it
    is returned under context.modified_command. Errors never block the command.
    """
    try:
        payload = sys.stdin.read()
        hook_input = HookInput.model_validate_json(payload)

        if hook_input.event_name != PRE_TOOL_USE or not hook_input.is_shell_call:
            _passthrough()
            return

        command = hook_input.command()
        if not command:
            _passthrough()
            return

        coordinator = get_coordinator()
        if coordinator.config.settings.debug:
            logger.setLevel(logging.DEBUG)

        decision = coordinator.evaluate(command, hook_input.working_directory())
        if decision.translated_command is None:
            _passthrough()
            return

        output = HookOutput(
            context={
                "modified_command": decision.translated_command,
                "original_command": command,
            }
        )
        click.echo(output.to_json())
    except Exception as exc:
        logger.exception("Hook failed")
        click.echo(HookOutput(message=f"Command replacer hook error: {exc}").to_json())


@cli.command()
@click.argument("command")
@click.option("--cwd", type=click.Path(file_okay=False), default=None, help="Working directory")
@click.option("--explain", is_flag=True, help="Print the full decision as JSON")
def translate(command: str, cwd: str | None, explain: bool):
    """Print the translation of COMMAND, or COMMAND itself when unchanged.

    Example: cmdswap translate "grep -rn TODO src"
    """
    decision = _coordinator().evaluate(command, cwd)
    if explain:
        click.echo(decision.model_dump_json(indent=2))
        return
    click.echo(decision.translated_command or command)


@cli.command("init-config")
@click.option("--path", "path_", type=click.Path(dir_okay=False), default=None)
@click.option("--force", is_flag=True, help="Overwrite an existing rules file")
def init_config(path_: str | None, force: bool):
    """Write the default rules file."""
    path = Path(path_).expanduser() if path_ else settings.resolved_config_path()
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")
    save_replacer_config(ReplacerConfig.default(), path)
    click.echo(f"Wrote default rules to {path}")


@cli.command()
def rules():
    """List replacement rules, highest priority first."""
    for command, rule in _coordinator().config.rules_by_priority():
        state = "on " if rule.enabled else "off"
        alternatives = f" (or {', '.join(rule.alternatives)})" if rule.alternatives else ""
        click.echo(
            f"[{state}] {rule.priority:>3}  {command:<6} -> {rule.replacement}{alternatives}"
        )


@cli.command("check-tool")
@click.argument("name")
def check_tool(name: str):
    """Exit 0 if tool NAME is installed, 1 otherwise."""
    available = _coordinator().oracle.is_available(name)
    click.echo(f"{name}: {'available' if available else 'not found'}")
    if not available:
        sys.exit(1)


def main():
    cli()


if __name__ == "__main__":
    main()
