"""Command-line interface for quotebar.

Runs the quote display engine against console surfaces, fetches single
quotes and edits the persisted settings.
"""

import sys
import threading
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click
import yaml

from .config.loader import SettingsRepository, TokenStore
from .engine.render import render_title
from .engine.supervisor import EngineSupervisor
from .errors import PersistenceError
from .logging.config import configure_logging
from .provider.client import QuoteProviderClient
from .quotes.models import QuoteState
from .surfaces.console import ConsoleClipboard, ConsoleTray, HeadlessWindow
from .surfaces.controller import MENU_LABELS, MenuAction, TrayController

# Single-letter commands read from stdin while ``run`` is active
_KEY_ACTIONS = {
    "r": MenuAction.REFRESH,
    "c": MenuAction.COPY,
    "t": MenuAction.TOGGLE,
    "q": MenuAction.QUIT,
}


def _build_client() -> QuoteProviderClient:
    return QuoteProviderClient()


@click.group()
@click.option("--config-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Settings directory (defaults to $QUOTEBAR_CONFIG_DIR or ~/.quotebar).")
@click.option("--log-level", default="WARNING", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines.")
@click.pass_context
def cli(ctx: click.Context, config_dir: Optional[Path], log_level: str, json_logs: bool) -> None:
    """Live quote display for the menu bar."""
    configure_logging(level=log_level, format_json=json_logs)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = SettingsRepository.create(config_dir)
    ctx.obj["tokens"] = TokenStore.create(config_dir)


@cli.command()
@click.option("--clock", is_flag=True, help="Prefix each title with the wall-clock time.")
@click.pass_context
def run(ctx: click.Context, clock: bool) -> None:
    """Run the engine, printing tray titles to stdout until quit."""
    settings: SettingsRepository = ctx.obj["settings"]
    tokens: TokenStore = ctx.obj["tokens"]
    stop = threading.Event()

    supervisor = EngineSupervisor(tray=ConsoleTray(with_clock=clock), client=_build_client())
    controller = TrayController(
        supervisor=supervisor,
        window=HeadlessWindow(),
        clipboard=ConsoleClipboard(),
        settings=settings,
        on_quit=stop.set,
        token_fallback=tokens.get_token,
    )

    status = controller.start()
    if not status.ok:
        click.echo(f"Settings: {status.message}", err=True)
    menu = ", ".join(f"{key}={MENU_LABELS[action]}" for key, action in _KEY_ACTIONS.items())
    click.echo(f"Commands: {menu}", err=True)

    try:
        for line in sys.stdin:
            action = _KEY_ACTIONS.get(line.strip().lower())
            if action is not None:
                controller.handle_menu(action.value)
            if stop.is_set():
                break
        stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        supervisor.shutdown()


@cli.command()
@click.argument("code")
@click.option("--token", default=None, help="Provider token (defaults to the stored one).")
@click.option("--no-proxy", is_flag=True, help="Bypass the system proxy.")
@click.pass_context
def quote(ctx: click.Context, code: str, token: Optional[str], no_proxy: bool) -> None:
    """Fetch one quote and print it as a tray title."""
    settings: SettingsRepository = ctx.obj["settings"]
    tokens: TokenStore = ctx.obj["tokens"]
    try:
        config = settings.get_settings()
    except PersistenceError as e:
        raise click.ClickException(str(e)) from e

    token = token or config.token or tokens.get_token()
    if not token:
        raise click.ClickException("No provider token configured; run set-token first.")

    result = _build_client().fetch_quote(code.strip(), token,
                                         use_proxy=config.use_system_proxy and not no_proxy)
    if not result.ok:
        raise click.ClickException(f"{result.error.kind.value}: {result.error}")
    state = QuoteState().with_success(result.quote.price, result.quote.timestamp)
    click.echo(render_title(code.strip(), state))


@cli.command(name="show-settings")
@click.pass_context
def show_settings(ctx: click.Context) -> None:
    """Print the normalized settings."""
    settings: SettingsRepository = ctx.obj["settings"]
    try:
        config = settings.get_settings()
    except PersistenceError as e:
        raise click.ClickException(str(e)) from e
    data = config.to_dict()
    if data["token"]:
        data["token"] = "***"
    click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), nl=False)


@cli.command(name="set-token")
@click.argument("token")
@click.option("--token-file", is_flag=True, help="Store in the plain token file instead of settings.")
@click.pass_context
def set_token(ctx: click.Context, token: str, token_file: bool) -> None:
    """Persist the provider token."""
    try:
        if token_file:
            ctx.obj["tokens"].set_token(token)
        else:
            settings: SettingsRepository = ctx.obj["settings"]
            settings.save_settings(replace(settings.get_settings(), token=token.strip()))
    except PersistenceError as e:
        raise click.ClickException(str(e)) from e
    click.echo("Token saved" if token.strip() else "Token cleared")
