"""Typer CLI definition for wpactrl."""

import logging
from pathlib import Path
from typing import NoReturn

import typer

from .config import CtrlConfig, generate_config, get_config_path, load_config
from .errors import ConfigError, ConnectError, WpaCtrlError
from .hostapd import list_stations
from .paths import ctrl_path as build_ctrl_path
from .session import ControlSession

app = typer.Typer(help="Talk to wpa_supplicant / hostapd over the control socket")


def fail(message: str, error: Exception, debug: bool) -> NoReturn:
    """Print an error and exit with status 1."""
    if debug:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {message}: {error}", err=True)
    raise typer.Exit(1) from None


@app.callback()
def main(
    ctx: typer.Context,
    interface: str | None = typer.Option(
        None, "-i", "--interface", help="Interface name (from config if omitted)"
    ),
    ctrl_dir: Path | None = typer.Option(
        None, "--ctrl-dir", help="Directory holding the daemon's control sockets"
    ),
    ctrl_path: Path | None = typer.Option(
        None, "--ctrl-path", help="Full control socket path (overrides -i/--ctrl-dir)"
    ),
    client_dir: Path | None = typer.Option(
        None, "--client-dir", help="Directory for this client's socket file"
    ),
    timeout: float | None = typer.Option(
        None, "-t", "--timeout", help="Reply timeout in seconds"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show frames and verbose errors"),
) -> None:
    """Talk to wpa_supplicant / hostapd over the control socket."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    ctx.obj = {"debug": debug}
    if ctx.invoked_subcommand == "init-config":
        return

    try:
        config = load_config()
        if ctrl_path is None and (interface or ctrl_dir):
            current = config.ctrl_path
            ctrl_path = build_ctrl_path(
                interface or current.name, ctrl_dir or current.parent
            )
        ctx.obj["config"] = config.with_overrides(
            ctrl_path=ctrl_path, client_dir=client_dir, timeout=timeout
        )
    except (ConfigError, ValueError) as e:
        fail("Invalid configuration", e, debug)


def open_session(ctx: typer.Context) -> ControlSession:
    config: CtrlConfig = ctx.obj["config"]
    try:
        return ControlSession.open(config)
    except ConnectError as e:
        fail(f"Cannot connect to {config.ctrl_path}", e, ctx.obj["debug"])


@app.command()
def request(
    ctx: typer.Context,
    command: list[str] = typer.Argument(..., help="Command and arguments, e.g. PING"),
) -> None:
    """Send one command and print the reply."""
    text = " ".join(command)
    with open_session(ctx) as session:
        try:
            reply = session.request(text)
        except WpaCtrlError as e:
            fail(f"{text} failed", e, ctx.obj["debug"])
    typer.echo(reply, nl=not reply.endswith("\n"))


@app.command()
def monitor(
    ctx: typer.Context,
    count: int | None = typer.Option(
        None, "-n", "--count", help="Exit after this many events"
    ),
) -> None:
    """Attach and print events as they arrive."""
    seen = 0
    with open_session(ctx) as session:
        try:
            session.attach()
            while count is None or seen < count:
                try:
                    event = session.next_event()
                except TimeoutError:
                    continue
                typer.echo(f"<{event.severity}> {event.body}")
                seen += 1
        except KeyboardInterrupt:
            pass
        except WpaCtrlError as e:
            fail("Monitoring failed", e, ctx.obj["debug"])


@app.command()
def stations(ctx: typer.Context) -> None:
    """List stations associated with a hostapd access point."""
    with open_session(ctx) as session:
        try:
            found = list_stations(session)
        except WpaCtrlError as e:
            fail("Station listing failed", e, ctx.obj["debug"])
    for station in found:
        typer.echo(station.address)


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a default config file."""
    path = get_config_path()
    if path.exists() and not force:
        typer.echo(f"Config already exists: {path} (use --force to overwrite)")
        raise typer.Exit(1)
    typer.echo(f"Wrote {generate_config()}")
