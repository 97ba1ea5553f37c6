"""CLI commands for censusbot."""

import asyncio
import signal
import sys
from contextlib import suppress
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table
from rich.text import Text

from censusbot import __logo__, __version__

app = typer.Typer(
    name="censusbot",
    help=f"{__logo__} censusbot - Tanzania Census 2022 WhatsApp bot",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)
EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit", ":q"}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _load_config(config_path: Path | None, dataset: Path | None = None):
    from censusbot.config.loader import load_config

    config = load_config(config_path)
    if dataset is not None:
        config.dataset.path = str(dataset)
    return config


def _configure_logging(config, verbose: bool = False) -> None:
    """Route loguru output to stderr (and the optional log file)."""
    level = "DEBUG" if verbose else config.logging.level
    logger.remove()
    logger.add(sys.stderr, level=level)
    if config.logging.file:
        logger.add(config.logging.file, level=level, rotation="10 MB", retention=5)


def _load_dataset_or_exit(config):
    """Load the census file; a failure ends the process with status 1."""
    from censusbot.census.loader import DatasetLoadError, load_dataset

    try:
        return load_dataset(config.dataset_path, config.dataset.root_key)
    except DatasetLoadError as e:
        err_console.print(Text(str(e), style="red"))
        raise typer.Exit(1)


def _is_exit_command(command: str) -> bool:
    """Return True when input should end interactive chat."""
    return command.lower() in EXIT_COMMANDS


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} censusbot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """censusbot - Tanzania Census 2022 WhatsApp bot."""
    pass


# ============================================================================
# Init
# ============================================================================


@app.command()
def init(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file to create"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
):
    """Write a default censusbot configuration file."""
    from censusbot.config.loader import get_config_path, save_config
    from censusbot.config.schema import Config

    path = config_path or get_config_path()

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config(), path)
    console.print(f"[green]✓[/green] Created config at {path}")

    console.print("\nNext steps:")
    console.print("  1. Point [cyan]dataset.path[/cyan] at your census JSON file")
    console.print("  2. Link WhatsApp: [cyan]censusbot login[/cyan]")
    console.print("  3. Try the menu locally: [cyan]censusbot chat -m menu[/cyan]")


# ============================================================================
# Run
# ============================================================================


@app.command()
def run(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.censusbot/config.json)"),
    dataset: Path = typer.Option(None, "--dataset", "-d", help="Census JSON file"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
):
    """Start the bot: answer WhatsApp messages from the census dataset."""
    from censusbot.bus.queue import MessageBus
    from censusbot.channels.manager import ChannelManager
    from censusbot.channels.pairing import QRPairingPresenter
    from censusbot.engine.dispatcher import Dispatcher

    config = _load_config(config_path, dataset)
    _configure_logging(config, verbose)

    # Dataset problems abort before any connection attempt
    census = _load_dataset_or_exit(config)

    bus = MessageBus()
    channels = ChannelManager(config, bus, pairing=QRPairingPresenter(config.pairing, console))
    if not channels.enabled_channels:
        err_console.print("[red]No channels enabled. Enable channels.whatsapp in the config.[/red]")
        raise typer.Exit(1)

    dispatcher = Dispatcher(bus, census)
    console.print(f"{__logo__} Serving {len(census)} regions on: {', '.join(channels.enabled_channels)}")

    async def serve() -> None:
        _shutdown_done = False

        async def _graceful_shutdown() -> None:
            nonlocal _shutdown_done
            if _shutdown_done:
                return
            _shutdown_done = True
            console.print("\nShutting down...")
            dispatcher.stop()
            await channels.stop_all()

        # Register SIGTERM handler for Docker / systemd graceful stop
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda: asyncio.ensure_future(_graceful_shutdown()),
            )

        dispatch_task = asyncio.create_task(dispatcher.run())
        try:
            await channels.start_all()
        except (KeyboardInterrupt, asyncio.CancelledError):
            pass
        finally:
            await _graceful_shutdown()
            await dispatch_task

    asyncio.run(serve())

    whatsapp = channels.get_channel("whatsapp")
    if whatsapp is not None and getattr(whatsapp, "is_logged_out", False):
        err_console.print("[red]WhatsApp session logged out. Run `censusbot login` to link again.[/red]")
        raise typer.Exit(1)


# ============================================================================
# Login (device pairing)
# ============================================================================


@app.command()
def login(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
    timeout: int = typer.Option(None, "--timeout", "-t", help="Seconds to wait for the scan"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
):
    """Link this bot to a WhatsApp account by scanning a QR code."""
    from censusbot.bus.queue import MessageBus
    from censusbot.channels.pairing import QRPairingPresenter
    from censusbot.channels.whatsapp import WhatsAppChannel

    config = _load_config(config_path)
    _configure_logging(config, verbose)
    wait_seconds = timeout or config.pairing.qr_timeout

    channel = WhatsAppChannel(
        config.channels.whatsapp,
        MessageBus(),
        pairing=QRPairingPresenter(config.pairing, console),
    )

    console.print(f"{__logo__} Connecting to bridge at {config.channels.whatsapp.bridge_url}...")
    console.print("Scan the QR code to connect.\n")

    async def link() -> bool:
        task = asyncio.create_task(channel.start())
        try:
            return await channel.wait_until_open(wait_seconds)
        finally:
            await channel.stop()
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    if asyncio.run(link()):
        console.print("[green]✓[/green] WhatsApp linked")
    else:
        err_console.print(f"[red]Device not linked within {wait_seconds}s[/red]")
        raise typer.Exit(1)


# ============================================================================
# Local chat
# ============================================================================


@app.command()
def chat(
    message: str = typer.Option(None, "--message", "-m", help="Message to send to the bot"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
    dataset: Path = typer.Option(None, "--dataset", "-d", help="Census JSON file"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs during chat"),
):
    """Talk to the menu bot in the terminal, without WhatsApp."""
    from censusbot.engine.responses import respond

    config = _load_config(config_path, dataset)

    if logs:
        logger.enable("censusbot")
    else:
        logger.disable("censusbot")

    census = _load_dataset_or_exit(config)

    def _print_reply(text: str) -> None:
        console.print()
        console.print(f"[cyan]{__logo__} censusbot[/cyan]")
        console.print(Text(text), soft_wrap=True)
        console.print()

    if message:
        _print_reply(respond(message, census))
        return

    from prompt_toolkit import PromptSession
    from prompt_toolkit.formatted_text import HTML
    from prompt_toolkit.history import FileHistory

    history_file = Path.home() / ".censusbot" / "history" / "chat_history"
    history_file.parent.mkdir(parents=True, exist_ok=True)
    session = PromptSession(history=FileHistory(str(history_file)))

    console.print(f"{__logo__} Interactive mode (type [bold]exit[/bold] or [bold]Ctrl+C[/bold] to quit)\n")

    while True:
        try:
            user_input = session.prompt(HTML("<b fg='ansiblue'>You:</b> "))
        except (KeyboardInterrupt, EOFError):
            console.print("\nGoodbye!")
            break

        command = user_input.strip()
        if not command:
            continue
        if _is_exit_command(command):
            console.print("\nGoodbye!")
            break
        _print_reply(respond(user_input, census))


# ============================================================================
# Status
# ============================================================================


@app.command()
def status(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Show censusbot configuration and dataset status."""
    from censusbot.census.loader import DatasetLoadError, load_dataset
    from censusbot.config.loader import get_config_path

    path = config_path or get_config_path()
    config = _load_config(config_path)
    logger.disable("censusbot")

    console.print(f"{__logo__} censusbot Status\n")
    console.print(f"Config: {path} {'[green]✓[/green]' if path.exists() else '[dim]defaults[/dim]'}")

    try:
        census = load_dataset(config.dataset_path, config.dataset.root_key)
        console.print(f"Dataset: {config.dataset_path} [green]✓[/green]")
        console.print(f"Regions: {len(census)}")
    except DatasetLoadError as e:
        console.print(f"Dataset: {config.dataset_path} [red]✗[/red]")
        console.print(Text(str(e), style="dim"))

    wa = config.channels.whatsapp
    table = Table(title="Channel Status")
    table.add_column("Channel", style="cyan")
    table.add_column("Enabled", style="green")
    table.add_column("Configuration", style="yellow")
    table.add_row(
        "WhatsApp",
        "✓" if wa.enabled else "✗",
        f"{wa.bridge_url} (allow: {', '.join(wa.allow_from) or 'everyone'})",
    )
    console.print(table)
    console.print(f"Pairing QR image: {config.qr_image_path}")


if __name__ == "__main__":
    app()
