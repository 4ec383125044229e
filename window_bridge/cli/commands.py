"""CLI commands for window-bridge.

    window-bridge create-window [URL] [--width W --height H --x X --y Y] [--count N] [--wait]
    window-bridge create-view
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..channel import StreamEventChannel
from ..config import BridgeSettings
from ..constants import BridgeDefaults, DEFAULT_LOAD_TARGET, UNSET_POSITION
from ..errors import ChannelError, CreationTimeoutError, InvalidArgumentError
from ..models import BrowserWindow, BrowserWindowOptions
from ..services import WindowRegistry
from ..window_manager import WindowManager
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

# Global console instance
console = Console()
err_console = Console(stderr=True)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGUMENT = 2


def format_window_table(windows: Sequence[BrowserWindow], title: str = "Live windows") -> Table:
    """Format live windows as a Rich table, oldest first."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Window ID", justify="right", style="bold green")

    for index, window in enumerate(windows, start=1):
        table.add_row(str(index), str(window.id))

    return table


def build_window_options(args: argparse.Namespace) -> BrowserWindowOptions:
    """Translate CLI geometry flags into window options."""
    values = {
        "width": args.width,
        "height": args.height,
        "x": args.x,
        "y": args.y,
        "title": args.title,
    }
    if args.frameless:
        values["frame"] = False
    return BrowserWindowOptions(**{k: v for k, v in values.items() if v is not None})


async def cmd_create_window(args: argparse.Namespace, manager: WindowManager, channel: StreamEventChannel) -> int:
    """Create one or more windows, optionally waiting for them to close.

    Returns:
        0 on success, 1 on error
    """
    if args.count < 1:
        err_console.print(f"[red]Error:[/red] --count must be at least 1, got {args.count}")
        return EXIT_ERROR

    options = build_window_options(args)

    # All requests go out before any result is awaited
    futures = [manager.create_window(options, args.url) for _ in range(args.count)]
    await channel.flush()
    windows: List[BrowserWindow] = list(await asyncio.gather(*futures))

    for window in windows:
        console.print(f"[green]✓[/green] Created window [bold]{window.id}[/bold]")

    if not args.wait:
        return EXIT_OK

    console.print(format_window_table(manager.browser_windows))
    all_closed = asyncio.Event()

    def on_registry_change(registry: WindowRegistry) -> None:
        console.print(format_window_table(registry.windows))
        if not registry.windows:
            all_closed.set()

    manager.registry.subscribe(on_registry_change)

    host_gone = asyncio.create_task(channel.wait_closed())
    closed_wait = asyncio.create_task(all_closed.wait())
    done, pending = await asyncio.wait([host_gone, closed_wait], return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()

    if closed_wait in done:
        console.print("All windows closed")
    else:
        console.print("[yellow]Host disconnected[/yellow]")
    return EXIT_OK


async def cmd_create_view(args: argparse.Namespace, manager: WindowManager, channel: StreamEventChannel) -> int:
    """Create a browser view.

    Returns:
        0 on success, 1 on error
    """
    future = manager.create_view()
    await channel.flush()
    view = await future
    console.print(f"[green]✓[/green] Created view [bold]{view.id}[/bold]")
    return EXIT_OK


COMMANDS = {
    "create-window": cmd_create_window,
    "create-view": cmd_create_view,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="window-bridge",
        description="Create and track windows in a UI host over its event bridge",
    )
    parser.add_argument("--version", action="version", version=f"window-bridge {__version__}")

    # Global logging flags
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging (INFO level)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging (DEBUG level)")

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"JSON settings file (default: {BridgeDefaults.CONFIG_FILE})",
    )
    parser.add_argument("--socket", type=Path, default=None, help="UNIX socket of the host bridge")
    parser.add_argument("--bridge-host", default=None, help="TCP host of the host bridge")
    parser.add_argument("--bridge-port", type=int, default=None, help="TCP port of the host bridge")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait for each creation")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_window = subparsers.add_parser(
        "create-window",
        help="Create a browser window",
        description="Create a browser window loading URL (absolute, or relative to the local web server)",
    )
    parser_window.add_argument("url", nargs="?", default=DEFAULT_LOAD_TARGET, help="Load target (default: /)")
    parser_window.add_argument("--width", type=int, default=None, help="Window width in pixels")
    parser_window.add_argument("--height", type=int, default=None, help="Window height in pixels")
    parser_window.add_argument("--x", type=int, default=None, help=f"Left offset ({UNSET_POSITION} = host places)")
    parser_window.add_argument("--y", type=int, default=None, help=f"Top offset ({UNSET_POSITION} = host places)")
    parser_window.add_argument("--title", default=None, help="Window title")
    parser_window.add_argument("--frameless", action="store_true", help="Create a window without frame")
    parser_window.add_argument("--count", type=int, default=1, help="Number of windows to create")
    parser_window.add_argument("--wait", action="store_true", help="Keep running until the windows are closed")

    subparsers.add_parser("create-view", help="Create a browser view")

    return parser


def load_settings(args: argparse.Namespace) -> BridgeSettings:
    """Load settings and apply CLI overrides."""
    settings = BridgeSettings.load(args.config)
    overrides = {
        "socket_path": args.socket,
        "bridge_host": args.bridge_host,
        "bridge_port": args.bridge_port,
        "creation_timeout": args.timeout,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return settings
    return BridgeSettings(**{**settings.model_dump(), **overrides})


async def run_command(args: argparse.Namespace, settings: BridgeSettings) -> int:
    """Connect to the host, run one command and disconnect."""
    channel = StreamEventChannel.from_settings(settings)
    await channel.connect(max_attempts=BridgeDefaults.CONNECT_ATTEMPTS)

    manager = WindowManager(channel, settings=settings)
    try:
        return await COMMANDS[args.command](args, manager, channel)
    finally:
        manager.close()
        await channel.close()


def cli_main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    try:
        settings = load_settings(args)
    except (ValidationError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] Invalid settings: {e}")
        return EXIT_ERROR

    setup_logging(verbose=args.verbose, debug=args.debug, default_level=settings.log_level)

    try:
        return asyncio.run(run_command(args, settings))

    except InvalidArgumentError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return EXIT_INVALID_ARGUMENT

    except (ValidationError, CreationTimeoutError, ChannelError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return EXIT_ERROR

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_OK


def main() -> None:
    sys.exit(cli_main())
