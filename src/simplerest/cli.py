"""Command-line interface for simplerest."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from . import __version__
from .core.builder import RequestBuilder
from .core.client import SimpleRest
from .core.downloader import save_to_file
from .errors import SimpleRestError
from .logging_config import setup_logging
from .models.config import ClientConfig
from .models.events import DownloadStatus


def _key_value(separator: str):
    """Build an argparse type splitting NAME<sep>VALUE."""

    def parse(value: str) -> tuple[str, str]:
        if separator not in value:
            raise argparse.ArgumentTypeError(f"Expected NAME{separator}VALUE, got '{value}'")
        name, _, rest = value.partition(separator)
        return name.strip(), rest.strip()

    return parse


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="Absolute URL, or path appended to --base-url")

    parser.add_argument(
        "--header",
        "-H",
        type=_key_value(":"),
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Request header (repeatable)",
    )
    parser.add_argument(
        "--param",
        "-p",
        type=_key_value("="),
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Query parameter (repeatable)",
    )
    parser.add_argument(
        "--include",
        "-i",
        action="store_true",
        help="Print response headers",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="simplerest",
        description="Send REST requests, poll endpoints and download files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch JSON
  simplerest get https://api.example.com/news -p page=2

  # Relative paths with a base URL
  simplerest --base-url https://api.example.com get /news

  # Post a JSON document
  simplerest --base-url https://api.example.com post /news --json '{"title": "Hello"}'

  # Poll every 5 seconds, 10 times
  simplerest poll https://api.example.com/status --interval 5 --count 10

  # Download with a progress bar
  simplerest download https://example.com/file.zip ./file.zip
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Client settings
    client_group = parser.add_argument_group("client settings")
    client_group.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML client configuration",
    )
    client_group.add_argument(
        "--base-url",
        type=str,
        default=None,
        metavar="URL",
        help="Base URL for relative paths",
    )
    client_group.add_argument(
        "--connect-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Connect timeout (default: 15)",
    )
    client_group.add_argument(
        "--read-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Read timeout (default: 15)",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress output",
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    for name in ("get", "head", "delete"):
        _add_common_arguments(commands.add_parser(name, help=f"Send a {name.upper()} request"))

    for name in ("post", "put"):
        sub = commands.add_parser(name, help=f"Send a {name.upper()} request")
        _add_common_arguments(sub)
        payload = sub.add_mutually_exclusive_group()
        payload.add_argument("--data", "-d", type=str, default=None, help="Plain text body")
        payload.add_argument("--json", type=str, default=None, dest="json_data", help="JSON body")

    poll = commands.add_parser("poll", help="Repeat a GET request at a fixed interval")
    _add_common_arguments(poll)
    poll.add_argument("--interval", type=float, default=1.0, help="Seconds between requests (default: 1)")
    poll.add_argument("--count", type=int, default=None, help="Stop after this many responses")

    download = commands.add_parser("download", help="Save a GET response body to a file")
    download.add_argument("url", help="Absolute URL, or path appended to --base-url")
    download.add_argument("destination", type=Path, help="Output file")

    return parser


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Merge the config file with command-line overrides."""
    config = ClientConfig.from_yaml_file(args.config) if args.config else ClientConfig()

    updates: dict[str, Any] = {}
    if args.base_url is not None:
        updates["base_url"] = args.base_url

    timeout_updates: dict[str, Any] = {}
    if args.connect_timeout is not None:
        timeout_updates["connect"] = args.connect_timeout
    if args.read_timeout is not None:
        timeout_updates["read"] = args.read_timeout
    if timeout_updates:
        updates["timeouts"] = {**config.timeouts.model_dump(), **timeout_updates}

    if args.verbose:
        updates["log_level"] = "DEBUG"
    elif args.quiet:
        updates["log_level"] = "ERROR"

    if not updates:
        return config
    return ClientConfig.model_validate({**config.model_dump(), **updates})


def build_request(client: SimpleRest, args: argparse.Namespace) -> RequestBuilder:
    """Create the builder described by the parsed arguments."""
    command = "get" if args.command in ("poll", "download") else args.command

    if command in ("post", "put"):
        data: Any = None
        if args.json_data is not None:
            data = json.loads(args.json_data)
        elif args.data is not None:
            data = args.data
        builder = getattr(client, command)(args.url, data)
    else:
        builder = getattr(client, command)(args.url)

    for name, value in getattr(args, "header", []):
        builder.add_header(name, value)
    for name, value in getattr(args, "param", []):
        builder.add_param(name, value)
    return builder


def _print_body(console: Console, body: Any) -> None:
    if body is None:
        return
    if isinstance(body, str):
        console.print(body, markup=False, highlight=False)
    else:
        console.print_json(data=body)


def run_request(client: SimpleRest, args: argparse.Namespace, console: Console) -> int:
    """Send a single request and print the result."""
    response = build_request(client, args).get_response()

    if not args.quiet:
        style = "green" if response.ok else "red"
        console.print(f"[{style}]HTTP {response.code}[/{style}]")
        if args.include:
            for name, value in response.headers.items():
                console.print(f"[cyan]{name}[/cyan]: {value}", highlight=False)
            console.print()
        _print_body(console, response.body)

    return 0 if response.ok else 1


async def run_poll(client: SimpleRest, args: argparse.Namespace, console: Console) -> int:
    """Poll an endpoint and print each body."""
    poller = build_request(client, args).to_flow(interval=args.interval)
    stream = poller.__aiter__()
    received = 0
    try:
        async for body in stream:
            received += 1
            if not args.quiet:
                console.rule(f"#{received}")
                _print_body(console, body)
            if args.count is not None and received >= args.count:
                break
    finally:
        await stream.aclose()  # type: ignore[attr-defined]
    return 0


async def run_download(client: SimpleRest, args: argparse.Namespace, console: Console) -> int:
    """Download a file, showing a progress bar."""
    builder = build_request(client, args)
    response = await builder.await_raw_response()

    failed = False
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
        disable=args.quiet,
    ) as progress:
        task = progress.add_task(f"[cyan]{args.destination.name}", total=100)
        async for state in save_to_file(response, args.destination, manager=client.manager):
            if state.status == DownloadStatus.DOWNLOADING:
                progress.update(task, completed=state.progress)
            elif state.status == DownloadStatus.FINISHED:
                progress.update(task, completed=100)
            elif state.status == DownloadStatus.FAILED:
                failed = True
                console.print(f"[red]Failed:[/red] {state.error}")

    if not failed and not args.quiet:
        console.print(f"[green]Saved[/green] {args.destination}")
    return 1 if failed else 0


def run_command(args: argparse.Namespace) -> int:
    """Run the requested command with given arguments."""
    console = Console()

    try:
        config = build_config(args)
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(config)

    try:
        with SimpleRest.from_config(config) as client:
            if args.command == "poll":
                return asyncio.run(run_poll(client, args, console))
            if args.command == "download":
                return asyncio.run(run_download(client, args, console))
            return run_request(client, args, console)
    except (SimpleRestError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1
    except KeyboardInterrupt:
        return 130


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_command(args)


if __name__ == "__main__":
    sys.exit(main())
