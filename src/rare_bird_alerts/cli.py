"""
Command-line interface for the application.

This module provides the main entry point for the CLI: serving the proxy
and querying eBird through it from a terminal.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import uvicorn
from pydantic import ValidationError

from rare_bird_alerts import __version__
from rare_bird_alerts.config import Settings, get_settings
from rare_bird_alerts.datasources.ebird import EBirdApiClient, FetchFailure
from rare_bird_alerts.proxy import create_app
from rare_bird_alerts.schemas import DetailLevel


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="rare-bird-alerts",
        description="Notable eBird sightings through a credential-attaching proxy",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    serve_parser = subparsers.add_parser("serve", help="Run the eBird request proxy")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to serve on (default: api_port from settings)",
    )

    notable_parser = subparsers.add_parser("notable", help="Fetch recent notable observations")
    notable_parser.add_argument("region", help="eBird region code, e.g. US-NY")
    notable_parser.add_argument("--back", type=int, default=None, help="Days back (1-30)")
    notable_parser.add_argument(
        "--detail", choices=[d.value for d in DetailLevel], default=None, help="Detail level"
    )
    notable_parser.add_argument("--hotspot", action="store_true", help="Hotspots only")
    notable_parser.add_argument("--max-results", type=int, default=None, help="1-10000")
    notable_parser.add_argument(
        "--locations", type=str, default=None, help="Up to 10 extra location codes, comma-separated"
    )
    notable_parser.add_argument("--locale", type=str, default=None, help="Species name locale")
    _add_client_args(notable_parser)

    validate_parser = subparsers.add_parser("validate-key", help="Check an eBird API key")
    _add_client_args(validate_parser)

    return parser


def _add_client_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--api-key", type=str, default=None, help="eBird API key")
    parser.add_argument("--proxy-url", type=str, default=None, help="Base URL of the proxy")


def _build_client(args: argparse.Namespace, settings: Settings) -> EBirdApiClient:
    client = EBirdApiClient(
        args.proxy_url or settings.proxy_url,
        proxy_path=settings.proxy_path,
        timeout=settings.request_timeout,
    )
    api_key = args.api_key or settings.ebird_api_key
    if api_key:
        client.set_credential(api_key)
    return client


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Upstream: {settings.ebird_api_base}")
    print(f"Proxy: {settings.proxy_url}{settings.proxy_path}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command: run the proxy with uvicorn."""
    settings = get_settings()
    host = args.host or settings.api_host
    port = args.port if args.port is not None else settings.api_port
    print(f"Serving proxy on http://{host}:{port}{settings.proxy_path} (Ctrl+C to stop)")
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())
    return 0


def cmd_notable(args: argparse.Namespace) -> int:
    """Handle the 'notable' command: print sightings or the classified error."""
    settings = get_settings()
    client = _build_client(args, settings)
    criteria = {
        key: value
        for key, value in {
            "days_back": args.back,
            "detail_level": args.detail,
            "hotspot_only": args.hotspot or None,
            "max_results": args.max_results,
            "extra_location_codes": args.locations,
            "species_locale": args.locale,
        }.items()
        if value is not None
    }
    try:
        result = asyncio.run(client.fetch_notable_observations(args.region, criteria))
    except ValidationError as exc:
        print(f"Invalid filter: {exc}", file=sys.stderr)
        return 2

    if isinstance(result, FetchFailure):
        print(f"Error [{result.kind}]: {result.error}", file=sys.stderr)
        if result.error.details:
            print(f"Details: {result.error.details}", file=sys.stderr)
        return 1

    for sighting in result.sightings:
        count = "X" if sighting.how_many is None else str(sighting.how_many)
        print(
            f"{sighting.observed_at}  {count:>4}  {sighting.display_name}"
            f"  @ {sighting.location_name}"
        )
    print(f"{len(result.sightings)} notable sightings in {args.region}")
    return 0


def cmd_validate_key(args: argparse.Namespace) -> int:
    """Handle the 'validate-key' command."""
    settings = get_settings()
    client = _build_client(args, settings)
    valid = asyncio.run(client.validate_credential())
    print("API key is valid" if valid else "API key is invalid")
    return 0 if valid else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    level = logging.DEBUG if args.debug or settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if not args.debug:
        # one line per request; the URL is redacted but still noise for a CLI
        logging.getLogger("httpx").setLevel(logging.WARNING)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "serve": cmd_serve,
        "notable": cmd_notable,
        "validate-key": cmd_validate_key,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
