"""
Main entry point — command line access to the status API.

Loads config.yaml, builds a StatusClient from it and prints services,
incident lists or a single incident through the console notifier.

Usage:
    python -m ycs services [--region ru]
    python -m ycs incidents [--status open] [--from 2025-01-01] [--zone ru-central1-a]
    python -m ycs incident 972
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import List, Optional

from ycs import notifier
from ycs.client import APIError, StatusClient
from ycs.config import load_config
from ycs.models import (
    ALL_LANGS,
    ALL_REGIONS,
    ALL_ZONES,
    STATUS_OPEN,
    STATUS_RESOLVED,
    STATUS_WITH_REPORT,
    ClientSettings,
    CLISettings,
    IncidentsRequest,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ycs",
        description="Yandex Cloud status from the command line.",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--lang", choices=ALL_LANGS, help="Response language")

    commands = parser.add_subparsers(dest="command", required=True)

    services = commands.add_parser("services", help="Show status of all services")
    services.add_argument("--region", choices=ALL_REGIONS[1:], help="Only services in region")

    incidents = commands.add_parser("incidents", help="List incidents")
    incidents.add_argument(
        "--status",
        choices=[STATUS_OPEN, STATUS_RESOLVED, STATUS_WITH_REPORT],
    )
    incidents.add_argument("--from", dest="date_from", type=date.fromisoformat, help="YYYY-MM-DD")
    incidents.add_argument("--to", dest="date_to", type=date.fromisoformat, help="YYYY-MM-DD")
    incidents.add_argument("--region", choices=ALL_REGIONS, default="")
    incidents.add_argument("--zone", dest="zones", action="append", choices=ALL_ZONES, default=[])

    incident = commands.add_parser("incident", help="Show a single incident")
    incident.add_argument("id", type=int)

    return parser


async def run(args: argparse.Namespace, client_settings: ClientSettings, settings: CLISettings) -> None:
    """Execute the selected command."""
    lang = args.lang or client_settings.lang

    async with StatusClient.from_settings(client_settings) as client:
        if args.command == "services":
            services = await client.get_services(lang)
            if args.region:
                services = services.in_region(args.region)
            notifier.print_services(services)

        elif args.command == "incidents":
            incidents = await client.get_incidents(
                IncidentsRequest(
                    lang=lang,
                    date_from=args.date_from,
                    date_to=args.date_to,
                    status=args.status or "",
                    region=args.region,
                    zones=args.zones,
                )
            )
            notifier.print_incidents(incidents, lang)

        elif args.command == "incident":
            incident = await client.get_incident(args.id, lang)
            notifier.print_incident(incident, lang, settings.max_comments)


def main(argv: Optional[List[str]] = None) -> None:
    """Sync entry point."""
    args = build_parser().parse_args(argv)
    client_settings, settings = load_config(args.config)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        asyncio.run(run(args, client_settings, settings))
    except APIError as exc:
        notifier.print_error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
