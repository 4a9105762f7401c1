"""
Console Notifier — structured console output for the CLI.

Formats services, incidents and comments into readable console
blocks, with ANSI colors. Reports and comments are shown in their
Markdown rendering.
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta
from typing import Optional

from ycs.models import LEVEL_ID_UNAVAILABLE, Incident, Incidents, Services

# ANSI color codes for terminal styling
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_BLUE = "\033[94m"
_MAGENTA = "\033[95m"
_CYAN = "\033[96m"
_WHITE = "\033[97m"
_GRAY = "\033[90m"


def _status_color(status: str) -> str:
    """Pick a color based on incident or service status."""
    s = status.lower()
    if s in ("resolved", "available", "ok"):
        return _GREEN
    elif "open" in s:
        return _RED
    elif "degraded" in s or "partial" in s:
        return _YELLOW
    else:
        return _MAGENTA


def _level_color(incident: Incident) -> str:
    return _RED if incident.level_id == LEVEL_ID_UNAVAILABLE else _YELLOW


def _format_ts(ts: Optional[datetime]) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S") if ts else "—"


def _format_duration(duration: timedelta) -> str:
    total = int(duration.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes = rest // 60
    return f"{hours}h{minutes:02d}m"


def _indent(text: str, prefix: str = "      ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())


def print_separator() -> None:
    """Print a visual separator line."""
    print(f"{_DIM}{'─' * 68}{_RESET}")


def print_services(services: Services) -> None:
    """Print one line per service with its current status."""
    print(f"\n  {_BOLD}{_CYAN}{len(services)} services{_RESET}\n")
    for service in services:
        color = _status_color(service.status)
        open_count = sum(1 for i in service.incidents if not i.is_resolved())
        line = (
            f"  {_WHITE}{service.name:<48}{_RESET}"
            f" {_DIM}[{service.installation_code or '-'}]{_RESET}"
            f" {color}{service.status or 'unknown'}{_RESET}"
        )
        if open_count:
            line += f"  {_RED}{open_count} open{_RESET}"
        print(line)
    print()


def print_incidents(incidents: Incidents, lang: str) -> None:
    """Print a short summary line per incident."""
    if not incidents:
        print(f"\n  {_DIM}No incidents found.{_RESET}\n")
        return

    header_color = _RED if incidents.has_open() else _GREEN
    print(f"\n  {_BOLD}{header_color}{len(incidents)} incidents{_RESET}\n")
    for incident in incidents:
        color = _status_color(incident.status)
        print(
            f"  {_GRAY}[{_format_ts(incident.start_date)}]{_RESET} "
            f"{_BOLD}#{incident.id}{_RESET} {incident.title} "
            f"{color}({incident.status}){_RESET}"
        )
        print(f"    {_DIM}{incident.url(lang)}{_RESET}")
    print()


def print_incident(incident: Incident, lang: str, max_comments: int = 5) -> None:
    """
    Print a single incident with:
    1. Header (title, status, level, timing)
    2. Affected regions, zones and services
    3. The report and the latest comments, as Markdown
    """
    color = _status_color(incident.status)
    level = incident.level.label if incident.level else str(incident.level_id or "—")

    print()
    print(f"  {_BOLD}{_level_color(incident)}#{incident.id} {incident.title}{_RESET}")
    print(f"    {_BOLD}Status   :{_RESET} {color}{incident.status}{_RESET}")
    print(f"    {_BOLD}Level    :{_RESET} {level}")
    print(f"    {_BOLD}Started  :{_RESET} {_format_ts(incident.start_date)}")

    if incident.is_resolved():
        print(f"    {_BOLD}Ended    :{_RESET} {_format_ts(incident.end_date)}")
        print(f"    {_BOLD}Duration :{_RESET} {_format_duration(incident.duration())}")

    print(f"    {_BOLD}Regions  :{_RESET} {', '.join(incident.region_list()) or 'N/A'}")
    print(f"    {_BOLD}Zones    :{_RESET} {', '.join(incident.zone_list()) or 'N/A'}")
    print(f"    {_BOLD}Services :{_RESET} {', '.join(incident.service_list()) or 'N/A'}")

    url = incident.url(lang)
    if url:
        print(f"    {_BOLD}Link     :{_RESET} {_DIM}{url}{_RESET}")

    report = incident.report_markdown().strip()
    if report:
        print(f"    {_BOLD}Report   :{_RESET}")
        print(_indent(report))

    shown = incident.comments[-max_comments:] if max_comments > 0 else []
    if shown:
        print_separator()
    for comment in shown:
        print(
            f"    {_GRAY}[{_format_ts(comment.created_at)}]{_RESET} "
            f"{_BOLD}{_BLUE}{comment.type}{_RESET}"
        )
        print(_indent(comment.markdown().strip()))

    print()


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    print(f"  {_RED}ERROR{_RESET} {message}", file=sys.stderr)
