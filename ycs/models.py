"""
Data models for the status API.

Structured representations of services, incidents, incident levels,
availability zones, regions (installations) and comments, built from
the JSON payloads returned by the API, plus the request object used
to query incidents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser as dateutil_parser

from ycs.markup import html_to_markdown

# ─── Constants ────────────────────────────────────────────────

LANG_RU = "ru"
LANG_EN = "en"

REGION_ALL = "all"
REGION_RU = "ru"
REGION_KZ = "kz"

ZONE_RU_A = "ru-central1-a"
ZONE_RU_B = "ru-central1-b"
ZONE_RU_C = "ru-central1-c"
ZONE_RU_D = "ru-central1-d"
ZONE_KZ_A = "kz1-a"

STATUS_OPEN = "open"
STATUS_RESOLVED = "resolved"
STATUS_WITH_REPORT = "withReport"

TYPE_INVESTIGATION = "investigation"
TYPE_UPDATE = "update"
TYPE_RESOLVED = "resolved"

LEVEL_MINOR = "Minor"
LEVEL_UNAVAILABLE = "Unavailable"

LEVEL_ID_MINOR = 1
LEVEL_ID_UNAVAILABLE = 2

ALL_LANGS = [LANG_EN, LANG_RU]
ALL_REGIONS = [REGION_ALL, REGION_KZ, REGION_RU]
ALL_ZONES = [ZONE_KZ_A, ZONE_RU_A, ZONE_RU_B, ZONE_RU_C, ZONE_RU_D]

API_URL = "https://status.yandex.cloud/api"
INCIDENT_URL = "https://status.yandex.cloud/{lang}/incidents/{id}"


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse an API timestamp such as ``2025-01-22T21:52:41Z``.

    ``null`` and empty strings mean "no date" and return None.
    Anything else that is not a timestamp raises ValueError.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"invalid date value {value!r}")
    parsed = dateutil_parser.isoparse(value)
    if parsed.tzinfo is None:
        raise ValueError(f"date {value!r} has no time zone")
    return parsed


def parse_int(value: Any) -> int:
    """Read an integer field; missing or null is 0, anything non-integer raises ValueError."""
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid integer value {value!r}")
    return value


# ─── Records ──────────────────────────────────────────────────


@dataclass
class Level:
    """Incident severity level."""

    level: int = 0
    label: str = ""
    theme: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Level:
        return cls(
            level=parse_int(data.get("level")),
            label=data.get("label") or "",
            theme=data.get("theme") or "",
            created_at=parse_date(data.get("createdAt")),
            updated_at=parse_date(data.get("updatedAt")),
        )


@dataclass
class Region:
    """Installation region (ru / kz) with its availability zones."""

    code: str = ""
    zones: List[Zone] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Region:
        return cls(
            code=data.get("code") or "",
            zones=[Zone.from_dict(z) for z in data.get("zones") or []],
        )


@dataclass
class Zone:
    """Availability zone, optionally linked back to its region."""

    id: str = ""
    installation_id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    region: Optional[Region] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Zone:
        region = data.get("installation")
        return cls(
            id=data.get("id") or "",
            installation_id=parse_int(data.get("installationId")),
            created_at=parse_date(data.get("createdAt")),
            updated_at=parse_date(data.get("updatedAt")),
            region=Region.from_dict(region) if region else None,
        )


@dataclass
class Comment:
    """A status update posted on an incident."""

    id: int = 0
    incident_id: int = 0
    content: str = ""
    type: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Comment:
        return cls(
            id=parse_int(data.get("id")),
            incident_id=parse_int(data.get("incidentId")),
            content=data.get("content") or "",
            type=data.get("type") or "",
            created_at=parse_date(data.get("createdAt")),
            updated_at=parse_date(data.get("updatedAt")),
        )

    def markdown(self) -> str:
        """Comment content rendered as Markdown."""
        if not self.content:
            return ""
        return html_to_markdown(self.content)


class Comments(List[Comment]):
    """List of comments."""

    def get(self, index: int) -> Optional[Comment]:
        """Return the comment at index, or None if there is no such comment."""
        if index < 0 or index >= len(self):
            return None
        return self[index]


@dataclass
class Incident:
    """
    A service disruption event.

    Attributes:
        id: Incident ID (0 when unknown).
        title: Human-readable incident title.
        report: Post-incident report, HTML.
        status: "open" or "resolved".
        level_id: Severity (1 = Minor, 2 = Unavailable).
        start_date / end_date: Incident time span; end_date is None while open.
        regions: Affected installations with their zones.
        services: Affected services.
        comments: Status updates, HTML content.
    """

    id: int = 0
    title: str = ""
    report: str = ""
    status: str = ""
    is_report_published: bool = False
    level_id: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    report_published_time: Optional[datetime] = None
    level: Optional[Level] = None
    zones: List[Zone] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    services: Services = field(default_factory=lambda: Services())
    comments: Comments = field(default_factory=lambda: Comments())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Incident:
        level = data.get("level")
        return cls(
            id=parse_int(data.get("id")),
            title=data.get("title") or "",
            report=data.get("report") or "",
            status=data.get("status") or "",
            is_report_published=bool(data.get("isReportPublished")),
            level_id=parse_int(data.get("levelId")),
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            created_at=parse_date(data.get("createdAt")),
            updated_at=parse_date(data.get("updatedAt")),
            report_published_time=parse_date(data.get("reportPublishedTime")),
            level=Level.from_dict(level) if level else None,
            zones=[Zone.from_dict(z) for z in data.get("zones") or []],
            regions=[Region.from_dict(r) for r in data.get("installations") or []],
            services=Services(Service.from_dict(s) for s in data.get("services") or []),
            comments=Comments(Comment.from_dict(c) for c in data.get("comments") or []),
        )

    def is_resolved(self) -> bool:
        return self.status == STATUS_RESOLVED

    def duration(self) -> timedelta:
        """Time between start and end, zero while the incident is still open."""
        if self.end_date is None or self.start_date is None:
            return timedelta(0)
        return self.end_date - self.start_date

    def url(self, lang: str) -> str:
        """URL of the incident page on the status site."""
        if not self.id:
            return ""
        return INCIDENT_URL.format(lang=lang, id=self.id)

    def report_markdown(self) -> str:
        """Incident report rendered as Markdown."""
        return html_to_markdown(self.report)

    def region_list(self) -> List[str]:
        """Codes of all affected regions."""
        return [r.code for r in self.regions]

    def zone_list(self) -> List[str]:
        """IDs of all affected zones, region by region."""
        return [z.id for r in self.regions for z in r.zones]

    def service_list(self) -> List[str]:
        """Names of all affected services."""
        return self.services.names()


class Incidents(List[Incident]):
    """List of incidents."""

    def has_open(self) -> bool:
        """True if at least one incident is still open."""
        return any(i.status == STATUS_OPEN for i in self)


@dataclass
class Service:
    """A cloud service tracked on the status page."""

    id: int = 0
    name: str = ""
    full_name: str = ""
    slug: str = ""
    description: str = ""
    iam_flag: str = ""
    status: str = ""
    doc_url: str = ""
    prices_url: str = ""
    console_url: str = ""
    installation_code: str = ""
    icon: str = ""
    icon_name: str = ""
    order_number: int = 0
    category_id: int = 0
    page_id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_product: bool = False
    incidents: Incidents = field(default_factory=lambda: Incidents())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Service:
        return cls(
            id=parse_int(data.get("id")),
            name=data.get("name") or "",
            full_name=data.get("fullName") or "",
            slug=data.get("slug") or "",
            description=data.get("description") or "",
            iam_flag=data.get("iamFlag") or "",
            status=data.get("status") or "",
            doc_url=data.get("docUrl") or "",
            prices_url=data.get("pricesUrl") or "",
            console_url=data.get("consoleUrl") or "",
            installation_code=data.get("installationCode") or "",
            icon=data.get("icon") or "",
            icon_name=data.get("iconName") or "",
            order_number=parse_int(data.get("orderNumber")),
            category_id=parse_int(data.get("categoryId")),
            page_id=parse_int(data.get("pageId")),
            created_at=parse_date(data.get("createdAt")),
            updated_at=parse_date(data.get("updatedAt")),
            is_product=bool(data.get("isProduct")),
            incidents=Incidents(Incident.from_dict(i) for i in data.get("incidents") or []),
        )


class Services(List[Service]):
    """List of services."""

    def in_region(self, code: str) -> Services:
        """Only the services installed in the given region."""
        return Services(s for s in self if s.installation_code == code)

    def ids(self) -> List[int]:
        return [s.id for s in self]

    def names(self) -> List[str]:
        return [s.name for s in self]


# ─── Requests ─────────────────────────────────────────────────


@dataclass
class IncidentsRequest:
    """Filters for the incident list endpoint."""

    lang: str = ""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    status: str = ""
    region: str = ""
    zones: List[str] = field(default_factory=list)

    def to_query(self) -> List[Tuple[str, str]]:
        """
        Build query parameters.

        Empty language and region fall back to "ru" and "all"; dates,
        status and zones are only sent when set.
        """
        query = [
            ("lang", self.lang or LANG_RU),
            ("installation", self.region or REGION_ALL),
        ]
        if self.date_from is not None:
            query.append(("from", self.date_from.strftime("%Y-%m-%d")))
        if self.date_to is not None:
            query.append(("to", self.date_to.strftime("%Y-%m-%d")))
        if self.status:
            query.append(("status", self.status))
        for zone in self.zones:
            query.append(("zones[]", zone))
        return query


# ─── Settings ─────────────────────────────────────────────────


@dataclass
class ClientSettings:
    """How to reach the API."""

    api_url: str = API_URL
    app: str = ""
    version: str = ""
    rate_limit: float = 0  # requests per second, 0 = unlimited
    timeout: float = 10  # seconds, 0 = no timeout
    lang: str = LANG_RU


@dataclass
class CLISettings:
    """Console output settings."""

    log_level: str = "WARNING"
    max_comments: int = 5
