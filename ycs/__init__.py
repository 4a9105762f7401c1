"""
Yandex Cloud Status — API client.

Fetches service health, incidents and incident comments from the
Yandex Cloud status API, and renders incident reports and comments
from HTML into Markdown.
"""

__version__ = "1.0.0"

from ycs.client import (  # noqa: E402
    APIError,
    DecodeError,
    HTTPStatusError,
    StatusClient,
    TransportError,
)
from ycs.markup import html_to_markdown  # noqa: E402
from ycs.models import (  # noqa: E402
    Comment,
    Comments,
    Incident,
    Incidents,
    IncidentsRequest,
    Level,
    Region,
    Service,
    Services,
    Zone,
)

__all__ = [
    "APIError",
    "Comment",
    "Comments",
    "DecodeError",
    "HTTPStatusError",
    "Incident",
    "Incidents",
    "IncidentsRequest",
    "Level",
    "Region",
    "Service",
    "Services",
    "StatusClient",
    "TransportError",
    "Zone",
    "html_to_markdown",
]
