"""Request details and helpers that resolve tenant scoping from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence


@dataclass(frozen=True)
class RequestInfo:
    """The parts of an incoming HTTP request the API helpers look at."""

    host: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    scheme: str = "http"
    path: str = "/"
    query: Mapping[str, Sequence[str]] = field(default_factory=dict)

    def header(self, name: str) -> str:
        """Return a header value, matching the name case-insensitively."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""

    def query_param(self, name: str) -> str:
        """Return the first value of a query parameter, or an empty string."""
        values = self.query.get(name)
        if not values:
            return ""
        if isinstance(values, str):
            return values
        return values[0]


class MissingSpaceError(Exception):
    """Raised when a request carries no X-Space header."""

    status_code = 400

    def __init__(self, message: str = "X-Space header is required") -> None:
        super().__init__(message)
        self.message = message


def resolve_org(request: RequestInfo) -> str:
    """Return the organization slug from X-Organization or the host name.

    The header wins; otherwise the first label of the host is used
    (acme.example.com gives acme). An empty string means none was found.
    """
    org_header = request.header("X-Organization")
    if org_header:
        return org_header
    if not request.host:
        return ""
    return request.host.split(".")[0]


def resolve_space_slug(request: RequestInfo) -> str:
    """Return the space slug from the X-Space header."""
    space_slug = request.header("X-Space")
    if not space_slug:
        raise MissingSpaceError()
    return space_slug


def parse_display_types(param: str) -> list[str]:
    """Split a comma-separated display_type filter, dropping blank items."""
    if not param:
        return []
    return [part.strip() for part in param.split(",") if part.strip()]