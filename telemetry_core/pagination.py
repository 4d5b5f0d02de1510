"""Limit/offset pagination for list endpoints."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode

from telemetry_core.http_request import RequestInfo

DEFAULT_LIMIT = 20

_INTEGER = re.compile(r"[+-]?\d+")

QueryValues = Mapping[str, Union[str, Sequence[str]]]


@dataclass(frozen=True)
class Pagination:
    limit: int
    offset: int


@dataclass
class PaginatedResponse:
    """A page of results with links to the neighbouring pages."""

    count: int
    next: Optional[str]
    previous: Optional[str]
    results: Any

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "next": self.next,
            "previous": self.previous,
            "results": self.results,
        }


def _values(value: Union[str, Sequence[str], None]) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def _first(query: QueryValues, name: str) -> str:
    values = _values(query.get(name))
    return values[0] if values else ""


def _to_int(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


def parse_pagination(query: QueryValues, default_limit: Optional[int] = None) -> Pagination:
    """Read limit and offset from a query, applying defaults and bounds."""
    fallback = default_limit if default_limit is not None and default_limit > 0 else DEFAULT_LIMIT
    limit = _to_int(_first(query, "limit"))
    if limit <= 0:
        limit = fallback
    offset = max(_to_int(_first(query, "offset")), 0)
    return Pagination(limit=limit, offset=offset)


def paginate(
    total: int,
    params: Pagination,
    base_url: str,
    extra: Optional[QueryValues] = None,
) -> tuple[Optional[str], Optional[str]]:
    """Return the (next, previous) page URLs, or None where there is none."""
    extra = extra or {}

    def build_url(offset: int) -> str:
        query = {"limit": str(params.limit), "offset": str(offset)}
        for key, values in extra.items():
            for value in _values(values):
                query[key] = value
        return f"{base_url}?{urlencode(sorted(query.items()))}"

    end = params.offset + params.limit
    next_url = build_url(end) if end < total else None
    previous_url = None
    if params.offset > 0:
        previous_url = build_url(max(params.offset - params.limit, 0))
    return next_url, previous_url


def build_base_url(request: RequestInfo) -> str:
    """Return scheme, host and path of the request as one URL."""
    return f"{request.scheme}://{request.host}{request.path}"


def extra_params(request: RequestInfo) -> dict[str, list[str]]:
    """Return the request's query parameters without limit and offset."""
    return {
        key: _values(values)
        for key, values in request.query.items()
        if key not in ("limit", "offset")
    }


def slice_page(total: int, params: Pagination) -> tuple[int, int]:
    """Return the start and end indexes of the page within total items."""
    start = min(params.offset, total)
    end = min(params.offset + params.limit, total)
    return start, end