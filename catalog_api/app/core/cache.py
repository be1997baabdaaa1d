"""
Validation tokens and conditional request handling.

A ``ValidationToken`` pairs the catalog's content fingerprint with the
instant the data file was last modified.  The HTTP layer turns it into
``ETag`` and ``Last-Modified`` headers and answers ``304 Not Modified``
when a client's ``If-None-Match`` or ``If-Modified-Since`` header shows
its cached copy is still current.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional

from fastapi import Request, Response, status


@dataclass(frozen=True)
class ValidationToken:
    """Fingerprint plus last-modified instant of the catalog."""

    fingerprint: str
    last_modified: datetime

    @property
    def etag(self) -> str:
        return f'"{self.fingerprint}"'

    @property
    def last_modified_http(self) -> str:
        return format_datetime(self.last_modified.astimezone(timezone.utc), usegmt=True)

    def headers(self) -> dict:
        return {"ETag": self.etag, "Last-Modified": self.last_modified_http}


def _parse_http_date(value: str) -> Optional[datetime]:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_not_modified(
    token: ValidationToken,
    if_none_match: Optional[str] = None,
    if_modified_since: Optional[str] = None,
) -> bool:
    """Decide whether a conditional request can be answered with 304.

    ``If-None-Match`` wins when it matches the current ETag.  Otherwise
    ``If-Modified-Since`` is compared against the last-modified instant
    truncated to whole seconds, the precision of HTTP dates.  An
    unparsable date is ignored.
    """
    if if_none_match is not None:
        candidates = {tag.strip() for tag in if_none_match.split(",")}
        if token.etag in candidates or "*" in candidates:
            return True
    if if_modified_since:
        client_date = _parse_http_date(if_modified_since)
        if client_date is not None:
            last_modified = token.last_modified.astimezone(timezone.utc).replace(microsecond=0)
            if client_date >= last_modified:
                return True
    return False


def conditional_response(request: Request, response: Response, token: ValidationToken) -> Optional[Response]:
    """Apply validator headers and short-circuit fresh conditional requests.

    Sets ``ETag`` and ``Last-Modified`` on ``response``.  Returns a bare
    304 response when the client's cached copy is current, ``None``
    otherwise, in which case the caller builds the normal body.
    """
    headers = token.headers()
    response.headers.update(headers)
    if is_not_modified(
        token,
        request.headers.get("if-none-match"),
        request.headers.get("if-modified-since"),
    ):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    return None
