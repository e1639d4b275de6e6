"""Clipboard adapter for HTTP responses."""

from fastapi import Request

from core.config import settings


class ResponseClipboard:
    """Collects copied text so the route can hand it to the browser."""

    def __init__(self) -> None:
        self.text: str | None = None

    def write_text(self, text: str) -> None:
        self.text = text


def resolve_origin(request: Request) -> str:
    """Origin the share link is built on.

    The page's own ``Origin`` header wins, then ``PUBLIC_ORIGIN``, then the
    URL this API was reached at.
    """
    origin = request.headers.get("origin")
    if origin and origin != "null":
        return origin
    if settings.public_origin:
        return settings.public_origin
    return str(request.base_url).rstrip("/")
