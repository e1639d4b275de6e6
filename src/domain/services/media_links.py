"""Rewrite shared-drive image links into directly viewable URLs.

Users paste share links from Dropbox or Google Drive. Those point at an HTML
preview page, so an ``<img>`` cannot render them. The rewritten links serve
the raw file:

    https://www.dropbox.com/scl/fi/abc/pic.jpg?rlkey=xyz&dl=0
        -> https://dl.dropboxusercontent.com/scl/fi/abc/pic.jpg?rlkey=xyz

    https://drive.google.com/file/d/FILE_ID/view?usp=sharing
        -> https://drive.google.com/uc?export=view&id=FILE_ID

Anything else is returned unchanged, and rewritten links map to themselves.
"""

import re
from typing import Optional
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit, urlunsplit

DROPBOX_HOSTS = frozenset({"dropbox.com", "www.dropbox.com"})
DROPBOX_DIRECT_HOST = "dl.dropboxusercontent.com"
# Query flags that only toggle Dropbox's preview/download page
DROPBOX_VIEW_FLAGS = frozenset({"dl", "raw"})

DRIVE_HOST = "drive.google.com"
_DRIVE_FILE_PATH = re.compile(r"^/file/d/(?P<id>[\w-]+)")


def normalize_media_url(url: Optional[str]) -> Optional[str]:
    """Return a directly renderable form of ``url``."""
    if not url:
        return url

    url = url.strip()
    parts = urlsplit(url)
    host = parts.netloc.lower()

    if host in DROPBOX_HOSTS:
        return _dropbox_direct(parts)
    if host == DRIVE_HOST:
        return _drive_direct(parts) or url
    return url


def _dropbox_direct(parts: SplitResult) -> str:
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in DROPBOX_VIEW_FLAGS
    ]
    return urlunsplit(("https", DROPBOX_DIRECT_HOST, parts.path, urlencode(query), ""))


def _drive_direct(parts: SplitResult) -> Optional[str]:
    file_id = None
    match = _DRIVE_FILE_PATH.match(parts.path)
    if match:
        file_id = match.group("id")
    elif parts.path in ("/open", "/uc"):
        file_id = dict(parse_qsl(parts.query)).get("id")

    if not file_id:
        return None
    return f"https://{DRIVE_HOST}/uc?export=view&id={file_id}"
