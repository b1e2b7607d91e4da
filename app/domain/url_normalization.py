"""
app/domain/url_normalization.py

Hostname normalization shared by submission and the provider adapters.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_WWW_RE = re.compile(r"^www\.", re.IGNORECASE)


def normalize_domain(value: str | None) -> str | None:
    """
    Reduce a domain or URL to a bare lowercase hostname.

    Strips the scheme and a leading ``www.`` and truncates at the first path
    separator, so ``https://www.Example.com/a?b`` becomes ``example.com``.
    Returns None for empty input.
    """

    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None

    if not _SCHEME_RE.match(candidate):
        candidate = f"https://{candidate}"

    try:
        hostname = urlparse(candidate).hostname or ""
    except ValueError:
        hostname = ""

    if not hostname:
        hostname = _SCHEME_RE.sub("", value.strip()).split("/", 1)[0]

    hostname = _WWW_RE.sub("", hostname.lower())
    return hostname or None


def strip_scheme_and_www(value: str) -> str:
    """
    Lowercase a link and drop its scheme and leading ``www.``.

    Unlike ``normalize_domain`` the path is kept, which is what result-link
    matching needs.
    """

    stripped = _SCHEME_RE.sub("", value.strip())
    return _WWW_RE.sub("", stripped).lower()
