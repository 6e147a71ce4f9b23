from __future__ import annotations

import re

_HTTP_SCHEME_RE = re.compile(r"^http://", flags=re.IGNORECASE)


def force_https_image(url: str | None) -> str | None:
    """Rewrite an ``http://`` image URL to ``https://``; anything else is returned as-is."""
    if not url:
        return url
    return _HTTP_SCHEME_RE.sub("https://", url, count=1)
