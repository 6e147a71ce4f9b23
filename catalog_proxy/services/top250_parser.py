from __future__ import annotations

import html
import re
from typing import Protocol

from catalog_proxy.schemas.douban import CatalogItem
from catalog_proxy.services.urls import force_https_image

# One match per <div class="item"> block on movie.douban.com/top250.
_TOP250_ITEM_RE = re.compile(
    r'<div class="item">[\s\S]*?'
    r'<a[^>]+href="https?://movie\.douban\.com/subject/(?P<id>\d+)/"[\s\S]*?'
    r'<img[^>]+alt="(?P<title>[^"]+)"[^>]*src="(?P<cover>[^"]+)"[\s\S]*?'
    r'<span class="rating_num"[^>]*>(?P<rate>[^<]*)</span>[\s\S]*?'
    r"</div>"
)


class Top250Parser(Protocol):
    def parse(self, markup: str) -> list[CatalogItem]: ...


class RegexTop250Parser:
    """Extracts top250 entries with a single pattern over the raw page.

    Coupled to the exact markup of the listing page; a block that does not
    carry the subject link, poster image and rating span is skipped.
    """

    def __init__(self, pattern: re.Pattern[str] = _TOP250_ITEM_RE):
        self.pattern = pattern

    def parse(self, markup: str) -> list[CatalogItem]:
        if not isinstance(markup, str) or not markup.strip():
            return []

        out: list[CatalogItem] = []
        for match in self.pattern.finditer(markup):
            out.append(
                CatalogItem(
                    id=match.group("id"),
                    title=html.unescape(match.group("title")),
                    poster=force_https_image(html.unescape(match.group("cover"))),
                    rate=(match.group("rate") or "").strip(),
                    year="",
                )
            )
        return out


default_top250_parser: Top250Parser = RegexTop250Parser()
