from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx

from catalog_proxy.core.config import settings
from catalog_proxy.services.douban import douban_client
from catalog_proxy.services.top250_parser import Top250Parser, default_top250_parser


async def get_douban_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    # Scoped to one request; closing the client also drops any pending timeout.
    async with douban_client() as client:
        yield client


def get_cache_time() -> int:
    return settings.cache_time


def get_top250_parser() -> Top250Parser:
    return default_top250_parser
