from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import anyio
import httpx
from pydantic import ValidationError

from catalog_proxy.core.config import settings
from catalog_proxy.schemas.douban import CatalogItem, CatalogQuery, DoubanSearchResponse
from catalog_proxy.services.top250_parser import Top250Parser, default_top250_parser
from catalog_proxy.services.urls import force_https_image

DOUBAN_BASE_URL = "https://movie.douban.com"
DOUBAN_SEARCH_PATH = "/j/search_subjects"
DOUBAN_TOP250_PATH = "/top250"
DOUBAN_REFERER = "https://movie.douban.com/"

DEFAULT_PAGE_SIZE = 16
DEFAULT_PAGE_START = 0
MAX_PAGE_SIZE = 100

JSON_ACCEPT = "application/json, text/plain, */*"
HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"

SUCCESS_MESSAGE = "获取成功"
SEARCH_FAILURE_MESSAGE = "获取豆瓣数据失败"
TOP250_FAILURE_MESSAGE = "获取豆瓣 Top250 数据失败"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

logger = logging.getLogger(__name__)


class CatalogValidationError(ValueError):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class UpstreamError(RuntimeError):
    pass


def _parse_int(raw: str | None, default: int) -> int:
    # Leading-integer parse: "12abc" -> 12, "abc" / "" / None -> default.
    if raw is None:
        return default
    match = _LEADING_INT_RE.match(raw)
    if not match:
        return default
    return int(match.group(1))


def parse_catalog_query(
    *,
    type: str | None,
    tag: str | None,
    page_size: str | None = None,
    page_start: str | None = None,
) -> CatalogQuery:
    if not type or not tag:
        raise CatalogValidationError("missing_parameter", "缺少必要参数: type 或 tag")

    if type not in ("tv", "movie"):
        raise CatalogValidationError("invalid_type", "type 参数必须是 tv 或 movie")

    size = _parse_int(page_size, DEFAULT_PAGE_SIZE)
    if size < 1 or size > MAX_PAGE_SIZE:
        raise CatalogValidationError("invalid_page_size", "pageSize 必须在 1-100 之间")

    start = _parse_int(page_start, DEFAULT_PAGE_START)
    if start < 0:
        raise CatalogValidationError("invalid_page_start", "pageStart 不能小于 0")

    return CatalogQuery(type=type, tag=tag, page_size=size, page_start=start)


def douban_headers(accept: str = JSON_ACCEPT) -> dict[str, str]:
    return {
        "User-Agent": settings.douban_user_agent,
        "Referer": DOUBAN_REFERER,
        "Accept": accept,
    }


@asynccontextmanager
async def douban_client(
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        base_url=DOUBAN_BASE_URL,
        timeout=timeout if timeout is not None else settings.douban_timeout_seconds,
        follow_redirects=True,
        transport=transport,
    ) as client:
        yield client


def _describe_http_error(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP error! Status: {exc.response.status_code}"
    if isinstance(exc, httpx.TimeoutException):
        return "Request timed out"
    return str(exc) or exc.__class__.__name__


def _total_deadline(client: httpx.AsyncClient) -> float:
    # httpx timeouts apply per connect/read/write; this bounds the whole request.
    read_timeout = client.timeout.read
    return read_timeout if read_timeout is not None else settings.douban_timeout_seconds


async def _get(
    client: httpx.AsyncClient,
    path: str,
    *,
    params: dict[str, Any],
    accept: str,
) -> httpx.Response:
    try:
        # client.get reads the full body, so the deadline covers a slowly dribbled response too
        with anyio.fail_after(_total_deadline(client)):
            r = await client.get(path, params=params, headers=douban_headers(accept))
        r.raise_for_status()
    except TimeoutError as exc:
        raise UpstreamError("Request timed out") from exc
    except httpx.HTTPError as exc:
        raise UpstreamError(_describe_http_error(exc)) from exc
    return r


async def fetch_douban_json(
    client: httpx.AsyncClient,
    path: str,
    params: dict[str, Any],
) -> Any:
    r = await _get(client, path, params=params, accept=JSON_ACCEPT)
    try:
        return r.json()
    except ValueError as exc:
        raise UpstreamError(f"Invalid JSON from upstream: {exc}") from exc


def search_params(query: CatalogQuery) -> dict[str, Any]:
    return {
        "type": query.type,
        "tag": query.tag,
        "sort": "recommend",
        "page_limit": query.page_size,
        "page_start": query.page_start,
    }


async def fetch_search_items(client: httpx.AsyncClient, query: CatalogQuery) -> list[CatalogItem]:
    data = await fetch_douban_json(client, DOUBAN_SEARCH_PATH, search_params(query))
    try:
        payload = DoubanSearchResponse.model_validate(data)
    except ValidationError as exc:
        raise UpstreamError(f"Unexpected upstream payload: {exc.error_count()} validation error(s)") from exc

    return [
        CatalogItem(
            id=subject.id,
            title=subject.title,
            poster=force_https_image(subject.cover),
            rate=subject.rate,
            year="",
        )
        for subject in payload.subjects
    ]


async def fetch_top250_items(
    client: httpx.AsyncClient,
    page_start: int,
    parser: Top250Parser = default_top250_parser,
) -> list[CatalogItem]:
    r = await _get(
        client,
        DOUBAN_TOP250_PATH,
        params={"start": page_start, "filter": ""},
        accept=HTML_ACCEPT,
    )
    # A changed page layout can surface as any exception type.
    try:
        return parser.parse(r.text)
    except Exception as exc:
        raise UpstreamError(f"Failed to parse top250 page: {exc}") from exc


async def fetch_catalog(
    client: httpx.AsyncClient,
    query: CatalogQuery,
    parser: Top250Parser = default_top250_parser,
) -> list[CatalogItem]:
    if query.is_top250:
        return await fetch_top250_items(client, query.page_start, parser)
    return await fetch_search_items(client, query)


def failure_message(query: CatalogQuery) -> str:
    return TOP250_FAILURE_MESSAGE if query.is_top250 else SEARCH_FAILURE_MESSAGE


def log_upstream_failure(query: CatalogQuery, exc: Exception) -> None:
    logger.warning(
        "douban fetch failed type=%s tag=%s page_size=%s page_start=%s",
        query.type,
        query.tag,
        query.page_size,
        query.page_start,
        exc_info=exc,
    )
