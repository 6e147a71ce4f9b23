from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from catalog_proxy.api.deps import get_cache_time, get_douban_client, get_top250_parser
from catalog_proxy.api.http_errors import cache_headers, upstream_error, validation_error
from catalog_proxy.schemas.douban import CatalogResult
from catalog_proxy.services.douban import (
    SUCCESS_MESSAGE,
    CatalogValidationError,
    UpstreamError,
    failure_message,
    fetch_catalog,
    log_upstream_failure,
    parse_catalog_query,
)
from catalog_proxy.services.top250_parser import Top250Parser

router = APIRouter(prefix="/api/douban", tags=["douban"])


@router.get("", response_model=CatalogResult, operation_id="douban_catalog")
async def douban_catalog_route(
    type: str | None = Query(None, description="tv or movie"),
    tag: str | None = Query(None, description="Douban tag; top250 switches to the scraped listing"),
    page_size: str | None = Query(None, alias="pageSize"),
    page_start: str | None = Query(None, alias="pageStart"),
    client: httpx.AsyncClient = Depends(get_douban_client),
    cache_time: int = Depends(get_cache_time),
    parser: Top250Parser = Depends(get_top250_parser),
):
    # Raw strings on purpose: bad values map to 400 {"error": ...} rather than 422.
    try:
        query = parse_catalog_query(type=type, tag=tag, page_size=page_size, page_start=page_start)
    except CatalogValidationError as e:
        return validation_error(e)

    try:
        items = await fetch_catalog(client, query, parser)
    except UpstreamError as e:
        log_upstream_failure(query, e)
        return upstream_error(e, message=failure_message(query))

    result = CatalogResult(code=200, message=SUCCESS_MESSAGE, items=items)
    return JSONResponse(result.model_dump(by_alias=True), headers=cache_headers(cache_time))
