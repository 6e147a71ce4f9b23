#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from catalog_proxy.core.logging_setup import configure_logging
from catalog_proxy.schemas.douban import CatalogQuery, CatalogResult
from catalog_proxy.services.douban import (
    SUCCESS_MESSAGE,
    CatalogValidationError,
    UpstreamError,
    douban_client,
    failure_message,
    fetch_catalog,
    log_upstream_failure,
    parse_catalog_query,
)

logger = logging.getLogger("fetch_douban_list")

EXIT_OK = 0
EXIT_UPSTREAM = 1
EXIT_INVALID = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run one Douban catalog query and print the normalized result as JSON."
    )
    parser.add_argument("--type", required=True, help="tv or movie")
    parser.add_argument("--tag", required=True, help="Douban tag, or top250 for the scraped listing")
    parser.add_argument("--page-size", default=None, help="1-100, default 16")
    parser.add_argument("--page-start", default=None, help=">= 0, default 0")
    parser.add_argument("--timeout", type=float, default=None, help="Upstream timeout in seconds")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


async def _run(query: CatalogQuery, *, timeout: float | None) -> CatalogResult:
    async with douban_client(timeout) as client:
        items = await fetch_catalog(client, query)
    return CatalogResult(code=200, message=SUCCESS_MESSAGE, items=items)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging("INFO" if args.verbose else "WARNING")

    try:
        query = parse_catalog_query(
            type=args.type,
            tag=args.tag,
            page_size=args.page_size,
            page_start=args.page_start,
        )
    except CatalogValidationError as exc:
        print(json.dumps({"error": str(exc)}, ensure_ascii=False), file=sys.stderr)
        return EXIT_INVALID

    logger.info("fetching type=%s tag=%s page_start=%s", query.type, query.tag, query.page_start)
    try:
        result = asyncio.run(_run(query, timeout=args.timeout))
    except UpstreamError as exc:
        log_upstream_failure(query, exc)
        print(
            json.dumps({"error": failure_message(query), "details": str(exc)}, ensure_ascii=False),
            file=sys.stderr,
        )
        return EXIT_UPSTREAM

    print(json.dumps(result.model_dump(by_alias=True), ensure_ascii=False, indent=2))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
