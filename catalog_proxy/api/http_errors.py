from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse

from catalog_proxy.services.douban import CatalogValidationError, UpstreamError


def validation_error(exc: CatalogValidationError) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)


def upstream_error(exc: UpstreamError, *, message: str) -> JSONResponse:
    return JSONResponse(
        {"error": message, "details": str(exc)},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def cache_headers(cache_time: int) -> dict[str, str]:
    return {
        "Cache-Control": f"public, max-age={cache_time}, s-maxage={cache_time}",
        "CDN-Cache-Control": f"public, s-maxage={cache_time}",
        "Vercel-CDN-Cache-Control": f"public, s-maxage={cache_time}",
    }
