import logging
import traceback

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi_mcp import FastApiMCP

from catalog_proxy.core.config import settings
from catalog_proxy.core.logging_setup import configure_logging
from catalog_proxy.api.routes.health import router as health_router
from catalog_proxy.api.routes.douban import router as douban_router


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Douban Catalog Proxy", version="0.1.0")


@app.exception_handler(Exception)
async def debug_exception_handler(request: Request, exc: Exception):
    if settings.env in {"local", "test"}:
        return PlainTextResponse(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            status_code=500,
        )
    logger.exception("Unhandled exception for %s %s", request.method, request.url.path)
    return PlainTextResponse("Internal Server Error", status_code=500)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(douban_router)

mcp = FastApiMCP(app, include_operations=["douban_catalog"])
mcp.mount_http()


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
