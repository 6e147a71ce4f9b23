import os
from collections.abc import Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# IMPORTANT:
# Set env vars BEFORE importing catalog_proxy.main (pydantic settings load at import time)
os.environ["ENV"] = "test"
os.environ.setdefault("CACHE_TIME", "7200")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:5173")

from catalog_proxy.main import app as fastapi_app  # noqa: E402
from catalog_proxy.api.deps import get_cache_time, get_douban_client  # noqa: E402
from catalog_proxy.services.douban import DOUBAN_BASE_URL  # noqa: E402

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def client():
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def douban_upstream():
    """
    Routes the proxy's outbound Douban calls to a handler instead of the network.

    Returns a list of the requests the handler received, so tests can assert
    on the upstream URL and headers.
    """
    seen: list[httpx.Request] = []

    def _install(handler: Handler) -> list[httpx.Request]:
        def _recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        async def _override_get_douban_client():
            async with AsyncClient(
                transport=httpx.MockTransport(_recording),
                base_url=DOUBAN_BASE_URL,
            ) as c:
                yield c

        fastapi_app.dependency_overrides[get_douban_client] = _override_get_douban_client
        return seen

    return _install


@pytest.fixture
def cache_time_override():
    def _set(value: int) -> None:
        fastapi_app.dependency_overrides[get_cache_time] = lambda: value

    return _set


TOP250_HTML = """
<ol class="grid_view">
  <li>
    <div class="item">
      <div class="pic">
        <em class="">1</em>
        <a href="https://movie.douban.com/subject/1292052/">
          <img width="100" alt="肖申克的救赎" src="http://img2.doubanio.com/view/photo/s_ratio_poster/public/p480747492.jpg" class="">
        </a>
      </div>
      <div class="info">
        <div class="hd">
          <a href="https://movie.douban.com/subject/1292052/" class="">
            <span class="title">肖申克的救赎</span>
          </a>
        </div>
        <div class="bd">
          <div class="star">
            <span class="rating5-t"></span>
            <span class="rating_num" property="v:average">9.7</span>
          </div>
        </div>
      </div>
    </div>
  </li>
  <li>
    <div class="item">
      <div class="pic">
        <em class="">2</em>
        <a href="https://movie.douban.com/subject/1291546/">
          <img width="100" alt="霸王别姬" src="https://img3.doubanio.com/view/photo/s_ratio_poster/public/p2561716440.jpg" class="">
        </a>
      </div>
      <div class="info">
        <div class="bd">
          <div class="star">
            <span class="rating5-t"></span>
            <span class="rating_num" property="v:average">9.6</span>
          </div>
        </div>
      </div>
    </div>
  </li>
</ol>
"""


@pytest.fixture
def top250_html():
    return TOP250_HTML
