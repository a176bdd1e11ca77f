import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from core.errors import ResourceNotFound, ResourceInternalError, NetworkFailure

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def _is_displayable(content_type: str) -> bool:
    # 服务端猜不出类型时回退到 octet-stream，同样接受
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type.startswith("image/") or media_type == DEFAULT_MEDIA_TYPE


@dataclass(frozen=True)
class FetchedResource:
    content: bytes
    media_type: str


class ResourceClient:
    """
    GET /resource 的异步客户端，把 HTTP 结果映射为 core.errors 中的异常：
    404 -> ResourceNotFound，其它非 200 或非图片类型的 200 -> ResourceInternalError，
    传输错误/超时 -> NetworkFailure。
    """

    def __init__(self, base_url: str, route: str = "/resource", timeout_s: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.route = route
        self.timeout_s = timeout_s
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            )
        return self._client

    async def fetch(self) -> FetchedResource:
        client = self._ensure_client()
        try:
            r = await client.get(self.route)
        except httpx.HTTPError as e:
            raise NetworkFailure(f"GET {self.base_url}{self.route} failed: {e!r}") from e

        if r.status_code == 404:
            raise ResourceNotFound(r.text or "resource not found")
        if r.status_code != 200:
            raise ResourceInternalError(f"HTTP {r.status_code}: {r.text}")

        media_type = r.headers.get("content-type", DEFAULT_MEDIA_TYPE)
        if not _is_displayable(media_type):
            # 例如代理返回的 HTML 错误页
            raise ResourceInternalError(f"HTTP 200 with non-image content type {media_type!r}")
        return FetchedResource(content=r.content, media_type=media_type)

    async def aclose(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None
