"""HTTP client for the document processing service."""

from __future__ import annotations

from typing import Any

import httpx

from redactor.core.constants import JSON_CONTENT_TYPE
from redactor.core.logging import get_logger
from redactor.pipeline.errors import RemoteServiceError

logger = get_logger(__name__)


class ProcessingServiceClient:
    """
    Thin async wrapper around httpx for the processing service.

    Every non-2xx response and every transport error surfaces as
    RemoteServiceError; callers translate it into the operation-specific
    error.  Nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ProcessingServiceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        response = await self._send(
            "POST",
            path,
            json=payload,
            headers={"content-type": JSON_CONTENT_TYPE},
        )
        return self._json(response)

    async def post_bytes(
        self,
        path: str,
        body: bytes,
        content_type: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        response = await self._send(
            "POST",
            path,
            content=body,
            params=params,
            headers={"content-type": content_type},
        )
        return self._json(response)

    async def get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = await self._send("GET", path, params=params)
        return self._json(response)

    async def get_bytes(self, path: str) -> bytes:
        response = await self._send("GET", path)
        return response.content

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"/{path.lstrip('/')}"
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Processing service unreachable", method=method, path=url, error=str(exc))
            raise RemoteServiceError(f"{method} {url} failed: {exc}") from exc

        if response.is_error:
            logger.error(
                "Processing service returned an error",
                method=method,
                path=url,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise RemoteServiceError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteServiceError(
                f"{response.request.method} {response.request.url.path} returned invalid JSON",
                status_code=response.status_code,
                response_body=response.text,
            ) from exc
