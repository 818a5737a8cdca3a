import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from .builder import build_request, to_transport_request
from .chain import InterceptorChain
from .config import HttpClientSettings
from .errors import HttpStatusError, RequestTimeoutError
from .models import MultipartFile, Response
from .pool import TransportConfig
from .progress import content_length, instrument
from .types import Interceptor, ProgressCallback

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, Any] | None


class HttpClient:
    """Async HTTP client that passes every exchange through a chain of interceptors.

    Interceptors see each request before it is sent and each fully buffered
    response before it is returned, first to last on both edges. The client
    holds no per-exchange state, so concurrent calls share only the transport,
    the interceptor list and the timeout.

    Usage:
        async with HttpClient.build(interceptors=[headers_interceptor(Authorization="Bearer t")]) as client:
            response = await client.get("https://api.example.com/users")
            await client.post_file(
                "https://api.example.com/upload",
                body={"name": "foo"},
                files=[MultipartFile.from_bytes("file", data, filename="a.bin")],
                on_upload_progress=lambda sent, total: print(sent, total),
            )
    """

    def __init__(
        self,
        interceptors: Iterable[Interceptor | None] | None = None,
        request_timeout: float | None = None,
        transport_config: TransportConfig | None = None,
        default_encoding: str | None = None,
        transport: httpx.AsyncClient | None = None,
    ):
        self._chain = InterceptorChain(interceptors)
        self._request_timeout = request_timeout
        self._default_encoding = default_encoding
        self._client = transport or (transport_config or TransportConfig()).create_client()

    @classmethod
    def build(
        cls,
        interceptors: Iterable[Interceptor | None] | None = None,
        request_timeout: float | None = None,
        **options: Any,
    ) -> "HttpClient":
        return cls(interceptors=interceptors, request_timeout=request_timeout, **options)

    @classmethod
    def from_settings(
        cls,
        settings: HttpClientSettings | None = None,
        interceptors: Iterable[Interceptor | None] | None = None,
    ) -> "HttpClient":
        settings = settings or HttpClientSettings()
        return cls(
            interceptors=interceptors,
            request_timeout=settings.REQUEST_TIMEOUT,
            transport_config=TransportConfig(
                max_connections=settings.MAX_CONNECTIONS,
                max_keepalive=settings.MAX_KEEPALIVE,
                keepalive_expiry=settings.KEEPALIVE_EXPIRY,
                proxy_url=settings.PROXY_URL or None,
            ),
            default_encoding=settings.DEFAULT_ENCODING,
        )

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._chain.interceptors

    @property
    def request_timeout(self) -> float | None:
        return self._request_timeout

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.close()

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a transport request as-is and return the streamed response.

        Interceptors, progress reporting and the request timeout do not apply.
        The caller must close the returned response.
        """
        return await self._client.send(request, stream=True)

    async def exchange(
        self,
        method: str,
        url: str | httpx.URL,
        *,
        headers: Mapping[str, str] | None = None,
        params: QueryParams = None,
        body: Any = None,
        encoding: str | None = None,
        files: Iterable[MultipartFile] | None = None,
        on_upload_progress: ProgressCallback | None = None,
        on_progress: ProgressCallback | None = None,
        timeout: float | None = None,
    ) -> Response:
        if params:
            url = httpx.URL(url).copy_merge_params(params)
        request = build_request(
            method,
            url,
            headers=headers,
            body=body,
            encoding=encoding or self._default_encoding,
            files=files,
        )

        request = await self._chain.run_request_stage(request)
        transport_request = to_transport_request(request, on_upload_progress=on_upload_progress)

        deadline = timeout if timeout is not None else self._request_timeout
        logger.debug(f"Sending {transport_request.method} {transport_request.url}")
        start_time = time.time()
        if deadline is None:
            stream = await self.send(transport_request)
        else:
            try:
                stream = await asyncio.wait_for(self.send(transport_request), deadline)
            except asyncio.TimeoutError as exc:
                raise RequestTimeoutError(str(transport_request.url), deadline) from exc

        try:
            chunks = stream.aiter_bytes()
            if on_progress is not None:
                chunks = instrument(chunks, _download_total(stream.headers), on_progress)
            buffer = bytearray()
            async for chunk in chunks:
                buffer.extend(chunk)
        finally:
            await stream.aclose()

        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Received {stream.status_code} ({len(buffer)} bytes, {latency_ms}ms)")

        response = Response(
            status_code=stream.status_code,
            headers=stream.headers,
            body=bytes(buffer),
            request=request,
            reason_phrase=stream.reason_phrase or None,
            is_redirect=stream.is_redirect,
            persistent_connection=_is_persistent(stream),
            latency_ms=latency_ms,
        )
        return await self._chain.run_response_stage(response)

    async def get(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        params: QueryParams = None,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        return await self.exchange("GET", url, headers=headers, params=params, on_progress=on_progress)

    async def head(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        params: QueryParams = None,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        return await self.exchange("HEAD", url, headers=headers, params=params, on_progress=on_progress)

    async def delete(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        params: QueryParams = None,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        return await self.exchange("DELETE", url, headers=headers, params=params, on_progress=on_progress)

    async def post(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        encoding: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        return await self.exchange(
            "POST", url, headers=headers, body=body, encoding=encoding, on_progress=on_progress
        )

    async def put(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        encoding: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        return await self.exchange(
            "PUT", url, headers=headers, body=body, encoding=encoding, on_progress=on_progress
        )

    async def patch(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        encoding: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        return await self.exchange(
            "PATCH", url, headers=headers, body=body, encoding=encoding, on_progress=on_progress
        )

    async def post_file(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, str] | None = None,
        files: Iterable[MultipartFile] | None = None,
        on_upload_progress: ProgressCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        return await self.exchange(
            "POST",
            url,
            headers=headers,
            body=body,
            files=files,
            on_upload_progress=on_upload_progress,
            on_progress=on_progress,
        )

    async def read(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        response = await self.get(url, headers=headers, on_progress=on_progress)
        _check_response_success(url, response)
        return response.text

    async def read_bytes(
        self,
        url: str | httpx.URL,
        headers: Mapping[str, str] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> bytes:
        response = await self.get(url, headers=headers, on_progress=on_progress)
        _check_response_success(url, response)
        return response.body


def _check_response_success(url: str | httpx.URL, response: Response) -> None:
    if response.status_code < 400:
        return
    raise HttpStatusError(str(url), response.status_code, response.reason_phrase)


def _download_total(headers: httpx.Headers) -> int | None:
    # aiter_bytes yields decoded bytes, so a compressed length is not a usable total.
    encoding = headers.get("content-encoding", "identity").strip().lower()
    if encoding not in ("", "identity"):
        return None
    return content_length(headers)


def _is_persistent(response: httpx.Response) -> bool:
    connection = response.headers.get("connection", "").lower()
    if "close" in connection:
        return False
    if response.http_version == "HTTP/1.0":
        return "keep-alive" in connection
    return True
