import logging
from dataclasses import dataclass

from .models import Request, Response
from .types import Interceptor, RequestHook, ResponseHook


@dataclass(frozen=True)
class FunctionInterceptor:
    """Adapts a pair of coroutine functions to the interceptor interface.

    A stage left as None passes its argument through untouched.
    """

    request_hook: RequestHook | None = None
    response_hook: ResponseHook | None = None

    async def on_request(self, request: Request) -> Request:
        if self.request_hook is None:
            return request
        return await self.request_hook(request)

    async def on_response(self, response: Response) -> Response:
        if self.response_hook is None:
            return response
        return await self.response_hook(response)


def headers_interceptor(**headers: str) -> Interceptor:
    async def on_request(request: Request) -> Request:
        return request.with_headers(**headers)

    return FunctionInterceptor(request_hook=on_request)


def base_url_interceptor(base_url: str) -> Interceptor:
    base = base_url.rstrip("/")

    async def on_request(request: Request) -> Request:
        if "://" in request.url:
            return request
        return request.with_url(f"{base}/{request.url.lstrip('/')}")

    return FunctionInterceptor(request_hook=on_request)


def logging_interceptor(logger: logging.Logger | None = None) -> Interceptor:
    log = logger or logging.getLogger(__name__)

    async def on_request(request: Request) -> Request:
        log.info(f"-> {request.method} {request.url}")
        return request

    async def on_response(response: Response) -> Response:
        log.info(f"<- {response.status_code} ({response.latency_ms}ms)")
        return response

    return FunctionInterceptor(request_hook=on_request, response_hook=on_response)
