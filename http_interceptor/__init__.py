"""HTTP client with request/response interceptors and transfer progress."""

from .builder import build_request, to_transport_request
from .chain import InterceptorChain
from .client import HttpClient
from .config import HttpClientSettings
from .errors import HttpClientError, HttpStatusError, InvalidArgumentError, RequestTimeoutError
from .interceptors import (
    FunctionInterceptor,
    base_url_interceptor,
    headers_interceptor,
    logging_interceptor,
)
from .models import MultipartFile, Request, Response
from .multipart import MultipartBody
from .pool import TransportConfig
from .progress import content_length, instrument
from .types import HttpMethod, Interceptor, ProgressCallback, RequestHook, ResponseHook

__all__ = [
    "HttpClient",
    "HttpClientSettings",
    "Request",
    "Response",
    "MultipartFile",
    "MultipartBody",
    "TransportConfig",
    "Interceptor",
    "InterceptorChain",
    "FunctionInterceptor",
    "HttpMethod",
    "ProgressCallback",
    "RequestHook",
    "ResponseHook",
    "build_request",
    "to_transport_request",
    "instrument",
    "content_length",
    "HttpClientError",
    "InvalidArgumentError",
    "RequestTimeoutError",
    "HttpStatusError",
    "headers_interceptor",
    "base_url_interceptor",
    "logging_interceptor",
]
