"""Shared fixtures for the interceptor client tests."""

from collections.abc import Callable

import httpx
import pytest

from http_interceptor.client import HttpClient


@pytest.fixture
def make_client() -> Callable[..., HttpClient]:
    """Build an HttpClient whose transport is served by ``handler``."""

    def factory(handler, interceptors=None, request_timeout=None, **options) -> HttpClient:
        transport = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpClient.build(
            interceptors=interceptors,
            request_timeout=request_timeout,
            transport=transport,
            **options,
        )

    return factory
