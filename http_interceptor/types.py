from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import Request, Response

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]
HTTP_METHODS: frozenset[str] = frozenset(("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"))

ProgressCallback = Callable[[int, int | None], None]

RequestHook = Callable[["Request"], Awaitable["Request"]]
ResponseHook = Callable[["Response"], Awaitable["Response"]]


@runtime_checkable
class Interceptor(Protocol):
    """Anything with an awaitable request stage and response stage."""

    async def on_request(self, request: "Request") -> "Request": ...

    async def on_response(self, response: "Response") -> "Response": ...
