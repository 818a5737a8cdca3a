from collections.abc import Iterable

from .models import Request, Response
from .types import Interceptor


class InterceptorChain:
    """Runs interceptors one after another, in list order on both edges."""

    def __init__(self, interceptors: Iterable[Interceptor | None] | None = None):
        self._interceptors: tuple[Interceptor, ...] = tuple(
            interceptor for interceptor in interceptors or () if interceptor is not None
        )

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._interceptors

    def __len__(self) -> int:
        return len(self._interceptors)

    async def run_request_stage(self, request: Request) -> Request:
        for interceptor in self._interceptors:
            request = await interceptor.on_request(request)
        return request

    async def run_response_stage(self, response: Response) -> Response:
        for interceptor in self._interceptors:
            response = await interceptor.on_response(response)
        return response
