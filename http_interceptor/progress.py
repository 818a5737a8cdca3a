from collections.abc import AsyncIterable, AsyncIterator, Mapping

from .types import ProgressCallback


async def instrument(
    chunks: AsyncIterable[bytes],
    total: int | None,
    on_progress: ProgressCallback,
) -> AsyncIterator[bytes]:
    """Yield ``chunks`` unchanged, reporting the running byte count before each one.

    ``total`` is passed through as-is; ``None`` means the length is unknown.
    """
    transferred = 0
    async for chunk in chunks:
        transferred += len(chunk)
        on_progress(transferred, total)
        yield chunk


def content_length(headers: Mapping[str, str]) -> int | None:
    for key, value in headers.items():
        if key.lower() != "content-length":
            continue
        try:
            length = int(value)
        except ValueError:
            return None
        return length if length >= 0 else None
    return None
