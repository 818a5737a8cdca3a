import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import IO, Any

import httpx

RequestBody = str | bytes | Mapping[str, str] | None


@dataclass(frozen=True)
class MultipartFile:
    field: str
    content: bytes | IO[bytes]
    filename: str | None = None
    content_type: str | None = None
    length: int | None = None

    def __post_init__(self) -> None:
        if self.length is None and isinstance(self.content, bytes):
            object.__setattr__(self, "length", len(self.content))

    @classmethod
    def from_bytes(
        cls,
        field: str,
        value: bytes,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> "MultipartFile":
        return cls(field=field, content=bytes(value), filename=filename, content_type=content_type)

    @classmethod
    def from_string(
        cls,
        field: str,
        value: str,
        filename: str | None = None,
        encoding: str = "utf-8",
    ) -> "MultipartFile":
        return cls(
            field=field,
            content=value.encode(encoding),
            filename=filename,
            content_type=f"text/plain; charset={encoding}",
        )


@dataclass(frozen=True)
class Request:
    """Editable request envelope handed to interceptors.

    The shape is multipart when ``files`` is set, even to an empty tuple,
    and simple when it is None. Header names are case-insensitive.
    """

    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: RequestBody = None
    encoding: str | None = None
    files: tuple[MultipartFile, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @property
    def is_multipart(self) -> bool:
        return self.files is not None

    def with_headers(self, **headers: str) -> "Request":
        return replace(self, headers=_merge_headers(self.headers, headers))

    def with_url(self, url: str) -> "Request":
        return replace(self, url=url)

    def with_body(self, body: RequestBody) -> "Request":
        return replace(self, body=body)

    def with_files(self, files: list[MultipartFile] | tuple[MultipartFile, ...] | None) -> "Request":
        return replace(self, files=tuple(files) if files is not None else None)


@dataclass(frozen=True)
class Response:
    status_code: int
    headers: httpx.Headers
    body: bytes
    request: Request
    reason_phrase: str | None = None
    is_redirect: bool = False
    persistent_connection: bool = True
    latency_ms: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def charset(self) -> str:
        content_type = self.headers.get("content-type") or ""
        for param in content_type.split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip('"')
        return "utf-8"

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def text(self) -> str:
        try:
            return self.body.decode(self.charset, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)

    def with_body(self, body: bytes) -> "Response":
        return replace(self, body=body)

    def with_headers(self, **headers: str) -> "Response":
        return replace(self, headers=_merge_headers(self.headers, headers))


def _merge_headers(current: httpx.Headers, updates: Mapping[str, str]) -> httpx.Headers:
    merged = current.copy()
    merged.update(updates)
    return merged
