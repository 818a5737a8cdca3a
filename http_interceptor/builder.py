"""Build request envelopes and turn them into transport requests.

A ``Request`` is the generic form interceptors edit. Once the request stage
has run, ``to_transport_request`` derives the ``httpx.Request`` that is
actually sent, choosing the simple or multipart encoding from the shape of
the post-interceptor envelope.
"""

import codecs
from collections.abc import AsyncIterable, Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from .errors import InvalidArgumentError
from .models import MultipartFile, Request
from .multipart import MultipartBody
from .progress import instrument
from .types import HTTP_METHODS, ProgressCallback

DEFAULT_ENCODING = "utf-8"


def build_request(
    method: str,
    url: str | httpx.URL,
    headers: Mapping[str, str] | None = None,
    body: Any = None,
    encoding: str | None = None,
    files: Iterable[MultipartFile] | None = None,
) -> Request:
    method = _check_method(method)
    if encoding is not None:
        _check_encoding(encoding)

    file_parts = tuple(files) if files is not None else None
    if file_parts is not None:
        for part in file_parts:
            if not isinstance(part, MultipartFile):
                raise InvalidArgumentError(f'Invalid multipart file "{part!r}".')
        fields = _check_fields(body)
        return Request(
            method=method,
            url=str(url),
            headers=headers or {},
            body=fields,
            encoding=encoding,
            files=file_parts,
        )

    return Request(
        method=method,
        url=str(url),
        headers=headers or {},
        body=_check_body(body),
        encoding=encoding,
    )


def to_transport_request(
    request: Request,
    on_upload_progress: ProgressCallback | None = None,
) -> httpx.Request:
    if request.is_multipart:
        return _multipart_request(request, on_upload_progress)
    return _simple_request(request)


def _simple_request(request: Request) -> httpx.Request:
    method = _check_method(request.method)
    encoding = _check_encoding(request.encoding or DEFAULT_ENCODING)
    headers = httpx.Headers(request.headers)
    body = _check_body(request.body)

    content: bytes | None = None
    if isinstance(body, str):
        headers.setdefault("Content-Type", f"text/plain; charset={encoding}")
        content = body.encode(encoding)
    elif isinstance(body, bytes):
        content = body
    elif body is not None:
        headers.setdefault("Content-Type", f"application/x-www-form-urlencoded; charset={encoding}")
        content = urlencode(body, encoding=encoding).encode("ascii")

    return httpx.Request(method, request.url, headers=headers, content=content)


def _multipart_request(request: Request, on_upload_progress: ProgressCallback | None) -> httpx.Request:
    method = _check_method(request.method)
    body = MultipartBody(_check_fields(request.body) or {}, request.files or ())
    total = body.content_length

    headers = httpx.Headers(request.headers)
    headers.setdefault("Content-Type", body.content_type)
    if total is not None:
        headers["Content-Length"] = str(total)

    content: AsyncIterable[bytes] = body
    if on_upload_progress is not None:
        content = instrument(body, total, on_upload_progress)
    return httpx.Request(method, request.url, headers=headers, content=content)


def _check_method(method: str) -> str:
    normalized = str(method).upper()
    if normalized not in HTTP_METHODS:
        raise InvalidArgumentError(f'Invalid request method "{method}".')
    return normalized


def _check_encoding(encoding: str) -> str:
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise InvalidArgumentError(f'Unknown encoding "{encoding}".') from exc
    return encoding


def _check_body(body: Any) -> str | bytes | dict[str, str] | None:
    if body is None or isinstance(body, (str, bytes)):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, Mapping):
        return _check_fields(body)
    raise InvalidArgumentError(f'Invalid request body "{body!r}".')


def _check_fields(body: Any) -> dict[str, str] | None:
    if body is None:
        return None
    if not isinstance(body, Mapping):
        raise InvalidArgumentError(f'Invalid multipart fields "{body!r}".')
    for key, value in body.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidArgumentError(f'Invalid form field "{key!r}": {value!r}.')
    return dict(body)
