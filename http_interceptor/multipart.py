"""Streaming ``multipart/form-data`` encoder.

Parts are rendered lazily so file contents are read chunk by chunk while the
body is sent. The total length is known up front whenever every file part has
a known length, either declared on the ``MultipartFile`` or discovered from a
seekable file object.
"""

import mimetypes
import secrets
from collections.abc import AsyncIterator, Iterator, Mapping, Sequence
from typing import IO

from .models import MultipartFile

CHUNK_SIZE = 64 * 1024


def _quote(value: str) -> str:
    return value.replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")


def _peek_length(fileobj: IO[bytes]) -> int | None:
    try:
        if not fileobj.seekable():
            return None
        position = fileobj.tell()
        end = fileobj.seek(0, 2)
        fileobj.seek(position)
    except (AttributeError, OSError):
        return None
    return end - position


class MultipartBody:
    def __init__(
        self,
        fields: Mapping[str, str],
        files: Sequence[MultipartFile],
        boundary: str | None = None,
    ):
        self.boundary = boundary or secrets.token_hex(16)
        self._fields = dict(fields)
        self._files = tuple(files)

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def _field_header(self, name: str) -> bytes:
        return (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{_quote(name)}"\r\n\r\n'
        ).encode()

    def _file_header(self, part: MultipartFile) -> bytes:
        disposition = f'form-data; name="{_quote(part.field)}"'
        if part.filename is not None:
            disposition += f'; filename="{_quote(part.filename)}"'
        content_type = part.content_type
        if content_type is None and part.filename:
            content_type = mimetypes.guess_type(part.filename)[0]
        return (
            f"--{self.boundary}\r\n"
            f"Content-Disposition: {disposition}\r\n"
            f"Content-Type: {content_type or 'application/octet-stream'}\r\n\r\n"
        ).encode()

    def _closing(self) -> bytes:
        return f"--{self.boundary}--\r\n".encode()

    @staticmethod
    def _file_length(part: MultipartFile) -> int | None:
        if part.length is not None:
            return part.length
        if isinstance(part.content, bytes):
            return len(part.content)
        return _peek_length(part.content)

    @property
    def content_length(self) -> int | None:
        length = len(self._closing())
        for name, value in self._fields.items():
            length += len(self._field_header(name)) + len(value.encode()) + 2
        for part in self._files:
            file_length = self._file_length(part)
            if file_length is None:
                return None
            length += len(self._file_header(part)) + file_length + 2
        return length

    def iter_chunks(self) -> Iterator[bytes]:
        for name, value in self._fields.items():
            yield self._field_header(name) + value.encode() + b"\r\n"
        for part in self._files:
            yield self._file_header(part)
            if isinstance(part.content, bytes):
                if part.content:
                    yield part.content
            else:
                while chunk := part.content.read(CHUNK_SIZE):
                    yield chunk
            yield b"\r\n"
        yield self._closing()

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.iter_chunks():
            yield chunk
