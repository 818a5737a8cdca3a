import io

import httpx
import pytest

from http_interceptor.builder import build_request, to_transport_request
from http_interceptor.errors import InvalidArgumentError
from http_interceptor.models import MultipartFile


class UnsizedReader:
    """Readable file object whose size cannot be discovered."""

    def __init__(self, data: bytes):
        self._buffer = io.BytesIO(data)

    def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)

    def seekable(self) -> bool:
        return False


class TestBuildRequest:
    def test_text_body(self):
        req = build_request("post", "https://example.com", body="hello")
        assert req.method == "POST"
        assert req.body == "hello"
        assert req.is_multipart is False

    def test_bytes_like_body_is_copied_to_bytes(self):
        req = build_request("PUT", "https://example.com", body=bytearray(b"\x00\x01"))
        assert req.body == b"\x00\x01"

    def test_field_map_body(self):
        req = build_request("POST", "https://example.com", body={"a": "1"})
        assert req.body == {"a": "1"}

    def test_headers_are_copied(self):
        headers = {"X-Trace": "1"}
        req = build_request("GET", "https://example.com", headers=headers)
        headers["X-Trace"] = "2"
        assert req.headers == {"X-Trace": "1"}

    def test_files_produce_multipart_shape(self):
        part = MultipartFile.from_bytes("file", b"data", filename="d.bin")
        req = build_request("POST", "https://example.com", body={"name": "foo"}, files=[part])
        assert req.is_multipart is True
        assert req.files == (part,)
        assert req.body == {"name": "foo"}

    @pytest.mark.parametrize("body", [123, 1.5, object(), ["a", "b"]])
    def test_invalid_body_kind(self, body):
        with pytest.raises(InvalidArgumentError):
            build_request("POST", "https://example.com", body=body)

    def test_invalid_method(self):
        with pytest.raises(InvalidArgumentError):
            build_request("OPTIONS", "https://example.com")

    def test_unknown_encoding(self):
        with pytest.raises(InvalidArgumentError):
            build_request("POST", "https://example.com", body="x", encoding="no-such-codec")

    def test_multipart_body_must_be_field_map(self):
        part = MultipartFile.from_bytes("file", b"data")
        with pytest.raises(InvalidArgumentError):
            build_request("POST", "https://example.com", body="text", files=[part])

    def test_invalid_error_is_value_error(self):
        with pytest.raises(ValueError):
            build_request("POST", "https://example.com", body=42)


class TestToTransportRequest:
    def test_text_round_trip(self):
        req = build_request("POST", "https://example.com", body="hello")
        transport_request = to_transport_request(req)
        assert transport_request.content.decode("utf-8") == "hello"
        assert transport_request.headers["content-type"] == "text/plain; charset=utf-8"

    def test_text_uses_encoding(self):
        req = build_request("POST", "https://example.com", body="héllo", encoding="latin-1")
        transport_request = to_transport_request(req)
        assert transport_request.content == b"h\xe9llo"
        assert transport_request.content.decode("latin-1") == "héllo"

    def test_explicit_content_type_is_kept(self):
        req = build_request(
            "POST", "https://example.com", headers={"content-type": "application/json"}, body='{"a": 1}'
        )
        transport_request = to_transport_request(req)
        assert transport_request.headers["content-type"] == "application/json"

    def test_bytes_sent_verbatim(self):
        req = build_request("POST", "https://example.com", body=b"\xff\x00")
        transport_request = to_transport_request(req)
        assert transport_request.content == b"\xff\x00"
        assert "content-type" not in transport_request.headers

    def test_form_fields_are_url_encoded(self):
        req = build_request("POST", "https://example.com", body={"name": "a b", "x": "&"})
        transport_request = to_transport_request(req)
        assert transport_request.content == b"name=a+b&x=%26"
        assert transport_request.headers["content-type"].startswith("application/x-www-form-urlencoded")

    def test_empty_body(self):
        transport_request = to_transport_request(build_request("GET", "https://example.com"))
        assert transport_request.method == "GET"
        assert transport_request.content == b""

    def test_body_replaced_by_interceptor_is_validated(self):
        req = build_request("POST", "https://example.com").with_body(42)
        with pytest.raises(InvalidArgumentError):
            to_transport_request(req)

    @pytest.mark.asyncio
    async def test_multipart_request(self):
        req = build_request(
            "POST",
            "https://example.com/upload",
            body={"name": "foo"},
            files=[MultipartFile.from_bytes("file", b"payload", filename="p.bin")],
        )
        transport_request = to_transport_request(req)
        body = await transport_request.aread()

        assert transport_request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert int(transport_request.headers["content-length"]) == len(body)
        assert b'name="name"' in body
        assert b"foo" in body
        assert b'filename="p.bin"' in body
        assert b"payload" in body

    @pytest.mark.asyncio
    async def test_multipart_with_file_object(self):
        req = build_request(
            "POST",
            "https://example.com/upload",
            files=[MultipartFile(field="file", content=io.BytesIO(b"from-file"), filename="f.txt")],
        )
        transport_request = to_transport_request(req)
        body = await transport_request.aread()

        assert b"from-file" in body
        assert b"Content-Type: text/plain" in body
        assert int(transport_request.headers["content-length"]) == len(body)

    @pytest.mark.asyncio
    async def test_empty_files_still_multipart(self):
        req = build_request("POST", "https://example.com/upload", body={"a": "b"}, files=[])
        assert req.is_multipart is True

        transport_request = to_transport_request(req)
        body = await transport_request.aread()

        assert transport_request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b'name="a"' in body
        assert int(transport_request.headers["content-length"]) == len(body)

    @pytest.mark.asyncio
    async def test_declared_length_sets_content_length(self):
        calls = []
        part = MultipartFile(field="file", content=UnsizedReader(b"hello"), filename="h.txt", length=5)
        req = build_request("POST", "https://example.com/upload", files=[part])

        transport_request = to_transport_request(req, on_upload_progress=lambda n, t: calls.append((n, t)))
        sent = await transport_request.aread()

        total = int(transport_request.headers["content-length"])
        assert "transfer-encoding" not in transport_request.headers
        assert total == len(sent)
        assert calls[-1] == (total, total)

    @pytest.mark.asyncio
    async def test_unknown_length_is_sent_chunked(self):
        calls = []
        part = MultipartFile(field="file", content=UnsizedReader(b"hello"), filename="h.txt")
        req = build_request("POST", "https://example.com/upload", files=[part])

        transport_request = to_transport_request(req, on_upload_progress=lambda n, t: calls.append((n, t)))
        sent = await transport_request.aread()

        assert "content-length" not in transport_request.headers
        assert transport_request.headers["transfer-encoding"] == "chunked"
        assert b"hello" in sent
        assert calls[-1] == (len(sent), None)

    @pytest.mark.asyncio
    async def test_multipart_upload_progress(self):
        calls = []
        req = build_request(
            "POST",
            "https://example.com/upload",
            body={"name": "foo"},
            files=[MultipartFile.from_bytes("file", b"x" * 4096, filename="big.bin")],
        )
        transport_request = to_transport_request(req, on_upload_progress=lambda n, t: calls.append((n, t)))
        total = int(transport_request.headers["content-length"])

        sent = b"".join([chunk async for chunk in transport_request.stream])

        assert calls
        assert [n for n, _ in calls] == sorted(n for n, _ in calls)
        assert calls[-1] == (len(sent), total)
        assert all(t == total for _, t in calls)
        assert transport_request.headers["content-type"].startswith("multipart/form-data")

    def test_simple_request_ignores_upload_progress(self):
        calls = []
        req = build_request("POST", "https://example.com", body="hello")
        transport_request = to_transport_request(req, on_upload_progress=lambda n, t: calls.append(n))
        assert transport_request.content == b"hello"
        assert calls == []
        assert isinstance(transport_request, httpx.Request)
