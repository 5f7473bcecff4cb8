from __future__ import annotations

import asyncio

import pytest

from linkimport.imports.uploads import (
    UploadTooLargeError,
    describe_upload_limit,
    read_file_limited,
    read_upload_limited,
)


class _FakeUpload:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload
        self._offset = 0

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._payload)
        block = self._payload[self._offset : self._offset + size]
        self._offset += len(block)
        return block


def test_read_upload_limited_reads_in_blocks() -> None:
    payload = asyncio.run(read_upload_limited(_FakeUpload(b"a" * 10), max_bytes=10, read_size=3))

    assert payload == b"a" * 10


def test_read_upload_limited_rejects_oversized_payload() -> None:
    with pytest.raises(UploadTooLargeError, match="maximum size of 4 bytes"):
        asyncio.run(read_upload_limited(_FakeUpload(b"abcde"), max_bytes=4, read_size=2))


def test_read_upload_limited_uses_environment_limit(monkeypatch) -> None:
    monkeypatch.setenv("LINKIMPORT_UPLOAD_MAX_BYTES", "2")

    with pytest.raises(UploadTooLargeError) as exc_info:
        asyncio.run(read_upload_limited(_FakeUpload(b"abc")))
    assert exc_info.value.max_bytes == 2


def test_read_file_limited(tmp_path) -> None:
    path = tmp_path / "links.csv"
    path.write_bytes(b"url\nhttps://a.example\n")

    assert read_file_limited(str(path), max_bytes=100) == b"url\nhttps://a.example\n"
    with pytest.raises(UploadTooLargeError):
        read_file_limited(str(path), max_bytes=5)


def test_describe_upload_limit() -> None:
    assert describe_upload_limit(5 * 1024 * 1024) == "5 MB"
    assert describe_upload_limit(2048) == "2 KB"
    assert describe_upload_limit(1) == "1 byte"
    assert describe_upload_limit(1500) == "1500 bytes"
