from __future__ import annotations

from typing import Optional, Protocol

from linkimport.environment import get_upload_max_bytes

UPLOAD_READ_SIZE = 64 * 1024


class UploadTooLargeError(ValueError):
    """Raised when an uploaded file exceeds the configured size limit."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(f"File exceeds maximum size of {describe_upload_limit(max_bytes)}.")
        self.max_bytes = max_bytes


class UploadLike(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


def describe_upload_limit(max_bytes: int) -> str:
    for unit, size in (("MB", 1024 * 1024), ("KB", 1024)):
        if max_bytes >= size and max_bytes % size == 0:
            return f"{max_bytes // size} {unit}"
    return "1 byte" if max_bytes == 1 else f"{max_bytes} bytes"


async def read_upload_limited(
    upload: UploadLike,
    *,
    max_bytes: Optional[int] = None,
    read_size: int = UPLOAD_READ_SIZE,
) -> bytes:
    limit = get_upload_max_bytes() if max_bytes is None else max_bytes
    if limit < 0:
        raise ValueError("max_bytes must be non-negative")
    if read_size <= 0:
        raise ValueError("read_size must be positive")

    buffer = bytearray()
    while True:
        block = await upload.read(read_size)
        if not block:
            return bytes(buffer)
        buffer.extend(block)
        if len(buffer) > limit:
            raise UploadTooLargeError(limit)


def read_file_limited(path: str, *, max_bytes: Optional[int] = None) -> bytes:
    limit = get_upload_max_bytes() if max_bytes is None else max_bytes
    with open(path, "rb") as handle:
        payload = handle.read(limit + 1)
    if len(payload) > limit:
        raise UploadTooLargeError(limit)
    return payload
