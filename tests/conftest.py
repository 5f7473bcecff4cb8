from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient as FastAPITestClient

from linkimport.dependencies import get_submitter_factory
from linkimport.imports.models import ChunkResponse, ChunkTransportError, RemoteRowResult
from linkimport.imports.parsing import parse_table
from linkimport.imports.runs import run_store
from linkimport.main import app


class FakeLinkService:
    """Records submitted chunks and answers every row with success.

    ``fail_chunks`` holds 1-based call numbers that raise a transport error;
    ``reject_rows`` holds chunk-relative row numbers reported as failed.
    """

    def __init__(
        self,
        fail_chunks: frozenset[int] = frozenset(),
        reject_rows: frozenset[int] = frozenset(),
    ) -> None:
        self.fail_chunks = fail_chunks
        self.reject_rows = reject_rows
        self.chunks: list[str] = []
        self.factory_calls: list[tuple[str, dict, dict]] = []

    def __call__(self, chunk_text: str) -> ChunkResponse:
        self.chunks.append(chunk_text)
        if len(self.chunks) in self.fail_chunks:
            raise ChunkTransportError("link service returned HTTP 502: bad gateway")
        table = parse_table(chunk_text, ",")
        results = [
            RemoteRowResult(
                row=index,
                success=index not in self.reject_rows,
                reason="Slug already exists." if index in self.reject_rows else None,
                slug=None if index in self.reject_rows else f"s{len(self.chunks)}-{index}",
            )
            for index in range(len(table.rows))
        ]
        errors = sum(1 for result in results if not result.success)
        return ChunkResponse(
            success_count=len(results) - errors,
            error_count=errors,
            results=results,
        )

    def factory(self, collection_id, mapping, rules):
        self.factory_calls.append((collection_id, dict(mapping), dict(rules)))
        return self


@pytest.fixture
def fake_service() -> FakeLinkService:
    return FakeLinkService()


@pytest.fixture
def client(fake_service, monkeypatch) -> Generator[FastAPITestClient, None, None]:
    monkeypatch.delenv("LINKIMPORT_UPLOAD_MAX_BYTES", raising=False)
    monkeypatch.delenv("LINKIMPORT_CHUNK_SIZE", raising=False)
    run_store.clear()
    app.dependency_overrides[get_submitter_factory] = lambda: fake_service.factory
    with FastAPITestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    run_store.clear()


@pytest.fixture
def make_csv() -> Callable[[int], str]:
    def _factory(rows: int, header: str = "Destination URL,Slug,US Redirect URL") -> str:
        lines = [header]
        for index in range(rows):
            lines.append(f"https://example.com/p/{index},promo{index},https://us.example.com/{index}")
        return "\n".join(lines) + "\n"

    return _factory
