from __future__ import annotations

from typing import Callable, Mapping

from fastapi import HTTPException, status

from linkimport import environment
from linkimport.connectors.link_service import LinkServiceClient
from linkimport.imports.mapping import FieldTarget
from linkimport.imports.models import ExtractionRule
from linkimport.imports.pipeline import CHUNK_DELIMITER, ChunkSubmitter
from linkimport.imports.runs import ImportRunStore, run_store

SubmitterFactory = Callable[
    [str, Mapping[str, FieldTarget], Mapping[str, ExtractionRule]], ChunkSubmitter
]


def get_run_store() -> ImportRunStore:
    return run_store


def get_submitter_factory() -> SubmitterFactory:
    base_url = environment.get_service_url()
    if not base_url:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Link service URL is not configured.",
        )
    token = environment.get_service_token()
    timeout = environment.get_service_timeout()
    insecure = environment.is_service_insecure()

    def _factory(
        collection_id: str,
        mapping: Mapping[str, FieldTarget],
        rules: Mapping[str, ExtractionRule],
    ) -> ChunkSubmitter:
        client = LinkServiceClient(
            base_url=base_url,
            collection_id=collection_id,
            column_mapping=mapping,
            extraction_rules=rules,
            token=token,
            delimiter=CHUNK_DELIMITER,
            timeout=timeout,
            insecure=insecure,
        )
        return client.submit

    return _factory
