from linkimport.connectors.link_service import (
    LinkServiceClient,
    encode_multipart,
    parse_chunk_response,
)

__all__ = [
    "LinkServiceClient",
    "encode_multipart",
    "parse_chunk_response",
]
