from linkimport.imports.classifier import HeaderClassifier, classify, suggest_core_field
from linkimport.imports.extractor import extract_value, extraction_changed
from linkimport.imports.mapping import (
    FieldTarget,
    ResolvedMapping,
    TargetField,
    parse_column_mapping,
    parse_extraction_rules,
    require_destination,
    resolve_mapping,
)
from linkimport.imports.models import (
    ChunkResponse,
    ChunkTransportError,
    DetectedColumn,
    DeviceKind,
    EmptyFileError,
    ExtractionRule,
    GeoKind,
    ImportChunk,
    ImportIssue,
    ImportParseError,
    ImportSummary,
    InvalidMappingError,
    MissingRequiredFieldError,
    RawTable,
    RemoteRowResult,
    RowResult,
    RowValidationError,
)
from linkimport.imports.parsing import (
    decode_upload,
    detect_delimiter,
    parse_table,
    serialize_rows,
    serialize_table,
    tokenize_line,
)
from linkimport.imports.pipeline import run_import
from linkimport.imports.preview import ImportPreview, build_preview
from linkimport.imports.reporter import ImportReporter

__all__ = [
    "RawTable",
    "ExtractionRule",
    "DetectedColumn",
    "GeoKind",
    "DeviceKind",
    "ImportChunk",
    "ImportIssue",
    "RowResult",
    "RemoteRowResult",
    "ChunkResponse",
    "ImportSummary",
    "ImportParseError",
    "EmptyFileError",
    "InvalidMappingError",
    "MissingRequiredFieldError",
    "ChunkTransportError",
    "RowValidationError",
    "TargetField",
    "FieldTarget",
    "ResolvedMapping",
    "HeaderClassifier",
    "ImportPreview",
    "ImportReporter",
    "classify",
    "suggest_core_field",
    "extract_value",
    "extraction_changed",
    "detect_delimiter",
    "tokenize_line",
    "decode_upload",
    "parse_table",
    "serialize_rows",
    "serialize_table",
    "parse_column_mapping",
    "parse_extraction_rules",
    "resolve_mapping",
    "require_destination",
    "build_preview",
    "run_import",
]
