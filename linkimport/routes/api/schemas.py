from __future__ import annotations

import json
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from linkimport.imports.models import ImportParseError
from linkimport.imports.parsing import AUTO_DELIMITER, resolve_delimiter


class ImportOptions(BaseModel):
    delimiter: str = AUTO_DELIMITER
    column_mapping: dict[str, str] = Field(default_factory=dict)
    extraction_rules: dict[str, str] = Field(default_factory=dict)

    @field_validator("column_mapping", "extraction_rules", mode="before")
    @classmethod
    def parse_json_object(cls, value):
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError("Must be a JSON object.") from exc
        if not isinstance(value, dict):
            raise ValueError("Must be a JSON object.")
        return {str(key): "" if item is None else str(item) for key, item in value.items()}

    @field_validator("delimiter", mode="before")
    @classmethod
    def normalize_delimiter(cls, value):
        try:
            return resolve_delimiter(value)
        except ImportParseError as exc:
            raise ValueError(str(exc)) from exc


class ImportRunOptions(ImportOptions):
    collection_id: str = Field(min_length=1)
    chunk_size: Optional[int] = Field(default=None, ge=1, le=1000)

    @field_validator("collection_id", mode="before")
    @classmethod
    def strip_collection_id(cls, value):
        return str(value or "").strip()
