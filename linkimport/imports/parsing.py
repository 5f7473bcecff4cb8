from __future__ import annotations

import re
from typing import Iterable, Sequence

from linkimport.imports.models import EmptyFileError, ImportParseError, RawTable

AUTO_DELIMITER = "auto"
DEFAULT_DELIMITER = ","
DELIMITER_CANDIDATES: tuple[str, ...] = (",", "\t", ";", "|")
DELIMITER_NAMES = {
    "comma": ",",
    "tab": "\t",
    "\\t": "\t",
    "semicolon": ";",
    "pipe": "|",
}

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_QUOTE = '"'


def resolve_delimiter(value: str | None) -> str:
    """Normalize a user supplied delimiter option.

    Returns ``AUTO_DELIMITER`` for auto-detection, otherwise a single character.
    """
    if value is None or value == "":
        return AUTO_DELIMITER
    if value.strip().lower() == AUTO_DELIMITER:
        return AUTO_DELIMITER
    named = DELIMITER_NAMES.get(value.strip().lower())
    if named is not None:
        return named
    if len(value) != 1 or value in {_QUOTE, "\r", "\n"}:
        raise ImportParseError(
            "Delimiter must be auto, comma, tab, semicolon, pipe or a single character.",
            location="delimiter",
        )
    return value


def detect_delimiter(
    sample_line: str, candidates: Iterable[str] = DELIMITER_CANDIDATES
) -> str:
    counts = {candidate: 0 for candidate in candidates}
    in_quotes = False
    for char in sample_line:
        if char == _QUOTE:
            in_quotes = not in_quotes
        elif not in_quotes and char in counts:
            counts[char] += 1

    best = DEFAULT_DELIMITER
    best_count = counts.get(DEFAULT_DELIMITER, 0)
    for candidate, count in counts.items():
        if count > best_count:
            best = candidate
            best_count = count
    return best


def tokenize_line(line: str, delimiter: str) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == _QUOTE:
            if in_quotes and index + 1 < length and line[index + 1] == _QUOTE:
                current.append(_QUOTE)
                index += 2
                continue
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    fields.append("".join(current))
    return fields


def decode_upload(payload: bytes) -> str:
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportParseError("File is not valid UTF-8.", location="file") from exc


def parse_table(text: str, delimiter: str = AUTO_DELIMITER) -> RawTable:
    lines = [line for line in _LINE_BREAK.split(text) if line.strip()]
    if len(lines) < 2:
        raise EmptyFileError()

    resolved = resolve_delimiter(delimiter)
    if resolved == AUTO_DELIMITER:
        resolved = detect_delimiter(lines[0])

    headers = tokenize_line(lines[0], resolved)
    width = len(headers)
    rows: list[list[str]] = []
    for line in lines[1:]:
        fields = tokenize_line(line, resolved)
        if len(fields) < width:
            fields.extend([""] * (width - len(fields)))
        rows.append(fields)
    return RawTable(headers=headers, rows=rows, delimiter=resolved)


def quote_field(value: str, delimiter: str) -> str:
    if (
        delimiter in value
        or _QUOTE in value
        or "\n" in value
        or "\r" in value
    ):
        return _QUOTE + value.replace(_QUOTE, _QUOTE * 2) + _QUOTE
    return value


def serialize_line(fields: Sequence[object], delimiter: str) -> str:
    values = ["" if value is None else str(value) for value in fields]
    line = delimiter.join(quote_field(value, delimiter) for value in values)
    if values and not line.strip():
        # parse_table skips blank lines, so the row must not serialize to one.
        first = len(values[0])
        line = _QUOTE + line[:first] + _QUOTE + line[first:]
    return line


def serialize_rows(
    headers: Sequence[str], rows: Iterable[Sequence[object]], delimiter: str = DEFAULT_DELIMITER
) -> str:
    lines = [serialize_line(headers, delimiter)]
    lines.extend(serialize_line(row, delimiter) for row in rows)
    return "\n".join(lines) + "\n"


def serialize_table(table: RawTable) -> str:
    return serialize_rows(table.headers, table.rows, table.delimiter)
