from __future__ import annotations

import re
from typing import Optional

from linkimport.imports.models import ExtractionRule


def _segment_after(value: str, start: int) -> str:
    end = value.find("/", start)
    return value[start:] if end == -1 else value[start:end]


def extract_value(raw_value: str, rule: Optional[ExtractionRule] = None) -> str:
    """Return the path segment that follows ``rule.prefix`` in ``raw_value``.

    Matching ignores case. ``prefix/`` may appear anywhere in the value; a bare
    ``prefix`` only counts where it starts a path segment. When nothing matches,
    or the match leaves a blank segment, the raw value is returned unchanged so
    callers can detect a no-op by comparing output with input.
    """
    if rule is None or not rule.prefix:
        return raw_value

    escaped = re.escape(rule.prefix)
    match = re.search(escaped + "/", raw_value, flags=re.IGNORECASE)
    if match is None:
        match = re.search(r"(?:^|(?<=/))" + escaped, raw_value, flags=re.IGNORECASE)
    if match is None:
        return raw_value

    extracted = _segment_after(raw_value, match.end()).strip()
    return extracted if extracted else raw_value


def extraction_changed(raw_value: str, rule: Optional[ExtractionRule]) -> bool:
    return extract_value(raw_value, rule) != raw_value
