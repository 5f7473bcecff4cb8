from __future__ import annotations

from typing import Optional


def split_tag_string(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_key_value_pairs(values: Optional[list[str]], option: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for value in values or []:
        key, sep, item = value.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"{option} expects HEADER=VALUE, got '{value}'.")
        pairs[key.strip()] = item.strip()
    return pairs
