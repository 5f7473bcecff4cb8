from __future__ import annotations

from linkimport.imports.mapping import parse_column_mapping, parse_extraction_rules, resolve_mapping
from linkimport.imports.parsing import parse_table
from linkimport.imports.preview import build_link_draft, build_preview, is_http_url


def _resolved(headers, explicit=None):
    return resolve_mapping(headers, parse_column_mapping(explicit or {}))


def test_build_preview_collects_redirects_tags_and_extracted_slug() -> None:
    table = parse_table(
        "Long URL,Short,Tags,US Redirect URL,Mobile Link,Notes\n"
        'https://a.example,https://x.com/go/promo1,"spring, sale",https://us.example,https://m.example,n\n'
        "https://b.example,b2,,,,\n"
    )
    resolved = _resolved(table.headers, {"Short": "slug"})
    rules = parse_extraction_rules({"Short": "go"}, resolved.mapping)

    preview = build_preview(table, resolved, rules, limit=1)

    assert preview.total_rows == 2
    assert preview.delimiter == ","
    assert len(preview.rows) == 1
    assert preview.mapping == {
        "Long URL": "destination_url",
        "Short": "slug",
        "Tags": "tags",
        "US Redirect URL": "geo_redirect:US",
        "Mobile Link": "device_redirect:mobile",
    }
    row = preview.rows[0]
    assert row.values == {
        "destination_url": "https://a.example",
        "slug": "promo1",
        "tags": ["spring", "sale"],
        "geo_redirects": {"US": "https://us.example"},
        "device_redirects": {"mobile": "https://m.example"},
    }
    assert row.warnings == []


def test_build_link_draft_reports_problems() -> None:
    headers = ["url", "slug"]
    resolved = _resolved(headers)
    rules = parse_extraction_rules({"slug": "go"}, resolved.mapping)

    draft = build_link_draft(headers, ["ftp://a.example", "bad slug!", "extra"], resolved, rules, row_index=4)

    messages = {(issue.location, issue.level) for issue in draft.warnings}
    assert ("row 4", "error") in messages
    assert ("row 4.slug", "warning") in messages
    assert ("row 4.destination_url", "warning") in messages
    assert ("row 4.slug", "error") in messages


def test_build_link_draft_flags_missing_destination() -> None:
    headers = ["url", "slug"]

    draft = build_link_draft(headers, ["", "abc"], _resolved(headers))

    assert [issue.message for issue in draft.warnings] == ["Missing destination URL."]


def test_is_http_url() -> None:
    assert is_http_url("https://example.com/x")
    assert not is_http_url("example.com")
    assert not is_http_url("mailto:a@example.com")
