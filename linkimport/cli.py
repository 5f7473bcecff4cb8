from __future__ import annotations

import argparse
import signal
import sys
import threading
from typing import Optional, Sequence

from linkimport import environment
from linkimport.connectors.link_service import LinkServiceClient
from linkimport.imports.mapping import (
    parse_column_mapping,
    parse_extraction_rules,
    require_destination,
    resolve_mapping,
)
from linkimport.imports.models import ImportParseError
from linkimport.imports.parsing import decode_upload, parse_table
from linkimport.imports.pipeline import CHUNK_DELIMITER, run_import
from linkimport.imports.preview import build_preview
from linkimport.imports.reporter import ImportReporter
from linkimport.imports.uploads import UploadTooLargeError, read_file_limited
from linkimport.routes.api.utils import detected_payload
from linkimport.startup import configure_logging
from linkimport.utils import parse_key_value_pairs

EXIT_OK = 0
EXIT_PREFLIGHT_FAILED = 1
EXIT_ROWS_FAILED = 2
EXIT_CANCELLED = 130


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import links from a delimited text file into the link service."
    )
    parser.add_argument("file", help="Path to the CSV/TSV file to import")
    parser.add_argument(
        "--service-url",
        default=environment.get_service_url(),
        help="Link service base URL (default: $LINKIMPORT_SERVICE_URL)",
    )
    parser.add_argument(
        "--token",
        default=environment.get_service_token(),
        help="Bearer token for the link service (default: $LINKIMPORT_SERVICE_TOKEN)",
    )
    parser.add_argument("--collection-id", required=False, help="Target domain/collection id")
    parser.add_argument(
        "--delimiter",
        default="auto",
        help="auto, comma, tab, semicolon, pipe or a single character (default: auto)",
    )
    parser.add_argument(
        "--map",
        action="append",
        metavar="HEADER=FIELD",
        help="Map a column to a field, e.g. 'Long URL=destination_url'. Repeatable.",
    )
    parser.add_argument(
        "--slug-prefix",
        action="append",
        metavar="HEADER=PREFIX",
        help="Take the slug from the path segment after PREFIX. Repeatable.",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=environment.get_chunk_size(),
        help="Rows per request (default: $LINKIMPORT_CHUNK_SIZE or 100)",
    )
    parser.add_argument("--errors-out", required=False, help="Write failed rows to this CSV file")
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Only show the resolved mapping and the first rows; do not import.",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        default=environment.is_service_insecure(),
        help="Disable TLS verification for link service HTTPS calls.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log each chunk request at DEBUG level.")
    parser.add_argument(
        "--timeout",
        type=int,
        default=environment.get_service_timeout(),
        help="HTTP timeout in seconds per chunk (default: 30)",
    )
    return parser


def _validate_cli_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    problems = []
    if args.chunk_size < 1:
        problems.append("--chunk-size must be positive")
    if not args.preview:
        if not args.service_url:
            problems.append("--service-url is required unless --preview is given")
        if not args.collection_id:
            problems.append("--collection-id is required unless --preview is given")
    if problems:
        parser.print_usage(sys.stderr)
        parser.exit(status=EXIT_PREFLIGHT_FAILED, message="".join(f"error: {problem}\n" for problem in problems))


def _print_preview(preview) -> None:
    print(f"Delimiter: {preview.delimiter!r}; rows: {preview.total_rows}")
    print("Mapping:")
    for header, target in preview.mapping.items():
        print(f"- {header} -> {target}")
    if preview.detected:
        print("Detected redirect columns:")
        for column in preview.detected:
            payload = detected_payload(column)
            print(f"- {payload['header']}: {payload['kind']} {payload['value']}")
    for row in preview.rows:
        print(f"Row {row.row_index}: {row.values}")
        for issue in row.warnings:
            print(f"  {issue.level}: {issue.message}")


def _install_interrupt_handler(cancel_event: threading.Event):
    """Turn the first Ctrl-C into a cancel request honoured at the next chunk."""

    def _handle_interrupt(signum, frame) -> None:
        if cancel_event.is_set():
            raise KeyboardInterrupt
        cancel_event.set()
        print(
            "Interrupted: stopping after the current chunk (Ctrl-C again to abort).",
            file=sys.stderr,
        )

    return signal.signal(signal.SIGINT, _handle_interrupt)


def _print_summary(reporter: ImportReporter) -> None:
    counters = reporter.counters()
    print(
        f"Import summary: success={counters['success_count']}, "
        f"errors={counters['error_count']}, not attempted={counters['pending_rows']}"
    )
    failures = reporter.failed_rows()
    if failures:
        print("Failed rows:")
        for row_index, reason in failures:
            print(f"- row {row_index}: {reason}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _validate_cli_args(parser, args)
    configure_logging("DEBUG" if args.verbose else None)

    try:
        text = decode_upload(read_file_limited(args.file))
        table = parse_table(text, args.delimiter)
        explicit = parse_column_mapping(parse_key_value_pairs(args.map, "--map"))
        resolved = resolve_mapping(table.headers, explicit)
        rules = parse_extraction_rules(
            parse_key_value_pairs(args.slug_prefix, "--slug-prefix"), resolved.mapping
        )
        if args.preview:
            _print_preview(build_preview(table, resolved, rules))
            return EXIT_OK
        require_destination(resolved.mapping)
    except (ImportParseError, UploadTooLargeError, ValueError) as exc:
        parser.exit(status=EXIT_PREFLIGHT_FAILED, message=f"error: {exc}\n")
    except OSError as exc:
        parser.exit(status=EXIT_PREFLIGHT_FAILED, message=f"error: cannot read {args.file}: {exc}\n")

    client = LinkServiceClient(
        base_url=args.service_url,
        collection_id=args.collection_id,
        column_mapping=resolved.mapping,
        extraction_rules=rules,
        token=args.token,
        delimiter=CHUNK_DELIMITER,
        timeout=args.timeout,
        insecure=args.insecure,
    )

    def _report_progress(processed: int, total: int) -> None:
        print(f"Processed {processed}/{total} rows")

    cancel_event = threading.Event()
    previous_handler = _install_interrupt_handler(cancel_event)
    try:
        summary = run_import(
            table,
            resolved.mapping,
            resolved.detected,
            submit=client.submit,
            chunk_size=args.chunk_size,
            on_progress=_report_progress,
            cancel=cancel_event.is_set,
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)
    reporter = ImportReporter(summary)
    _print_summary(reporter)

    if args.errors_out:
        with open(args.errors_out, "w", encoding="utf-8", newline="") as output_file:
            output_file.write(reporter.diagnostic_csv())
        print(f"Error report written to {args.errors_out}")

    if summary.cancelled:
        return EXIT_CANCELLED
    return EXIT_ROWS_FAILED if summary.error_count else EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
