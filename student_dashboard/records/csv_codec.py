"""
CSV encoding and decoding for student rows.

Encoding quotes every value unconditionally so that commas, quotes and line
breaks inside a value always re-parse to the same field. Decoding accepts CRLF
or LF line endings, quoted fields (including embedded newlines and doubled
quotes), skips blank lines, trims every field, and repairs ragged rows by
padding or truncating them against the header. Ragged rows are reported as
warning diagnostics rather than failures.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .errors import CSVParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedCSV:
    """Header and data rows parsed from CSV text."""

    headers: tuple[str, ...]
    rows: tuple[dict[str, str], ...]
    diagnostics: tuple[str, ...] = ()
    # 1-based physical line on which each data row starts.
    source_lines: tuple[int, ...] = ()


def _sanitize_header(header: str | None) -> str:
    token = (header or "").strip()
    return token.lstrip("\ufeff").strip()


def _encode_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def collect_headers(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    """Union of keys across ``rows`` in first-seen order."""

    headers: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def encode_csv(rows: Sequence[Mapping[str, Any]], headers: Sequence[str] | None = None) -> str:
    """
    Serialize ``rows`` to CSV text.

    The header row defaults to the union of keys across all rows. Missing
    values and ``None`` encode as empty quoted fields.
    """

    columns = list(headers) if headers is not None else collect_headers(rows)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_encode_value(row.get(column)) for column in columns])
    return buffer.getvalue()


def _row_is_blank(row: Sequence[str]) -> bool:
    return all(value.strip() == "" for value in row) and len(row) <= 1


def _iter_records(text: str) -> Iterator[tuple[int, list[str]]]:
    # newline="" keeps CR/LF inside quoted values intact for the csv module.
    reader = csv.reader(io.StringIO(text, newline=""))
    start_line = 1
    try:
        for row in reader:
            yield start_line, row
            start_line = reader.line_num + 1
    except csv.Error as exc:
        raise CSVParseError(f"CSV is unreadable near line {reader.line_num}: {exc}") from exc


def decode_csv(text: str) -> DecodedCSV:
    """
    Parse CSV ``text`` into headers and row dictionaries.

    Raises ``CSVParseError`` when the text is empty or has no usable header.
    """

    if text is None or not text.strip():
        raise CSVParseError("The CSV file is empty.")

    headers: tuple[str, ...] | None = None
    rows: list[dict[str, str]] = []
    source_lines: list[int] = []
    diagnostics: list[str] = []

    for line_number, raw_row in _iter_records(text):
        if _row_is_blank(raw_row):
            continue

        values = [value.strip() for value in raw_row]
        if headers is None:
            headers = tuple(_sanitize_header(value) for value in values)
            if not any(headers):
                raise CSVParseError("The CSV header row has no column names.")
            continue

        if len(values) != len(headers):
            message = f"Line {line_number} has {len(values)} values, expected {len(headers)}."
            logger.warning("%s Padding or truncating to fit the header.", message)
            diagnostics.append(message)
            if len(values) < len(headers):
                values.extend([""] * (len(headers) - len(values)))
            else:
                del values[len(headers):]

        rows.append(dict(zip(headers, values)))
        source_lines.append(line_number)

    if headers is None:
        raise CSVParseError("The CSV file is empty.")

    return DecodedCSV(
        headers=headers,
        rows=tuple(rows),
        diagnostics=tuple(diagnostics),
        source_lines=tuple(source_lines),
    )
