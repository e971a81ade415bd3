"""Parsing of GeoNames tab separated postal code data."""

import csv
import io
import sys

from postcodes.geonames_service.errors import MalformedRecord
from postcodes.logging_config import logger
from postcodes.models.entry import Entry

# Rows are only bounded by the archive size.
csv.field_size_limit(min(sys.maxsize, 2**31 - 1))

_FIELD_START, _UNQUOTED, _QUOTED, _QUOTE_IN_QUOTED = range(4)
_FIELD_ENDS = ("\t", "\r", "\n")


def _has_bare_quote(record: str) -> bool:
    """Report whether a raw record has a quote inside an unquoted field."""
    state = _FIELD_START
    for char in record:
        if state == _QUOTED:
            if char == '"':
                state = _QUOTE_IN_QUOTED
        elif char in _FIELD_ENDS:
            state = _FIELD_START
        elif char == '"':
            if state == _UNQUOTED:
                return True
            state = _QUOTED
        else:
            state = _UNQUOTED
    return False


def _captured_lines(text: str, captured: list[str]):
    for line in io.StringIO(text, newline=""):
        captured.append(line)
        yield line


def parse_entries(data: bytes) -> list[Entry]:
    """Parse tab separated rows into entries, keeping their order.

    Args:
        data: UTF-8 encoded rows, one record per line.

    Returns:
        One Entry per non-blank row.

    Raises:
        MalformedRecord: If the data is not valid UTF-8 or a row has broken
            quoting.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.error("RECORDS_BAD_ENCODING", position=exc.start)
        raise MalformedRecord(f"invalid UTF-8 at byte {exc.start}") from exc

    captured = []
    reader = csv.reader(_captured_lines(text, captured), delimiter="\t", strict=True)
    entries = []
    try:
        for row in reader:
            record = "".join(captured)
            captured.clear()
            if '"' in record and _has_bare_quote(record):
                raise csv.Error('bare " in non-quoted field')
            if row:
                entries.append(Entry.from_row(row))
    except csv.Error as exc:
        logger.error("RECORDS_MALFORMED", line=reader.line_num, error=str(exc))
        raise MalformedRecord(str(exc), line=reader.line_num) from exc

    logger.info("RECORDS_PARSED", count=len(entries))
    return entries
