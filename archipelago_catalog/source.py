from __future__ import annotations

import csv
import hashlib
import logging
from pathlib import Path

from .config import CLI
from .models import GameRecord, ParseError, ParseResult
from .schema import EMULATOR_COL, NAME_COL, PLATFORM_COL, STATUS_COL, TOOL_COL, parse_bool


def file_hash(path: str | Path) -> str:
    """
    MD5 hex digest of a file's bytes; used to detect an unchanged source list.
    """
    return hashlib.md5(Path(path).read_bytes()).hexdigest()


def _clean(value: object) -> str:
    return str(value or "").strip()


def read_source(path: str | Path) -> ParseResult:
    """
    Parse the source games CSV into records, collecting row-level errors.

    Rows missing a game name, carrying more values than the header declares, or with broken
    quoting are reported in `errors` and left out of `records`. Other missing cells default to "".
    Line numbers are physical (the header is line 1).
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"CSV file not found: {p}")

    logging.info(f"[SOURCE] Reading CSV from: {p}")
    result = ParseResult()
    with open(p, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f, restkey="__extra__", restval="", strict=True)
        try:
            fieldnames = reader.fieldnames
        except csv.Error as e:
            raise ValueError(f"Malformed CSV header in {p}: {e}") from e
        if fieldnames is None:
            logging.warning(f"[SOURCE] {p} is empty")
            return result
        reader.fieldnames = [_clean(h) for h in fieldnames]
        expected = len(reader.fieldnames)

        rows = iter(reader)
        while True:
            start = reader.line_num + 1
            try:
                row = next(rows)
            except StopIteration:
                break
            except csv.Error as e:
                # An unterminated quote swallows the rest of the file; report where it opened.
                result.errors.append(ParseError(row=start, message=f"Malformed row: {e}"))
                continue
            line = reader.line_num
            extra = row.pop("__extra__", None)
            if extra:
                result.errors.append(
                    ParseError(
                        row=line,
                        message=f"Too many fields: expected {expected}, found {expected + len(extra)}",
                    )
                )
                continue

            name = _clean(row.get(NAME_COL))
            if not name:
                result.errors.append(
                    ParseError(row=line, field=NAME_COL, message=f"Missing required field: {NAME_COL}")
                )
                continue

            result.records.append(
                GameRecord(
                    name=name,
                    status=_clean(row.get(STATUS_COL)),
                    platform=_clean(row.get(PLATFORM_COL)),
                    emulator=_clean(row.get(EMULATOR_COL)),
                    is_tool=parse_bool(row.get(TOOL_COL)),
                )
            )

    _log_parse_summary(result)
    return result


def _log_parse_summary(result: ParseResult) -> None:
    logging.info(f"[SOURCE] Parsed {len(result.records)} games with {len(result.errors)} errors")
    if not result.errors:
        return
    limit = CLI.max_logged_parse_errors
    for err in result.errors[:limit]:
        where = f" ({err.field})" if err.field else ""
        logging.warning(f"[SOURCE] Line {err.row}{where}: {err.message}")
    if len(result.errors) > limit:
        logging.warning(f"[SOURCE] ... and {len(result.errors) - limit} more parse errors")
