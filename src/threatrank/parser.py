"""
ThreatRank record parser - raw CSV lines to validated Contacts.

Columns (header optional):
    id, iff(Friend|Foe|Unknown), range_km, closing_mps, altitude_m, rcs_m2

Row-level problems become RowRejection entries; field-level problems fall
back to per-field defaults. Nothing here raises for bad content.
"""

import math
from collections.abc import Iterable
from pathlib import Path

from .errors import SourceUnavailableError
from .models import Contact, Identity, IngestResult, RowRejection

DELIMITER = ","
MIN_FIELDS = 6

# Per-field defaults. A garbled range must never rank high, hence the sentinel.
RANGE_DEFAULT_KM = 1e9
CLOSING_DEFAULT_MPS = 0.0
ALTITUDE_DEFAULT_M = 0.0
RCS_DEFAULT_M2 = 1.0

IDENTITY_TOKENS: dict[str, Identity] = {
    "FRIEND": "FRIEND",
    "F": "FRIEND",
    "FOE": "FOE",
    "HOSTILE": "FOE",
    "H": "FOE",
    "UNKNOWN": "UNKNOWN",
    "U": "UNKNOWN",
}

HEADER_RANGE_COLUMN = "range_km"
HEADER_CLOSING_COLUMN = "closing_mps"


def parse_identity(token: str) -> Identity | None:
    """Map an IFF token (case-insensitive, synonyms allowed) to an Identity."""
    return IDENTITY_TOKENS.get(token.strip().upper())


def parse_float(token: str, default: float) -> float:
    """Parse a finite float, falling back to `default` on anything else."""
    try:
        value = float(token)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return value


def split_fields(line: str) -> list[str]:
    """Split a line on the delimiter and trim each field."""
    return [field.strip() for field in line.split(DELIMITER)]


def looks_like_header(fields: list[str]) -> bool:
    """
    Header heuristic for the first data line.

    A line with enough columns is taken as a header when its identity column
    does not parse, or when the range/closing columns carry their literal
    names. A real row with a bad identity on the first line is indistinguishable
    from a header and gets dropped as one.
    """
    if len(fields) < MIN_FIELDS:
        return False
    return (
        parse_identity(fields[1]) is None
        or fields[2] == HEADER_RANGE_COLUMN
        or fields[3] == HEADER_CLOSING_COLUMN
    )


def parse_fields(fields: list[str], line_number: int, line: str = "") -> Contact | RowRejection:
    """Turn already-split fields into a Contact or a rejection."""
    if len(fields) < MIN_FIELDS:
        return RowRejection(line_number=line_number, reason="too_few_fields", line=line)

    identity = parse_identity(fields[1])
    if identity is None:
        return RowRejection(line_number=line_number, reason="invalid_identity", line=line)

    if not fields[0]:
        return RowRejection(line_number=line_number, reason="empty_id", line=line)

    return Contact(
        id=fields[0],
        identity=identity,
        range_km=parse_float(fields[2], RANGE_DEFAULT_KM),
        closing_mps=parse_float(fields[3], CLOSING_DEFAULT_MPS),
        altitude_m=parse_float(fields[4], ALTITUDE_DEFAULT_M),
        rcs_m2=parse_float(fields[5], RCS_DEFAULT_M2),
    )


def parse_line(line: str, line_number: int = 1) -> Contact | RowRejection | None:
    """
    Parse one raw line.

    Returns None for blank and comment lines. Header detection is a batch
    concern and is handled by parse_lines().
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    return parse_fields(split_fields(text), line_number, text)


def parse_lines(lines: Iterable[str]) -> IngestResult:
    """Parse a batch of raw lines, preserving input order."""
    result = IngestResult()
    maybe_header = True

    for line_number, raw in enumerate(lines, 1):
        text = raw.strip()
        if not text or text.startswith("#"):
            result.skipped_lines += 1
            continue

        fields = split_fields(text)

        if maybe_header:
            # Only the first non-skipped line is ever considered
            maybe_header = False
            if looks_like_header(fields):
                result.header_skipped = True
                continue

        parsed = parse_fields(fields, line_number, text)
        if isinstance(parsed, RowRejection):
            result.rejections.append(parsed)
        else:
            result.contacts.append(parsed)

    return result


def load_contacts(path: Path) -> IngestResult:
    """Read and parse a contacts file.

    Args:
        path: CSV file to read.

    Returns:
        The parsed IngestResult.

    Raises:
        SourceUnavailableError: If the file cannot be opened or read.
    """
    try:
        # Undecodable bytes stay local to their line
        with open(path, encoding="utf-8-sig", errors="replace") as f:
            lines = f.readlines()
    except OSError as e:
        raise SourceUnavailableError(f"Failed to open CSV: {path} ({e})") from e

    return parse_lines(lines)
