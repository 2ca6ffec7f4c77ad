"""
Weights CSV parser.

Pure functions only: no database access, no file I/O. The asset's column
positions shift from release to release, so columns are resolved from the
header row, anchored on the "All samples" aggregate column.
"""

import re
from typing import List, Optional
from core.exceptions import (
    EmptyAssetError,
    LeagueColumnLooksLikeVersionError,
    MissingSentinelColumnError,
    SentinelIsFirstColumnError,
)
from schemas.weights import ParseResult, RawWeightRow
import logging

logger = logging.getLogger(__name__)

# Aggregate column header; the column right before it is the current league
ALL_SAMPLES_HEADER = "All samples"

# The dataset's own aggregate row
SAMPLE_SIZE_LABEL = "Sample Size"

PATCH_VERSION_PATTERN = re.compile(r"^\d+\.\d+$")

_LEADING_INT = re.compile(r"^[+-]?\d+")
_LINE_BREAK = re.compile(r"\r?\n")

ITEM_NAME_COLUMN = 0
BUCKET_COLUMN = 1
BOSS_COLUMN = 3
BOSS_MARKER = "boss"


def split_csv_line(line: str) -> List[str]:
    """
    Split one CSV line into trimmed fields.

    A field wrapped in double quotes may contain commas and escaped
    quotes (""). Lines without any quote take a plain split.
    """
    if '"' not in line:
        return [field.strip() for field in line.split(",")]

    fields = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < length and line[i + 1] == '"':
                    current.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current).strip())
    return fields


def parse_int(raw: Optional[str]) -> int:
    """
    Parse the leading integer of a cell.

    Blank, absent or unparsable cells give 0; negatives clamp to 0.
    """
    if not raw:
        return 0
    match = _LEADING_INT.match(raw.strip())
    if not match:
        return 0
    return max(int(match.group(0)), 0)


def is_patch_version_header(header: str) -> bool:
    """True for headers like "3.18" or "3.26"."""
    return bool(PATCH_VERSION_PATTERN.match(header))


def derive_from_boss(raw: Optional[str]) -> bool:
    """Only the literal "Boss" (any case) marks a boss-exclusive item."""
    if not raw:
        return False
    return raw.lower() == BOSS_MARKER


def _field(columns: List[str], index: int) -> Optional[str]:
    return columns[index] if index < len(columns) else None


def parse_weights_csv(content: str) -> ParseResult:
    """
    Parse the weights CSV into fixed-shape rows.

    Args:
        content: Raw CSV text, "\\n" or "\\r\\n" line endings

    Returns:
        ParseResult with the data rows and the raw (unresolved) league label

    Raises:
        EmptyAssetError: No header row
        MissingSentinelColumnError: Header has no "All samples" column
        SentinelIsFirstColumnError: "All samples" is column 0
        LeagueColumnLooksLikeVersionError: Current-league header is a patch version
    """
    lines = _LINE_BREAK.split(content)

    if not lines or not lines[0].strip():
        raise EmptyAssetError(
            "Weights CSV is empty; expected a header row and data rows"
        )

    # Tolerate a UTF-8 byte order mark on the header
    headers = split_csv_line(lines[0].lstrip("\ufeff"))

    try:
        all_samples_index = headers.index(ALL_SAMPLES_HEADER)
    except ValueError:
        raise MissingSentinelColumnError(
            f'Weights CSV header row has no "{ALL_SAMPLES_HEADER}" column',
            context={"sentinel": ALL_SAMPLES_HEADER, "header_count": len(headers)},
        )

    if all_samples_index < 1:
        raise SentinelIsFirstColumnError(
            f'"{ALL_SAMPLES_HEADER}" is column {all_samples_index}; '
            f"there is no preceding current-league column",
            context={"sentinel": ALL_SAMPLES_HEADER},
        )

    league_index = all_samples_index - 1
    raw_league_label = headers[league_index]

    if is_patch_version_header(raw_league_label):
        raise LeagueColumnLooksLikeVersionError(
            f'Current-league column header "{raw_league_label}" looks like a patch '
            f"version, expected a league name. The CSV layout may have changed.",
            context={"header": raw_league_label, "column_index": league_index},
        )

    rows: List[RawWeightRow] = []

    for line in lines[1:]:
        if not line.strip():
            continue

        columns = split_csv_line(line)
        item_name = columns[ITEM_NAME_COLUMN]

        if not item_name:
            continue

        if item_name == SAMPLE_SIZE_LABEL:
            continue

        rows.append(RawWeightRow(
            item_name=item_name,
            bucket=parse_int(_field(columns, BUCKET_COLUMN)),
            weight=parse_int(_field(columns, league_index)),
            from_boss=derive_from_boss(_field(columns, BOSS_COLUMN)),
            raw_league_label=raw_league_label,
        ))

    logger.debug(f"Parsed {len(rows)} rows for league column \"{raw_league_label}\"")
    return ParseResult(rows=rows, raw_league_label=raw_league_label)
