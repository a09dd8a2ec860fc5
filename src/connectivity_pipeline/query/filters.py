"""Sample selection by identifier pattern and result-count limit."""

import re
from typing import Sequence, TypeVar

import structlog

from connectivity_pipeline.database import Database, DbRow

logger = structlog.get_logger(__name__)

# Parameter value meaning "no selection"
WILDCARD = ".*"

T = TypeVar("T")


def is_specified(values: Sequence[str] | None) -> bool:
    """True unless values is empty or starts with the wildcard."""
    return bool(values) and values[0] != WILDCARD


def pwid_matches(row: DbRow, patterns: Sequence[re.Pattern]) -> bool:
    """True if the row's pwid fully matches any pattern.

    Rows without a pwid never match.
    """
    if row.pwid is None:
        return False
    return any(pattern.fullmatch(row.pwid) for pattern in patterns)


def filter_by_pwids(database: Database, pwids: Sequence[str] | None) -> Database:
    """Keep samples whose pwid matches one of the regular expressions.

    The database is returned unchanged when no pwids are specified.

    Raises:
        re.error: If a pattern is not a valid regular expression
    """
    if not is_specified(pwids):
        return database

    patterns = [re.compile(p) for p in pwids]
    filtered = database.filter(lambda row: pwid_matches(row, patterns))

    logger.info(
        "filter_by_pwids_complete",
        patterns=len(patterns),
        total_samples=len(database),
        matched_samples=len(filtered),
    )

    return filtered


def limit_rows(rows: Sequence[T], limit: int, pwids_specified: bool) -> list[T]:
    """Cap the candidate rows at limit unless pwids were requested explicitly.

    Explicit pwid queries return every match. Limiting keeps the first rows
    in database order and happens before sorting by score.
    """
    if pwids_specified or len(rows) <= limit:
        return list(rows)

    logger.debug("limit_rows_applied", limit=limit, candidates=len(rows))
    return list(rows[:limit])
