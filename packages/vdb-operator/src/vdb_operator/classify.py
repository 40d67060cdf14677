"""
Classifier for admintools command output.

Turns the free-form stdout of a failed create_db/revive_db into one of a
closed set of categories. The classifier only names the condition; which
categories lead to a requeue and which are fatal is decided by the
reconcilers.
"""

import re
from enum import Enum


class OutputCategory(str, Enum):
    """Known failure conditions reported by admintools."""

    ENDPOINT_UNREACHABLE = "endpoint_unreachable"
    """The object-storage endpoint could not be reached."""

    BUCKET_MISSING = "bucket_missing"
    """The bucket in the communal path does not exist."""

    COMMUNAL_PATH_NOT_EMPTY = "communal_path_not_empty"
    """create_db refused to use a communal path that already has data."""

    DATABASE_NOT_FOUND = "database_not_found"
    """revive_db found no database at the communal path."""

    UNCLASSIFIED = "unclassified"
    """None of the known patterns matched."""


# Checked in order; first match wins.
OUTPUT_PATTERNS: list[tuple[re.Pattern[str], OutputCategory]] = [
    (re.compile(r"Unable to connect to endpoint"), OutputCategory.ENDPOINT_UNREACHABLE),
    (re.compile(r"The specified bucket does not exist"), OutputCategory.BUCKET_MISSING),
    (re.compile(r"Communal location \[.+\] is not empty"), OutputCategory.COMMUNAL_PATH_NOT_EMPTY),
    (
        re.compile(r"Could not copy file \[.+\]: No such file or directory"),
        OutputCategory.DATABASE_NOT_FOUND,
    ),
    (
        re.compile(r"Database .+ not found in communal storage"),
        OutputCategory.DATABASE_NOT_FOUND,
    ),
]

# Infrastructure conditions reported as a warning and retried.
# DATABASE_NOT_FOUND is handled by the revive reconciler.
TRANSIENT_CATEGORIES = frozenset(
    {
        OutputCategory.ENDPOINT_UNREACHABLE,
        OutputCategory.BUCKET_MISSING,
        OutputCategory.COMMUNAL_PATH_NOT_EMPTY,
    }
)


def classify_output(stdout: str) -> OutputCategory:
    """
    Classify the full captured stdout of an admintools call.

    Args:
        stdout: Captured standard output (may be empty)

    Returns:
        The first matching category, or UNCLASSIFIED. Never raises.
    """
    if not isinstance(stdout, str) or not stdout:
        return OutputCategory.UNCLASSIFIED

    for pattern, category in OUTPUT_PATTERNS:
        if pattern.search(stdout):
            return category
    return OutputCategory.UNCLASSIFIED


def is_transient(category: OutputCategory) -> bool:
    """True if the condition is expected to clear and warrants a requeue."""
    return category in TRANSIENT_CATEGORIES
