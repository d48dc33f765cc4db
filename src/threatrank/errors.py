"""
ThreatRank exceptions.

Only run-level failures are exceptions. Row and field problems are absorbed
by the parser and never surface here.
"""


class ThreatRankError(Exception):
    """Base class for fatal run errors."""

    exit_code = 2


class SourceUnavailableError(ThreatRankError):
    """The input source could not be opened or read."""

    exit_code = 2


class NoContactsError(ThreatRankError):
    """Ingestion finished but no contact survived parsing."""

    exit_code = 1


class ProfileError(ValueError):
    """A scoring profile file is missing or invalid."""
