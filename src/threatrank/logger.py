"""
ThreatRank structured logging - operator-facing telemetry for a ranking run.

Telemetry (phases, counts) goes to stdout unless quiet or redirected to
stderr; anything the operator must act on (rejected rows, warnings, errors)
goes to stderr.
"""

import sys
from datetime import UTC, datetime


def _print(*args: object, **kwargs: object) -> None:
    """Print with immediate flush."""
    print(*args, **kwargs, flush=True)


def _eprint(*args: object, **kwargs: object) -> None:
    """Print to stderr with immediate flush."""
    print(*args, **kwargs, file=sys.stderr, flush=True)


class ProgressLogger:
    """
    Structured progress logger for ThreatRank runs.

    `quiet` drops telemetry entirely; `to_stderr` moves it off stdout so a
    command can keep stdout for the ranked output itself. Rejections,
    warnings and errors always go to stderr.
    """

    def __init__(
        self,
        run_id: str,
        verbose: bool = False,
        quiet: bool = False,
        to_stderr: bool = False,
    ):
        self.run_id = run_id
        self.verbose = verbose
        self.quiet = quiet
        self.to_stderr = to_stderr
        self.start_time = datetime.now(UTC)
        self.phase_times: dict[str, datetime] = {}

    def _out(self, msg: str) -> None:
        if self.quiet:
            return
        if self.to_stderr:
            _eprint(msg)
        else:
            _print(msg)

    def phase(self, name: str, detail: str = "") -> None:
        """Log a major phase transition."""
        now = datetime.now(UTC)
        self.phase_times[name] = now
        elapsed = (now - self.start_time).total_seconds()

        if detail:
            self._out(f"[Phase] {name}: {detail} ({elapsed:.1f}s)")
        else:
            self._out(f"[Phase] {name} ({elapsed:.1f}s)")

    def ingested(self, accepted: int, rejected: int, skipped: int) -> None:
        """Log ingestion summary."""
        self._out(f"  [Ingest] {accepted} accepted, {rejected} rejected, {skipped} skipped")

    def header(self, detail: str) -> None:
        """Log a skipped header line (verbose only)."""
        if self.verbose:
            self._out(f"  [Header] {detail}")

    def rejected(self, msg: str) -> None:
        """Log a rejected row. Always reported."""
        _eprint(f"[Skip] {msg}")

    def recommendations(self, counts: dict[str, int]) -> None:
        """Log recommendation distribution."""
        counts_str = ", ".join(f"{k}={v}" for k, v in sorted(counts.items()))
        self._out(f"  [Recommendations] {counts_str}")

    def finish(self, ranked: int, output_dir: str = "") -> None:
        """Log run completion."""
        elapsed = (datetime.now(UTC) - self.start_time).total_seconds()

        self._out(f"[ThreatRank] Run complete in {elapsed:.2f}s")
        self._out(f"  Ranked: {ranked}")
        if output_dir:
            self._out(f"  Output: {output_dir}")

    def error(self, msg: str) -> None:
        """Log an error."""
        _eprint(f"[Error] {msg}")

    def warning(self, msg: str) -> None:
        """Log a warning."""
        _eprint(f"[Warning] {msg}")
