"""
ThreatRank pipeline - orchestrates ingest -> score -> rank -> recommend.
"""

import uuid
from datetime import UTC, datetime
from pathlib import Path

from .errors import NoContactsError
from .exporter import export_csv, export_excel, export_json, generate_report
from .logger import ProgressLogger
from .models import Contact, IngestResult, PolicyThresholds, RankedContact, RunResult, Weights
from .parser import load_contacts
from .policy import DEFAULT_THRESHOLDS, recommend
from .profile import ScoringProfile, default_profile
from .scoring import score_all


def rank_contacts(
    contacts: list[Contact],
    weights: Weights,
    thresholds: PolicyThresholds = DEFAULT_THRESHOLDS,
) -> list[RankedContact]:
    """
    Score, sort and annotate a batch of contacts.

    Sorting is stable and by score only, so equal scores keep input order.
    Ranks are 1-based sorted positions with no gaps.
    """
    scored = sorted(score_all(contacts, weights), key=lambda s: s.score, reverse=True)
    return [
        RankedContact(
            rank=rank,
            contact=s.contact,
            score=s.score,
            contributions=s.contributions,
            recommendation=recommend(s.contact, s.score, thresholds),
        )
        for rank, s in enumerate(scored, 1)
    ]


class Pipeline:
    """Main pipeline orchestrator."""

    def __init__(
        self,
        profile: ScoringProfile | None = None,
        verbose: bool = False,
        quiet: bool = False,
        to_stderr: bool = False,
    ):
        self.profile = profile or default_profile()
        self.run_id = datetime.now().strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:6]
        self.logger = ProgressLogger(
            self.run_id, verbose=verbose, quiet=quiet, to_stderr=to_stderr
        )

    def ingest(self, source: Path) -> IngestResult:
        """Load contacts and report every rejected row."""
        self.logger.phase("Ingesting contacts", str(source))
        ingest = load_contacts(source)

        if ingest.header_skipped:
            self.logger.header("first line treated as header")
        for rejection in ingest.rejections:
            self.logger.rejected(rejection.describe())

        self.logger.ingested(len(ingest.contacts), len(ingest.rejections), ingest.skipped_lines)
        return ingest

    def run(self, source: Path, output_dir: Path | None = None) -> RunResult:
        """Execute the full pipeline.

        Raises:
            SourceUnavailableError: If the source cannot be read.
            NoContactsError: If no contact survives ingestion.
        """
        result = RunResult(
            run_id=self.run_id,
            source=str(source),
            profile_name=self.profile.name,
            weights=self.profile.weights,
            thresholds=self.profile.thresholds,
            started_at=datetime.now(UTC),
        )

        ingest = self.ingest(source)
        result.rejections = ingest.rejections
        result.skipped_lines = ingest.skipped_lines
        result.header_skipped = ingest.header_skipped

        if not ingest.contacts:
            raise NoContactsError(f"No contacts loaded from {source}")

        self.logger.phase("Scoring and ranking", f"{len(ingest.contacts)} contacts")
        result.ranked = rank_contacts(
            ingest.contacts, self.profile.weights, self.profile.thresholds
        )
        result.finished_at = datetime.now(UTC)
        self.logger.recommendations(result.recommendation_counts())

        if output_dir:
            run_dir = output_dir / self.run_id
            run_dir.mkdir(parents=True, exist_ok=True)

            export_csv(result.ranked, run_dir / "ranking.csv")
            export_json(result.ranked, run_dir / "ranking.json")
            export_excel(result.ranked, run_dir / "ranking.xlsx")
            generate_report(result, run_dir / "report.md")

            self.logger.finish(len(result.ranked), str(run_dir))
        else:
            self.logger.finish(len(result.ranked))

        return result


def run_pipeline(
    source: Path,
    profile: ScoringProfile | None = None,
    output_dir: Path | None = None,
    verbose: bool = False,
    quiet: bool = False,
    to_stderr: bool = False,
) -> RunResult:
    """Convenience function to run a ranking pipeline."""
    pipeline = Pipeline(profile, verbose=verbose, quiet=quiet, to_stderr=to_stderr)
    return pipeline.run(source, output_dir=output_dir)
