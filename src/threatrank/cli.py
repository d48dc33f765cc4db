"""
ThreatRank CLI - command line interface.
"""

import io
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

if TYPE_CHECKING:
    from .profile import ScoringProfile

INPUT_ENV_VAR = "THREATRANK_INPUT"
DEFAULT_INPUT = "data/contacts.csv"

# explain --id names a contact that was not ranked
EXIT_UNKNOWN_ID = 3


def _input_path(path: Path | None) -> Path:
    """Explicit path, then $THREATRANK_INPUT, then the conventional default."""
    if path is not None:
        return path
    return Path(os.getenv(INPUT_ENV_VAR, DEFAULT_INPUT))


def _load_profile_or_exit(profile_path: Path | None) -> "ScoringProfile":
    """Resolve the run profile, exiting 2 if it cannot be loaded."""
    from .errors import ProfileError
    from .profile import resolve_profile

    try:
        return resolve_profile(profile_path)
    except ProfileError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


input_argument = click.argument(
    "path", required=False, default=None, type=click.Path(dir_okay=False, path_type=Path)
)
profile_option = click.option(
    "--profile",
    "-p",
    "profile_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Scoring profile YAML (default: $THREATRANK_PROFILE or built-in)",
)


@click.group()
@click.version_option(version="0.1.0", prog_name="threatrank")
def main() -> None:
    """ThreatRank - rank airborne contacts by risk"""
    pass


@main.command()
@input_argument
@profile_option
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "csv", "json"]),
    default="table",
    help="Stdout rendering (default: table)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write CSV/JSON/Excel/report artifacts under this directory",
)
@click.option("--verbose", "-v", is_flag=True, help="Print run telemetry to stderr")
def rank(
    path: Path | None,
    profile_path: Path | None,
    output_format: str,
    output: Path | None,
    verbose: bool,
) -> None:
    """Score and rank the contacts in PATH (default: data/contacts.csv)."""
    from .errors import ThreatRankError
    from .exporter import export_csv, export_json, format_table
    from .pipeline import run_pipeline

    source = _input_path(path)
    profile = _load_profile_or_exit(profile_path)

    try:
        result = run_pipeline(
            source,
            profile=profile,
            output_dir=output,
            verbose=verbose,
            quiet=not verbose,
            to_stderr=True,
        )
    except ThreatRankError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)

    if output_format == "csv":
        buffer = io.StringIO()
        export_csv(result.ranked, buffer)
        click.echo(buffer.getvalue(), nl=False)
    elif output_format == "json":
        buffer = io.StringIO()
        export_json(result.ranked, buffer)
        click.echo(buffer.getvalue(), nl=False)
    else:
        click.echo(format_table(result.ranked), nl=False)


@main.command()
@input_argument
@profile_option
def check(path: Path | None, profile_path: Path | None) -> None:
    """Validate PATH without ranking: report accepted, rejected and skipped rows.

    The scoring profile is loaded too, so a bad profile fails here (exit 2).
    """
    from .errors import SourceUnavailableError
    from .parser import load_contacts

    source = _input_path(path)
    checked_profile = _load_profile_or_exit(profile_path)

    try:
        ingest = load_contacts(source)
    except SourceUnavailableError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)

    click.echo(f"Source: {source}")
    click.echo(f"  Profile:  {checked_profile.name}")
    click.echo(f"  Accepted: {len(ingest.contacts)}")
    click.echo(f"  Rejected: {len(ingest.rejections)}")
    click.echo(f"  Skipped:  {ingest.skipped_lines}")
    click.echo(f"  Header:   {'yes' if ingest.header_skipped else 'no'}")

    for rejection in ingest.rejections:
        click.echo(f"  - {rejection.describe()}", err=True)

    if not ingest.contacts:
        click.echo(f"Error: No contacts loaded from {source}", err=True)
        sys.exit(1)


@main.command()
@input_argument
@profile_option
@click.option(
    "--id",
    "contact_id",
    default=None,
    help="Only explain this contact (exit 3 if it was not ranked)",
)
def explain(path: Path | None, profile_path: Path | None, contact_id: str | None) -> None:
    """Show the per-term score breakdown for ranked contacts."""
    from .errors import ThreatRankError
    from .pipeline import run_pipeline

    source = _input_path(path)
    profile = _load_profile_or_exit(profile_path)

    try:
        result = run_pipeline(source, profile=profile, quiet=True)
    except ThreatRankError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)

    rows = result.ranked
    if contact_id is not None:
        rows = [r for r in rows if r.contact.id == contact_id]
        if not rows:
            click.echo(f"Error: No contact with id {contact_id}", err=True)
            sys.exit(EXIT_UNKNOWN_ID)

    for row in rows:
        click.echo(
            f"#{row.rank} {row.contact.id} [{row.contact.identity}] "
            f"score={row.score:.2f} -> {row.recommendation}"
        )
        for term, value in row.contributions.items():
            click.echo(f"    {term:<10} {value:>10.2f}")


@main.group()
def profile() -> None:
    """Inspect and create scoring profiles."""
    pass


@profile.command("show")
@profile_option
def profile_show(profile_path: Path | None) -> None:
    """Show the effective scoring profile."""
    p = _load_profile_or_exit(profile_path)

    click.echo(f"\nProfile: {p.name}")
    if p.description:
        click.echo(f"  {p.description}")

    click.echo("\nWeights:")
    for name, value in p.weights.model_dump().items():
        click.echo(f"  {name:<16} {value}")

    click.echo("\nThresholds:")
    for name, value in p.thresholds.model_dump().items():
        click.echo(f"  {name:<22} {value}")


@profile.command("init")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def profile_init(path: Path, force: bool) -> None:
    """Write the built-in profile to PATH as a starting point."""
    from .profile import default_profile, save_profile

    if path.exists() and not force:
        click.echo(f"Error: {path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    saved = save_profile(default_profile(), path)
    click.echo(f"Profile written: {saved}")


if __name__ == "__main__":
    main()
