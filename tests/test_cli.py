"""Tests for ThreatRank CLI."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from threatrank.cli import EXIT_UNKNOWN_ID, INPUT_ENV_VAR, main

CLEAN_CSV = "A,FOE,10,150,1000,5\nB,FRIEND,10,150,1000,5\nC,FOE,20,150,1000,5\n"


@pytest.fixture
def clean_csv(tmp_path: Path) -> Path:
    """A contacts file with no header and no bad rows."""
    path = tmp_path / "clean.csv"
    path.write_text(CLEAN_CSV, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(INPUT_ENV_VAR, raising=False)
    monkeypatch.delenv("THREATRANK_PROFILE", raising=False)


class TestRank:
    """Tests for the rank command."""

    def test_rank_table(self, sample_csv: Path) -> None:
        """Ranks the sample and prints the table."""
        result = CliRunner().invoke(main, ["rank", str(sample_csv)])

        assert result.exit_code == 0
        assert "RANK" in result.output
        assert "SUGGESTION" in result.output
        assert "INTERCEPT" in result.output
        assert "IGNORE (FRIEND)" in result.output
        assert result.output.index("\n1 ") < result.output.index("\n2 ")

    def test_rejections_do_not_change_exit_code(self, sample_csv: Path) -> None:
        """Malformed rows are reported but the run still succeeds."""
        result = CliRunner().invoke(main, ["rank", str(sample_csv)])
        assert result.exit_code == 0
        assert "[Skip]" in result.output
        assert "invalid IFF" in result.output

    def test_no_contacts_exit_code(self, empty_csv: Path) -> None:
        """Empty input exits 1 without a table."""
        result = CliRunner().invoke(main, ["rank", str(empty_csv)])
        assert result.exit_code == 1
        assert "No contacts loaded" in result.output
        assert "SUGGESTION" not in result.output

    def test_missing_source_exit_code(self, tmp_path: Path) -> None:
        """An unreadable source exits 2."""
        result = CliRunner().invoke(main, ["rank", str(tmp_path / "missing.csv")])
        assert result.exit_code == 2
        assert "Failed to open CSV" in result.output

    def test_default_path_from_env(
        self, monkeypatch: pytest.MonkeyPatch, clean_csv: Path
    ) -> None:
        """Without a PATH the env var location is used."""
        monkeypatch.setenv(INPUT_ENV_VAR, str(clean_csv))
        result = CliRunner().invoke(main, ["rank"])
        assert result.exit_code == 0
        assert "INTERCEPT" in result.output

    def test_default_path_fallback(self, tmp_path: Path) -> None:
        """Without a PATH or env var, data/contacts.csv is read."""
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            Path("data").mkdir()
            Path("data/contacts.csv").write_text(CLEAN_CSV, encoding="utf-8")
            result = runner.invoke(main, ["rank"])
        assert result.exit_code == 0
        assert "INTERCEPT" in result.output

    def test_csv_format(self, clean_csv: Path) -> None:
        """CSV output lists contacts in rank order."""
        result = CliRunner().invoke(main, ["rank", str(clean_csv), "--format", "csv"])
        assert result.exit_code == 0
        rows = list(csv.DictReader(io.StringIO(result.output)))
        assert [r["id"] for r in rows] == ["A", "C", "B"]
        assert [r["rank"] for r in rows] == ["1", "2", "3"]

    def test_json_format(self, clean_csv: Path) -> None:
        """JSON output carries recommendations and contributions."""
        result = CliRunner().invoke(main, ["rank", str(clean_csv), "-f", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data[0]["recommendation"] == "INTERCEPT"
        assert data[2]["recommendation"] == "IGNORE (FRIEND)"
        assert "identity" in data[0]["contributions"]

    def test_verbose_keeps_stdout_clean(self, clean_csv: Path) -> None:
        """Verbose telemetry goes to stderr so JSON on stdout stays parseable."""
        result = CliRunner().invoke(main, ["rank", str(clean_csv), "-v", "-f", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [row["contact"]["id"] for row in data] == ["A", "C", "B"]
        assert "[Phase]" in result.stderr
        assert "[Phase]" not in result.stdout

    def test_verbose_csv(self, clean_csv: Path) -> None:
        """Verbose CSV output parses cleanly from stdout."""
        result = CliRunner().invoke(main, ["rank", str(clean_csv), "--verbose", "-f", "csv"])
        assert result.exit_code == 0
        rows = list(csv.DictReader(io.StringIO(result.stdout)))
        assert [r["id"] for r in rows] == ["A", "C", "B"]

    def test_output_dir(self, clean_csv: Path, tmp_path: Path) -> None:
        """--output writes a run directory with artifacts."""
        out = tmp_path / "runs"
        result = CliRunner().invoke(main, ["rank", str(clean_csv), "--output", str(out)])
        assert result.exit_code == 0
        run_dirs = list(out.iterdir())
        assert len(run_dirs) == 1
        assert (run_dirs[0] / "report.md").exists()

    def test_profile_option(self, clean_csv: Path, tmp_path: Path) -> None:
        """A profile can change the recommendation thresholds."""
        profile = tmp_path / "strict.yml"
        profile.write_text("thresholds:\n  intercept_score: 1000.0\n", encoding="utf-8")
        result = CliRunner().invoke(
            main, ["rank", str(clean_csv), "--profile", str(profile), "-f", "json"]
        )
        assert result.exit_code == 0
        assert all(row["recommendation"] != "INTERCEPT" for row in json.loads(result.stdout))

    def test_bad_profile_exit_code(self, clean_csv: Path, tmp_path: Path) -> None:
        """An invalid profile exits 2."""
        profile = tmp_path / "bad.yml"
        profile.write_text("weights:\n  bogus: 1\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["rank", str(clean_csv), "--profile", str(profile)])
        assert result.exit_code == 2
        assert "Invalid profile" in result.output


class TestCheck:
    """Tests for the check command."""

    def test_check_sample(self, sample_csv: Path) -> None:
        """Reports counts and rejections."""
        result = CliRunner().invoke(main, ["check", str(sample_csv)])
        assert result.exit_code == 0
        assert "Accepted: 4" in result.output
        assert "Rejected: 2" in result.output
        assert "Header:   yes" in result.output

    def test_check_with_profile(self, sample_csv: Path, tmp_path: Path) -> None:
        """--profile is accepted and its name reported."""
        profile = tmp_path / "coastal.yml"
        profile.write_text("weights:\n  w_alt_low: 0.3\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["check", str(sample_csv), "--profile", str(profile)])
        assert result.exit_code == 0
        assert "Profile:  coastal" in result.output

    def test_check_bad_profile(self, sample_csv: Path, tmp_path: Path) -> None:
        """An invalid profile fails the check with exit 2."""
        profile = tmp_path / "bad.yml"
        profile.write_text("thresholds:\n  bogus: 1\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["check", str(sample_csv), "-p", str(profile)])
        assert result.exit_code == 2

    def test_check_empty(self, empty_csv: Path) -> None:
        """No accepted contacts exits 1."""
        result = CliRunner().invoke(main, ["check", str(empty_csv)])
        assert result.exit_code == 1

    def test_check_missing(self, tmp_path: Path) -> None:
        """A missing source exits 2."""
        result = CliRunner().invoke(main, ["check", str(tmp_path / "nope.csv")])
        assert result.exit_code == 2


class TestExplain:
    """Tests for the explain command."""

    def test_explain_all(self, clean_csv: Path) -> None:
        """Every ranked contact gets a breakdown."""
        result = CliRunner().invoke(main, ["explain", str(clean_csv)])
        assert result.exit_code == 0
        assert "#1 A [FOE]" in result.output
        assert result.output.count("identity") == 3

    def test_explain_one(self, clean_csv: Path) -> None:
        """--id limits output to one contact."""
        result = CliRunner().invoke(main, ["explain", str(clean_csv), "--id", "B"])
        assert result.exit_code == 0
        assert "#3 B [FRIEND]" in result.output
        assert "-40.00" in result.output
        assert "[FOE]" not in result.output

    def test_explain_unknown_id(self, clean_csv: Path) -> None:
        """An unknown id has its own exit code, distinct from no contacts."""
        result = CliRunner().invoke(main, ["explain", str(clean_csv), "--id", "ZZZ"])
        assert result.exit_code == EXIT_UNKNOWN_ID
        assert "No contact with id ZZZ" in result.output


class TestProfileCommands:
    """Tests for the profile command group."""

    def test_show_default(self) -> None:
        """Shows the built-in profile."""
        result = CliRunner().invoke(main, ["profile", "show"])
        assert result.exit_code == 0
        assert "Profile: default" in result.output
        assert "w_iff_friend" in result.output
        assert "intercept_score" in result.output

    def test_init_writes_file(self, tmp_path: Path) -> None:
        """init writes a loadable profile and refuses to overwrite."""
        path = tmp_path / "mine.yml"
        runner = CliRunner()

        result = runner.invoke(main, ["profile", "init", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        again = runner.invoke(main, ["profile", "init", str(path)])
        assert again.exit_code == 1

        forced = runner.invoke(main, ["profile", "init", str(path), "--force"])
        assert forced.exit_code == 0

        shown = runner.invoke(main, ["profile", "show", "--profile", str(path)])
        assert shown.exit_code == 0
        assert "Profile: default" in shown.output


class TestEncoding:
    """Tests for input with undecodable bytes."""

    def test_latin1_comment_still_ranks(self, tmp_path: Path) -> None:
        """A stray non-UTF-8 byte in a comment does not fail the run."""
        path = tmp_path / "latin1.csv"
        path.write_bytes(b"# op note: caf\xe9\nA,FOE,10,150,1000,5\n")
        result = CliRunner().invoke(main, ["rank", str(path), "-f", "csv"])
        assert result.exit_code == 0
        rows = list(csv.DictReader(io.StringIO(result.stdout)))
        assert [r["id"] for r in rows] == ["A"]
