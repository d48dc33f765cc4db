"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from threatrank.models import Contact, PolicyThresholds, Weights

SAMPLE_CSV = """\
# test picture
id, iff, range_km, closing_mps, altitude_m, rcs_m2
A, FOE, 10, 150, 1000, 5
B, FRIEND, 10, 150, 1000, 5
C, FOE, 20, 150, 1000, 5

D, UNKNOWN, 80, 0, 10000, 1
E, NEUTRAL, 30, 100, 5000, 2
F, FOE, 30
"""


@pytest.fixture
def weights() -> Weights:
    """Default scoring weights."""
    return Weights()


@pytest.fixture
def thresholds() -> PolicyThresholds:
    """Default policy thresholds."""
    return PolicyThresholds()


@pytest.fixture
def foe_contact() -> Contact:
    """A close, fast, hostile contact."""
    return Contact(
        id="A",
        identity="FOE",
        range_km=10.0,
        closing_mps=150.0,
        altitude_m=1000.0,
        rcs_m2=5.0,
    )


@pytest.fixture
def friend_contact() -> Contact:
    """A friendly contact with the same kinematics as foe_contact."""
    return Contact(
        id="B",
        identity="FRIEND",
        range_km=10.0,
        closing_mps=150.0,
        altitude_m=1000.0,
        rcs_m2=5.0,
    )


@pytest.fixture
def unknown_contact() -> Contact:
    """A distant, slow unknown contact."""
    return Contact(
        id="D",
        identity="UNKNOWN",
        range_km=80.0,
        closing_mps=0.0,
        altitude_m=10000.0,
        rcs_m2=1.0,
    )


@pytest.fixture
def sample_csv(tmp_path: Path) -> Path:
    """A contacts file with a header, comments, blanks and two bad rows."""
    path = tmp_path / "contacts.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def empty_csv(tmp_path: Path) -> Path:
    """A contacts file with only comments and blank lines."""
    path = tmp_path / "empty.csv"
    path.write_text("# nothing here\n\n   \n# still nothing\n", encoding="utf-8")
    return path
