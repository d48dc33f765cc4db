"""
ThreatRank data models - immutable Pydantic schemas for contact scoring.

Design principles:
- extra="forbid" everywhere (fail fast on misspelled config keys)
- frozen value types: a run never mutates a Contact, Weights or thresholds
- numeric Contact fields are always populated (parser substitutes defaults)
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# TYPE LITERALS
# =============================================================================

Identity = Literal["FRIEND", "FOE", "UNKNOWN"]

Recommendation = Literal["IGNORE (FRIEND)", "INTERCEPT", "ELEVATED MONITOR", "MONITOR"]

RejectionReason = Literal["too_few_fields", "invalid_identity", "empty_id"]


# =============================================================================
# CONTACT
# =============================================================================


class Contact(BaseModel):
    """One sensor report of an airborne object."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, description="Track ID or callsign")
    identity: Identity = Field(..., description="IFF classification")
    range_km: float = Field(..., description="Slant range (km)")
    closing_mps: float = Field(..., description="Closing speed, positive = approaching (m/s)")
    altitude_m: float = Field(..., description="Altitude (m)")
    rcs_m2: float = Field(..., description="Radar cross-section (m^2)")


# =============================================================================
# CONFIGURATION VALUES
# =============================================================================


class Weights(BaseModel):
    """Coefficients for each scoring term. Larger score => higher priority."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    w_range_inv: float = Field(default=60.0, description="Closer = higher risk")
    w_closing: float = Field(default=1.0, description="Faster approach = higher risk")
    w_rcs: float = Field(default=1.0, description="Bigger target = higher risk")
    w_alt_low: float = Field(default=0.1, description="Lower altitude = higher risk")
    w_iff_friend: float = Field(default=-40.0, description="Penalty for friendly contacts")
    w_iff_unknown: float = Field(default=15.0, description="Mild boost for unknown contacts")
    w_iff_foe: float = Field(default=30.0, description="Strong boost for hostile contacts")


class PolicyThresholds(BaseModel):
    """Fixed decision constants for the recommendation policy."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    intercept_score: float = Field(default=120.0)
    intercept_range_km: float = Field(default=25.0)
    intercept_closing_mps: float = Field(default=100.0)
    elevated_score: float = Field(default=80.0)
    elevated_range_km: float = Field(default=50.0)


# =============================================================================
# INGEST RESULTS
# =============================================================================


class RowRejection(BaseModel):
    """A raw input line that could not become a Contact."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    line_number: int = Field(..., ge=1, description="1-based physical line number")
    reason: RejectionReason
    line: str = Field(default="", description="Trimmed line text")

    def describe(self) -> str:
        """Human-readable rejection message."""
        if self.reason == "too_few_fields":
            return f"Skipping malformed row (line {self.line_number}): {self.line}"
        if self.reason == "invalid_identity":
            return f"Skipping row with invalid IFF (line {self.line_number}): {self.line}"
        return f"Skipping row with empty id (line {self.line_number}): {self.line}"


class IngestResult(BaseModel):
    """Accepted contacts (input order) plus everything that was dropped."""

    model_config = ConfigDict(extra="forbid")

    contacts: list[Contact] = Field(default_factory=list)
    rejections: list[RowRejection] = Field(default_factory=list)
    skipped_lines: int = Field(default=0, description="Blank and comment lines")
    header_skipped: bool = Field(default=False)


# =============================================================================
# SCORING & RANKING
# =============================================================================


class ScoredContact(BaseModel):
    """A Contact paired with its risk score."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    contact: Contact
    score: float
    contributions: dict[str, float] = Field(default_factory=dict)


class RankedContact(BaseModel):
    """A row of the final ranking."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rank: int = Field(..., ge=1)
    contact: Contact
    score: float
    contributions: dict[str, float] = Field(default_factory=dict)
    recommendation: Recommendation


# =============================================================================
# RUN RESULT
# =============================================================================


class RunResult(BaseModel):
    """Result of a ranking run."""

    model_config = ConfigDict(extra="forbid")

    run_id: str = Field(default="")
    source: str = Field(default="", description="Where the contacts were read from")
    profile_name: str = Field(default="default")
    weights: Weights = Field(default_factory=Weights)
    thresholds: PolicyThresholds = Field(default_factory=PolicyThresholds)

    ranked: list[RankedContact] = Field(default_factory=list)
    rejections: list[RowRejection] = Field(default_factory=list)
    skipped_lines: int = Field(default=0)
    header_skipped: bool = Field(default=False)

    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = Field(default=None)

    def recommendation_counts(self) -> dict[str, int]:
        """Count ranked contacts per recommendation label."""
        counts: dict[str, int] = {}
        for row in self.ranked:
            counts[row.recommendation] = counts.get(row.recommendation, 0) + 1
        return counts
