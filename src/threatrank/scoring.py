"""
ThreatRank scoring engine - simple, explainable weighted sum.

Each term is weight * normalized signal. The sum is not normalized, so scores
are only comparable within one batch under one set of Weights.
"""

import math

from .models import Contact, ScoredContact, Weights

# Range below this is treated as "on top of us" and capped
MIN_RANGE_KM = 0.05
CLOSE_RANGE_CAP = 20.0

# Closing speed scale: 0..400 m/s -> 0..100
MAX_CLOSING_MPS = 400.0

# RCS floor and log mapping: 0.01..100 m^2 -> 0..100
MIN_RCS_M2 = 0.01
RCS_LOG_OFFSET = 2.0
RCS_LOG_SCALE = 25.0

# Altitude ceiling: 0..20000 m -> 100..0
MAX_ALTITUDE_M = 20000.0
ALTITUDE_SCALE = 200.0


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp x into [lo, hi]."""
    return max(lo, min(hi, x))


def range_signal(range_km: float) -> float:
    """Inverse range, capped when very close."""
    return 1.0 / range_km if range_km > MIN_RANGE_KM else CLOSE_RANGE_CAP


def closing_signal(closing_mps: float) -> float:
    """Approach speed mapped to 0..100; receding contacts get 0."""
    return clamp(closing_mps / MAX_CLOSING_MPS, 0.0, 1.0) * 100.0


def rcs_signal(rcs_m2: float) -> float:
    """Log-compressed radar cross-section."""
    return (math.log10(max(MIN_RCS_M2, rcs_m2)) + RCS_LOG_OFFSET) * RCS_LOG_SCALE


def altitude_signal(altitude_m: float) -> float:
    """Lower altitude scores higher, 0..100."""
    return (MAX_ALTITUDE_M - clamp(altitude_m, 0.0, MAX_ALTITUDE_M)) / ALTITUDE_SCALE


def identity_term(contact: Contact, weights: Weights) -> float:
    """Fixed bonus/penalty by IFF."""
    if contact.identity == "FRIEND":
        return weights.w_iff_friend
    if contact.identity == "FOE":
        return weights.w_iff_foe
    return weights.w_iff_unknown


def score_breakdown(contact: Contact, weights: Weights) -> dict[str, float]:
    """
    Compute each scoring term for a contact.
    Returns contributions keyed range/closing/rcs/altitude/identity.
    """
    return {
        "range": weights.w_range_inv * range_signal(contact.range_km),
        "closing": weights.w_closing * closing_signal(contact.closing_mps),
        "rcs": weights.w_rcs * rcs_signal(contact.rcs_m2),
        "altitude": weights.w_alt_low * altitude_signal(contact.altitude_m),
        "identity": identity_term(contact, weights),
    }


def total_score(contributions: dict[str, float]) -> float:
    """Sum the terms in a fixed order."""
    return (
        contributions["range"]
        + contributions["closing"]
        + contributions["rcs"]
        + contributions["altitude"]
        + contributions["identity"]
    )


def score_contact(contact: Contact, weights: Weights) -> float:
    """Total risk score for a contact."""
    return total_score(score_breakdown(contact, weights))


def score_all(contacts: list[Contact], weights: Weights) -> list[ScoredContact]:
    """Score every contact, preserving input order."""
    scored = []
    for contact in contacts:
        contributions = score_breakdown(contact, weights)
        scored.append(
            ScoredContact(
                contact=contact,
                score=total_score(contributions),
                contributions=contributions,
            )
        )
    return scored
