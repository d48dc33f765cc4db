"""
ThreatRank engagement recommendation policy.
"""

from .models import Contact, PolicyThresholds, Recommendation

DEFAULT_THRESHOLDS = PolicyThresholds()


def recommend(
    contact: Contact,
    score: float,
    thresholds: PolicyThresholds = DEFAULT_THRESHOLDS,
) -> Recommendation:
    """
    Suggest an engagement action. First match wins:
    friend -> ignore, then intercept, then elevated monitor, else monitor.

    Thresholds apply to the raw contact fields, not normalized signals.
    """
    if contact.identity == "FRIEND":
        return "IGNORE (FRIEND)"
    if (
        score > thresholds.intercept_score
        and contact.range_km < thresholds.intercept_range_km
        and contact.closing_mps > thresholds.intercept_closing_mps
    ):
        return "INTERCEPT"
    if score > thresholds.elevated_score and contact.range_km < thresholds.elevated_range_km:
        return "ELEVATED MONITOR"
    return "MONITOR"
