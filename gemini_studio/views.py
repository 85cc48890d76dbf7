"""Presentation helpers for the character sheet and relationships panel.

None of this affects game state; it only decides how state is shown.
"""

from gemini_studio.models import Gauge, Relationship

# (min_score, band): first match wins
SCORE_BANDS = [
    (80, "devoted"),
    (60, "friendly"),
    (40, "neutral"),
    (20, "wary"),
]


def sorted_relationships(relationships: list[Relationship]) -> list[Relationship]:
    """Most recent interaction first; ties keep their original order."""
    return sorted(relationships, key=lambda r: r.last_interaction_time, reverse=True)


def gauge_percent(gauge: Gauge) -> float:
    if gauge.max <= 0:
        return 0.0
    return max(0.0, min(100.0, gauge.current / gauge.max * 100))


def score_band(score: int) -> str:
    for min_score, band in SCORE_BANDS:
        if score >= min_score:
            return band
    return "hostile"
