"""
Account Reputation

Scores accounts from their activity, classifies them into tiers and
aggregates network-wide statistics.
"""

from .scoring import (
    calculate_score,
    classify,
    throttle_multiplier,
    rescore,
    UPLOAD_WEIGHT,
    DOWNLOAD_WEIGHT,
    RATING_WEIGHT,
    LOW_REPUTATION,
    CONTRIBUTOR_THRESHOLD,
    NEUTRAL_THRESHOLD,
    THROTTLE_MULTIPLIERS,
    DEFAULT_THROTTLE,
)
from .service import (
    ReputationService,
    RecalculationReport,
    RecalculationOutcome,
    OutcomeStatus,
)

__all__ = [
    "calculate_score",
    "classify",
    "throttle_multiplier",
    "rescore",
    "UPLOAD_WEIGHT",
    "DOWNLOAD_WEIGHT",
    "RATING_WEIGHT",
    "LOW_REPUTATION",
    "CONTRIBUTOR_THRESHOLD",
    "NEUTRAL_THRESHOLD",
    "THROTTLE_MULTIPLIERS",
    "DEFAULT_THROTTLE",
    "ReputationService",
    "RecalculationReport",
    "RecalculationOutcome",
    "OutcomeStatus",
]
