"""
Reputation Scoring and Tier Policy

Pure functions that turn an account's activity counters into a score,
a score into a tier, and a tier into a transfer speed multiplier.

Score formula:
    score = uploads * UPLOAD_WEIGHT
            - downloads * DOWNLOAD_WEIGHT
            + int(average_rating * RATING_WEIGHT)

The rating term is truncated toward zero (not rounded), and the result is
floored at LOW_REPUTATION. There is no upper bound.

Tiers (first match wins):
    score > CONTRIBUTOR_THRESHOLD  -> Contributor
    score >= NEUTRAL_THRESHOLD     -> Neutral
    otherwise                      -> Leecher
"""

from peerlib.core.models import Account, Tier


# Score weights
UPLOAD_WEIGHT = 2  # Uploads count double
DOWNLOAD_WEIGHT = 1  # Each download costs one point
RATING_WEIGHT = 10  # Multiplier on the average received rating

# Score bounds and tier thresholds
LOW_REPUTATION = -100  # Score floor
CONTRIBUTOR_THRESHOLD = 50  # Strictly above -> Contributor
NEUTRAL_THRESHOLD = 0  # At or above -> Neutral

# Fraction of full transfer speed per tier
THROTTLE_MULTIPLIERS = {
    Tier.CONTRIBUTOR: 1.0,
    Tier.NEUTRAL: 0.7,
    Tier.LEECHER: 0.3,
}
DEFAULT_THROTTLE = 0.5  # Unrecognised tier


def calculate_score(uploads: int, downloads: int, average_rating: float) -> int:
    """
    Compute a reputation score from activity counters.

    Args:
        uploads: Number of resources shared (>= 0)
        downloads: Number of resources fetched (>= 0)
        average_rating: Mean rating received, expected in [0, 5]

    Returns:
        Integer score, never below LOW_REPUTATION
    """
    upload_score = uploads * UPLOAD_WEIGHT
    download_penalty = downloads * DOWNLOAD_WEIGHT
    rating_bonus = int(average_rating * RATING_WEIGHT)

    score = upload_score - download_penalty + rating_bonus
    return max(LOW_REPUTATION, score)


def classify(score: int) -> Tier:
    """Map a score to its tier."""
    if score > CONTRIBUTOR_THRESHOLD:
        return Tier.CONTRIBUTOR
    elif score >= NEUTRAL_THRESHOLD:
        return Tier.NEUTRAL
    return Tier.LEECHER


def throttle_multiplier(tier) -> float:
    """Return the allowed fraction of full transfer speed for a tier."""
    return THROTTLE_MULTIPLIERS.get(tier, DEFAULT_THROTTLE)


def rescore(account: Account) -> Account:
    """
    Recompute an account's score and tier from its counters, in place.

    Returns the same account for chaining.
    """
    account.score = calculate_score(account.uploads, account.downloads, account.average_rating)
    account.tier = classify(account.score)
    return account
