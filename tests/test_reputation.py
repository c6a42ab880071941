"""
Test suite for the reputation subsystem.

Tests the score engine, tier classification, throttle policy and the
network-wide aggregation in ReputationService.
"""

import pytest

from peerlib.backends.memory import MemoryStore
from peerlib.core.exceptions import (
    InsufficientReputationError,
    NotFoundError,
    OperationError,
)
from peerlib.core.models import Account, Tier
from peerlib.reputation.scoring import (
    DEFAULT_THROTTLE,
    LOW_REPUTATION,
    calculate_score,
    classify,
    rescore,
    throttle_multiplier,
)
from peerlib.reputation.service import OutcomeStatus, ReputationService


# ===== FIXTURES =====

def make_account(account_id, uploads=0, downloads=0, average_rating=0.0):
    """Build an account whose score/tier have not been recomputed yet."""
    return Account(
        account_id=account_id,
        username=account_id,
        email=f"{account_id}@university.edu",
        uploads=uploads,
        downloads=downloads,
        average_rating=average_rating,
    )


@pytest.fixture
def store():
    """Provide an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def populated_store(store):
    """Store with a contributor, a neutral member and a leecher (all stale)."""
    store.create_account(make_account("contributor", uploads=30))
    store.create_account(make_account("neutral", uploads=10))
    store.create_account(make_account("leecher", downloads=50))
    return store


@pytest.fixture
def reputation(populated_store):
    """Provide a reputation service over the populated store."""
    return ReputationService(populated_store)


class FlakyStore(MemoryStore):
    """Store whose writes fail for selected account ids."""

    def __init__(self, failing_ids):
        super().__init__()
        self.failing_ids = set(failing_ids)

    def update_account(self, account):
        if account.account_id in self.failing_ids:
            raise OperationError("update_account", "simulated write failure")
        super().update_account(account)


# ===== SCORE ENGINE TESTS =====

@pytest.mark.unit
class TestScoreEngine:
    """Test the pure scoring function."""

    def test_new_account_scores_zero(self):
        """Test all-zero counters give a zero score."""
        assert calculate_score(0, 0, 0.0) == 0

    def test_weighted_sum(self):
        """Test uploads, downloads and rating terms combine additively."""
        assert calculate_score(50, 30, 4.5) == 115
        assert calculate_score(5, 50, 2.0) == -20

    def test_rating_term_truncates(self):
        """Test the rating term is truncated, not rounded."""
        assert calculate_score(0, 0, 4.99) == 49
        assert calculate_score(0, 0, 3.45) == 34

    def test_floor_at_low_reputation(self):
        """Test scores never drop below the floor."""
        assert calculate_score(0, 500, 0.0) == LOW_REPUTATION
        assert calculate_score(0, 100, 0.0) == -100
        assert calculate_score(0, 99, 0.0) == -99

    def test_no_upper_bound(self):
        """Test large upload counts are not capped."""
        assert calculate_score(10_000, 0, 5.0) == 20_050

    def test_monotonic_in_uploads(self):
        """Test one more upload never lowers the score."""
        for uploads in range(0, 40):
            assert calculate_score(uploads + 1, 20, 3.0) >= calculate_score(uploads, 20, 3.0)

    def test_monotonic_in_downloads(self):
        """Test one more download never raises the score."""
        for downloads in range(0, 200):
            assert calculate_score(10, downloads + 1, 3.0) <= calculate_score(10, downloads, 3.0)


# ===== CLASSIFIER / THROTTLE TESTS =====

@pytest.mark.unit
class TestClassifier:
    """Test tier boundaries and throttle multipliers."""

    def test_tier_boundaries(self):
        """Test the exact threshold values."""
        assert classify(51) == Tier.CONTRIBUTOR
        assert classify(50) == Tier.NEUTRAL
        assert classify(0) == Tier.NEUTRAL
        assert classify(-1) == Tier.LEECHER
        assert classify(LOW_REPUTATION) == Tier.LEECHER

    def test_throttle_per_tier(self):
        """Test each tier maps to its speed multiplier."""
        assert throttle_multiplier(Tier.CONTRIBUTOR) == 1.0
        assert throttle_multiplier(Tier.NEUTRAL) == 0.7
        assert throttle_multiplier(Tier.LEECHER) == 0.3

    def test_throttle_default_for_unknown_tier(self):
        """Test unrecognised tiers fall back to the default multiplier."""
        assert throttle_multiplier("Moderator") == DEFAULT_THROTTLE
        assert throttle_multiplier(None) == 0.5

    def test_rescore_sets_score_and_tier(self):
        """Test rescore brings an account's derived fields in line."""
        account = make_account("a", uploads=30)
        assert account.tier == Tier.NEUTRAL

        rescore(account)

        assert account.score == 60
        assert account.tier == Tier.CONTRIBUTOR


# ===== AGGREGATOR TESTS =====

@pytest.mark.unit
class TestReputationService:
    """Test bulk recalculation, statistics and access checks."""

    def test_recalculate_all(self, reputation, populated_store):
        """Test every stale account is rescored and written back."""
        report = reputation.recalculate_all()

        assert report.all_updated
        assert len(report.updated) == 3

        for account in populated_store.list_accounts():
            assert account.tier == classify(account.score)

        assert populated_store.get_account("contributor").tier == Tier.CONTRIBUTOR
        assert populated_store.get_account("neutral").tier == Tier.NEUTRAL
        assert populated_store.get_account("leecher").tier == Tier.LEECHER

    def test_recalculate_all_skips_failed_writes(self):
        """Test a failing write is reported while the others still update."""
        store = FlakyStore(failing_ids=["neutral"])
        store.create_account(make_account("contributor", uploads=30))
        store.create_account(make_account("neutral", uploads=40))
        store.create_account(make_account("leecher", downloads=50))

        report = ReputationService(store).recalculate_all()

        assert not report.all_updated
        assert report.skipped == ["neutral"]
        assert sorted(report.updated) == ["contributor", "leecher"]

        skipped = [o for o in report.outcomes if o.status == OutcomeStatus.SKIPPED][0]
        assert "simulated write failure" in skipped.reason

        # The skipped account keeps its stale values
        assert store.get_account("neutral").score == 0
        assert store.get_account("contributor").tier == Tier.CONTRIBUTOR

    def test_network_stats(self, reputation):
        """Test tier counts and mean score after recalculation."""
        reputation.recalculate_all()
        stats = reputation.network_stats()

        assert stats.total_users == 3
        assert stats.contributors >= 1
        assert stats.leechers >= 1
        assert stats.contributors + stats.neutral + stats.leechers == stats.total_users
        assert stats.average_score == pytest.approx((60 + 20 - 50) / 3)

    def test_network_stats_empty(self, store):
        """Test an empty network reports zeros."""
        stats = ReputationService(store).network_stats()

        assert stats.total_users == 0
        assert stats.average_score == 0.0

    def test_network_stats_counts_stored_tier(self, reputation):
        """Test statistics read the stored tier rather than recomputing it."""
        stats = reputation.network_stats()

        # Nothing has been rescored yet, so every account is still Neutral
        assert stats.neutral == 3
        assert stats.contributors == 0

    def test_check_access_allowed(self, reputation):
        """Test accounts at or above the requirement pass."""
        reputation.recalculate_all()

        assert reputation.check_access_allowed("contributor", 60) is None
        assert reputation.check_access_allowed("neutral", 0) is None

    def test_check_access_denied(self, reputation):
        """Test a low score raises with the required and current values."""
        reputation.recalculate_all()

        with pytest.raises(InsufficientReputationError) as exc_info:
            reputation.check_access_allowed("leecher", 0, action="download")

        error = exc_info.value
        assert error.account_id == "leecher"
        assert error.required == 0
        assert error.current == -50
        assert error.action == "download"
        assert "insufficient reputation" in str(error)

    def test_check_access_unknown_account(self, reputation):
        """Test a missing account propagates not-found."""
        with pytest.raises(NotFoundError):
            reputation.check_access_allowed("ghost", 0)

    def test_reputation_info(self, reputation):
        """Test reputation details include the throttle multiplier."""
        reputation.recalculate_all()
        info = reputation.get_reputation_info("leecher")

        assert info.score == -50
        assert info.tier == Tier.LEECHER
        assert info.throttle == 0.3
        assert reputation.get_throttle_speed("contributor") == 1.0

    def test_calculate_does_not_persist(self, reputation, populated_store):
        """Test calculate reports the implied score without saving it."""
        assert reputation.calculate("contributor") == 60
        assert populated_store.get_account("contributor").score == 0

    def test_leaderboard(self, reputation):
        """Test the leaderboard orders by score and honours the limit."""
        reputation.recalculate_all()
        board = reputation.leaderboard(limit=2)

        assert [a.account_id for a in board] == ["contributor", "neutral"]
        assert reputation.leaderboard(limit=0) == []
