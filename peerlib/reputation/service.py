"""
Network Reputation Service

Keeps every account's score and tier in sync with its counters and
summarises the population.

Features:
- Best-effort bulk recalculation with a per-account outcome report
- Tier distribution and mean score across the network
- Reputation gate for actions that require a minimum score
- Per-account reputation details and leaderboard
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from peerlib.backends.base import AccountStore
from peerlib.core.exceptions import InsufficientReputationError
from peerlib.core.models import Account, NetworkStats, ReputationInfo, Tier

from .scoring import calculate_score, rescore, throttle_multiplier

logger = logging.getLogger(__name__)


DEFAULT_ACTION = "access resource"


class OutcomeStatus(Enum):
    """Result of recalculating a single account."""
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass
class RecalculationOutcome:
    account_id: str
    status: OutcomeStatus
    score: Optional[int] = None
    tier: Optional[Tier] = None
    reason: Optional[str] = None


@dataclass
class RecalculationReport:
    """Tagged outcome for every account visited by recalculate_all."""
    outcomes: List[RecalculationOutcome] = field(default_factory=list)

    @property
    def updated(self) -> List[str]:
        return [o.account_id for o in self.outcomes if o.status == OutcomeStatus.UPDATED]

    @property
    def skipped(self) -> List[str]:
        return [o.account_id for o in self.outcomes if o.status == OutcomeStatus.SKIPPED]

    @property
    def all_updated(self) -> bool:
        return not self.skipped


class ReputationService:
    """
    Reputation aggregation over an injected account store.

    The service holds no state of its own; every call reads the store.
    """

    def __init__(self, store: AccountStore):
        """
        Initialize reputation service.

        Args:
            store: Account store (any AccountStore implementation)
        """
        self.store = store

    def calculate(self, account_id: str) -> int:
        """Compute the score an account's counters imply, without saving it."""
        account = self.store.get_account(account_id)
        return calculate_score(account.uploads, account.downloads, account.average_rating)

    def recalculate_all(self) -> RecalculationReport:
        """
        Recompute score and tier for every account and write each back.

        Not transactional: an account whose write fails is skipped and the
        loop carries on. Only a failure to list the accounts propagates.

        Returns:
            RecalculationReport with one outcome per account
        """
        accounts = self.store.list_accounts()
        report = RecalculationReport()

        for account in accounts:
            rescore(account)
            try:
                self.store.update_account(account)
            except Exception as e:
                logger.warning(f"Skipped reputation update for {account.account_id[:8]}...: {e}")
                report.outcomes.append(RecalculationOutcome(
                    account_id=account.account_id,
                    status=OutcomeStatus.SKIPPED,
                    reason=str(e),
                ))
                continue

            report.outcomes.append(RecalculationOutcome(
                account_id=account.account_id,
                status=OutcomeStatus.UPDATED,
                score=account.score,
                tier=account.tier,
            ))

        logger.info(
            f"Recalculated reputation for {len(report.updated)} accounts "
            f"({len(report.skipped)} skipped)"
        )
        return report

    def network_stats(self) -> NetworkStats:
        """Count accounts per tier and average their scores."""
        accounts = self.store.list_accounts()
        stats = NetworkStats(total_users=len(accounts))

        total_score = 0
        for account in accounts:
            total_score += account.score

            if account.tier == Tier.CONTRIBUTOR:
                stats.contributors += 1
            elif account.tier == Tier.NEUTRAL:
                stats.neutral += 1
            elif account.tier == Tier.LEECHER:
                stats.leechers += 1

        if accounts:
            stats.average_score = total_score / len(accounts)

        return stats

    def check_access_allowed(
        self,
        account_id: str,
        required_score: int,
        action: str = DEFAULT_ACTION
    ):
        """
        Gate an action on a minimum reputation score.

        Raises:
            NotFoundError: If the account does not exist
            InsufficientReputationError: If the account's score is too low
        """
        account = self.store.get_account(account_id)

        if account.score < required_score:
            logger.debug(
                f"Denied '{action}' for {account_id[:8]}...: "
                f"score {account.score} < {required_score}"
            )
            raise InsufficientReputationError(
                account_id=account_id,
                required=required_score,
                current=account.score,
                action=action,
            )

    def get_reputation_info(self, account_id: str) -> ReputationInfo:
        account = self.store.get_account(account_id)
        return ReputationInfo(
            account_id=account.account_id,
            score=account.score,
            tier=account.tier,
            uploads=account.uploads,
            downloads=account.downloads,
            average_rating=account.average_rating,
            throttle=throttle_multiplier(account.tier),
        )

    def get_throttle_speed(self, account_id: str) -> float:
        """Transfer speed multiplier for an account's current tier."""
        account = self.store.get_account(account_id)
        return throttle_multiplier(account.tier)

    def leaderboard(self, limit: int = 10) -> List[Account]:
        """
        Get the highest scoring accounts.

        Args:
            limit: Maximum number of accounts to return

        Returns:
            Accounts sorted by score, highest first
        """
        accounts = self.store.list_accounts()
        accounts.sort(key=lambda a: a.score, reverse=True)
        return accounts[:max(limit, 0)]
