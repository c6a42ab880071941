"""
Account service: membership and activity events.

Every event is a read-modify-write against the store: fetch a copy,
change the counters, rescore, write the copy back.
"""

import logging
from typing import List

from peerlib.backends.base import AccountStore
from peerlib.core.exceptions import ValidationError
from peerlib.core.models import (
    Account,
    MAX_RATING,
    MIN_RATING,
    PeerStatus,
    is_valid_rating,
)
from peerlib.reputation.scoring import rescore

logger = logging.getLogger(__name__)


class AccountService:
    """Creates accounts and records the activity that drives reputation."""

    def __init__(self, store: AccountStore):
        self.store = store

    def create_account(self, username: str, email: str) -> Account:
        """
        Register a new account.

        Args:
            username: Display name (required)
            email: Contact address, unique across accounts

        Returns:
            The stored account (Neutral, all counters zero)

        Raises:
            ValidationError: On an empty username or malformed email
            AlreadyExistsError: If the email is already registered
        """
        username = (username or "").strip()
        email = (email or "").strip()

        if not username:
            raise ValidationError("username", "username is required")
        if "@" not in email:
            raise ValidationError("email", "a valid email address is required")

        account = Account.create(username, email)
        # Email uniqueness is checked by the store under its lock
        self.store.create_account(account)

        logger.info(f"Created account {account.account_id[:8]}... ({username})")
        return account

    def get_account(self, account_id: str) -> Account:
        return self.store.get_account(account_id)

    def get_account_by_email(self, email: str) -> Account:
        return self.store.get_account_by_email(email)

    def list_accounts(self) -> List[Account]:
        return self.store.list_accounts()

    def set_status(self, account_id: str, status: PeerStatus) -> Account:
        """Update the simulated peer status of an account."""
        account = self.store.get_account(account_id)
        account.status = status
        account.touch()
        self.store.update_account(account)
        return account

    def record_upload(self, account_id: str) -> Account:
        """Credit an account for sharing a resource."""
        account = self.store.get_account(account_id)
        account.uploads += 1
        return self._save(account)

    def record_download(self, account_id: str) -> Account:
        """Debit an account for fetching a resource."""
        account = self.store.get_account(account_id)
        account.downloads += 1
        return self._save(account)

    def record_rating_received(self, account_id: str, rating: float) -> Account:
        """
        Fold a rating given to one of the account's resources into its
        running mean.

        Raises:
            ValidationError: If rating lies outside [MIN_RATING, MAX_RATING]
        """
        if not is_valid_rating(rating):
            raise ValidationError(
                "rating", f"rating must be between {MIN_RATING:g} and {MAX_RATING:g}"
            )

        account = self.store.get_account(account_id)
        total = account.average_rating * account.ratings_received + rating
        account.ratings_received += 1
        account.average_rating = total / account.ratings_received
        return self._save(account)

    def _save(self, account: Account) -> Account:
        """Rescore and write back an account whose counters changed."""
        rescore(account)
        account.touch()
        self.store.update_account(account)

        logger.debug(
            f"Account {account.account_id[:8]}...: score={account.score} "
            f"tier={account.tier.value}"
        )
        return account
