"""
In-memory storage backend.

Keeps accounts and resources in plain dicts guarded by a single lock.
Records are deep-copied on the way in and on the way out: a service that
fetches an account mutates its own copy and must call ``update_account``
for the change to become visible to anyone else.
"""

import copy
import logging
from threading import RLock
from typing import Dict, List, Tuple

from peerlib.core.exceptions import AlreadyExistsError, NotFoundError
from peerlib.core.models import Account, Resource

from .base import LibraryStore

logger = logging.getLogger(__name__)


class MemoryStore(LibraryStore):
    """
    Thread-safe in-memory implementation of LibraryStore.

    One re-entrant lock serialises every read and write, so a listing is
    always a consistent snapshot of the whole map.
    """

    def __init__(self):
        """Initialize empty account and resource maps."""
        self._accounts: Dict[str, Account] = {}
        self._resources: Dict[str, Resource] = {}

        self._lock = RLock()

        logger.info("Initialized in-memory library store")

    # ===== ACCOUNTS =====

    def create_account(self, account: Account):
        with self._lock:
            if account.account_id in self._accounts:
                raise AlreadyExistsError("account", account.account_id)
            if any(a.email == account.email for a in self._accounts.values()):
                raise AlreadyExistsError("account", account.email)
            self._accounts[account.account_id] = copy.deepcopy(account)

        logger.debug(f"Stored account {account.account_id[:8]}... ({account.username})")

    def get_account(self, account_id: str) -> Account:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise NotFoundError("account", account_id)
            return copy.deepcopy(account)

    def get_account_by_email(self, email: str) -> Account:
        with self._lock:
            for account in self._accounts.values():
                if account.email == email:
                    return copy.deepcopy(account)
        raise NotFoundError("account", email)

    def update_account(self, account: Account):
        with self._lock:
            if account.account_id not in self._accounts:
                raise NotFoundError("account", account.account_id)
            self._accounts[account.account_id] = copy.deepcopy(account)

    def delete_account(self, account_id: str):
        with self._lock:
            if account_id not in self._accounts:
                raise NotFoundError("account", account_id)
            del self._accounts[account_id]

    def list_accounts(self) -> List[Account]:
        with self._lock:
            return [copy.deepcopy(a) for a in self._accounts.values()]

    # ===== RESOURCES =====

    def create_resource(self, resource: Resource):
        with self._lock:
            if resource.resource_id in self._resources:
                raise AlreadyExistsError("resource", resource.resource_id)
            self._resources[resource.resource_id] = copy.deepcopy(resource)

        logger.debug(f"Stored resource {resource.resource_id[:16]}... ({resource.filename})")

    def get_resource(self, resource_id: str) -> Resource:
        with self._lock:
            resource = self._resources.get(resource_id)
            if resource is None:
                raise NotFoundError("resource", resource_id)
            return copy.deepcopy(resource)

    def update_resource(self, resource: Resource):
        with self._lock:
            if resource.resource_id not in self._resources:
                raise NotFoundError("resource", resource.resource_id)
            self._resources[resource.resource_id] = copy.deepcopy(resource)

    def delete_resource(self, resource_id: str):
        with self._lock:
            if resource_id not in self._resources:
                raise NotFoundError("resource", resource_id)
            del self._resources[resource_id]

    def list_resources(self) -> List[Resource]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._resources.values()]

    def list_resources_by_owner(self, owner_id: str) -> List[Resource]:
        with self._lock:
            return [
                copy.deepcopy(r) for r in self._resources.values()
                if r.owner_id == owner_id
            ]

    # ===== UTILITIES =====

    def count(self) -> Tuple[int, int]:
        """Return (accounts, resources) counts."""
        with self._lock:
            return len(self._accounts), len(self._resources)

    def clear(self):
        """Drop all data."""
        with self._lock:
            self._accounts = {}
            self._resources = {}
        logger.info("Cleared in-memory library store")
