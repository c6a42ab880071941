"""
Abstract storage contract used by the reputation, search and library services.

Implementations must return copies of stored records so that a caller owns
its record between fetch and write-back, and must raise NotFoundError for
missing ids and AlreadyExistsError for duplicate ids.
"""

from abc import ABC, abstractmethod
from typing import List

from peerlib.core.models import Account, Resource


class AccountStore(ABC):
    """CRUD contract for accounts."""

    @abstractmethod
    def create_account(self, account: Account):
        """Store a new account (AlreadyExistsError if the id or email is taken)."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Account:
        """Fetch an account by id (NotFoundError if absent)."""
        pass

    @abstractmethod
    def get_account_by_email(self, email: str) -> Account:
        """Fetch an account by email (NotFoundError if absent)."""
        pass

    @abstractmethod
    def update_account(self, account: Account):
        """Replace a stored account (NotFoundError if absent)."""
        pass

    @abstractmethod
    def delete_account(self, account_id: str):
        pass

    @abstractmethod
    def list_accounts(self) -> List[Account]:
        """All accounts, in no guaranteed order."""
        pass


class ResourceStore(ABC):
    """CRUD contract for shared resources."""

    @abstractmethod
    def create_resource(self, resource: Resource):
        """Store a new resource (AlreadyExistsError if the id is taken)."""
        pass

    @abstractmethod
    def get_resource(self, resource_id: str) -> Resource:
        """Fetch a resource by id (NotFoundError if absent)."""
        pass

    @abstractmethod
    def update_resource(self, resource: Resource):
        """Replace a stored resource (NotFoundError if absent)."""
        pass

    @abstractmethod
    def delete_resource(self, resource_id: str):
        pass

    @abstractmethod
    def list_resources(self) -> List[Resource]:
        """All resources, in no guaranteed order."""
        pass

    @abstractmethod
    def list_resources_by_owner(self, owner_id: str) -> List[Resource]:
        pass


class LibraryStore(AccountStore, ResourceStore):
    """Combined account and resource store injected into every service."""
    pass
