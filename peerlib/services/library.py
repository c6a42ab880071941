"""
Library service: the shared resource catalogue.

Handles uploads, downloads, ratings, tags and peer availability, and the
catalogue views (popular, recent, top rated, statistics). Side effects on
accounts (upload/download counters, received ratings) are best-effort: a
failure there is logged and never undoes the resource operation.
"""

import logging
from typing import Iterable, List, Optional

from peerlib.backends.base import ResourceStore
from peerlib.core.exceptions import LibraryError, OperationError, ValidationError
from peerlib.core.models import (
    LibraryStats,
    MAX_FILE_SIZE,
    Resource,
    is_valid_file_type,
)

from .accounts import AccountService

logger = logging.getLogger(__name__)


def validate_resource(resource: Resource):
    """
    Check a resource before it is stored.

    Raises:
        ValidationError: On a missing filename, bad size or disallowed type
    """
    if not resource.filename:
        raise ValidationError("filename", "filename is required")
    if resource.size <= 0:
        raise ValidationError("size", "invalid file size")
    if resource.size > MAX_FILE_SIZE:
        raise ValidationError("size", f"file exceeds maximum size of {MAX_FILE_SIZE} bytes")
    if not is_valid_file_type(resource.extension):
        raise ValidationError("extension", f"file type '{resource.extension}' not allowed")


class LibraryService:
    """
    Resource catalogue over an injected store.

    Args:
        store: Resource store
        accounts: Account service used to credit and debit members
    """

    def __init__(self, store: ResourceStore, accounts: AccountService):
        self.store = store
        self.accounts = accounts

    # ===== RESOURCE OPERATIONS =====

    def upload(self, resource: Resource) -> Resource:
        """
        Add a resource to the library and credit its owner.

        Returns:
            The stored resource

        Raises:
            ValidationError: If the resource fails validation
            AlreadyExistsError: If the resource id is already stored
            OperationError: If the store fails for any other reason
        """
        validate_resource(resource)

        try:
            self.store.create_resource(resource)
        except LibraryError:
            raise
        except Exception as e:
            raise OperationError("upload", "failed to store resource", cause=e) from e

        try:
            owner = self.accounts.record_upload(resource.owner_id)
        except LibraryError as e:
            logger.warning(f"Upload credit failed for {resource.owner_id[:8]}...: {e}")
        else:
            if owner.peer_id:
                resource.add_peer(owner.peer_id)
                self.store.update_resource(resource)

        logger.info(f"Uploaded {resource.filename} ({resource.resource_id[:16]}...)")
        return resource

    def download(self, resource_id: str, account_id: Optional[str] = None) -> Resource:
        """
        Fetch a resource, bump its download count and debit the downloader.

        Raises:
            NotFoundError: If the resource does not exist
        """
        resource = self.store.get_resource(resource_id)
        resource.record_download()
        self.store.update_resource(resource)

        if account_id:
            try:
                self.accounts.record_download(account_id)
            except LibraryError as e:
                logger.warning(f"Download debit failed for {account_id[:8]}...: {e}")

        return resource

    def rate_resource(self, resource_id: str, rating: float) -> Resource:
        """
        Rate a resource and pass the rating on to its owner.

        Raises:
            NotFoundError: If the resource does not exist
            ValidationError: If the rating is outside [1, 5]
        """
        resource = self.store.get_resource(resource_id)
        resource.add_rating(rating)
        self.store.update_resource(resource)

        try:
            self.accounts.record_rating_received(resource.owner_id, rating)
        except LibraryError as e:
            logger.warning(f"Rating credit failed for {resource.owner_id[:8]}...: {e}")

        return resource

    def add_tags(self, resource_id: str, tags: Iterable[str]) -> Resource:
        resource = self.store.get_resource(resource_id)
        for tag in tags:
            resource.add_tag(tag)
        self.store.update_resource(resource)
        return resource

    def announce_peer(self, resource_id: str, peer_id: str) -> Resource:
        """Mark a resource as available on a peer."""
        resource = self.store.get_resource(resource_id)
        resource.add_peer(peer_id)
        self.store.update_resource(resource)
        return resource

    def withdraw_peer(self, resource_id: str, peer_id: str) -> Resource:
        resource = self.store.get_resource(resource_id)
        resource.remove_peer(peer_id)
        self.store.update_resource(resource)
        return resource

    def get_resource(self, resource_id: str) -> Resource:
        return self.store.get_resource(resource_id)

    def get_owner_library(self, owner_id: str) -> List[Resource]:
        """All resources uploaded by an account."""
        return self.store.list_resources_by_owner(owner_id)

    # ===== CATALOGUE VIEWS =====

    def popular(self, limit: int = 10) -> List[Resource]:
        """Most downloaded resources first."""
        resources = self.store.list_resources()
        resources.sort(key=lambda r: r.download_count, reverse=True)
        return resources[:max(limit, 0)]

    def recent(self, limit: int = 10) -> List[Resource]:
        """Newest resources first."""
        resources = self.store.list_resources()
        resources.sort(key=lambda r: r.created_at, reverse=True)
        return resources[:max(limit, 0)]

    def top_rated(self, limit: int = 10) -> List[Resource]:
        """Highest average rating first, ignoring unrated resources."""
        rated = [r for r in self.store.list_resources() if r.total_ratings > 0]
        rated.sort(key=lambda r: r.average_rating, reverse=True)
        return rated[:max(limit, 0)]

    def statistics(self) -> LibraryStats:
        resources = self.store.list_resources()
        stats = LibraryStats(total_resources=len(resources))

        for resource in resources:
            stats.total_downloads += resource.download_count
            stats.total_ratings += resource.total_ratings
            stats.by_subject[resource.subject] = stats.by_subject.get(resource.subject, 0) + 1
            type_key = resource.resource_type.value
            stats.by_type[type_key] = stats.by_type.get(type_key, 0) + 1

        return stats
