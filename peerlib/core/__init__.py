"""
peerlib Core Module

Domain records and the exception hierarchy shared by every layer:
- Accounts (activity counters, derived score and tier)
- Resources (metadata, ratings, peer availability)
- Search pages and network/library statistics
"""

from peerlib.core.exceptions import (
    LibraryError,
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    InsufficientReputationError,
    OperationError,
    is_not_found,
)
from peerlib.core.models import (
    Account,
    Resource,
    Tier,
    ResourceType,
    PeerStatus,
    SearchResult,
    SearchPage,
    NetworkStats,
    ReputationInfo,
    LibraryStats,
)

__all__ = [
    "LibraryError",
    "NotFoundError",
    "AlreadyExistsError",
    "ValidationError",
    "InsufficientReputationError",
    "OperationError",
    "is_not_found",
    "Account",
    "Resource",
    "Tier",
    "ResourceType",
    "PeerStatus",
    "SearchResult",
    "SearchPage",
    "NetworkStats",
    "ReputationInfo",
    "LibraryStats",
]
