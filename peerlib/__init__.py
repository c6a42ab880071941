"""
peerlib - P2P Academic Library

Members share academic resources, earn a reputation score from their
activity, and download at a speed set by their reputation tier.

Quick Start:
    >>> from peerlib import MemoryStore, AccountService, LibraryService
    >>> from peerlib import ReputationService, SearchService, Resource
    >>>
    >>> store = MemoryStore()
    >>> accounts = AccountService(store)
    >>> library = LibraryService(store, accounts)
    >>>
    >>> alice = accounts.create_account("alice", "alice@university.edu")
    >>> library.upload(Resource.create("notes.pdf", 2048, alice.account_id,
    ...                                title="Calculus Notes", subject="Mathematics"))
    >>>
    >>> page = SearchService(store).search("calculus")
    >>> print(page.total_count)
    >>>
    >>> stats = ReputationService(store).network_stats()
    >>> print(f"Contributors: {stats.contributors}")

Features:
    - Reputation score from uploads, downloads and received ratings
    - Contributor / Neutral / Leecher tiers with throttled transfer speed
    - Ranked, filtered and paginated search with suggestions
    - Thread-safe in-memory storage behind an abstract store interface
    - FastAPI server and command-line interface
"""

from peerlib.core.models import (
    Account,
    Resource,
    ResourceType,
    Tier,
    PeerStatus,
    SearchResult,
    SearchPage,
    NetworkStats,
)
from peerlib.core.exceptions import (
    LibraryError,
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    InsufficientReputationError,
    OperationError,
)
from peerlib.backends import LibraryStore, MemoryStore
from peerlib.reputation import (
    ReputationService,
    calculate_score,
    classify,
    throttle_multiplier,
)
from peerlib.search import SearchFilters, SearchService
from peerlib.services import AccountService, LibraryService

__version__ = "1.0.0"

__all__ = [
    "Account",
    "Resource",
    "ResourceType",
    "Tier",
    "PeerStatus",
    "SearchResult",
    "SearchPage",
    "NetworkStats",
    "LibraryError",
    "NotFoundError",
    "AlreadyExistsError",
    "ValidationError",
    "InsufficientReputationError",
    "OperationError",
    "LibraryStore",
    "MemoryStore",
    "ReputationService",
    "calculate_score",
    "classify",
    "throttle_multiplier",
    "SearchFilters",
    "SearchService",
    "AccountService",
    "LibraryService",
]
