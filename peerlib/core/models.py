"""
Domain records for the peer library.

Accounts share academic resources with the network. Each account carries
activity counters from which a reputation score and tier are derived; each
resource carries its descriptive metadata, download and rating statistics,
and the set of peers currently offering it.
"""

import hashlib
import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError


# Resource constraints
MAX_FILE_SIZE = 100 << 20  # 100 MiB
MIN_RATING = 1.0
MAX_RATING = 5.0
DEFAULT_RATING = 0.0  # Average reported before the first rating arrives

ALLOWED_FILE_TYPES = [".pdf", ".doc", ".docx", ".pptx", ".xlsx", ".txt", ".md"]

SUBJECT_CATEGORIES = [
    "Mathematics",
    "Physics",
    "Chemistry",
    "Biology",
    "Computer Science",
    "Electronics",
    "Mechanical",
    "Civil",
    "Literature",
    "History",
    "Economics",
    "Other",
]


class Tier(str, Enum):
    """Reputation tier derived from an account's score."""
    CONTRIBUTOR = "Contributor"
    NEUTRAL = "Neutral"
    LEECHER = "Leecher"


class ResourceType(str, Enum):
    """Coarse resource type derived from the file extension."""
    PDF = "pdf"
    DOCUMENT = "document"
    PRESENTATION = "presentation"
    SPREADSHEET = "spreadsheet"
    OTHER = "other"


class PeerStatus(str, Enum):
    """Simulated network status of an account's peer."""
    ONLINE = "online"
    OFFLINE = "offline"
    CONNECTING = "connecting"
    TRANSFERRING = "transferring"


def resource_type_for_extension(extension: str) -> ResourceType:
    """Map a file extension (with leading dot) to a resource type."""
    ext = extension.lower()
    if ext == ".pdf":
        return ResourceType.PDF
    elif ext in (".doc", ".docx"):
        return ResourceType.DOCUMENT
    elif ext in (".ppt", ".pptx"):
        return ResourceType.PRESENTATION
    elif ext in (".xls", ".xlsx"):
        return ResourceType.SPREADSHEET
    return ResourceType.OTHER


def is_valid_rating(rating: float) -> bool:
    return MIN_RATING <= rating <= MAX_RATING


def is_valid_file_type(extension: str) -> bool:
    return extension.lower() in ALLOWED_FILE_TYPES


@dataclass
class Account:
    """
    A library member and the peer they run.

    ``score`` and ``tier`` are derived from the counters and must be
    recomputed (see ``peerlib.reputation.scoring.rescore``) after any
    counter changes, before the account is written back to a store.
    """

    account_id: str
    username: str
    email: str

    # Activity counters
    uploads: int = 0
    downloads: int = 0
    average_rating: float = 0.0
    ratings_received: int = 0

    # Derived reputation
    score: int = 0
    tier: Tier = Tier.NEUTRAL

    # Simulated peer
    peer_id: Optional[str] = None
    status: PeerStatus = PeerStatus.OFFLINE

    # Timestamps
    created_at: float = field(default_factory=time.time)
    last_active_at: float = field(default_factory=time.time)

    @classmethod
    def create(cls, username: str, email: str) -> "Account":
        """Create a fresh account with a random id and zeroed counters."""
        account_id = str(uuid.uuid4())
        return cls(
            account_id=account_id,
            username=username,
            email=email,
            peer_id=f"peer-{account_id[:8]}",
        )

    def is_contributor(self) -> bool:
        return self.tier == Tier.CONTRIBUTOR

    def is_leecher(self) -> bool:
        return self.tier == Tier.LEECHER

    def touch(self):
        """Update last activity timestamp."""
        self.last_active_at = time.time()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["tier"] = self.tier.value
        data["status"] = self.status.value
        return data


@dataclass
class Resource:
    """A shared academic resource and its statistics."""

    resource_id: str
    filename: str
    owner_id: str
    size: int = 0
    extension: str = ""
    resource_type: ResourceType = ResourceType.OTHER

    # Descriptive metadata
    title: str = ""
    description: str = ""
    subject: str = ""
    tags: List[str] = field(default_factory=list)

    # Peers currently offering this resource (informational only)
    available_on: List[str] = field(default_factory=list)

    # Statistics
    download_count: int = 0
    total_ratings: int = 0
    rating_sum: float = 0.0
    average_rating: float = DEFAULT_RATING

    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    @classmethod
    def create(cls, filename: str, size: int, owner_id: str, **metadata: Any) -> "Resource":
        """
        Create a new resource with a content id derived from its name.

        Args:
            filename: Original filename (extension decides the type)
            size: File size in bytes
            owner_id: Uploading account id
            **metadata: Optional title, description, subject, tags

        Returns:
            Resource with empty peer list and zeroed statistics
        """
        now = time.time()
        extension = PurePath(filename).suffix.lower()
        digest = hashlib.sha256(f"{filename}{now}{uuid.uuid4()}".encode()).hexdigest()

        resource = cls(
            resource_id=digest[:32],
            filename=filename,
            owner_id=owner_id,
            size=size,
            extension=extension,
            resource_type=resource_type_for_extension(extension),
            title=metadata.get("title", ""),
            description=metadata.get("description", ""),
            subject=metadata.get("subject", ""),
            created_at=now,
            updated_at=now,
        )
        for tag in metadata.get("tags") or []:
            resource.add_tag(tag)
        return resource

    @property
    def peer_count(self) -> int:
        return len(self.available_on)

    def add_tag(self, tag: str):
        """Add a tag unless already present."""
        if tag and tag not in self.tags:
            self.tags.append(tag)

    def remove_tag(self, tag: str):
        self.tags = [t for t in self.tags if t != tag]

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive tag membership."""
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags)

    def add_peer(self, peer_id: str):
        """Record that a peer offers this resource (idempotent)."""
        if peer_id not in self.available_on:
            self.available_on.append(peer_id)

    def remove_peer(self, peer_id: str):
        self.available_on = [p for p in self.available_on if p != peer_id]

    def add_rating(self, rating: float):
        """
        Accumulate a rating into the running mean.

        Raises:
            ValidationError: If rating lies outside [MIN_RATING, MAX_RATING]
        """
        if not is_valid_rating(rating):
            raise ValidationError(
                "rating", f"rating must be between {MIN_RATING:g} and {MAX_RATING:g}"
            )
        self.total_ratings += 1
        self.rating_sum += rating
        self.average_rating = self.rating_sum / self.total_ratings
        self.updated_at = time.time()

    def record_download(self):
        self.download_count += 1
        self.updated_at = time.time()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["resource_type"] = self.resource_type.value
        data["peer_count"] = self.peer_count
        return data


@dataclass
class SearchResult:
    """One ranked hit produced by a query; owns no data."""
    resource: Resource
    available_peers: int
    relevance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource": self.resource.to_dict(),
            "available_peers": self.available_peers,
            "relevance": self.relevance,
        }


@dataclass
class SearchPage:
    """A page of search results plus the filtered total."""
    query: str
    results: List[SearchResult]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.total_count == 0:
            return 0
        return (self.total_count + self.page_size - 1) // self.page_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "results": [r.to_dict() for r in self.results],
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


@dataclass
class NetworkStats:
    """Tier distribution and mean score across all accounts."""
    total_users: int = 0
    contributors: int = 0
    neutral: int = 0
    leechers: int = 0
    average_score: float = 0.0


@dataclass
class ReputationInfo:
    """Reputation details for a single account."""
    account_id: str
    score: int
    tier: Tier
    uploads: int
    downloads: int
    average_rating: float
    throttle: float


@dataclass
class LibraryStats:
    """Aggregate statistics over the resource collection."""
    total_resources: int = 0
    total_downloads: int = 0
    total_ratings: int = 0
    by_subject: Dict[str, int] = field(default_factory=dict)
    by_type: Dict[str, int] = field(default_factory=dict)
