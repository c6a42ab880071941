"""
Storage backends for peerlib.

The services depend only on the abstract LibraryStore contract;
MemoryStore is the in-process implementation.
"""

from .base import AccountStore, ResourceStore, LibraryStore
from .memory import MemoryStore

__all__ = ["AccountStore", "ResourceStore", "LibraryStore", "MemoryStore"]
