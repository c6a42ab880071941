"""
Account and library services.

The event layer on top of the store: membership, upload/download/rating
activity, and the resource catalogue.
"""

from .accounts import AccountService
from .library import LibraryService, validate_resource

__all__ = ["AccountService", "LibraryService", "validate_resource"]
