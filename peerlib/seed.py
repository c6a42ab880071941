"""
Demo data for a fresh in-memory library.

Creates three members at different reputation levels and a small
catalogue of rated resources, then recalculates the network.
"""

import logging
from typing import Dict

from peerlib.core.models import Resource
from peerlib.reputation.service import ReputationService
from peerlib.services.accounts import AccountService
from peerlib.services.library import LibraryService

logger = logging.getLogger(__name__)


DEMO_FILE_SIZE = 1 << 20  # 1 MiB

DEMO_RESOURCES = [
    # (filename, title, subject, owner, tags)
    ("golang_tutorial.pdf", "Go Programming Fundamentals", "Computer Science", "alice",
     ["golang", "programming", "tutorial"]),
    ("data_structures.pdf", "Data Structures and Algorithms", "Computer Science", "alice",
     ["algorithms", "dsa", "programming"]),
    ("calculus_notes.pdf", "Calculus Complete Notes", "Mathematics", "bob",
     ["calculus", "math", "notes"]),
    ("physics_mechanics.pdf", "Classical Mechanics", "Physics", "alice",
     ["physics", "mechanics"]),
    ("database_design.pdf", "Database Design Principles", "Computer Science", "bob",
     ["database", "sql", "design"]),
    ("linear_algebra.pdf", "Linear Algebra Essentials", "Mathematics", "alice",
     ["algebra", "math", "linear"]),
    ("networking_basics.pdf", "Computer Networks Basics", "Computer Science", "charlie",
     ["networking", "tcp", "protocols"]),
    ("chemistry_organic.pdf", "Organic Chemistry Guide", "Chemistry", "bob",
     ["chemistry", "organic"]),
]

DEMO_RATINGS = (4.0, 4.5)


def seed_demo_data(
    accounts: AccountService,
    library: LibraryService,
    reputation: ReputationService
) -> Dict[str, str]:
    """
    Populate an empty library with demo members and resources.

    Returns:
        Mapping of demo username to account id
    """
    members = {
        name: accounts.create_account(name, f"{name}@university.edu").account_id
        for name in ("alice", "bob", "charlie")
    }

    # Alice contributes, Bob is balanced, Charlie mostly takes
    for _ in range(25):
        accounts.record_upload(members["alice"])
    for _ in range(10):
        accounts.record_upload(members["bob"])
    for _ in range(5):
        accounts.record_download(members["bob"])
    for _ in range(3):
        accounts.record_upload(members["charlie"])
    for _ in range(30):
        accounts.record_download(members["charlie"])

    for filename, title, subject, owner, tags in DEMO_RESOURCES:
        resource = Resource.create(
            filename,
            DEMO_FILE_SIZE,
            members[owner],
            title=title,
            subject=subject,
            tags=tags,
            description=f"Sample resource for {title}",
        )
        library.upload(resource)
        for rating in DEMO_RATINGS:
            library.rate_resource(resource.resource_id, rating)

    reputation.recalculate_all()

    logger.info(f"Seeded demo data: {len(members)} accounts, {len(DEMO_RESOURCES)} resources")
    return members
