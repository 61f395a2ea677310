"""Library Desk - Core Package

This package contains the circulation core and its collaborators:
- Entities (book.py, member.py, transaction.py)
- Catalog and membership stores (stores.py)
- Circulation service (library.py)
- Read-only reports (reports.py)
- CSV persistence (file_store.py)
- Sample data (seed.py)
"""

from .book import Book
from .member import BORROW_POLICIES, FINE_CEILING, BorrowPolicy, Member, MemberType
from .transaction import Transaction, TransactionType
from .stores import Catalog, Membership
from .library import FINE_PER_DAY, MAX_FINE_PER_BOOK, Library, calculate_fine
from .file_store import FileStore, PersistenceError
from .seed import seed_sample_data

__all__ = [
    "Book",
    "BORROW_POLICIES",
    "FINE_CEILING",
    "BorrowPolicy",
    "Member",
    "MemberType",
    "Transaction",
    "TransactionType",
    "Catalog",
    "Membership",
    "FINE_PER_DAY",
    "MAX_FINE_PER_BOOK",
    "Library",
    "calculate_fine",
    "FileStore",
    "PersistenceError",
    "seed_sample_data",
]
