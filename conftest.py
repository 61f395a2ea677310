from datetime import datetime

import pytest

from library_desk import Book, FileStore, Library, Member, MemberType

START = datetime(2025, 1, 6, 10, 0, 0)


@pytest.fixture
def now():
    return START


@pytest.fixture
def lib(now):
    # Empty library whose clock is pinned to START
    return Library(clock=lambda: now)


@pytest.fixture
def stocked_lib(lib):
    """Library with B001-B006 on the shelf and one member of each type."""
    for i in range(1, 7):
        lib.add_book(Book(f"B00{i}", f"Book {i}", f"Author {i}", f"978000000000{i}", "Fiction"))
    lib.add_member(Member("M001", "John Doe", "john@email.com", "123-456-7890", "123 Main St", MemberType.STUDENT))
    lib.add_member(Member("M002", "Jane Smith", "jane@email.com", "098-765-4321", "456 Oak Ave", MemberType.FACULTY))
    lib.add_member(Member("M003", "Bob Johnson", "bob@email.com", "555-123-4567", "789 Pine Rd", MemberType.STAFF))
    return lib


@pytest.fixture
def store(tmp_path):
    return FileStore(tmp_path / "data")
