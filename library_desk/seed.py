from __future__ import annotations

from .book import Book
from .library import Library
from .member import Member, MemberType

SAMPLE_BOOKS = [
    ("B001", "The Great Gatsby", "F. Scott Fitzgerald", "978-0-7432-7356-5", "Fiction"),
    ("B002", "To Kill a Mockingbird", "Harper Lee", "978-0-06-112008-4", "Fiction"),
    ("B003", "1984", "George Orwell", "978-0-452-28423-4", "Dystopian"),
    ("B004", "Pride and Prejudice", "Jane Austen", "978-0-14-143951-8", "Romance"),
    ("B005", "The Catcher in the Rye", "J.D. Salinger", "978-0-316-76948-0", "Fiction"),
]

SAMPLE_MEMBERS = [
    ("M001", "John Doe", "john@email.com", "123-456-7890", "123 Main St", MemberType.STUDENT),
    ("M002", "Jane Smith", "jane@email.com", "098-765-4321", "456 Oak Ave", MemberType.FACULTY),
    ("M003", "Bob Johnson", "bob@email.com", "555-123-4567", "789 Pine Rd", MemberType.STAFF),
]


def seed_sample_data(library: Library) -> int:
    """Add the sample books and members; ids already present are left alone.

    Returns the number of records added.
    """
    added = 0
    for book_id, title, author, isbn, category in SAMPLE_BOOKS:
        added += library.add_book(Book(book_id, title, author, isbn, category))
    for member_id, name, email, phone, address, member_type in SAMPLE_MEMBERS:
        added += library.add_member(Member(member_id, name, email, phone, address, member_type))
    return added
