"""In-memory keyed collections for the catalog and the membership roll.

Both stores hand out snapshots: mutating a returned list never changes
the store itself.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .book import Book
from .member import Member

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "author", "category", "isbn")


class Catalog:
    """Books keyed by book id."""

    def __init__(self) -> None:
        self._books: Dict[str, Book] = {}

    def __len__(self) -> int:
        return len(self._books)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._books

    def add(self, book: Book) -> bool:
        if book.book_id in self._books:
            logger.warning(f"Book {book.book_id} already exists")
            return False
        self._books[book.book_id] = book
        return True

    def remove(self, book_id: str) -> bool:
        book = self._books.get(book_id)
        if book is None:
            return False
        if not book.available:
            logger.warning(f"Refusing to remove book {book_id}: on loan to {book.borrowed_by}")
            return False
        del self._books[book_id]
        return True

    def get(self, book_id: str) -> Optional[Book]:
        return self._books.get(book_id)

    def list(self) -> List[Book]:
        return list(self._books.values())

    def available(self) -> List[Book]:
        return [b for b in self._books.values() if b.available]

    def search(self, query: str, fields: Optional[Iterable[str]] = None) -> List[Book]:
        """Case-insensitive substring search over the given book fields.

        ``fields`` defaults to title, author, category and ISBN.
        """
        fields = tuple(fields) if fields else SEARCH_FIELDS
        unknown = [f for f in fields if f not in SEARCH_FIELDS]
        if unknown:
            raise ValueError(f"Cannot search by {', '.join(unknown)}.")
        term = query.lower().strip()

        def matches(b: Book) -> bool:
            return any(term in getattr(b, f).lower() for f in fields)

        return [b for b in self._books.values() if matches(b)]


class Membership:
    """Members keyed by member id."""

    def __init__(self) -> None:
        self._members: Dict[str, Member] = {}

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._members

    def add(self, member: Member) -> bool:
        if member.member_id in self._members:
            logger.warning(f"Member {member.member_id} already exists")
            return False
        self._members[member.member_id] = member
        return True

    def remove(self, member_id: str) -> bool:
        member = self._members.get(member_id)
        if member is None:
            return False
        if member.borrowed_count > 0:
            logger.warning(f"Refusing to remove member {member_id}: {member.borrowed_count} book(s) on loan")
            return False
        del self._members[member_id]
        return True

    def get(self, member_id: str) -> Optional[Member]:
        return self._members.get(member_id)

    def list(self) -> List[Member]:
        return list(self._members.values())
