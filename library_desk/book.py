from __future__ import annotations

from datetime import date, datetime
from typing import Optional


def whole_days_between(start: datetime, end: datetime) -> int:
    """Number of complete 24h periods from ``start`` to ``end`` (0 if end <= start)."""
    if end <= start:
        return 0
    return (end - start).days


class Book:
    """A single catalog item and, while it is on loan, who holds it."""

    def __init__(self, book_id: str, title: str, author: str, isbn: str, category: str,
                 date_added: date | None = None, available: bool = True,
                 borrowed_by: str | None = None, borrow_date: datetime | None = None,
                 due_date: datetime | None = None) -> None:
        self.book_id = book_id.strip()
        self.title = title.strip()
        self.author = author.strip()
        self.isbn = isbn.strip()
        self.category = category.strip()
        self.date_added = date_added or date.today()

        borrow_fields = (borrowed_by, borrow_date, due_date)
        all_set = all(f is not None for f in borrow_fields)
        none_set = all(f is None for f in borrow_fields)
        if not (all_set or none_set):
            raise ValueError(f"Book {self.book_id}: borrower, borrow date and due date must be set together.")
        if available == all_set:
            raise ValueError(f"Book {self.book_id}: availability does not match its loan fields.")

        self._available = available
        self._borrowed_by = borrowed_by
        self._borrow_date = borrow_date
        self._due_date = due_date

    @property
    def available(self) -> bool:
        return self._available

    @property
    def borrowed_by(self) -> Optional[str]:
        return self._borrowed_by

    @property
    def borrow_date(self) -> Optional[datetime]:
        return self._borrow_date

    @property
    def due_date(self) -> Optional[datetime]:
        return self._due_date

    # ------------------------- Loan state ------------------------- #
    def check_out(self, member_id: str, borrow_date: datetime, due_date: datetime) -> None:
        if not self._available:
            raise ValueError(f"Book {self.book_id} is already on loan to {self._borrowed_by}.")
        self._available = False
        self._borrowed_by = member_id
        self._borrow_date = borrow_date
        self._due_date = due_date

    def check_in(self) -> None:
        self._available = True
        self._borrowed_by = None
        self._borrow_date = None
        self._due_date = None

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self._available or self._due_date is None:
            return False
        now = now or datetime.now()
        return now > self._due_date

    def days_overdue(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now()
        if not self.is_overdue(now):
            return 0
        return whole_days_between(self._due_date, now)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.book_id} - {self.title} by {self.author} ({self.category})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.book_id == other.book_id

    def __hash__(self) -> int:
        return hash(self.book_id)

    def to_dict(self) -> dict:
        return {
            "book_id": self.book_id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "category": self.category,
            "available": self._available,
            "date_added": self.date_added.isoformat(),
            "borrowed_by": self._borrowed_by,
            "borrow_date": self._borrow_date.isoformat(sep=" ", timespec="seconds") if self._borrow_date else None,
            "due_date": self._due_date.isoformat(sep=" ", timespec="seconds") if self._due_date else None,
        }
