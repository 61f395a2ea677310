from __future__ import annotations

import itertools
import logging
import math
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional

from . import reports
from .book import Book
from .member import Member
from .stores import Catalog, Membership
from .transaction import Transaction, TransactionType, format_transaction_id, parse_transaction_sequence

if TYPE_CHECKING:
    from .file_store import FileStore

logger = logging.getLogger(__name__)

FINE_PER_DAY = 1.0
MAX_FINE_PER_BOOK = 50.0


class Library:
    """Owns the catalog, the membership roll and the transaction log.

    Circulation operations (borrow, return, fine payment) validate their
    preconditions before touching any entity, so a rejected request leaves
    every store untouched. They report their outcome as a message meant to
    be shown to the user as-is.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or datetime.now
        self.catalog = Catalog()
        self.members = Membership()
        self._transactions: List[Transaction] = []
        self._sequence = itertools.count(1)

    @classmethod
    def load(cls, store: "FileStore", clock: Optional[Callable[[], datetime]] = None) -> "Library":
        """Build a library from the records held by ``store``."""
        library = cls(clock=clock)
        library.restore(store.load_books(), store.load_members(), store.load_transactions())
        return library

    def save(self, store: "FileStore") -> None:
        store.save_books(self.catalog.list())
        store.save_members(self.members.list())
        store.save_transactions(self._transactions)
        logger.info(f"Saved {len(self.catalog)} books, {len(self.members)} members, "
                    f"{len(self._transactions)} transactions to {store.data_dir}")

    def restore(self, books: Iterable[Book], members: Iterable[Member],
                transactions: Iterable[Transaction]) -> None:
        for book in books:
            if not self.catalog.add(book):
                raise ValueError(f"Duplicate book ID {book.book_id} in restored records.")
        for member in members:
            if not self.members.add(member):
                raise ValueError(f"Duplicate member ID {member.member_id} in restored records.")
        self._transactions.extend(transactions)
        # Resume numbering after the highest id already on record.
        sequences = [parse_transaction_sequence(t.transaction_id) for t in self._transactions]
        last = max((s for s in sequences if s is not None), default=0)
        self._sequence = itertools.count(last + 1)

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self._clock().replace(microsecond=0)

    def _next_transaction_id(self) -> str:
        return format_transaction_id(next(self._sequence))

    # ------------------------- Catalog ------------------------- #
    def add_book(self, book: Book) -> bool:
        added = self.catalog.add(book)
        if added:
            logger.info(f"Added book {book.book_id}: {book.title}")
        return added

    def remove_book(self, book_id: str) -> bool:
        removed = self.catalog.remove(book_id)
        if removed:
            logger.info(f"Removed book {book_id}")
        return removed

    def get_book(self, book_id: str) -> Optional[Book]:
        return self.catalog.get(book_id)

    def list_books(self) -> List[Book]:
        return self.catalog.list()

    def available_books(self) -> List[Book]:
        return self.catalog.available()

    def search_books(self, query: str, field: Optional[str] = None) -> List[Book]:
        """Search by title, author, category or ISBN; ``field`` restricts to one of them."""
        return self.catalog.search(query, [field] if field else None)

    def update_book(self, book_id: str, *, title: Optional[str] = None, author: Optional[str] = None,
                    category: Optional[str] = None) -> Optional[Book]:
        """Update descriptive fields of a book. Returns the book or None if not found."""
        if title is None and author is None and category is None:
            raise ValueError("Nothing to update. Provide title, author and/or category.")
        book = self.catalog.get(book_id)
        if book is None:
            return None
        if title is not None and title.strip():
            book.title = title.strip()
        if author is not None and author.strip():
            book.author = author.strip()
        if category is not None and category.strip():
            book.category = category.strip()
        return book

    # ------------------------- Membership ------------------------- #
    def add_member(self, member: Member) -> bool:
        added = self.members.add(member)
        if added:
            logger.info(f"Registered member {member.member_id}: {member.name}")
        return added

    def remove_member(self, member_id: str) -> bool:
        removed = self.members.remove(member_id)
        if removed:
            logger.info(f"Removed member {member_id}")
        return removed

    def get_member(self, member_id: str) -> Optional[Member]:
        return self.members.get(member_id)

    def list_members(self) -> List[Member]:
        return self.members.list()

    def update_member(self, member_id: str, *, name: Optional[str] = None, email: Optional[str] = None,
                      phone_number: Optional[str] = None, address: Optional[str] = None,
                      active: Optional[bool] = None) -> Optional[Member]:
        member = self.members.get(member_id)
        if member is None:
            return None
        if name is not None and name.strip():
            member.name = name.strip()
        if email is not None:
            member.email = email.strip()
        if phone_number is not None:
            member.phone_number = phone_number.strip()
        if address is not None:
            member.address = address.strip()
        if active is not None:
            member.active = active
            logger.info(f"Member {member_id} marked {'active' if active else 'inactive'}")
        return member

    # ------------------------- Circulation ------------------------- #
    def borrow_book(self, member_id: str, book_id: str, now: Optional[datetime] = None) -> str:
        member = self.members.get(member_id)
        book = self.catalog.get(book_id)

        rejection = None
        if member is None:
            rejection = "Member not found!"
        elif book is None:
            rejection = "Book not found!"
        elif not member.active:
            rejection = "Member account is inactive!"
        elif not book.available:
            rejection = "Book is not available!"
        elif not member.within_fine_limit():
            rejection = "Member cannot borrow books (outstanding fine exceeds limit)!"
        elif not member.can_borrow_more_books():
            rejection = "Member has reached maximum book limit!"
        if rejection:
            logger.warning(f"Borrow rejected (member={member_id}, book={book_id}): {rejection}")
            return rejection

        now = self._now(now)
        due = now + timedelta(days=member.member_type.borrow_duration_days)
        book.check_out(member_id, now, due)
        member.add_borrowed_book(book_id)
        self._transactions.append(Transaction(
            transaction_id=self._next_transaction_id(),
            member_id=member_id,
            book_id=book_id,
            type=TransactionType.BORROW,
            transaction_date=now,
            due_date=due,
        ))
        logger.info(f"Book {book_id} lent to {member_id}, due {due:%Y-%m-%d}")
        return f"Book borrowed successfully! Due date: {due:%Y-%m-%d}"

    def return_book(self, member_id: str, book_id: str, now: Optional[datetime] = None) -> str:
        member = self.members.get(member_id)
        book = self.catalog.get(book_id)

        rejection = None
        if member is None:
            rejection = "Member not found!"
        elif book is None:
            rejection = "Book not found!"
        elif book.available:
            rejection = "Book is not currently borrowed!"
        elif book.borrowed_by != member_id:
            rejection = "This book was not borrowed by this member!"
        if rejection:
            logger.warning(f"Return rejected (member={member_id}, book={book_id}): {rejection}")
            return rejection

        now = self._now(now)
        late = book.is_overdue(now)
        days_overdue = book.days_overdue(now)
        fine = calculate_fine(days_overdue)
        message = "Book returned successfully!"
        if fine > 0:
            member.add_fine(fine)
            message += f" Fine of ${fine:.2f} applied for {days_overdue} days overdue."

        book.check_in()
        member.remove_borrowed_book(book_id)
        self._transactions.append(Transaction(
            transaction_id=self._next_transaction_id(),
            member_id=member_id,
            book_id=book_id,
            type=TransactionType.RETURN,
            transaction_date=now,
            return_date=now,
            fine_amount=fine,
            notes="Returned late" if late else "Returned on time",
        ))
        logger.info(f"Book {book_id} returned by {member_id}, fine ${fine:.2f}")
        return message

    def pay_fine(self, member_id: str, amount: float, now: Optional[datetime] = None) -> str:
        member = self.members.get(member_id)

        rejection = None
        if member is None:
            rejection = "Member not found!"
        elif not math.isfinite(amount) or amount <= 0:
            rejection = "Invalid payment amount!"
        elif amount > member.fine_amount:
            rejection = "Payment amount exceeds fine amount!"
        if rejection:
            logger.warning(f"Fine payment rejected (member={member_id}, amount={amount}): {rejection}")
            return rejection

        member.pay_fine(amount)
        self._transactions.append(Transaction(
            transaction_id=self._next_transaction_id(),
            member_id=member_id,
            book_id=None,
            type=TransactionType.FINE_PAID,
            transaction_date=self._now(now),
            fine_amount=amount,
            notes="Fine payment",
        ))
        logger.info(f"Member {member_id} paid ${amount:.2f}, remaining ${member.fine_amount:.2f}")
        return f"Fine payment of ${amount:.2f} successful! Remaining fine: ${member.fine_amount:.2f}"

    # ------------------------- Reporting ------------------------- #
    def overdue_books(self, now: Optional[datetime] = None) -> List[Book]:
        return reports.overdue_books(self.catalog.list(), self._now(now))

    def members_with_fines(self) -> List[Member]:
        return reports.members_with_fines(self.members.list())

    def transaction_history(self) -> List[Transaction]:
        return list(self._transactions)

    def member_transactions(self, member_id: str) -> List[Transaction]:
        return reports.member_transactions(self._transactions, member_id)

    def get_statistics(self) -> Dict[str, Any]:
        return reports.statistics(self.catalog.list(), self.members.list())


def calculate_fine(days_overdue: int) -> float:
    """Per-return fine: a flat daily rate, capped per book."""
    if days_overdue <= 0:
        return 0.0
    return min(days_overdue * FINE_PER_DAY, MAX_FINE_PER_BOOK)
