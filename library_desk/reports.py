"""Read-only projections over books, members and the transaction log."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .book import Book
from .member import Member
from .transaction import Transaction


def overdue_books(books: Iterable[Book], now: Optional[datetime] = None) -> List[Book]:
    now = now or datetime.now()
    return [b for b in books if b.is_overdue(now)]


def members_with_fines(members: Iterable[Member]) -> List[Member]:
    return [m for m in members if m.has_pending_fines()]


def member_transactions(transactions: Iterable[Transaction], member_id: str) -> List[Transaction]:
    return [t for t in transactions if t.member_id == member_id]


def statistics(books: Iterable[Book], members: Iterable[Member]) -> Dict[str, Any]:
    books = list(books)
    members = list(members)
    available = sum(1 for b in books if b.available)
    return {
        "total_books": len(books),
        "available_books": available,
        "borrowed_books": len(books) - available,
        "total_members": len(members),
        "active_members": sum(1 for m in members if m.active),
        "outstanding_fines": round(sum(m.fine_amount for m in members), 2),
    }
