from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional

# Members owing more than this may not borrow.
FINE_CEILING = 50.0


class MemberType(Enum):
    STUDENT = "STUDENT"
    FACULTY = "FACULTY"
    STAFF = "STAFF"

    @property
    def policy(self) -> "BorrowPolicy":
        return BORROW_POLICIES[self]

    @property
    def borrow_duration_days(self) -> int:
        return self.policy.borrow_duration_days

    @property
    def max_books_allowed(self) -> int:
        return self.policy.max_books_allowed


@dataclass(frozen=True)
class BorrowPolicy:
    borrow_duration_days: int
    max_books_allowed: int


BORROW_POLICIES: Dict[MemberType, BorrowPolicy] = {
    MemberType.STUDENT: BorrowPolicy(borrow_duration_days=14, max_books_allowed=3),
    MemberType.FACULTY: BorrowPolicy(borrow_duration_days=21, max_books_allowed=5),
    MemberType.STAFF: BorrowPolicy(borrow_duration_days=14, max_books_allowed=3),
}


class Member:
    """A registered library member with their current loans and outstanding fine."""

    def __init__(self, member_id: str, name: str, email: str, phone_number: str, address: str,
                 member_type: MemberType, registration_date: date | None = None,
                 borrowed_books: Optional[Iterable[str]] = None, fine_amount: float = 0.0,
                 active: bool = True) -> None:
        self.member_id = member_id.strip()
        self.name = name.strip()
        self.email = email.strip()
        self.phone_number = phone_number.strip()
        self.address = address.strip()
        self.member_type = member_type
        self.registration_date = registration_date or date.today()
        self.active = active

        books = list(borrowed_books or [])
        if len(books) > member_type.max_books_allowed:
            raise ValueError(
                f"Member {self.member_id}: {len(books)} borrowed books exceeds the "
                f"{member_type.value} limit of {member_type.max_books_allowed}."
            )
        if not math.isfinite(fine_amount) or fine_amount < 0:
            raise ValueError(f"Member {self.member_id}: fine amount must be a non-negative number.")
        self._borrowed_books: List[str] = books
        self._fine_amount = round(float(fine_amount), 2)

    @property
    def borrowed_books(self) -> List[str]:
        return list(self._borrowed_books)

    @property
    def borrowed_count(self) -> int:
        return len(self._borrowed_books)

    @property
    def fine_amount(self) -> float:
        return self._fine_amount

    @property
    def max_books_allowed(self) -> int:
        return self.member_type.max_books_allowed

    # ------------------------- Policy checks ------------------------- #
    def can_borrow_more_books(self) -> bool:
        return len(self._borrowed_books) < self.member_type.max_books_allowed

    def within_fine_limit(self) -> bool:
        return self._fine_amount <= FINE_CEILING

    def has_pending_fines(self) -> bool:
        return self._fine_amount > 0

    # ------------------------- Mutations ------------------------- #
    def add_borrowed_book(self, book_id: str) -> None:
        if not self.can_borrow_more_books():
            raise ValueError(f"Member {self.member_id} has reached the borrowing limit.")
        self._borrowed_books.append(book_id)

    def remove_borrowed_book(self, book_id: str) -> bool:
        if book_id not in self._borrowed_books:
            return False
        self._borrowed_books.remove(book_id)
        return True

    def add_fine(self, amount: float) -> None:
        if not math.isfinite(amount) or amount < 0:
            raise ValueError("Fine amount must be a non-negative number.")
        self._fine_amount = round(self._fine_amount + amount, 2)

    def pay_fine(self, amount: float) -> None:
        # Balances are kept in whole cents.
        if not math.isfinite(amount) or amount < 0:
            raise ValueError("Payment amount must be a non-negative number.")
        self._fine_amount = max(0.0, round(self._fine_amount - amount, 2))

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return (f"{self.member_id} - {self.name} ({self.member_type.value}), "
                f"books: {len(self._borrowed_books)}, fine: ${self._fine_amount:.2f}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Member):
            return NotImplemented
        return self.member_id == other.member_id

    def __hash__(self) -> int:
        return hash(self.member_id)

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "name": self.name,
            "email": self.email,
            "phone_number": self.phone_number,
            "address": self.address,
            "member_type": self.member_type.value,
            "registration_date": self.registration_date.isoformat(),
            "borrowed_books": self.borrowed_books,
            "fine_amount": round(self._fine_amount, 2),
            "active": self.active,
        }
