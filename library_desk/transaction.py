from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .book import whole_days_between

TRANSACTION_PREFIX = "TXN"


class TransactionType(Enum):
    BORROW = "BORROW"
    RETURN = "RETURN"
    RENEW = "RENEW"
    FINE_PAID = "FINE_PAID"


def format_transaction_id(sequence: int) -> str:
    return f"{TRANSACTION_PREFIX}{sequence:06d}"


def parse_transaction_sequence(transaction_id: str) -> Optional[int]:
    """Return the numeric part of a ``TXN000123`` style id, or None for foreign ids."""
    if not transaction_id.startswith(TRANSACTION_PREFIX):
        return None
    digits = transaction_id[len(TRANSACTION_PREFIX):]
    return int(digits) if digits.isdigit() else None


@dataclass(frozen=True)
class Transaction:
    """One entry of the circulation log. Never modified after it is recorded."""

    transaction_id: str
    member_id: str
    book_id: Optional[str]
    type: TransactionType
    transaction_date: datetime = field(default_factory=datetime.now)
    due_date: Optional[datetime] = None
    return_date: Optional[datetime] = None
    fine_amount: float = 0.0
    notes: str = ""

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self.due_date is None or self.return_date is not None:
            return False
        now = now or datetime.now()
        return now > self.due_date

    def days_overdue(self, now: Optional[datetime] = None) -> int:
        if self.due_date is None:
            return 0
        if self.return_date is not None:
            return whole_days_between(self.due_date, self.return_date)
        return whole_days_between(self.due_date, now or datetime.now())

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return (f"{self.transaction_id} {self.type.value} member={self.member_id} "
                f"book={self.book_id or '-'} on {self.transaction_date:%Y-%m-%d} "
                f"fine=${self.fine_amount:.2f}")

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "member_id": self.member_id,
            "book_id": self.book_id,
            "type": self.type.value,
            "transaction_date": self.transaction_date.isoformat(sep=" ", timespec="seconds"),
            "due_date": self.due_date.isoformat(sep=" ", timespec="seconds") if self.due_date else None,
            "return_date": self.return_date.isoformat(sep=" ", timespec="seconds") if self.return_date else None,
            "fine_amount": round(self.fine_amount, 2),
            "notes": self.notes,
        }
