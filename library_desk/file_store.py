"""CSV persistence for books, members and transactions.

Each entity kind lives in its own file under the data directory, with a
header row. Fields containing a comma, a double quote or a line break are
quoted and embedded quotes are doubled (``csv`` module defaults). A
member's borrowed books are stored in one field joined by ``;``.
"""

from __future__ import annotations

import csv
import logging
import os
import shutil
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .book import Book
from .member import Member, MemberType
from .transaction import Transaction, TransactionType

logger = logging.getLogger(__name__)

BOOKS_FILE = "books.csv"
MEMBERS_FILE = "members.csv"
TRANSACTIONS_FILE = "transactions.csv"
DATA_FILES = (BOOKS_FILE, MEMBERS_FILE, TRANSACTIONS_FILE)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
LIST_SEPARATOR = ";"

BOOK_HEADER = ["BookID", "Title", "Author", "ISBN", "Category", "IsAvailable", "DateAdded",
               "BorrowedBy", "BorrowDate", "DueDate"]
MEMBER_HEADER = ["MemberID", "Name", "Email", "Phone", "Address", "MemberType", "RegistrationDate",
                 "BorrowedBooks", "FineAmount", "IsActive"]
TRANSACTION_HEADER = ["TransactionID", "MemberID", "BookID", "Type", "TransactionDate", "DueDate",
                      "ReturnDate", "FineAmount", "Notes"]

T = TypeVar("T")


class PersistenceError(Exception):
    """Raised when a data file cannot be read, written or parsed."""


# ------------------------- Field codecs ------------------------- #
def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value not in ("true", "false"):
        raise ValueError(f"expected true/false, got {raw!r}")
    return value == "true"


def _format_datetime(value: Optional[datetime]) -> str:
    return value.strftime(DATETIME_FORMAT) if value else ""


def _parse_datetime(raw: str) -> Optional[datetime]:
    return datetime.strptime(raw, DATETIME_FORMAT) if raw else None


def _parse_date(raw: str) -> date:
    return datetime.strptime(raw, DATE_FORMAT).date()


def _optional(raw: str) -> Optional[str]:
    return raw if raw else None


# ------------------------- Row mapping ------------------------- #
def book_to_row(book: Book) -> List[str]:
    return [
        book.book_id,
        book.title,
        book.author,
        book.isbn,
        book.category,
        _format_bool(book.available),
        book.date_added.strftime(DATE_FORMAT),
        book.borrowed_by or "",
        _format_datetime(book.borrow_date),
        _format_datetime(book.due_date),
    ]


def book_from_row(row: Sequence[str]) -> Book:
    return Book(
        book_id=row[0],
        title=row[1],
        author=row[2],
        isbn=row[3],
        category=row[4],
        available=_parse_bool(row[5]),
        date_added=_parse_date(row[6]),
        borrowed_by=_optional(row[7]),
        borrow_date=_parse_datetime(row[8]),
        due_date=_parse_datetime(row[9]),
    )


def member_to_row(member: Member) -> List[str]:
    return [
        member.member_id,
        member.name,
        member.email,
        member.phone_number,
        member.address,
        member.member_type.value,
        member.registration_date.strftime(DATE_FORMAT),
        LIST_SEPARATOR.join(member.borrowed_books),
        f"{member.fine_amount:.2f}",
        _format_bool(member.active),
    ]


def member_from_row(row: Sequence[str]) -> Member:
    borrowed = [b.strip() for b in row[7].split(LIST_SEPARATOR) if b.strip()]
    return Member(
        member_id=row[0],
        name=row[1],
        email=row[2],
        phone_number=row[3],
        address=row[4],
        member_type=MemberType(row[5]),
        registration_date=_parse_date(row[6]),
        borrowed_books=borrowed,
        fine_amount=float(row[8]),
        active=_parse_bool(row[9]),
    )


def transaction_to_row(transaction: Transaction) -> List[str]:
    return [
        transaction.transaction_id,
        transaction.member_id,
        transaction.book_id or "",
        transaction.type.value,
        _format_datetime(transaction.transaction_date),
        _format_datetime(transaction.due_date),
        _format_datetime(transaction.return_date),
        f"{transaction.fine_amount:.2f}",
        transaction.notes,
    ]


def transaction_from_row(row: Sequence[str]) -> Transaction:
    return Transaction(
        transaction_id=row[0],
        member_id=row[1],
        book_id=_optional(row[2]),
        type=TransactionType(row[3]),
        transaction_date=datetime.strptime(row[4], DATETIME_FORMAT),
        due_date=_parse_datetime(row[5]),
        return_date=_parse_datetime(row[6]),
        fine_amount=float(row[7]),
        notes=row[8],
    )


class FileStore:
    """Loads and saves library records as CSV files in ``data_dir``."""

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    # ------------------------- Books ------------------------- #
    def load_books(self) -> List[Book]:
        return self._read(BOOKS_FILE, BOOK_HEADER, book_from_row, key=lambda b: b.book_id)

    def save_books(self, books: Iterable[Book]) -> None:
        self._write(BOOKS_FILE, BOOK_HEADER, (book_to_row(b) for b in books))

    # ------------------------- Members ------------------------- #
    def load_members(self) -> List[Member]:
        return self._read(MEMBERS_FILE, MEMBER_HEADER, member_from_row, key=lambda m: m.member_id)

    def save_members(self, members: Iterable[Member]) -> None:
        self._write(MEMBERS_FILE, MEMBER_HEADER, (member_to_row(m) for m in members))

    # ------------------------- Transactions ------------------------- #
    def load_transactions(self) -> List[Transaction]:
        return self._read(TRANSACTIONS_FILE, TRANSACTION_HEADER, transaction_from_row,
                          key=lambda t: t.transaction_id)

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        self._write(TRANSACTIONS_FILE, TRANSACTION_HEADER, (transaction_to_row(t) for t in transactions))

    # ------------------------- Maintenance ------------------------- #
    def create_backup(self, now: Optional[datetime] = None) -> Path:
        """Copy the existing data files into a timestamped ``backup_*`` directory."""
        now = now or datetime.now()
        backup_dir = self.data_dir / f"backup_{now:%Y%m%d_%H%M%S}"
        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            for name in DATA_FILES:
                source = self.data_dir / name
                if source.exists():
                    shutil.copy2(source, backup_dir / name)
        except OSError as e:
            raise PersistenceError(f"Could not create backup in {backup_dir}: {e}") from e
        logger.info(f"Backup created at {backup_dir}")
        return backup_dir

    def export_statistics(self, stats: dict, overdue: Sequence[Book], with_fines: Sequence[Member],
                          now: Optional[datetime] = None) -> Path:
        """Write a plain-text statistics report and return its path."""
        now = now or datetime.now()
        path = self.data_dir / f"library_statistics_{now:%Y%m%d_%H%M%S}.txt"
        lines = [
            "LIBRARY MANAGEMENT SYSTEM - STATISTICS REPORT",
            f"Generated on: {now:{DATETIME_FORMAT}}",
            "=" * 60,
            "",
            "BASIC STATISTICS:",
            "-" * 20,
            f"Total Books: {stats.get('total_books', 0)}",
            f"Available Books: {stats.get('available_books', 0)}",
            f"Borrowed Books: {stats.get('borrowed_books', 0)}",
            f"Total Members: {stats.get('total_members', 0)}",
            f"Active Members: {stats.get('active_members', 0)}",
            "",
            f"OVERDUE BOOKS ({len(overdue)}):",
            "-" * 25,
        ]
        if not overdue:
            lines.append("No overdue books found.")
        for book in overdue:
            lines.append(f"Book ID: {book.book_id}, Title: {book.title}, Borrowed By: {book.borrowed_by}, "
                         f"Days Overdue: {book.days_overdue(now)}")
        lines += ["", f"MEMBERS WITH FINES ({len(with_fines)}):", "-" * 30]
        if not with_fines:
            lines.append("No members with fines found.")
        else:
            for member in with_fines:
                lines.append(f"Member ID: {member.member_id}, Name: {member.name}, "
                             f"Fine Amount: ${member.fine_amount:.2f}")
            total = sum(m.fine_amount for m in with_fines)
            lines += ["", f"Total Outstanding Fines: ${total:.2f}"]

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not write statistics report {path}: {e}") from e
        logger.info(f"Statistics exported to {path}")
        return path

    def is_accessible(self) -> bool:
        return self.data_dir.is_dir() and os.access(self.data_dir, os.R_OK | os.W_OK)

    def data_size(self) -> int:
        """Total size in bytes of the data files that exist."""
        return sum((self.data_dir / name).stat().st_size for name in DATA_FILES
                   if (self.data_dir / name).exists())

    # ------------------------- Internals ------------------------- #
    def _read(self, name: str, header: List[str], parse: Callable[[Sequence[str]], T],
              key: Callable[[T], str]) -> List[T]:
        path = self.data_dir / name
        if not path.exists():
            return []
        records: List[T] = []
        seen: Dict[str, int] = {}
        try:
            with open(path, "r", newline="", encoding="utf-8") as f:
                reader = csv.reader(f)
                next(reader, None)  # header
                for row in reader:
                    if not row:
                        continue
                    if len(row) < len(header):
                        raise PersistenceError(
                            f"{path}:{reader.line_num}: expected {len(header)} fields, got {len(row)}"
                        )
                    try:
                        record = parse(row)
                    except (ValueError, KeyError) as e:
                        raise PersistenceError(f"{path}:{reader.line_num}: {e}") from e
                    record_id = key(record)
                    if record_id in seen:
                        raise PersistenceError(
                            f"{path}:{reader.line_num}: duplicate id {record_id} (first seen on line {seen[record_id]})"
                        )
                    seen[record_id] = reader.line_num
                    records.append(record)
        except OSError as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e
        except csv.Error as e:
            raise PersistenceError(f"{path}: malformed CSV: {e}") from e
        logger.info(f"Loaded {len(records)} record(s) from {path}")
        return records

    def _write(self, name: str, header: List[str], rows: Iterable[List[str]]) -> None:
        path = self.data_dir / name
        tmp_path = path.with_suffix(".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, lineterminator="\n")
                writer.writerow(header)
                writer.writerows(rows)
            tmp_path.replace(path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise PersistenceError(f"Could not write {path}: {e}") from e


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 ** 2:
        return f"{size / 1024:.1f} KB"
    if size < 1024 ** 3:
        return f"{size / 1024 ** 2:.1f} MB"
    return f"{size / 1024 ** 3:.1f} GB"
