import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _print_records(records: List[Any], empty_message: str, title: str,
                   columns: List[str], row: Any, plain_line: Any) -> None:
    """Shared renderer: ``row`` maps a record to table cells, ``plain_line`` to one text line."""
    mode = get_output_mode()

    if not records:
        print(empty_message)
        return

    if mode == "json":
        print(json.dumps([r.to_dict() for r in records], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=title, show_lines=True, header_style="bold cyan")
        for i, name in enumerate(columns):
            table.add_column(name, style="magenta" if i == 0 else "white", no_wrap=(i == 0))
        for r in records:
            table.add_row(*row(r))
        _console.print(table)
    else:
        for r in records:
            print(plain_line(r))


def print_book_list(books: List[Any], empty_message: str = "No books in library.") -> None:
    """Print books in the current output mode.
    - plain: 'ID - Title by Author [Category] (status)' lines
    - json: array of book dicts
    - rich: Rich table
    """
    def status(b: Any) -> str:
        if b.available:
            return "available"
        return f"on loan to {b.borrowed_by}, due {b.due_date:%Y-%m-%d}"

    _print_records(
        books, empty_message, "📚 Books",
        ["ID", "Title", "Author", "ISBN", "Category", "Status"],
        lambda b: (b.book_id, b.title, b.author, b.isbn, b.category, status(b)),
        lambda b: f"{b.book_id} - {b.title} by {b.author} [{b.category}] ({status(b)})",
    )


def print_member_list(members: List[Any], empty_message: str = "No members registered.") -> None:
    _print_records(
        members, empty_message, "👥 Members",
        ["ID", "Name", "Type", "Books", "Fine", "Active"],
        lambda m: (m.member_id, m.name, m.member_type.value,
                   f"{m.borrowed_count}/{m.max_books_allowed}", f"${m.fine_amount:.2f}",
                   "yes" if m.active else "no"),
        lambda m: (f"{m.member_id} - {m.name} ({m.member_type.value}) "
                   f"books: {m.borrowed_count}/{m.max_books_allowed}, fine: ${m.fine_amount:.2f}"
                   f"{'' if m.active else ', inactive'}"),
    )


def print_transaction_list(transactions: List[Any], empty_message: str = "No transactions recorded.") -> None:
    _print_records(
        transactions, empty_message, "🧾 Transactions",
        ["ID", "Type", "Member", "Book", "Date", "Fine", "Notes"],
        lambda t: (t.transaction_id, t.type.value, t.member_id, t.book_id or "-",
                   f"{t.transaction_date:%Y-%m-%d %H:%M}", f"${t.fine_amount:.2f}", t.notes),
        lambda t: (f"{t.transaction_id} {t.type.value} member={t.member_id} book={t.book_id or '-'} "
                   f"{t.transaction_date:%Y-%m-%d} fine=${t.fine_amount:.2f} {t.notes}".rstrip()),
    )


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics in the current output mode.
    - plain: one 'Label: value' line per metric
    - json: JSON object
    - rich: Panel with the main metrics
    """
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = {
        "total_books": "Total Books",
        "available_books": "Available Books",
        "borrowed_books": "Borrowed Books",
        "total_members": "Total Members",
        "active_members": "Active Members",
        "outstanding_fines": "Outstanding Fines",
    }

    def fmt(key: str) -> str:
        value = stats.get(key, 0)
        return f"${value:.2f}" if key == "outstanding_fines" else str(value)

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {fmt(key)}" for key, label in labels.items())
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for key, label in labels.items():
            print(f"{label}: {fmt(key)}")
