import logging
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from config import settings
from library_desk import Book, FileStore, Library, Member, MemberType, PersistenceError, seed_sample_data
from library_desk.file_store import format_file_size
from library_desk.utils.ui_helpers import (
    get_output_mode,
    print_book_list,
    print_member_list,
    print_stats_result,
    print_transaction_list,
    set_output_mode,
)
from library_desk.utils.validators import ISBNValidator, TextValidator

APP_NAME = settings.app_name

console = Console()
logger = logging.getLogger(__name__)

# Options shared by every command, set by the app callback.
_state = {"data_dir": settings.data_dir}


def _store() -> FileStore:
    return FileStore(_state["data_dir"])


def _load() -> Library:
    try:
        return Library.load(_store())
    except PersistenceError as e:
        logger.error(f"Could not load data from {_state['data_dir']}: {e}")
        print(f"Error loading library data: {e}")
        raise typer.Exit(code=1)


def _save(lib: Library) -> None:
    try:
        lib.save(_store())
    except PersistenceError as e:
        logger.error(f"Could not save data to {_state['data_dir']}: {e}")
        print(f"Error saving library data: {e}")
        raise typer.Exit(code=1)


def _circulate(operation: Callable[[Library], str]) -> None:
    """Run a circulation operation, print its outcome and save if it recorded a transaction."""
    lib = _load()
    before = len(lib.transaction_history())
    print(operation(lib))
    if len(lib.transaction_history()) > before:
        _save(lib)


# --- Typer CLI application ---
app = typer.Typer(help=f"{APP_NAME} CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    data_dir: Optional[str] = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory holding the CSV data files",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level"),
):
    """Global options (output mode, data directory, logging)."""
    level = logging.INFO if verbose or settings.debug else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format=settings.log_format)
    if output:
        set_output_mode(output)
    _state["data_dir"] = data_dir or settings.data_dir


# ------------------------- Books ------------------------- #
@app.command("add-book")
def cli_add_book(
    book_id: str,
    title: str,
    author: str,
    isbn: str,
    category: str = typer.Option("General", "--category", "-c", help="Book category"),
):
    """Add a book to the catalog."""
    if not TextValidator.validate_identifier(book_id):
        print(f"Error: invalid book ID '{book_id}'.")
        return
    if not TextValidator.validate_title(title) or not TextValidator.validate_author(author):
        print("Error: title and author must be non-empty text.")
        return
    if not ISBNValidator.is_valid_isbn(isbn):
        print(f"Error: '{isbn}' is not a valid ISBN.")
        return

    lib = _load()
    if lib.add_book(Book(book_id, title, author, isbn, category)):
        _save(lib)
        print(f"Book added successfully: {title} by {author}")
    else:
        print(f"Book with ID {book_id} already exists.")


@app.command("remove-book")
def cli_remove_book(book_id: str):
    """Remove an available book from the catalog."""
    lib = _load()
    book = lib.get_book(book_id)
    if book is None:
        print(f"Book with ID {book_id} not found.")
        return
    if lib.remove_book(book_id):
        _save(lib)
        print(f"Book with ID {book_id} has been removed.")
    else:
        print(f"Book with ID {book_id} is currently borrowed and cannot be removed.")


@app.command("update-book")
def cli_update_book(
    book_id: str,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
):
    """Change the title, author or category of a book."""
    lib = _load()
    try:
        book = lib.update_book(book_id, title=title, author=author, category=category)
    except ValueError as e:
        print(f"Error: {e}")
        return
    if book is None:
        print(f"Book with ID {book_id} not found.")
        return
    _save(lib)
    print(f"Book updated: {book.book_id} - {book.title} by {book.author} [{book.category}]")


@app.command("list-books")
def cli_list_books(available: bool = typer.Option(False, "--available", help="Only books on the shelf")):
    """List the catalog."""
    lib = _load()
    books = lib.available_books() if available else lib.list_books()
    print_book_list(sorted(books, key=lambda b: b.book_id))


@app.command("find-book")
def cli_find_book(book_id: str):
    """Show the details of one book."""
    lib = _load()
    book = lib.get_book(book_id)
    if book is None:
        print(f"Book with ID {book_id} not found.")
        return
    print("Book Found")
    print(f"Title: {book.title}")
    print(f"Author: {book.author}")
    print(f"ISBN: {book.isbn}")
    print(f"Category: {book.category}")
    if book.available:
        print("Status: available")
    else:
        print(f"Status: borrowed by {book.borrowed_by}, due {book.due_date:%Y-%m-%d}")


@app.command("search")
def cli_search(
    query: str = typer.Argument(..., help="Search text"),
    field: Optional[str] = typer.Option(None, "--field", "-f", help="title | author | category | isbn"),
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum results to show"),
):
    """Search the catalog (case-insensitive substring match)."""
    lib = _load()
    try:
        results = lib.search_books(query, field)
    except ValueError as e:
        print(f"Error: {e}")
        return
    results = sorted(results, key=lambda b: b.book_id)[:limit]
    if not results:
        print("No books match the search criteria.")
        return
    if get_output_mode() == "plain":
        print(f"Found {len(results)} book(s):")
    print_book_list(results)


# ------------------------- Members ------------------------- #
@app.command("add-member")
def cli_add_member(
    member_id: str,
    name: str,
    email: str,
    phone: str = typer.Option("", "--phone", help="Phone number"),
    address: str = typer.Option("", "--address", help="Postal address"),
    member_type: MemberType = typer.Option(MemberType.STUDENT, "--type", "-t", case_sensitive=False),
):
    """Register a new member."""
    if not TextValidator.validate_identifier(member_id):
        print(f"Error: invalid member ID '{member_id}'.")
        return
    if not TextValidator.validate_name(name):
        print("Error: name must be non-empty text.")
        return
    if not TextValidator.validate_email(email):
        print(f"Error: '{email}' is not a valid e-mail address.")
        return

    lib = _load()
    if lib.add_member(Member(member_id, name, email, phone, address, member_type)):
        _save(lib)
        print(f"Member added successfully: {name} ({member_type.value})")
    else:
        print(f"Member with ID {member_id} already exists.")


@app.command("remove-member")
def cli_remove_member(member_id: str):
    """Remove a member who has no books on loan."""
    lib = _load()
    if lib.get_member(member_id) is None:
        print(f"Member with ID {member_id} not found.")
        return
    if lib.remove_member(member_id):
        _save(lib)
        print(f"Member with ID {member_id} has been removed.")
    else:
        print(f"Member with ID {member_id} has borrowed books and cannot be removed.")


@app.command("set-active")
def cli_set_active(member_id: str, active: bool = typer.Argument(..., help="true to activate, false to suspend")):
    """Activate or suspend a member account."""
    lib = _load()
    if lib.update_member(member_id, active=active) is None:
        print(f"Member with ID {member_id} not found.")
        return
    _save(lib)
    print(f"Member {member_id} is now {'active' if active else 'inactive'}.")


@app.command("list-members")
def cli_list_members():
    """List all members."""
    lib = _load()
    print_member_list(sorted(lib.list_members(), key=lambda m: m.member_id))


@app.command("member")
def cli_member(member_id: str):
    """Show a member's details and transaction history."""
    lib = _load()
    member = lib.get_member(member_id)
    if member is None:
        print(f"Member with ID {member_id} not found.")
        return
    print(f"Member: {member.member_id} - {member.name}")
    print(f"Type: {member.member_type.value} (max {member.max_books_allowed} books, "
          f"{member.member_type.borrow_duration_days} days)")
    print(f"Email: {member.email}")
    print(f"Phone: {member.phone_number}")
    print(f"Address: {member.address}")
    print(f"Registered: {member.registration_date:%Y-%m-%d}")
    print(f"Borrowed books: {', '.join(member.borrowed_books) or 'none'}")
    print(f"Outstanding fine: ${member.fine_amount:.2f}")
    print(f"Active: {'yes' if member.active else 'no'}")


# ------------------------- Circulation ------------------------- #
@app.command("borrow")
def cli_borrow(member_id: str, book_id: str):
    """Lend a book to a member."""
    _circulate(lambda lib: lib.borrow_book(member_id, book_id))


@app.command("return")
def cli_return(member_id: str, book_id: str):
    """Return a borrowed book, charging any overdue fine."""
    _circulate(lambda lib: lib.return_book(member_id, book_id))


@app.command("pay-fine")
def cli_pay_fine(member_id: str, amount: float):
    """Pay off part or all of a member's fine."""
    _circulate(lambda lib: lib.pay_fine(member_id, amount))


# ------------------------- Reports ------------------------- #
@app.command("overdue")
def cli_overdue():
    """List books past their due date."""
    lib = _load()
    print_book_list(lib.overdue_books(), empty_message="No overdue books.")


@app.command("fines")
def cli_fines():
    """List members with outstanding fines."""
    lib = _load()
    print_member_list(lib.members_with_fines(), empty_message="No members with outstanding fines.")


@app.command("history")
def cli_history(member_id: Optional[str] = typer.Argument(None, help="Only this member's transactions")):
    """Show the transaction log."""
    lib = _load()
    transactions = lib.member_transactions(member_id) if member_id else lib.transaction_history()
    print_transaction_list(transactions)


@app.command("stats")
def cli_stats():
    """Show library statistics."""
    print_stats_result(_load().get_statistics())


@app.command("export-stats")
def cli_export_stats():
    """Write a statistics report file into the data directory."""
    lib = _load()
    try:
        path = _store().export_statistics(lib.get_statistics(), lib.overdue_books(), lib.members_with_fines())
    except PersistenceError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)
    print(f"Statistics exported to: {path}")


# ------------------------- Maintenance ------------------------- #
@app.command("backup")
def cli_backup():
    """Copy the data files into a timestamped backup directory."""
    try:
        path = _store().create_backup()
    except PersistenceError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)
    print(f"Backup created successfully at: {path}")


@app.command("info")
def cli_info():
    """Show where data is stored and how large it is."""
    store = _store()
    status = "accessible" if store.is_accessible() else "not accessible"
    size = format_file_size(store.data_size()) if store.data_dir.exists() else "0 B"
    if get_output_mode() == "rich":
        console.print(Panel.fit(f"[bold]Data directory:[/] {store.data_dir} ({status})\n[bold]Data size:[/] {size}",
                                title=f"{APP_NAME} {settings.app_version}", border_style="blue"))
    else:
        print(f"Data directory: {store.data_dir} ({status})")
        print(f"Data size: {size}")


@app.command("seed")
def cli_seed():
    """Load the sample books and members."""
    lib = _load()
    added = seed_sample_data(lib)
    if added:
        _save(lib)
    print(f"Sample data loaded: {added} record(s) added.")


if __name__ == "__main__":
    app()
