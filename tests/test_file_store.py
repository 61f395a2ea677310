from datetime import date, datetime, timedelta

import pytest

from library_desk import Book, FileStore, Library, Member, MemberType, PersistenceError, Transaction, TransactionType
from library_desk.file_store import format_file_size


def test_missing_files_load_empty(store):
    assert store.load_books() == []
    assert store.load_members() == []
    assert store.load_transactions() == []


def test_book_round_trip_preserves_loan_fields(store):
    on_shelf = Book("B001", "Dune", "Frank Herbert", "9780441172719", "Sci-Fi", date_added=date(2024, 5, 2))
    on_loan = Book("B002", "Emma", "Jane Austen", "9780141439587", "Romance", date_added=date(2024, 6, 1))
    on_loan.check_out("M001", datetime(2025, 1, 6, 10, 0, 0), datetime(2025, 1, 20, 10, 0, 0))

    store.save_books([on_shelf, on_loan])
    loaded = {b.book_id: b for b in store.load_books()}

    assert loaded["B001"].available is True
    assert loaded["B001"].date_added == date(2024, 5, 2)
    assert loaded["B001"].borrowed_by is None
    assert loaded["B002"].available is False
    assert loaded["B002"].borrowed_by == "M001"
    assert loaded["B002"].borrow_date == datetime(2025, 1, 6, 10, 0, 0)
    assert loaded["B002"].due_date == datetime(2025, 1, 20, 10, 0, 0)


def test_fields_with_delimiters_and_quotes_survive(store):
    tricky = Book("B001", 'Say "Hello", World', "Doe, Jane", "1", "Line one\nline two")
    store.save_books([tricky])

    text = (store.data_dir / "books.csv").read_text(encoding="utf-8")
    assert '"Say ""Hello"", World"' in text
    assert '"Doe, Jane"' in text

    [loaded] = store.load_books()
    assert loaded.title == 'Say "Hello", World'
    assert loaded.author == "Doe, Jane"
    assert loaded.category == "Line one\nline two"


def test_member_round_trip(store):
    member = Member("M002", "Jane Smith", "jane@email.com", "098-765-4321", "456 Oak Ave, Apt 2",
                    MemberType.FACULTY, registration_date=date(2023, 9, 1),
                    borrowed_books=["B003", "B001"], fine_amount=12.5, active=False)
    store.save_members([member])

    text = (store.data_dir / "members.csv").read_text(encoding="utf-8")
    assert "B003;B001" in text
    assert "12.50" in text

    [loaded] = store.load_members()
    assert loaded.member_type is MemberType.FACULTY
    assert loaded.address == "456 Oak Ave, Apt 2"
    assert loaded.borrowed_books == ["B003", "B001"]
    assert loaded.fine_amount == 12.5
    assert loaded.active is False
    assert loaded.registration_date == date(2023, 9, 1)


def test_transaction_round_trip(store):
    t0 = datetime(2025, 1, 6, 10, 0, 0)
    transactions = [
        Transaction("TXN000001", "M001", "B001", TransactionType.BORROW, t0, due_date=t0 + timedelta(days=14)),
        Transaction("TXN000002", "M001", "B001", TransactionType.RETURN, t0 + timedelta(days=20),
                    return_date=t0 + timedelta(days=20), fine_amount=6.0, notes="Returned late"),
        Transaction("TXN000003", "M001", None, TransactionType.FINE_PAID, t0 + timedelta(days=21),
                    fine_amount=6.0, notes="Fine payment"),
    ]
    store.save_transactions(transactions)
    assert store.load_transactions() == transactions


def test_library_save_and_load(stocked_lib, store, now):
    stocked_lib.borrow_book("M001", "B001")
    stocked_lib.borrow_book("M002", "B002")
    stocked_lib.return_book("M002", "B002", now=now + timedelta(days=30))
    stocked_lib.save(store)

    reloaded = Library.load(store, clock=lambda: now + timedelta(days=31))
    assert reloaded.get_statistics() == stocked_lib.get_statistics()
    assert reloaded.get_book("B001").borrowed_by == "M001"
    assert reloaded.get_member("M002").fine_amount == 9.0
    assert [t.transaction_id for t in reloaded.transaction_history()] == ["TXN000001", "TXN000002", "TXN000003"]

    reloaded.return_book("M001", "B001")
    assert reloaded.transaction_history()[-1].transaction_id == "TXN000004"


def test_malformed_record_is_reported(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / "members.csv").write_text(
        "MemberID,Name,Email,Phone,Address,MemberType,RegistrationDate,BorrowedBooks,FineAmount,IsActive\n"
        "M001,John,j@e.com,1,Main St,WIZARD,2024-01-01,,0.00,true\n",
        encoding="utf-8",
    )
    with pytest.raises(PersistenceError, match="members.csv:2"):
        store.load_members()


def test_short_record_is_reported(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / "books.csv").write_text(
        "BookID,Title,Author,ISBN,Category,IsAvailable,DateAdded,BorrowedBy,BorrowDate,DueDate\n"
        "B001,Dune\n",
        encoding="utf-8",
    )
    with pytest.raises(PersistenceError, match="expected 10 fields"):
        store.load_books()


def test_inconsistent_book_record_is_reported(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / "books.csv").write_text(
        "BookID,Title,Author,ISBN,Category,IsAvailable,DateAdded,BorrowedBy,BorrowDate,DueDate\n"
        "B001,Dune,Herbert,1,Sci-Fi,false,2024-01-01,M001,,\n",
        encoding="utf-8",
    )
    with pytest.raises(PersistenceError):
        store.load_books()


def test_create_backup(stocked_lib, store):
    stocked_lib.save(store)
    backup = store.create_backup(now=datetime(2025, 2, 3, 4, 5, 6))
    assert backup.name == "backup_20250203_040506"
    assert sorted(p.name for p in backup.iterdir()) == ["books.csv", "members.csv", "transactions.csv"]


def test_export_statistics(stocked_lib, store, now):
    stocked_lib.borrow_book("M001", "B001")
    stocked_lib.get_member("M003").add_fine(7.25)
    later = now + timedelta(days=17)

    path = store.export_statistics(stocked_lib.get_statistics(), stocked_lib.overdue_books(now=later),
                                   stocked_lib.members_with_fines(), now=later)
    report = path.read_text(encoding="utf-8")
    assert "Total Books: 6" in report
    assert "Borrowed Books: 1" in report
    assert "Book ID: B001, Title: Book 1, Borrowed By: M001, Days Overdue: 3" in report
    assert "Member ID: M003, Name: Bob Johnson, Fine Amount: $7.25" in report
    assert "Total Outstanding Fines: $7.25" in report


def test_data_size_and_access(stocked_lib, store):
    stocked_lib.save(store)
    assert store.is_accessible() is True
    assert store.data_size() > 0


@pytest.mark.parametrize("size, text", [(512, "512 B"), (2048, "2.0 KB"), (5 * 1024 ** 2, "5.0 MB"),
                                        (3 * 1024 ** 3, "3.0 GB")])
def test_format_file_size(size, text):
    assert format_file_size(size) == text


def test_duplicate_book_id_is_reported(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / "books.csv").write_text(
        "BookID,Title,Author,ISBN,Category,IsAvailable,DateAdded,BorrowedBy,BorrowDate,DueDate\n"
        "B001,Dune,Herbert,1,Sci-Fi,true,2024-01-01,,,\n"
        "B001,Emma,Austen,2,Romance,true,2024-01-02,,,\n",
        encoding="utf-8",
    )
    with pytest.raises(PersistenceError, match=r"books.csv:3: duplicate id B001"):
        store.load_books()


def test_non_finite_fine_is_reported(store):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / "members.csv").write_text(
        "MemberID,Name,Email,Phone,Address,MemberType,RegistrationDate,BorrowedBooks,FineAmount,IsActive\n"
        "M001,John,j@e.com,1,Main St,STUDENT,2024-01-01,,nan,true\n",
        encoding="utf-8",
    )
    with pytest.raises(PersistenceError, match="members.csv:2"):
        store.load_members()
