from datetime import timedelta

from library_desk import reports


def test_overdue_books(stocked_lib, now):
    stocked_lib.borrow_book("M001", "B001")
    stocked_lib.borrow_book("M002", "B002")  # faculty: due a week later

    later = now + timedelta(days=15)
    assert [b.book_id for b in stocked_lib.overdue_books(now=later)] == ["B001"]
    assert stocked_lib.overdue_books() == []


def test_members_with_fines(stocked_lib):
    stocked_lib.get_member("M003").add_fine(4.0)
    assert [m.member_id for m in stocked_lib.members_with_fines()] == ["M003"]


def test_transaction_history_is_a_copy(stocked_lib):
    stocked_lib.borrow_book("M001", "B001")
    history = stocked_lib.transaction_history()
    history.clear()
    assert len(stocked_lib.transaction_history()) == 1


def test_member_transactions(stocked_lib, now):
    stocked_lib.borrow_book("M001", "B001")
    stocked_lib.borrow_book("M002", "B002")
    stocked_lib.return_book("M001", "B001", now=now + timedelta(days=2))
    assert [t.transaction_id for t in stocked_lib.member_transactions("M001")] == ["TXN000001", "TXN000003"]
    assert stocked_lib.member_transactions("M999") == []


def test_statistics(stocked_lib):
    stocked_lib.borrow_book("M001", "B001")
    stocked_lib.borrow_book("M001", "B002")
    stocked_lib.update_member("M003", active=False)
    stocked_lib.get_member("M002").add_fine(3.5)

    assert stocked_lib.get_statistics() == {
        "total_books": 6,
        "available_books": 4,
        "borrowed_books": 2,
        "total_members": 3,
        "active_members": 2,
        "outstanding_fines": 3.5,
    }


def test_statistics_empty():
    stats = reports.statistics([], [])
    assert stats["total_books"] == 0
    assert stats["outstanding_fines"] == 0
