from datetime import datetime, timedelta

import pytest

from library_desk import Book, Catalog, Member, Membership, MemberType


@pytest.fixture
def catalog():
    c = Catalog()
    c.add(Book("B001", "The Great Gatsby", "F. Scott Fitzgerald", "978-0-7432-7356-5", "Fiction"))
    c.add(Book("B003", "1984", "George Orwell", "978-0-452-28423-4", "Dystopian"))
    c.add(Book("B004", "Pride and Prejudice", "Jane Austen", "978-0-14-143951-8", "Romance"))
    return c


def test_catalog_rejects_duplicate_id(catalog):
    assert catalog.add(Book("B001", "Other", "Someone", "1", "Misc")) is False
    assert catalog.get("B001").title == "The Great Gatsby"
    assert len(catalog) == 3


def test_catalog_remove(catalog):
    assert catalog.remove("B003") is True
    assert catalog.remove("B003") is False
    assert "B003" not in catalog


def test_catalog_refuses_to_remove_borrowed_book(catalog):
    t0 = datetime(2025, 1, 1)
    catalog.get("B001").check_out("M001", t0, t0 + timedelta(days=14))
    assert catalog.remove("B001") is False
    assert "B001" in catalog


def test_catalog_list_is_a_snapshot(catalog):
    books = catalog.list()
    books.clear()
    assert len(catalog.list()) == 3


@pytest.mark.parametrize("query, expected", [
    ("gatsby", {"B001"}),
    ("ORWELL", {"B003"}),
    ("romance", {"B004"}),
    ("0-452", {"B003"}),
    ("e", {"B001", "B003", "B004"}),
    ("nothing-like-this", set()),
])
def test_catalog_search_all_fields(catalog, query, expected):
    assert {b.book_id for b in catalog.search(query)} == expected


def test_catalog_search_single_field(catalog):
    assert {b.book_id for b in catalog.search("austen", ["author"])} == {"B004"}
    assert catalog.search("austen", ["title"]) == []
    with pytest.raises(ValueError):
        catalog.search("x", ["publisher"])


def test_catalog_available(catalog):
    t0 = datetime(2025, 1, 1)
    catalog.get("B004").check_out("M001", t0, t0 + timedelta(days=14))
    assert {b.book_id for b in catalog.available()} == {"B001", "B003"}


def test_membership_add_and_remove():
    roll = Membership()
    john = Member("M001", "John", "john@email.com", "", "", MemberType.STUDENT)
    assert roll.add(john) is True
    assert roll.add(Member("M001", "Other", "o@email.com", "", "", MemberType.STAFF)) is False
    assert roll.get("M001").name == "John"

    john.add_borrowed_book("B001")
    assert roll.remove("M001") is False
    john.remove_borrowed_book("B001")
    assert roll.remove("M001") is True
    assert roll.remove("M001") is False
    assert roll.list() == []
