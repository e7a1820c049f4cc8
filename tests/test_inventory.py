import threading

import pytest

from school_library.errors import NotFound, OutOfStock, ValidationError


def test_decrement_and_increment(lib):
    book = lib.catalog.add({"title": "Filosofi Teras", "author": "Henry Manampiring", "stock": 1})
    assert lib.inventory.decrement(book.id).status == "borrowed"
    with pytest.raises(OutOfStock):
        lib.inventory.decrement(book.id)
    assert lib.catalog.get(book.id).stock == 0
    assert lib.inventory.increment(book.id).status == "available"


def test_increment_has_no_upper_bound(lib):
    book = lib.catalog.add({"title": "Filosofi Teras", "author": "Henry Manampiring", "stock": 1})
    lib.inventory.increment(book.id)
    lib.inventory.increment(book.id)
    assert lib.catalog.get(book.id).stock == 3


def test_set_stock_validates(lib):
    book = lib.catalog.add({"title": "Filosofi Teras", "author": "Henry Manampiring", "stock": 1})
    with pytest.raises(ValidationError):
        lib.inventory.set_stock(book.id, -1)
    with pytest.raises(ValidationError):
        lib.inventory.set_stock(book.id, "3")
    with pytest.raises(NotFound):
        lib.inventory.set_stock("missing", 1)


def test_paired_mutation_invariant_holds(lib):
    book = lib.catalog.add({"title": "Atomic Habits", "author": "James Clear", "stock": 4})
    loans = []
    for i in range(3):
        loans.append(lib.loans.borrow(book.id, f"Student {i}", "X", str(i)))
        assert lib.inventory.check_consistency(book.id, initial_stock=4)
    lib.loans.return_loan(loans[1].id)
    assert lib.inventory.check_consistency(book.id, initial_stock=4)
    assert lib.store.active_loan_count(book.id) == 2


def test_concurrent_borrows_never_oversell(lib):
    book = lib.catalog.add({"title": "Bumi Manusia", "author": "Pramoedya Ananta Toer", "stock": 5})
    start = threading.Barrier(20)
    outcomes = []
    outcomes_lock = threading.Lock()

    def borrow(i):
        start.wait()
        try:
            lib.loans.borrow(book.id, f"Student {i}", "XI IPS 2", f"nis-{i}")
            result = "ok"
        except OutOfStock:
            result = "out"
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=borrow, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 5
    assert outcomes.count("out") == 15
    assert lib.catalog.get(book.id).stock == 0
    assert len(lib.loans.list_active()) == 5
    assert lib.inventory.check_consistency(book.id, initial_stock=5)


def test_unknown_book_ids_do_not_leave_locks_behind(lib):
    for i in range(100):
        with pytest.raises(NotFound):
            lib.loans.borrow(f"bogus-{i}", "Ahmad Rizky", "XII IPA 1", "12345")
    with pytest.raises(NotFound):
        lib.catalog.update("bogus", title="x")
    with pytest.raises(NotFound):
        lib.inventory.set_stock("bogus", 1)
    with pytest.raises(NotFound):
        lib.catalog.remove("bogus")
    assert lib.store.book_lock_count() == 0


def test_remove_drops_the_book_lock(lib):
    book = lib.catalog.add({"title": "Laskar Pelangi", "author": "Andrea Hirata", "stock": 1})
    lib.loans.borrow(book.id, "Ahmad Rizky", "XII IPA 1", "12345")
    assert lib.store.book_lock_count() == 1
    lib.catalog.remove(book.id)
    assert lib.store.book_lock_count() == 0
