import pytest
from datetime import date

from fieldops import db
from fieldops.errors import (
    StoreError, NOT_FOUND, UNIQUE_VIOLATION, CHECK_VIOLATION, NOT_NULL_VIOLATION, INVALID_ROW,
    classify_integrity_error
)
from fieldops.models import DailySalaryRecord, Employee


def test_get_one_returns_none_when_missing(store):
    assert store.get_one('employees', {'name': 'Nobody'}) is None


def test_get_missing_row_is_not_found(store):
    with pytest.raises(StoreError) as excinfo:
        store.get('bookings', 42)
    assert excinfo.value.code == NOT_FOUND
    assert excinfo.value.http_status == 404
    assert excinfo.value.user_message == "Record not found"


def test_duplicate_day_row_is_unique_violation(store, make_employee):
    a = make_employee('A')
    store.insert('daily_salary_records', {'employee_id': a.id, 'date': date(2026, 3, 1), 'total_amount': 10})

    with pytest.raises(StoreError) as excinfo:
        store.insert('daily_salary_records', {'employee_id': a.id, 'date': date(2026, 3, 1), 'total_amount': 20})

    assert excinfo.value.code == UNIQUE_VIOLATION
    assert excinfo.value.user_message == "A record with this information already exists"


def test_negative_booking_is_check_violation(store):
    with pytest.raises(StoreError) as excinfo:
        store.insert('bookings', {
            'customer_name': 'Ravi', 'service_name': 'Sofa Cleaning',
            'total_amount': -5, 'booking_date': date(2026, 3, 1),
        })
    assert excinfo.value.code == CHECK_VIOLATION


def test_missing_required_column_is_not_null_violation(store):
    with pytest.raises(StoreError) as excinfo:
        store.insert('bookings', {'service_name': 'Sofa Cleaning', 'booking_date': date(2026, 3, 1)})
    assert excinfo.value.code == NOT_NULL_VIOLATION
    assert excinfo.value.http_status == 400


def test_unknown_table_and_column(store):
    with pytest.raises(StoreError):
        store.select('invoices')
    with pytest.raises(StoreError):
        store.select('employees', {'nickname': 'x'})


def test_transaction_rolls_back_every_write(store, make_employee):
    a = make_employee('A')

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.insert('daily_salary_records', {'employee_id': a.id, 'date': date(2026, 3, 1)})
            with store.transaction():
                store.update('employees', a.id, {'salary': 5000})
            raise RuntimeError("boom")

    assert DailySalaryRecord.query.count() == 0
    assert db.session.get(Employee, a.id).salary == 0


def test_update_by_filters_counts_rows(store, make_employee):
    make_employee('A', department='Domestic')
    make_employee('B', department='Domestic')
    make_employee('C', department='Office')

    with store.transaction():
        count = store.update('employees', {'department': 'Domestic'}, {'status': 'Inactive'})

    assert count == 2
    assert [e.name for e in store.select('employees', {'status': 'Active'})] == ['C']


def test_select_orders_by_column(store, make_employee):
    make_employee('Zara')
    make_employee('Anil')

    names = [e.name for e in store.select('employees', order_by='name')]
    assert names == ['Anil', 'Zara']
    assert [e.name for e in store.select('employees', order_by='name', descending=True)] == ['Zara', 'Anil']


class _PgError(Exception):
    pgcode = '23505'


class _Wrapped(Exception):
    def __init__(self, orig):
        super().__init__(str(orig))
        self.orig = orig


def test_classify_uses_postgres_codes():
    assert classify_integrity_error(_Wrapped(_PgError('duplicate key'))) == UNIQUE_VIOLATION


def test_delete_removes_the_row(store, make_employee):
    a = make_employee('A')

    with store.transaction():
        store.delete('employees', a.id)

    assert store.get_one('employees', {'name': 'A'}) is None
    with pytest.raises(StoreError) as excinfo:
        store.delete('employees', a.id)
    assert excinfo.value.code == NOT_FOUND


def test_row_that_breaks_its_schema_is_invalid_row(store, make_booking):
    booking = make_booking(status='Cancelled')

    with pytest.raises(StoreError) as excinfo:
        store.get('bookings', booking.id)
    assert excinfo.value.code == INVALID_ROW
    assert excinfo.value.http_status == 500

    with pytest.raises(StoreError):
        store.select('bookings')


def test_accumulate_creates_then_adds(store, make_employee):
    a = make_employee('A')
    keys = {'manager_id': a.id, 'date': date(2026, 3, 1)}

    with store.transaction():
        store.accumulate('manager_revenue', keys, {'revenue_generated': 100, 'tasks_received': 1},
                         defaults={'profit': 100})
        row = store.accumulate('manager_revenue', keys, {'revenue_generated': 40, 'tasks_received': 1},
                               recompute={'profit': lambda c: c.revenue_generated + 40 - c.expenses})

    assert row.revenue_generated == 140
    assert row.tasks_received == 2
    assert row.profit == 140


def test_compare_and_set_only_changes_matching_row(store, make_booking):
    booking = make_booking()

    with store.transaction():
        assert store.compare_and_set('bookings', booking.id, {'revenue_processed': False},
                                     {'revenue_processed': True}) is True
        assert store.compare_and_set('bookings', booking.id, {'revenue_processed': False},
                                     {'revenue_processed': True}) is False

    assert store.get('bookings', booking.id).revenue_processed is True
