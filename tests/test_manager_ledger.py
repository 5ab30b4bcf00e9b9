import pytest
from datetime import date, datetime, timezone

from fieldops import db
from fieldops.errors import ValidationError
from fieldops.ledger import (
    assign_employee, credit_manager_revenue, latest_assignment, list_tasks, update_task_status
)
from fieldops.models import Booking, ManagerRevenue, TaskAssignment

TODAY = date(2026, 3, 10)


@pytest.fixture
def make_assignment(add_row):
    def _make(booking, employee=None, created_at=None, status='Assigned'):
        return add_row(TaskAssignment(
            booking_id=booking.id,
            employee_id=employee.id if employee else None,
            status=status,
            created_at=created_at or datetime(2026, 3, 1, 9, 0),
        ))
    return _make


def test_credits_on_same_day_accumulate(store, make_employee):
    """Two credits land in one row and profit is revenue minus stored expenses."""
    manager = make_employee('Suresh', position='Manager')

    credit_manager_revenue(store, manager.id, 500, TODAY)
    row = credit_manager_revenue(store, manager.id, 200, TODAY)

    assert row.revenue_generated == 700
    assert row.task_amounts == 700
    assert row.tasks_received == 2
    assert row.profit == 700
    assert ManagerRevenue.query.count() == 1


def test_profit_is_recomputed_against_expenses(store, make_employee):
    manager = make_employee('Suresh')
    first = credit_manager_revenue(store, manager.id, 500, TODAY)

    # expenses entered separately between two credits
    db.session.get(ManagerRevenue, first.id).expenses = 100
    db.session.commit()

    row = credit_manager_revenue(store, manager.id, 200, TODAY)
    assert row.profit == 600


def test_latest_assignment_ignores_rows_without_employee(make_employee, make_booking, make_assignment):
    a, b = make_employee('A'), make_employee('B')
    booking = make_booking()
    make_assignment(booking, a, datetime(2026, 3, 1, 9, 0))
    second = make_assignment(booking, b, datetime(2026, 3, 1, 10, 0))
    make_assignment(booking, None, datetime(2026, 3, 1, 11, 0))

    rows = TaskAssignment.query.all()
    assert latest_assignment(rows).id == second.id
    assert latest_assignment([r for r in rows if r.employee_id is None]) is None


def test_only_latest_assignment_is_current(store, make_employee, make_booking, make_assignment):
    a, b, c = make_employee('A'), make_employee('B'), make_employee('C')
    booking = make_booking(total_amount=800)
    t1 = make_assignment(booking, a, datetime(2026, 3, 1, 9, 0))
    make_assignment(booking, b, datetime(2026, 3, 1, 10, 0))
    t3 = make_assignment(booking, c, datetime(2026, 3, 1, 11, 0))

    views = list_tasks(store)
    assert len(views) == 1
    assert views[0].assignment.id == t3.id
    assert views[0].assigned_employee == 'C'

    with pytest.raises(ValidationError, match="superseded"):
        update_task_status(store, t1.id, 'Completed', on_date=TODAY)

    change = update_task_status(store, t3.id, 'Completed', on_date=TODAY)
    assert change.revenue_credited is True
    assert change.booking.status == 'Completed'
    assert ManagerRevenue.query.filter_by(manager_id=c.id).one().revenue_generated == 800
    assert ManagerRevenue.query.filter_by(manager_id=a.id).count() == 0


def test_assign_moves_pointer_and_confirms_booking(store, make_employee, make_booking):
    a, b = make_employee('A'), make_employee('B')
    booking = make_booking()

    first = assign_employee(store, booking.id, a.id)
    stored = db.session.get(Booking, booking.id)
    assert stored.status == 'Confirmed'
    assert stored.current_assignment_id == first.id

    second = assign_employee(store, booking.id, b.id, notes='Swap, A on leave')
    assert db.session.get(Booking, booking.id).current_assignment_id == second.id

    with pytest.raises(ValidationError):
        update_task_status(store, first.id, 'In Progress', on_date=TODAY)
    assert db.session.get(TaskAssignment, first.id).status == 'Assigned'


def test_assign_rejects_inactive_employee(store, make_employee, make_booking):
    gone = make_employee('Gone', status='Inactive')
    booking = make_booking()

    with pytest.raises(ValidationError, match="not active"):
        assign_employee(store, booking.id, gone.id)
    assert TaskAssignment.query.count() == 0


def test_completion_credits_revenue_once(store, make_employee, make_booking):
    a = make_employee('A')
    booking = make_booking(total_amount=1200)
    assignment = assign_employee(store, booking.id, a.id)

    first = update_task_status(store, assignment.id, 'completed', on_date=TODAY)
    second = update_task_status(store, assignment.id, 'Completed', on_date=TODAY)

    assert first.revenue_credited is True
    assert second.revenue_credited is False
    row = ManagerRevenue.query.filter_by(manager_id=a.id).one()
    assert row.revenue_generated == 1200
    assert row.tasks_received == 1
    assert db.session.get(Booking, booking.id).revenue_processed is True


def test_zero_amount_booking_is_not_credited(store, make_employee, make_booking):
    a = make_employee('A')
    booking = make_booking(total_amount=0)
    assignment = assign_employee(store, booking.id, a.id)

    change = update_task_status(store, assignment.id, 'Completed', on_date=TODAY)

    assert change.revenue_credited is False
    assert change.booking.status == 'Completed'
    assert ManagerRevenue.query.count() == 0


def test_in_progress_does_not_credit(store, make_employee, make_booking):
    a = make_employee('A')
    booking = make_booking(total_amount=400)
    assignment = assign_employee(store, booking.id, a.id)

    change = update_task_status(store, assignment.id, 'In Progress', on_date=TODAY)

    assert change.assignment.status == 'In Progress'
    assert change.booking.status == 'Confirmed'
    assert ManagerRevenue.query.count() == 0


def test_unknown_status_rejected(store, make_employee, make_booking):
    a = make_employee('A')
    booking = make_booking()
    assignment = assign_employee(store, booking.id, a.id)

    with pytest.raises(ValidationError, match="Invalid task status"):
        update_task_status(store, assignment.id, 'Done', on_date=TODAY)


def test_new_assignment_is_stamped_in_naive_utc(store, make_employee, make_booking):
    a = make_employee('A')
    booking = make_booking()
    before = datetime.now(timezone.utc).replace(tzinfo=None)

    assignment = assign_employee(store, booking.id, a.id)

    assert assignment.created_at.tzinfo is None
    assert before <= assignment.created_at <= datetime.now(timezone.utc).replace(tzinfo=None)
