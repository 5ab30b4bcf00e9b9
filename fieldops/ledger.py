from collections import defaultdict
from datetime import date

from flask import current_app

from .errors import ValidationError
from .schemas import TaskStatusChange, TaskView
from .validation import TASK_STATUSES


def latest_assignment(assignments):
    """
    The most recently created assignment that names an employee.

    Ties on ``created_at`` go to the higher id. Returns None when no
    assignment has an employee.
    """
    candidates = [a for a in assignments if a.employee_id is not None]
    if not candidates:
        return None
    return max(candidates, key=lambda a: (a.created_at, a.id))


def pick_current(booking, assignments):
    """Current assignment of ``booking`` among its ``assignments``."""
    if booking.current_assignment_id is not None:
        for a in assignments:
            if a.id == booking.current_assignment_id and a.employee_id is not None:
                return a
    return latest_assignment([a for a in assignments if a.booking_id == booking.id])


def current_assignment(store, booking):
    return pick_current(booking, store.select('task_assignments', {'booking_id': booking.id}))


def normalize_task_status(status):
    lookup = {s.lower(): s for s in TASK_STATUSES}
    try:
        return lookup[str(status).strip().lower()]
    except KeyError:
        raise ValidationError(f"Invalid task status: {status}. Expected one of {', '.join(TASK_STATUSES)}")


def assign_employee(store, booking_id, employee_id, notes=None):
    """Create a new assignment for the booking and make it the current one."""
    booking = store.get('bookings', booking_id)
    employee = store.get('employees', employee_id)
    if employee.status != 'Active':
        raise ValidationError(f"Employee {employee.name} is not active")
    if booking.status == 'Completed':
        raise ValidationError("Booking is already completed")

    with store.transaction():
        assignment = store.insert('task_assignments', {
            'booking_id': booking.id,
            'employee_id': employee.id,
            'status': 'Assigned',
            'notes': notes,
        })
        patch = {'current_assignment_id': assignment.id}
        if booking.status == 'Pending':
            patch['status'] = 'Confirmed'
        store.update('bookings', booking.id, patch)

    current_app.logger.info(f"Booking {booking.id} assigned to {employee.name}")
    return assignment


def credit_manager_revenue(store, employee_id, amount, on_date):
    """
    Add a completed booking's amount to the employee's revenue row for ``on_date``.

    ``profit`` is recomputed from the new revenue and the stored expenses on
    every credit rather than incremented.
    """
    with store.transaction():
        row = store.accumulate(
            'manager_revenue',
            {'manager_id': employee_id, 'date': on_date},
            {'revenue_generated': amount, 'task_amounts': amount, 'tasks_received': 1},
            defaults={'expenses': 0.0, 'profit': amount},
            recompute={'profit': lambda c: c.revenue_generated + amount - c.expenses},
        )
    return row


def update_task_status(store, assignment_id, new_status, on_date=None):
    """
    Move an assignment to ``new_status``.

    Completing the booking's current assignment also completes the booking
    and credits the assignee with the booking amount, once: a booking whose
    revenue is already processed is never credited again, also when two
    requests complete it at the same time. Only the current
    assignment of a booking can change status.
    """
    new_status = normalize_task_status(new_status)
    on_date = on_date or date.today()
    assignment = store.get('task_assignments', assignment_id)

    credited = False
    with store.transaction():
        booking = store.get('bookings', assignment.booking_id)
        current = current_assignment(store, booking)
        if current is None or current.id != assignment.id:
            raise ValidationError("This assignment has been superseded by a newer one")

        store.update('task_assignments', assignment.id, {'status': new_status})

        if new_status == 'Completed':
            store.update('bookings', booking.id, {'status': 'Completed'})
            if not booking.total_amount:
                current_app.logger.info(f"Booking {booking.id} has no amount, nothing to credit")
            elif store.compare_and_set('bookings', booking.id,
                                       {'revenue_processed': False}, {'revenue_processed': True}):
                credit_manager_revenue(store, assignment.employee_id, booking.total_amount, on_date)
                credited = True
            else:
                current_app.logger.info(f"Booking {booking.id} revenue already processed, not credited again")

    if credited:
        current_app.logger.info(
            f"Credited {booking.total_amount:.2f} to employee {assignment.employee_id} for booking {booking.id}")
    return TaskStatusChange(
        assignment=store.get('task_assignments', assignment.id),
        booking=store.get('bookings', booking.id),
        revenue_credited=credited,
    )


def list_tasks(store):
    """Bookings by date, each with its current assignment and assignee name."""
    bookings = store.select('bookings', order_by='booking_date')
    by_booking = defaultdict(list)
    for a in store.select('task_assignments'):
        by_booking[a.booking_id].append(a)
    names = {e.id: e.name for e in store.select('employees')}

    views = []
    for booking in bookings:
        current = pick_current(booking, by_booking[booking.id])
        views.append(TaskView(
            booking=booking,
            assignment=current,
            assigned_employee=names.get(current.employee_id) if current else None,
        ))
    return views
