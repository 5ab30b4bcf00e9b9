from datetime import date

from flask import current_app

from .errors import ValidationError
from .schemas import TaskCompletion
from .validation import (
    parse_date, validate_amount, validate_choice, validate_customer_payload,
    validate_employee_names, CUSTOMER_PAYMENT_STATUSES
)

CUSTOMER_FIELDS = (
    'name', 'phone', 'address', 'email', 'booking_date', 'task_type', 'source',
    'amount', 'discount_points', 'amount_paid', 'payment_status', 'task_done_by',
    'customer_notes', 'customer_rating', 'task_completed'
)


def resolve_employee(store, name):
    """Active employee with exactly this name, or None."""
    return store.get_one('employees', {'name': name, 'status': 'Active'})


def credit_daily_salary(store, employee_id, amount, on_date, note=None):
    """
    Add ``amount`` to the employee's salary ledger row for ``on_date``.

    There is a single row per (employee, date); a second credit on the same
    day accumulates into it, also when it comes from another request that
    committed in the meantime. Returns the new day total.
    """
    with store.transaction():
        row = store.accumulate(
            'daily_salary_records',
            {'employee_id': employee_id, 'date': on_date},
            {'total_amount': amount},
            defaults={'notes': note},
        )
    return row.total_amount


def complete_task(store, record_id, on_date=None):
    """
    Mark a customer record's task done and pay its amount out to the staff who did it.

    The amount is split evenly over the non-blank names in ``task_done_by``
    and credited to each employee's daily salary row for ``on_date`` (today
    by default). Names without an active employee are logged and skipped;
    their share is not redistributed.

    All credits and the completion flag are written in one transaction, so a
    failure part-way leaves nothing applied and the call can simply be
    repeated. A record that is already completed is rejected.
    """
    on_date = on_date or date.today()
    record = store.get('customer_records', record_id)

    if record.task_completed:
        raise ValidationError("Task already completed")
    names = record.assignees()
    if not names:
        raise ValidationError("No employees assigned to this task")

    employee_count = len(names)
    per_employee = record.amount / employee_count
    credited, skipped = [], []

    with store.transaction():
        for name in names:
            employee = resolve_employee(store, name)
            if employee is None:
                current_app.logger.warning(
                    f"Customer record {record.id}: no active employee named '{name}', share not credited")
                skipped.append(name)
                continue
            credit_daily_salary(
                store, employee.id, per_employee, on_date,
                note=f"Task completion revenue for customer: {record.name}")
            credited.append(employee.id)
        store.update('customer_records', record.id, {'task_completed': True})

    current_app.logger.info(
        f"Task completed for customer record {record.id}: "
        f"{per_employee:.2f} to each of {employee_count} employees")
    return TaskCompletion(
        record_id=record.id,
        per_employee_amount=per_employee,
        employee_count=employee_count,
        credited_employee_ids=credited,
        skipped_names=skipped,
    )


def _customer_values(payload):
    values = {k: payload[k] for k in CUSTOMER_FIELDS if k in payload}
    for field in ('name', 'phone', 'address'):
        if field in values:
            values[field] = str(values[field]).strip()
    for field in ('email', 'customer_notes'):
        if field in values:
            values[field] = str(values[field]).strip() if values[field] else None
    if 'source' in values:
        values['source'] = str(values['source'] or '').strip()
    if 'booking_date' in values:
        values['booking_date'] = parse_date(values['booking_date'])
    for field in ('amount', 'discount_points', 'amount_paid'):
        if field in values:
            values[field] = validate_amount(values[field], field)
    if 'payment_status' in values:
        validate_choice(values['payment_status'], CUSTOMER_PAYMENT_STATUSES, 'payment status')
    if 'task_done_by' in values:
        values['task_done_by'] = validate_employee_names(values['task_done_by'])
    if 'task_completed' in values:
        values['task_completed'] = bool(values['task_completed'])
    return values


def create_customer_record(store, payload):
    validate_customer_payload(payload)
    values = {
        'task_type': 'Domestic',
        'source': '',
        'payment_status': 'Unpaid',
        'customer_rating': 'Normal',
        'task_done_by': [],
        'task_completed': False,
    }
    values.update(_customer_values(payload))
    with store.transaction():
        record = store.insert('customer_records', values)
    current_app.logger.info(f"Added customer record {record.id} for {record.name}")
    return record


def update_customer_record(store, record_id, payload):
    existing = store.get('customer_records', record_id)
    merged = existing.model_dump()
    merged.update(payload)
    validate_customer_payload(merged)
    with store.transaction():
        store.update('customer_records', record_id, _customer_values(payload))
    return store.get('customer_records', record_id)


def update_payment_status(store, record_id, status, amount_paid=None):
    """Set the payment status; the paid amount only moves on 'Paid in Cash'."""
    validate_choice(status, CUSTOMER_PAYMENT_STATUSES, 'payment status')
    patch = {'payment_status': status}
    if status == 'Paid in Cash' and amount_paid is not None:
        patch['amount_paid'] = validate_amount(amount_paid, 'amount_paid')
    with store.transaction():
        store.update('customer_records', record_id, patch)
    return store.get('customer_records', record_id)
