import uuid

import pydantic
from flask import current_app

from .errors import ValidationError
from .schemas import ExpenseItem, MonthlyExpenseSheet
from .validation import validate_month_key, validate_amount


def new_line_id():
    return uuid.uuid4().hex[:9]


def default_sheet(month):
    """Empty sheet for a month nobody has saved yet, seeded with the usual bills."""
    types = current_app.config.get('DEFAULT_DIRECT_EXPENSE_TYPES', [])
    return MonthlyExpenseSheet(
        month=month,
        direct_expenses=[ExpenseItem(id=f"{month}-{n}", type=t, amount=0) for n, t in enumerate(types, 1)],
    )


def load_sheet(store, month):
    validate_month_key(month)
    sheet = store.get_one('monthly_expenses', {'month': month})
    if sheet is None:
        return default_sheet(month)
    return sheet


def parse_sheet(payload):
    """Validate a sheet submitted by the accounts form."""
    payload = dict(payload)
    payload['deposits'] = validate_amount(payload.get('deposits'), 'deposits')
    try:
        return MonthlyExpenseSheet.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid expense sheet: {e.errors()[0]['msg']}")


def save_sheet(store, sheet):
    """
    Replace the stored sheet for ``sheet.month`` with this one.

    The write is a whole-document upsert keyed by month: whoever saves last
    wins, edits made concurrently by someone else are not merged.
    """
    if isinstance(sheet, dict):
        sheet = parse_sheet(sheet)

    values = {
        'direct_expenses': [item.model_dump() for item in sheet.direct_expenses],
        'salary_expenses': [item.model_dump() for item in sheet.salary_expenses],
        'repair_maintenance': [item.model_dump() for item in sheet.repair_maintenance],
        'deposits': sheet.deposits,
    }
    with store.transaction():
        existing = store.get_one('monthly_expenses', {'month': sheet.month})
        if existing:
            store.update('monthly_expenses', existing.id, values)
        else:
            store.insert('monthly_expenses', dict(month=sheet.month, **values))

    current_app.logger.info(f"Saved expense sheet for {sheet.month}")
    return store.get_one('monthly_expenses', {'month': sheet.month})


def salary_line_for_employee(store, name):
    """Salary expense line pre-filled with an active employee's salary."""
    employee = store.get_one('employees', {'name': name, 'status': 'Active'})
    if employee is None:
        raise ValidationError(f"No active employee named {name}")
    return ExpenseItem(id=new_line_id(), type=employee.name, amount=employee.salary)
