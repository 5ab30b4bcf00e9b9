from datetime import datetime, date, time
import re

from .errors import ValidationError

# Time format regex patterns
TIME_PATTERN = re.compile(r'^([01]?[0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$')
MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')

BOOKING_STATUSES = ('Pending', 'Confirmed', 'Completed')
TASK_STATUSES = ('Assigned', 'In Progress', 'Completed')
CUSTOMER_PAYMENT_STATUSES = ('Unpaid', 'Partial', 'Paid in Cash')
ATTENDANCE_STATUSES = ('Present', 'Absent')

# Required fields for a customer record
CUSTOMER_REQUIRED_FIELDS = {
    'name': 'Customer name is required',
    'phone': 'Phone number is required',
    'address': 'Address is required',
    'booking_date': 'Booking date is required',
}

def current_month():
    today = date.today()
    return f"{today.year}-{today.month:02d}"

def validate_month_key(month):
    """Validate a month key (YYYY-MM)."""
    if not isinstance(month, str) or not MONTH_PATTERN.match(month):
        raise ValidationError(f"Invalid month: {month}. Expected YYYY-MM")
    return month

def month_bounds(month):
    """First day of the month and first day of the following month."""
    validate_month_key(month)
    year, mon = map(int, month.split('-'))
    first = date(year, mon, 1)
    end = date(year + 1, 1, 1) if mon == 12 else date(year, mon + 1, 1)
    return first, end

def parse_date(value):
    """Parse a YYYY-MM-DD string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"Invalid date format: {value}. Expected YYYY-MM-DD")

def parse_time(value):
    """Parse HH:MM or HH:MM:SS (or pass a time through)."""
    if isinstance(value, time):
        return value
    value = str(value).strip()
    if not TIME_PATTERN.match(value):
        raise ValidationError(f"Invalid time format: {value}. Expected HH:MM")
    fmt = '%H:%M:%S' if value.count(':') == 2 else '%H:%M'
    return datetime.strptime(value, fmt).time()

def validate_amount(value, field='amount'):
    """Coerce a currency amount; negatives are rejected."""
    if value is None or value == '':
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value}")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return amount

def parse_id(value, field):
    """Row id from a request payload."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value}")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value}")

def validate_choice(value, choices, field):
    if value not in choices:
        raise ValidationError(f"Invalid {field}: {value}. Expected one of {', '.join(choices)}")
    return value

def validate_customer_payload(payload):
    """Check required fields of a customer record form."""
    for field, message in CUSTOMER_REQUIRED_FIELDS.items():
        value = payload.get(field)
        if value is None or not str(value).strip():
            raise ValidationError(message)
    return True

def validate_employee_names(names):
    if names is None:
        return []
    if not isinstance(names, list):
        raise ValidationError("task_done_by must be a list of employee names")
    return [n if isinstance(n, str) or n is None else str(n) for n in names]

def require_fields(payload, *fields):
    missing = [f for f in fields if payload.get(f) in (None, '')]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    return True
