from datetime import datetime, date

import pandas as pd
from flask import current_app

from .errors import ValidationError
from .schemas import AttendanceTimeUpdate
from .validation import parse_time, validate_choice, ATTENDANCE_STATUSES

MS_PER_HOUR = 3600 * 1000


def compute_hours(check_in, check_out):
    """
    Hours between check-in and check-out on the same calendar day.

    No overnight handling: a check-out earlier than the check-in gives a
    negative result, which callers flag for correction.
    """
    base_date = date(2000, 1, 1)  # Arbitrary date, we only care about time
    dt_in = datetime.combine(base_date, parse_time(check_in))
    dt_out = datetime.combine(base_date, parse_time(check_out))
    elapsed_ms = (dt_out - dt_in).total_seconds() * 1000
    return elapsed_ms / MS_PER_HOUR


def _time_text(value):
    if not value:
        return None
    parsed = parse_time(value)
    return parsed.strftime('%H:%M:%S' if parsed.second else '%H:%M')


def list_attendance(store, on_date):
    return store.select('attendance', {'date': on_date}, order_by='employee_name')


def mark_attendance(store, employee_id, on_date, status):
    """Record Present/Absent for an employee on a date, replacing any earlier mark."""
    validate_choice(status, ATTENDANCE_STATUSES, 'attendance status')
    employee = store.get('employees', employee_id)

    with store.transaction():
        existing = store.get_one('attendance', {'employee_id': employee.id, 'date': on_date})
        if existing:
            store.update('attendance', existing.id, {'status': status})
        else:
            store.insert('attendance', {
                'employee_id': employee.id,
                'employee_name': employee.name,
                'date': on_date,
                'status': status,
                'position': employee.position,
                'department': employee.department,
            })

    current_app.logger.info(f"Marked {employee.name} as {status} on {on_date}")
    return store.get_one('attendance', {'employee_id': employee.id, 'date': on_date})


def update_attendance_time(store, employee_id, on_date, check_in=None, check_out=None):
    existing = store.get_one('attendance', {'employee_id': employee_id, 'date': on_date})
    if existing is None:
        raise ValidationError("Mark attendance for this date before recording times")

    check_in, check_out = _time_text(check_in), _time_text(check_out)
    total_hours = compute_hours(check_in, check_out) if check_in and check_out else 0.0

    needs_correction = total_hours < 0
    if needs_correction:
        current_app.logger.warning(
            f"Employee {employee_id} on {on_date}: check-out {check_out} is before check-in {check_in}")

    with store.transaction():
        store.update('attendance', existing.id, {
            'check_in_time': check_in,
            'check_out_time': check_out,
            'total_hours': total_hours,
        })

    return AttendanceTimeUpdate(
        record=store.get('attendance', existing.id),
        needs_correction=needs_correction,
    )


def summarize_attendance(records):
    """Days present/absent and hours per employee over a list of attendance records."""
    df = pd.DataFrame(
        [r.model_dump() for r in records],
        columns=['employee_id', 'employee_name', 'date', 'status', 'total_hours'])
    if df.empty:
        return pd.DataFrame(columns=['employee_id', 'employee_name', 'days_present', 'days_absent', 'total_hours'])
    df['total_hours'] = df['total_hours'].fillna(0.0).astype(float)
    df['present'] = (df['status'] == 'Present').astype(int)
    df['absent'] = (df['status'] == 'Absent').astype(int)
    return df.groupby(['employee_id', 'employee_name'], dropna=False).agg(
        days_present=('present', 'sum'),
        days_absent=('absent', 'sum'),
        total_hours=('total_hours', 'sum')
    ).reset_index()
