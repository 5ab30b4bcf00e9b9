import pandas as pd
from flask import current_app

from .expenses import load_sheet
from .schemas import AccountsData, AccountsTotals, AccountsSummary
from .validation import validate_month_key, current_month

# payment states that still leave money owed
OUTSTANDING_STATUSES = ('Unpaid', 'Partial')

BOOKING_COLUMNS = ['id', 'total_amount', 'booking_date', 'status', 'payment_status', 'amount_paid']
CUSTOMER_COLUMNS = ['id', 'amount', 'discount_points', 'amount_paid', 'payment_status', 'booking_date']
SALARY_COLUMNS = ['employee_id', 'date', 'total_amount']
MANAGER_COLUMNS = ['manager_id', 'date', 'revenue_generated', 'expenses']
STOCK_COLUMNS = ['quantity', 'cost_per_unit']


def percentage(part, whole):
    """Share of ``whole`` taken by ``part``, in percent to one decimal. 0 when whole is 0."""
    if whole is None or pd.isna(whole) or whole == 0:
        return 0
    if part is None or pd.isna(part):
        return 0
    return round(part / whole * 100, 1)


def records_frame(records, columns):
    """DataFrame of store records, always carrying ``columns`` even when empty."""
    return pd.DataFrame([r.model_dump() for r in records], columns=columns)


def in_month(df, column, month):
    """Rows of ``df`` whose ``column`` date falls in ``month`` (YYYY-MM)."""
    if df.empty:
        return df
    return df[pd.to_datetime(df[column]).dt.strftime('%Y-%m') == month]


def outstanding_booking_amount(bookings):
    owed = bookings[
        (bookings['status'] == 'Completed') & bookings['payment_status'].isin(OUTSTANDING_STATUSES)
    ]
    if owed.empty:
        return 0.0
    return float((owed['total_amount'] - owed['amount_paid']).clip(lower=0).sum())


def outstanding_customer_amount(customers):
    owed = customers[customers['payment_status'].isin(OUTSTANDING_STATUSES)]
    if owed.empty:
        return 0.0
    return float((owed['amount'] - owed['discount_points'] - owed['amount_paid']).clip(lower=0).sum())


def manager_totals(manager_df, employee_ids):
    """Per-manager revenue and expenses, restricted to known employees."""
    manager_df = manager_df[manager_df['manager_id'].isin(employee_ids)]
    if manager_df.empty:
        return pd.DataFrame(columns=['manager_id', 'revenue', 'expenses'])
    return manager_df.groupby('manager_id').agg(
        revenue=('revenue_generated', 'sum'),
        expenses=('expenses', 'sum')
    ).reset_index()


def load_accounts_data(store, month):
    """
    Read every source the accounts summary depends on and reduce it for one month.

    Bookings and customer records are scoped by booking_date, daily salary
    and manager revenue records by their ledger date. Stock value is a
    point-in-time figure and is not month scoped.

    The reads are independent: a row written while this runs may or may not
    be reflected.
    """
    validate_month_key(month)

    bookings = in_month(records_frame(store.select('bookings'), BOOKING_COLUMNS), 'booking_date', month)
    completed = bookings[bookings['status'] == 'Completed']

    customers = in_month(
        records_frame(store.select('customer_records'), CUSTOMER_COLUMNS), 'booking_date', month)

    salaries = in_month(records_frame(store.select('daily_salary_records'), SALARY_COLUMNS), 'date', month)

    employee_ids = [e.id for e in store.select('employees')]
    managers = manager_totals(
        in_month(records_frame(store.select('manager_revenue'), MANAGER_COLUMNS), 'date', month),
        employee_ids)

    stocks = records_frame(store.select('stocks'), STOCK_COLUMNS)

    return AccountsData(
        month=month,
        bookings_revenue=float(completed['total_amount'].sum()),
        total_bookings=int(len(bookings)),
        customer_records_revenue=float(customers['amount'].sum()),
        customer_records_paid=float(customers['amount_paid'].sum()),
        daily_salary_total=float(salaries['total_amount'].sum()),
        daily_salary_record_count=int(len(salaries)),
        total_manager_revenue=float(managers['revenue'].sum()),
        total_manager_expenses=float(managers['expenses'].sum()),
        overdue=outstanding_booking_amount(bookings) + outstanding_customer_amount(customers),
        stock_value=float((stocks['quantity'] * stocks['cost_per_unit']).sum()),
    )


def compute_totals(data, sheet):
    """
    Combine the month's source figures with its expense sheet.

    Salary expenses come from the daily salary ledger whenever the month has
    at least one ledger row; only a month without any falls back to the
    salary lines typed into the expense sheet. ``salary_source`` records
    which one was used.
    """
    total_direct = sum(item.amount for item in sheet.direct_expenses)
    manual_salary = sum(item.amount for item in sheet.salary_expenses)
    total_repair = sum(item.amount for item in sheet.repair_maintenance)

    if data.daily_salary_record_count > 0:
        total_salary, salary_source = data.daily_salary_total, 'daily_records'
    else:
        total_salary, salary_source = manual_salary, 'manual'

    total_revenue = data.bookings_revenue + data.customer_records_revenue
    total_expenses = total_direct + total_salary + total_repair
    net_profit = total_revenue - total_expenses
    net_balance = net_profit + sheet.deposits - data.overdue
    manager_profit = data.total_manager_revenue - data.total_manager_expenses

    return AccountsTotals(
        total_revenue=total_revenue,
        total_direct_expenses=total_direct,
        total_salary_expenses=total_salary,
        salary_source=salary_source,
        total_repair_maintenance=total_repair,
        total_expenses=total_expenses,
        deposits=sheet.deposits,
        net_profit=net_profit,
        overdue=data.overdue,
        net_balance=net_balance,
        manager_profit=manager_profit,
        direct_expense_pct=percentage(total_direct, total_revenue),
        net_margin_pct=percentage(net_profit, total_revenue),
        manager_margin_pct=percentage(manager_profit, data.total_manager_revenue),
    )


def compute_accounts_summary(store, month=None):
    """Financial summary for ``month`` (current month by default). Read-only."""
    month = month or current_month()
    data = load_accounts_data(store, month)
    sheet = load_sheet(store, month)
    totals = compute_totals(data, sheet)
    if totals.salary_source == 'manual':
        current_app.logger.warning(
            f"No daily salary records for {month}; using {totals.total_salary_expenses:.2f} "
            f"from the expense sheet salary lines")
    return AccountsSummary(month=month, data=data, sheet=sheet, totals=totals)
