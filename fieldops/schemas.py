"""
Record schemas for the accounts engine

Every row leaving the record store is parsed into one of the pydantic models
below, so the business rules never see a loosely-typed mapping. Missing or
malformed numeric values are normalised to 0 and JSON list columns that
arrive as strings are decoded.

The second half of the module holds the result types returned by the
business operations.
"""

import json
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _number_or_zero(value):
    if value is None or value == '':
        return 0.0
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _json_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return []
    return value if isinstance(value, list) else []


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# -----------------------------
# Store records
# -----------------------------

class Employee(Record):
    id: int
    name: str = Field(..., description="Employee name, used as join key by customer records")
    position: Optional[str] = None
    department: Optional[str] = None
    salary: float = Field(0.0, description="Monthly salary")
    status: Literal["Active", "Inactive"] = "Active"

    @field_validator('salary', mode='before')
    @classmethod
    def coerce_salary(cls, value):
        return _number_or_zero(value)


class Booking(Record):
    id: int
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    service_name: str
    total_amount: float = Field(0.0, ge=0, description="Booking value")
    booking_date: date
    status: Literal["Pending", "Confirmed", "Completed"] = "Pending"
    revenue_processed: bool = False
    payment_status: Literal["Unpaid", "Partial", "Paid"] = "Unpaid"
    amount_paid: float = 0.0
    current_assignment_id: Optional[int] = Field(None, description="Authoritative task assignment")
    created_at: Optional[datetime] = None

    @field_validator('total_amount', 'amount_paid', mode='before')
    @classmethod
    def coerce_amounts(cls, value):
        return _number_or_zero(value)


class TaskAssignment(Record):
    id: int
    booking_id: int
    employee_id: Optional[int] = None
    status: Literal["Assigned", "In Progress", "Completed"] = "Assigned"
    notes: Optional[str] = None
    created_at: datetime


class CustomerRecord(Record):
    id: int
    name: str
    phone: str
    address: str
    email: Optional[str] = None
    booking_date: date
    task_type: Optional[str] = "Domestic"
    source: Optional[str] = ""
    amount: float = 0.0
    discount_points: float = 0.0
    amount_paid: float = 0.0
    payment_status: Literal["Unpaid", "Partial", "Paid in Cash"] = "Unpaid"
    task_done_by: List[Optional[str]] = Field(default_factory=list, description="Names of the staff who did the job")
    customer_notes: Optional[str] = None
    customer_rating: Optional[str] = "Normal"
    task_completed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('amount', 'discount_points', 'amount_paid', mode='before')
    @classmethod
    def coerce_amounts(cls, value):
        return _number_or_zero(value)

    @field_validator('task_done_by', mode='before')
    @classmethod
    def coerce_names(cls, value):
        return _json_list(value)

    def assignees(self):
        """Non-blank names from task_done_by, in order."""
        return [n.strip() for n in self.task_done_by if n and n.strip()]


class DailySalaryRecord(Record):
    id: int
    employee_id: int
    date: date
    total_amount: float = 0.0
    notes: Optional[str] = None

    @field_validator('total_amount', mode='before')
    @classmethod
    def coerce_amount(cls, value):
        return _number_or_zero(value)


class ManagerRevenue(Record):
    id: int
    manager_id: int
    date: date
    revenue_generated: float = 0.0
    task_amounts: float = 0.0
    tasks_received: int = 0
    expenses: float = 0.0
    profit: float = 0.0

    @field_validator('revenue_generated', 'task_amounts', 'expenses', 'profit', mode='before')
    @classmethod
    def coerce_amounts(cls, value):
        return _number_or_zero(value)


class ExpenseItem(BaseModel):
    id: Optional[str] = None
    type: str = ""
    amount: float = 0.0

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, value):
        return _number_or_zero(value)


class RepairMaintenanceItem(ExpenseItem):
    description: str = ""


class MonthlyExpenseSheet(Record):
    id: Optional[int] = None
    month: str = Field(..., pattern=r'^\d{4}-(0[1-9]|1[0-2])$', description="YYYY-MM")
    direct_expenses: List[ExpenseItem] = Field(default_factory=list)
    salary_expenses: List[ExpenseItem] = Field(default_factory=list)
    repair_maintenance: List[RepairMaintenanceItem] = Field(default_factory=list)
    deposits: float = 0.0

    @field_validator('direct_expenses', 'salary_expenses', 'repair_maintenance', mode='before')
    @classmethod
    def coerce_lists(cls, value):
        return _json_list(value)

    @field_validator('deposits', mode='before')
    @classmethod
    def coerce_deposits(cls, value):
        return _number_or_zero(value)


class Attendance(Record):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    date: date
    status: Literal["Present", "Absent"]
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    total_hours: Optional[float] = None
    position: Optional[str] = None
    department: Optional[str] = None


class Stock(Record):
    id: int
    item_name: str
    category: Optional[str] = None
    quantity: float = 0.0
    cost_per_unit: float = 0.0
    unit: Optional[str] = None

    @field_validator('quantity', 'cost_per_unit', mode='before')
    @classmethod
    def coerce_amounts(cls, value):
        return _number_or_zero(value)


# -----------------------------
# Operation results
# -----------------------------

class TaskCompletion(BaseModel):
    record_id: int
    per_employee_amount: float
    employee_count: int
    credited_employee_ids: List[int] = Field(default_factory=list)
    skipped_names: List[str] = Field(default_factory=list)


class AttendanceTimeUpdate(BaseModel):
    record: Attendance
    needs_correction: bool = False


class AccountsData(BaseModel):
    month: str
    bookings_revenue: float = 0.0
    total_bookings: int = 0
    customer_records_revenue: float = 0.0
    customer_records_paid: float = 0.0
    daily_salary_total: float = 0.0
    daily_salary_record_count: int = 0
    total_manager_revenue: float = 0.0
    total_manager_expenses: float = 0.0
    overdue: float = 0.0
    stock_value: float = 0.0


class AccountsTotals(BaseModel):
    total_revenue: float
    total_direct_expenses: float
    total_salary_expenses: float
    salary_source: Literal["daily_records", "manual"]
    total_repair_maintenance: float
    total_expenses: float
    deposits: float
    net_profit: float
    overdue: float
    net_balance: float
    manager_profit: float
    direct_expense_pct: float
    net_margin_pct: float
    manager_margin_pct: float


class AccountsSummary(BaseModel):
    month: str
    data: AccountsData
    sheet: MonthlyExpenseSheet
    totals: AccountsTotals


class TaskView(BaseModel):
    booking: Booking
    assignment: Optional[TaskAssignment] = None
    assigned_employee: Optional[str] = None


class TaskStatusChange(BaseModel):
    assignment: TaskAssignment
    booking: Booking
    revenue_credited: bool = False
