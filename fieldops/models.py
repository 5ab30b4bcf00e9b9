from . import db
from datetime import datetime, timezone


def utcnow():
    """Current UTC time as a naive datetime, the form the DateTime columns hold."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Employee(db.Model):
    __tablename__ = 'employees'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, index=True)
    position = db.Column(db.String(64), nullable=True)
    department = db.Column(db.String(64), nullable=True)
    salary = db.Column(db.Float, default=0.0)
    status = db.Column(db.String(16), default='Active', nullable=False)  # Active | Inactive

    def __repr__(self):
        return f'<Employee {self.id} {self.name} {self.status}>'


class Booking(db.Model):
    __tablename__ = 'bookings'
    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(128), nullable=False)
    customer_email = db.Column(db.String(128), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True)
    service_name = db.Column(db.String(128), nullable=False)
    total_amount = db.Column(db.Float, default=0.0, nullable=False)
    booking_date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(16), default='Pending', nullable=False)  # Pending | Confirmed | Completed
    revenue_processed = db.Column(db.Boolean, default=False, nullable=False)
    payment_status = db.Column(db.String(16), default='Unpaid', nullable=False)  # Unpaid | Partial | Paid
    amount_paid = db.Column(db.Float, default=0.0, nullable=False)
    # authoritative assignment, moved together with every new assignment
    current_assignment_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint('total_amount >= 0', name='ck_booking_amount_non_negative'),
    )

    def __repr__(self):
        return f'<Booking {self.id} {self.service_name} {self.status}>'


class TaskAssignment(db.Model):
    __tablename__ = 'task_assignments'
    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=True, index=True)
    status = db.Column(db.String(16), default='Assigned', nullable=False)  # Assigned | In Progress | Completed
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f'<TaskAssignment {self.id} booking={self.booking_id} employee={self.employee_id} {self.status}>'


class CustomerRecord(db.Model):
    __tablename__ = 'customer_records'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    address = db.Column(db.String(256), nullable=False)
    email = db.Column(db.String(128), nullable=True)
    booking_date = db.Column(db.Date, nullable=False, index=True)
    task_type = db.Column(db.String(64), default='Domestic')
    source = db.Column(db.String(64), default='')
    amount = db.Column(db.Float, default=0.0, nullable=False)
    discount_points = db.Column(db.Float, default=0.0, nullable=False)
    amount_paid = db.Column(db.Float, default=0.0, nullable=False)
    payment_status = db.Column(db.String(16), default='Unpaid', nullable=False)  # Unpaid | Partial | Paid in Cash
    task_done_by = db.Column(db.JSON, default=list)  # employee names, may hold blanks
    customer_notes = db.Column(db.Text, nullable=True)
    customer_rating = db.Column(db.String(16), default='Normal')
    task_completed = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<CustomerRecord {self.id} {self.name} {self.amount}>'


class DailySalaryRecord(db.Model):
    __tablename__ = 'daily_salary_records'
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    total_amount = db.Column(db.Float, default=0.0, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.UniqueConstraint('employee_id', 'date', name='uq_daily_salary_employee_date'),
    )

    def __repr__(self):
        return f'<DailySalaryRecord {self.employee_id} {self.date} {self.total_amount}>'


class ManagerRevenue(db.Model):
    __tablename__ = 'manager_revenue'
    id = db.Column(db.Integer, primary_key=True)
    manager_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    revenue_generated = db.Column(db.Float, default=0.0, nullable=False)
    task_amounts = db.Column(db.Float, default=0.0, nullable=False)
    tasks_received = db.Column(db.Integer, default=0, nullable=False)
    expenses = db.Column(db.Float, default=0.0, nullable=False)
    profit = db.Column(db.Float, default=0.0, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('manager_id', 'date', name='uq_manager_revenue_manager_date'),
    )

    def __repr__(self):
        return f'<ManagerRevenue {self.manager_id} {self.date} {self.revenue_generated}>'


class MonthlyExpenseSheet(db.Model):
    __tablename__ = 'monthly_expenses'
    id = db.Column(db.Integer, primary_key=True)
    month = db.Column(db.String(7), unique=True, nullable=False, index=True)  # YYYY-MM
    direct_expenses = db.Column(db.JSON, default=list)
    salary_expenses = db.Column(db.JSON, default=list)
    repair_maintenance = db.Column(db.JSON, default=list)
    deposits = db.Column(db.Float, default=0.0)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<MonthlyExpenseSheet {self.month}>'


class Attendance(db.Model):
    __tablename__ = 'attendance'
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False, index=True)
    employee_name = db.Column(db.String(128), nullable=True)
    date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False)  # Present | Absent
    check_in_time = db.Column(db.String(8), nullable=True)
    check_out_time = db.Column(db.String(8), nullable=True)
    total_hours = db.Column(db.Float, nullable=True)
    position = db.Column(db.String(64), nullable=True)
    department = db.Column(db.String(64), nullable=True)

    __table_args__ = (
        db.UniqueConstraint('employee_id', 'date', name='uq_attendance_employee_date'),
    )

    def __repr__(self):
        return f'<Attendance {self.employee_id} {self.date} {self.status}>'


class Stock(db.Model):
    __tablename__ = 'stocks'
    id = db.Column(db.Integer, primary_key=True)
    item_name = db.Column(db.String(128), nullable=False)
    category = db.Column(db.String(64), nullable=True)
    quantity = db.Column(db.Float, default=0.0, nullable=False)
    cost_per_unit = db.Column(db.Float, default=0.0, nullable=False)
    unit = db.Column(db.String(16), nullable=True)

    def __repr__(self):
        return f'<Stock {self.item_name} {self.quantity}{self.unit or ""}>'
