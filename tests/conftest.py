import pytest
from datetime import date

from fieldops import create_app, db
from fieldops.models import Employee, Booking, CustomerRecord
from fieldops.store import RecordStore

# Each test gets a completely fresh app instance
@pytest.fixture
def app_with_db():
    """Create and configure a Flask app for testing with a unique in-memory database."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app_with_db):
    """A test client for the app."""
    return app_with_db.test_client()

@pytest.fixture
def store(app_with_db):
    return RecordStore()

@pytest.fixture
def add_row(app_with_db):
    """Persist a model instance directly, bypassing the business rules."""
    def _add(obj):
        db.session.add(obj)
        db.session.commit()
        return obj
    return _add

@pytest.fixture
def make_employee(add_row):
    def _make(name, status='Active', salary=0.0, **kwargs):
        return add_row(Employee(name=name, status=status, salary=salary, **kwargs))
    return _make

@pytest.fixture
def make_booking(add_row):
    def _make(total_amount=1000.0, booking_date=date(2026, 3, 5), status='Pending', **kwargs):
        kwargs.setdefault('customer_name', 'Ravi Kumar')
        kwargs.setdefault('service_name', 'Deep Cleaning')
        return add_row(Booking(total_amount=total_amount, booking_date=booking_date, status=status, **kwargs))
    return _make

@pytest.fixture
def make_customer_record(add_row):
    def _make(amount=300.0, task_done_by=None, booking_date=date(2026, 3, 5), **kwargs):
        kwargs.setdefault('name', 'Meena')
        kwargs.setdefault('phone', '9876543210')
        kwargs.setdefault('address', '12 Lake Road')
        return add_row(CustomerRecord(
            amount=amount, task_done_by=task_done_by or [], booking_date=booking_date, **kwargs))
    return _make
