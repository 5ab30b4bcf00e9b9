from contextlib import contextmanager

import pydantic
import sqlalchemy as sa
from flask import current_app
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import db
from . import models
from . import schemas
from .errors import StoreError, NOT_FOUND, INVALID_ROW, UNKNOWN, classify_integrity_error

# table name -> (SQLAlchemy model, record schema)
TABLES = {
    'employees': (models.Employee, schemas.Employee),
    'bookings': (models.Booking, schemas.Booking),
    'task_assignments': (models.TaskAssignment, schemas.TaskAssignment),
    'customer_records': (models.CustomerRecord, schemas.CustomerRecord),
    'daily_salary_records': (models.DailySalaryRecord, schemas.DailySalaryRecord),
    'manager_revenue': (models.ManagerRevenue, schemas.ManagerRevenue),
    'monthly_expenses': (models.MonthlyExpenseSheet, schemas.MonthlyExpenseSheet),
    'attendance': (models.Attendance, schemas.Attendance),
    'stocks': (models.Stock, schemas.Stock),
}

# dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


class RecordStore:
    """
    Generic table access over the SQLAlchemy session.

    Writes only flush; they become durable when the outermost
    ``transaction()`` block exits cleanly, and are rolled back together if
    anything inside it raises.
    """

    def __init__(self, session=None):
        self.session = session or db.session
        self._depth = 0

    # --- helpers --------------------------------------------------------------

    def _table(self, table):
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(UNKNOWN, f"Unknown table: {table}")

    def _parse(self, table, schema, obj):
        try:
            return schema.model_validate(obj)
        except pydantic.ValidationError as e:
            ident = getattr(obj, 'id', None)
            current_app.logger.error(f"Row {ident} in {table} does not match its schema: {e}")
            raise StoreError(INVALID_ROW, f"Row {ident} in {table} has invalid data")

    def _query(self, model, filters):
        query = self.session.query(model)
        for column, value in (filters or {}).items():
            if not hasattr(model, column):
                raise StoreError(UNKNOWN, f"Unknown column {column} on {model.__tablename__}")
            query = query.filter(getattr(model, column) == value)
        return query

    def _flush(self):
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise StoreError(classify_integrity_error(e), str(e.orig))
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(UNKNOWN, str(e))

    def _execute(self, model, statement):
        """Run a Core statement against ``model``'s table and expire its loaded rows."""
        self._flush()
        try:
            result = self.session.execute(statement)
        except IntegrityError as e:
            self.session.rollback()
            raise StoreError(classify_integrity_error(e), str(e.orig))
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(UNKNOWN, str(e))
        for obj in list(self.session.identity_map.values()):
            if isinstance(obj, model):
                self.session.expire(obj)
        return result

    def _get(self, model, ident):
        obj = self.session.get(model, ident)
        if obj is None:
            raise StoreError(NOT_FOUND, f"No row {ident} in {model.__tablename__}")
        return obj

    # --- reads ----------------------------------------------------------------

    def select(self, table, filters=None, order_by=None, descending=False):
        model, schema = self._table(table)
        try:
            query = self._query(model, filters)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc(), model.id.asc())
            rows = query.all()
        except SQLAlchemyError as e:
            raise StoreError(UNKNOWN, str(e))
        return [self._parse(table, schema, row) for row in rows]

    def get_one(self, table, filters):
        """Single row matching ``filters``; None when there is no such row."""
        rows = self.select(table, filters)
        return rows[0] if rows else None

    def get(self, table, ident):
        model, schema = self._table(table)
        return self._parse(table, schema, self._get(model, ident))

    # --- writes ---------------------------------------------------------------

    def insert(self, table, values):
        model, schema = self._table(table)
        obj = model(**values)
        self.session.add(obj)
        self._flush()
        return self._parse(table, schema, obj)

    def update(self, table, ident, patch):
        """Patch one row by id, or every row matching a dict of filters."""
        model, _ = self._table(table)
        if isinstance(ident, dict):
            targets = self._query(model, ident).all()
        else:
            targets = [self._get(model, ident)]
        for obj in targets:
            for column, value in patch.items():
                setattr(obj, column, value)
        self._flush()
        return len(targets)

    def delete(self, table, ident):
        model, _ = self._table(table)
        self.session.delete(self._get(model, ident))
        self._flush()

    def accumulate(self, table, keys, deltas, defaults=None, recompute=None):
        """
        Add ``deltas`` to the row identified by ``keys``, creating it when missing.

        The additions happen in the database, in a single statement where the
        dialect supports upserts, so concurrent writers accumulate rather than
        overwrite each other. ``defaults`` fills the other columns of a new
        row. ``recompute`` maps a column to a function of the table columns
        giving its new value on an existing row; the function sees the values
        from before this update.
        """
        model, _ = self._table(table)
        columns = model.__table__.c
        increments = {name: columns[name] + delta for name, delta in deltas.items()}
        for name, expression in (recompute or {}).items():
            increments[name] = expression(columns)
        if 'updated_at' in columns:
            increments['updated_at'] = models.utcnow()
        new_row = dict(keys, **deltas)
        new_row.update(defaults or {})

        dialect = self.session.get_bind().dialect.name
        if dialect in UPSERT_INSERTS:
            statement = UPSERT_INSERTS[dialect](model.__table__).values(**new_row)
            self._execute(model, statement.on_conflict_do_update(index_elements=list(keys), set_=increments))
        else:
            statement = sa.update(model.__table__)
            for name, value in keys.items():
                statement = statement.where(columns[name] == value)
            if self._execute(model, statement.values(**increments)).rowcount == 0:
                self._execute(model, sa.insert(model.__table__).values(**new_row))
        return self.get_one(table, keys)

    def compare_and_set(self, table, ident, expected, patch):
        """
        Apply ``patch`` to row ``ident`` only while its columns still hold ``expected``.

        The check and the write are one UPDATE statement. Returns True when
        this call changed the row.
        """
        model, _ = self._table(table)
        columns = model.__table__.c
        statement = sa.update(model.__table__).where(columns.id == ident)
        for name, value in expected.items():
            statement = statement.where(columns[name] == value)
        return self._execute(model, statement.values(**patch)).rowcount == 1

    @contextmanager
    def transaction(self):
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                try:
                    self.session.commit()
                except IntegrityError as e:
                    self.session.rollback()
                    raise StoreError(classify_integrity_error(e), str(e.orig))
                except SQLAlchemyError as e:
                    self.session.rollback()
                    current_app.logger.error(f"Commit failed: {e}")
                    raise StoreError(UNKNOWN, str(e))
