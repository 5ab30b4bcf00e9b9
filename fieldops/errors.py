"""Error types shared by the store, the business rules and the blueprints."""

NOT_FOUND = 'not_found'
UNIQUE_VIOLATION = 'unique_violation'
CHECK_VIOLATION = 'check_violation'
NOT_NULL_VIOLATION = 'not_null_violation'
INVALID_ROW = 'invalid_row'
UNKNOWN = 'unknown'

# SQLSTATE values reported by PostgreSQL drivers
PG_CODES = {
    '23505': UNIQUE_VIOLATION,
    '23514': CHECK_VIOLATION,
    '23502': NOT_NULL_VIOLATION,
}

USER_MESSAGES = {
    NOT_FOUND: 'Record not found',
    UNIQUE_VIOLATION: 'A record with this information already exists',
    CHECK_VIOLATION: 'Invalid data format. Please check your inputs',
    NOT_NULL_VIOLATION: 'Required field is missing. Please fill all required fields',
    INVALID_ROW: 'A stored record has invalid data and needs correcting',
}

HTTP_STATUS = {
    NOT_FOUND: 404,
    UNIQUE_VIOLATION: 409,
    CHECK_VIOLATION: 400,
    NOT_NULL_VIOLATION: 400,
}


class ValidationError(ValueError):
    """Input rejected before anything was written."""


class StoreError(Exception):
    """A read or write against the record store failed."""

    def __init__(self, code, message):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def user_message(self):
        if self.code in USER_MESSAGES:
            return USER_MESSAGES[self.code]
        if self.message:
            return f"Database error: {self.message}"
        return 'Operation failed, please try again'

    @property
    def http_status(self):
        return HTTP_STATUS.get(self.code, 500)


def classify_integrity_error(exc):
    """Map a DBAPI integrity error onto one of the store error codes."""
    orig = getattr(exc, 'orig', exc)
    pgcode = getattr(orig, 'pgcode', None) or getattr(orig, 'sqlstate', None)
    if pgcode in PG_CODES:
        return PG_CODES[pgcode]
    text = str(orig).upper()
    if 'UNIQUE' in text:
        return UNIQUE_VIOLATION
    if 'NOT NULL' in text:
        return NOT_NULL_VIOLATION
    if 'CHECK' in text:
        return CHECK_VIOLATION
    return UNKNOWN
