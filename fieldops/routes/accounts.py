from flask import Blueprint, request, jsonify

from ..accounts import compute_accounts_summary
from ..expenses import load_sheet, save_sheet, salary_line_for_employee
from ..store import RecordStore
from ..validation import current_month, validate_month_key, require_fields

accounts_bp = Blueprint('accounts', __name__, url_prefix='/accounts')

@accounts_bp.route('/summary', methods=['GET'])
def summary():
    month = request.args.get('month') or current_month()
    result = compute_accounts_summary(RecordStore(), month)
    return jsonify(result.model_dump(mode='json'))

@accounts_bp.route('/expenses/<month>', methods=['GET'])
def get_expenses(month):
    sheet = load_sheet(RecordStore(), month)
    return jsonify(sheet.model_dump(mode='json'))

@accounts_bp.route('/expenses/<month>', methods=['PUT'])
def put_expenses(month):
    validate_month_key(month)
    payload = request.get_json(silent=True) or {}
    payload['month'] = month
    sheet = save_sheet(RecordStore(), payload)
    return jsonify({'message': 'Month data saved successfully', 'sheet': sheet.model_dump(mode='json')})

@accounts_bp.route('/salary-line', methods=['GET'])
def salary_line():
    require_fields(request.args, 'employee')
    line = salary_line_for_employee(RecordStore(), request.args['employee'])
    return jsonify(line.model_dump(mode='json'))
