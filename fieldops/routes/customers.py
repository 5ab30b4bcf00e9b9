from flask import Blueprint, request, jsonify

from ..payroll import (
    create_customer_record, update_customer_record, update_payment_status, complete_task
)
from ..store import RecordStore
from ..validation import require_fields

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')

@customers_bp.route('', methods=['POST'])
def add_customer():
    record = create_customer_record(RecordStore(), request.get_json(silent=True) or {})
    return jsonify(record.model_dump(mode='json')), 201

@customers_bp.route('/<int:record_id>', methods=['PUT'])
def edit_customer(record_id):
    record = update_customer_record(RecordStore(), record_id, request.get_json(silent=True) or {})
    return jsonify(record.model_dump(mode='json'))

@customers_bp.route('/<int:record_id>/payment', methods=['POST'])
def payment(record_id):
    payload = request.get_json(silent=True) or {}
    require_fields(payload, 'payment_status')
    record = update_payment_status(
        RecordStore(), record_id, payload['payment_status'], payload.get('amount_paid'))
    return jsonify(record.model_dump(mode='json'))

@customers_bp.route('/<int:record_id>/complete', methods=['POST'])
def complete(record_id):
    result = complete_task(RecordStore(), record_id)
    message = (f"Task completed! Revenue of {result.per_employee_amount:.2f} distributed "
               f"to each of {result.employee_count} employees")
    return jsonify({'message': message, **result.model_dump(mode='json')})
