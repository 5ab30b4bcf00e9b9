from datetime import date

from flask import Blueprint, request, jsonify

from ..attendance import list_attendance, mark_attendance, update_attendance_time, summarize_attendance
from ..store import RecordStore
from ..validation import parse_date, parse_id, require_fields

attendance_bp = Blueprint('attendance', __name__, url_prefix='/attendance')

@attendance_bp.route('', methods=['GET'])
def view_attendance():
    on_date = parse_date(request.args.get('date') or date.today())
    records = list_attendance(RecordStore(), on_date)
    summary = summarize_attendance(records)
    return jsonify({
        'date': on_date.isoformat(),
        'records': [r.model_dump(mode='json') for r in records],
        'summary': summary.to_dict('records'),
    })

@attendance_bp.route('/mark', methods=['POST'])
def mark():
    payload = request.get_json(silent=True) or {}
    require_fields(payload, 'employee_id', 'date', 'status')
    employee_id = parse_id(payload['employee_id'], 'employee_id')
    record = mark_attendance(RecordStore(), employee_id, parse_date(payload['date']), payload['status'])
    return jsonify(record.model_dump(mode='json'))

@attendance_bp.route('/time', methods=['POST'])
def record_time():
    payload = request.get_json(silent=True) or {}
    require_fields(payload, 'employee_id', 'date')
    result = update_attendance_time(
        RecordStore(), parse_id(payload['employee_id'], 'employee_id'), parse_date(payload['date']),
        payload.get('check_in_time'), payload.get('check_out_time'))
    return jsonify(result.model_dump(mode='json'))
