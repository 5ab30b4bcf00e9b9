from flask import Blueprint, request, jsonify

from ..ledger import list_tasks, assign_employee, update_task_status
from ..store import RecordStore
from ..validation import parse_id, require_fields

tasks_bp = Blueprint('tasks', __name__, url_prefix='/tasks')

@tasks_bp.route('', methods=['GET'])
def view_tasks():
    views = list_tasks(RecordStore())
    return jsonify([v.model_dump(mode='json') for v in views])

@tasks_bp.route('/assign', methods=['POST'])
def assign():
    payload = request.get_json(silent=True) or {}
    require_fields(payload, 'booking_id', 'employee_id')
    booking_id = parse_id(payload['booking_id'], 'booking_id')
    employee_id = parse_id(payload['employee_id'], 'employee_id')
    assignment = assign_employee(RecordStore(), booking_id, employee_id, payload.get('notes'))
    return jsonify(assignment.model_dump(mode='json')), 201

@tasks_bp.route('/<int:assignment_id>/status', methods=['POST'])
def change_status(assignment_id):
    payload = request.get_json(silent=True) or {}
    require_fields(payload, 'status')
    change = update_task_status(RecordStore(), assignment_id, payload['status'])
    return jsonify({
        'message': f"Task marked as {change.assignment.status.lower()}",
        **change.model_dump(mode='json'),
    })
