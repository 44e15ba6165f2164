from flask import Blueprint, jsonify, current_app

from quizroom.api import current_session, json_body
from quizroom.errors import InvalidInput
from quizroom.services import workflow
from quizroom.services.sessions import session_ttl


rooms = Blueprint('rooms', __name__)


def _int_field(data, key):
    try:
        return int(data.get(key))
    except (TypeError, ValueError):
        raise InvalidInput(f'{key} must be an integer') from None


@rooms.route('/join', methods=['POST'])
def join_room():
    data = json_body()
    result = workflow.join_room(
        data.get('name'),
        data.get('room_name'),
        as_admin=data.get('is_admin', False),
    )
    resp = jsonify(result)
    resp.set_cookie(
        current_app.config.get('SESSION_TOKEN_COOKIE', 'quiz_session'),
        result['token'],
        max_age=int(session_ttl().total_seconds()),
        httponly=True,
        samesite='Strict',
        path='/',
    )
    return resp


@rooms.route('/<int:room_id>/accept', methods=['POST'])
def accept_quiz(room_id):
    return jsonify(workflow.accept_quiz(current_session(), room_id))


@rooms.route('/<int:room_id>/activate', methods=['POST'])
def activate_room(room_id):
    return jsonify(workflow.set_room_active(current_session(), room_id, True))


@rooms.route('/<int:room_id>/deactivate', methods=['POST'])
def deactivate_room(room_id):
    return jsonify(workflow.set_room_active(current_session(), room_id, False))


@rooms.route('/<int:room_id>/questions', methods=['POST'])
def add_question(room_id):
    data = json_body()
    result = workflow.add_question(current_session(), room_id, data.get('text'), data.get('answers'))
    return jsonify(result), 201


@rooms.route('/<int:room_id>/dashboard', methods=['GET'])
def admin_dashboard(room_id):
    return jsonify(workflow.get_admin_dashboard(current_session(), room_id))


@rooms.route('/<int:room_id>/state', methods=['GET'])
def participant_state(room_id):
    # Waiting room and quiz views poll this to follow activation/acceptance
    return jsonify(workflow.get_participant_state(current_session(), room_id))


@rooms.route('/<int:room_id>/results', methods=['GET'])
def quiz_results(room_id):
    return jsonify(workflow.get_results(current_session(), room_id))


@rooms.route('/questions/<int:question_id>/answer', methods=['POST'])
def submit_answer(question_id):
    data = json_body()
    answer_id = _int_field(data, 'answer_id')
    return jsonify(workflow.submit_answer(current_session(), question_id, answer_id))
