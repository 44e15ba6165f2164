from flask import Blueprint, jsonify, current_app
from flask_login import login_required

from quizroom.api import current_session
from quizroom.services import workflow

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the quiz room server!'})


@main.route('/session', methods=['GET'])
@login_required
def check_session():
    return jsonify(workflow.get_session_user(current_session()))


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    resp = jsonify(workflow.logout(current_session()))
    resp.delete_cookie(current_app.config.get('SESSION_TOKEN_COOKIE', 'quiz_session'), path='/')
    return resp
