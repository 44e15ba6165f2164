from flask import g, request
from flask_login import current_user

from quizroom.errors import InvalidInput


def current_session():
    """The caller's SessionContext, or None when no valid token was sent."""
    # Touching current_user runs the Flask-Login request loader for this request
    if not current_user.is_authenticated:
        return None
    return g.get('quiz_session')


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data
