"""Closed error taxonomy for quiz room operations.

Services raise these; the app factory registers `render_workflow_error`
so each one reaches the client as ``{"error": ..., "kind": ...}`` with a
matching status code. Storage errors never leak: the unit of work in
`quizroom.services.transactions` converts them first.
"""
from flask import jsonify


class WorkflowError(Exception):
    status_code = 500
    default_message = 'Something went wrong'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self):
        return type(self).__name__

    def to_dict(self):
        return {'error': self.message, 'kind': self.kind}


class Unauthenticated(WorkflowError):
    status_code = 401
    default_message = 'User not authenticated'


class Forbidden(WorkflowError):
    status_code = 403
    default_message = 'You are not allowed to do that'


class NotFound(WorkflowError):
    status_code = 404
    default_message = 'Not found'


class InvalidInput(WorkflowError):
    status_code = 400
    default_message = 'Invalid input'


class Conflict(WorkflowError):
    status_code = 409
    default_message = 'That record was changed by another request, please retry'


class Internal(WorkflowError):
    status_code = 500


def render_workflow_error(error: WorkflowError):
    return jsonify(error.to_dict()), error.status_code
