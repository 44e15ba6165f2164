"""Room lifecycle and scoring workflow.

Every operation here is one unit of work: it either commits all of its
writes or none of them. Callers pass the resolved `SessionContext`
explicitly (``None`` when the request carried no valid token); failures are
raised as `quizroom.errors.WorkflowError` subclasses.

Participant state for a room is two independent flags, ``room.is_active``
and ``membership.has_accepted``. Only when both are true does the
participant see the quiz; otherwise they wait.
"""
from typing import Optional

from flask import current_app

from quizroom.errors import Forbidden, InvalidInput, NotFound
from quizroom.services import directory, question_bank, rooms, scoring
from quizroom.services.sessions import SessionContext, issue_session, require_session, revoke_session
from quizroom.services.transactions import retry_on_conflict, unit_of_work


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def _require_bool(value, field):
    # JSON strings like "false" must not pass as flags
    if not isinstance(value, bool):
        raise InvalidInput(f'{field} must be true or false')
    return value


@retry_on_conflict
def join_room(name, room_name, as_admin=False):
    """Get-or-create the user, resolve or create the room, and issue a session.

    Only admins may create rooms, and only the creator may join an existing
    room as admin. Participants get a pending membership on first join.
    """
    name, room_name = _clean(name), _clean(room_name)
    if not name or not room_name:
        raise InvalidInput('Name and room name are required')
    _require_bool(as_admin, 'is_admin')

    with unit_of_work('join_room'):
        user = directory.get_or_create_user(name)
        room = rooms.find_room_by_name(room_name)
        if room is None:
            if not as_admin:
                raise NotFound('Room does not exist. Only admins can create new rooms.')
            room = rooms.create_room(room_name, user)
            current_app.logger.info(f"[join] room={room.id} created name={room.name!r} admin={user.id}")
        elif as_admin and not room.is_admin(user.id):
            raise Forbidden('You are not the admin of this room')

        if not as_admin:
            rooms.upsert_membership(user, room)

        token, session_row = issue_session(user)
        result = {
            'room_id': room.id,
            'user_id': user.id,
            'is_admin': as_admin,
            'token': token,
            'expires_at': session_row.expires_at.isoformat(),
            'next_view': 'admin' if as_admin else 'waiting',
        }
    current_app.logger.info(f"[join] user={result['user_id']} room={result['room_id']} admin={result['is_admin']}")
    return result


def accept_quiz(ctx: Optional[SessionContext], room_id):
    ctx = require_session(ctx)
    with unit_of_work('accept_quiz'):
        rooms.get_room_or_404(room_id)
        membership = rooms.get_membership(ctx.user_id, room_id)
        if membership is None:
            raise NotFound('You have not joined this room')
        if not membership.has_accepted:
            membership.has_accepted = True
            current_app.logger.info(f"[accept] user={ctx.user_id} room={room_id}")
    return {'success': True}


def set_room_active(ctx: Optional[SessionContext], room_id, active: bool):
    """Open or close the room. Acceptances and scores are left as they are."""
    ctx = require_session(ctx)
    verb = 'activate' if active else 'deactivate'
    with unit_of_work(f'{verb}_room'):
        room = rooms.get_admin_room(room_id, ctx.user_id, f'{verb} the room')
        room.is_active = bool(active)
        current_app.logger.info(f"[{verb}] room={room.id} by user={ctx.user_id}")
        result = {'success': True, 'room': room.to_dict()}
    return result


def validate_question(text, answers):
    """Return the cleaned question text and its non-blank answers.

    Raises `InvalidInput` with the first problem found.
    """
    text = _clean(text)
    if not text:
        raise InvalidInput('Question text is required')
    if not isinstance(answers, (list, tuple)):
        raise InvalidInput('Answers must be a list')

    filled = []
    for answer in answers:
        if not isinstance(answer, dict):
            raise InvalidInput('Each answer needs a text and an is_correct flag')
        answer_text = _clean(answer.get('text'))
        is_correct = _require_bool(answer.get('is_correct', False), 'is_correct')
        if answer_text:
            filled.append({'text': answer_text, 'is_correct': is_correct})

    if len(filled) < 2:
        raise InvalidInput('At least two answers are required')
    if not any(a['is_correct'] for a in filled):
        raise InvalidInput('At least one answer must be marked as correct')
    return text, filled


def add_question(ctx: Optional[SessionContext], room_id, text, answers):
    ctx = require_session(ctx)
    with unit_of_work('add_question'):
        room = rooms.get_admin_room(room_id, ctx.user_id, 'add questions')
        text, filled = validate_question(text, answers)
        question = question_bank.create_question(room.id, text, filled)
        question_id = question.id
    current_app.logger.info(f"[question] room={room_id} question={question_id} answers={len(filled)}")
    return {'success': True, 'question_id': question_id}


@retry_on_conflict
def submit_answer(ctx: Optional[SessionContext], question_id, answer_id):
    """Record the participant's answer and refresh their score.

    Resubmitting replaces the recorded answer. The score is recomputed from
    the ledger, so a question counts at most once.
    """
    ctx = require_session(ctx)
    with unit_of_work('submit_answer'):
        question = question_bank.get_question_or_404(question_id)
        answer = question_bank.get_answer_for_question(question, answer_id)
        # Locked before the ledger write so the recount sees every committed answer
        membership = rooms.get_membership(ctx.user_id, question.room_id, for_update=True)
        if membership is None:
            raise Forbidden('You have not joined this room')
        if not (question.room.is_active and membership.has_accepted):
            raise Forbidden('The quiz is not open for you yet')

        question_bank.record_submission(ctx.user_id, question, answer)
        score = scoring.recompute_score(membership)
        result = {'success': True, 'is_correct': answer.is_correct, 'score': score}
    current_app.logger.info(
        f"[answer] user={ctx.user_id} question={question_id} answer={answer_id} correct={result['is_correct']} score={score}"
    )
    return result


def get_results(ctx: Optional[SessionContext], room_id):
    """Participants ranked by score; ties keep join order, then user id."""
    ctx = require_session(ctx)
    with unit_of_work('get_results'):
        rooms.get_admin_room(room_id, ctx.user_id, 'view results')
        participants = [
            {
                'user_id': m.user_id,
                'name': m.user.name,
                'score': m.score,
                'has_accepted': m.has_accepted,
            }
            for m in rooms.list_memberships(room_id, ranked=True)
        ]
    return {'success': True, 'participants': participants}


def get_admin_dashboard(ctx: Optional[SessionContext], room_id):
    ctx = require_session(ctx)
    with unit_of_work('load_dashboard'):
        room = rooms.get_admin_room(room_id, ctx.user_id, 'view the dashboard')
        dashboard = {
            'room': room.to_dict(),
            'participants': [m.to_dict() for m in rooms.list_memberships(room.id)],
            'questions': [q.to_dict(include_correct=True) for q in question_bank.list_questions(room.id)],
        }
    return dashboard


def get_participant_state(ctx: Optional[SessionContext], room_id):
    """What a participant should see right now: the quiz or the waiting room."""
    ctx = require_session(ctx)
    with unit_of_work('load_participant_state'):
        room = rooms.get_room_or_404(room_id)
        membership = rooms.get_membership(ctx.user_id, room.id)
        if membership is None:
            raise NotFound('You have not joined this room')

        state = {
            'room': room.to_dict(),
            'user_name': membership.user.name,
            'has_accepted': membership.has_accepted,
            'score': membership.score,
            'view': 'quiz' if room.is_active and membership.has_accepted else 'waiting',
        }
        if state['view'] == 'quiz':
            questions = question_bank.list_questions(room.id)
            answered = question_bank.answered_question_ids(ctx.user_id, room.id)
            answered_set = set(answered)
            state['questions'] = [q.to_dict() for q in questions]
            state['answered_question_ids'] = answered
            state['current_question_id'] = next(
                (q.id for q in questions if q.id not in answered_set), None
            )
    return state


def get_session_user(ctx: Optional[SessionContext]):
    ctx = require_session(ctx)
    user = ctx.user
    if user is None:
        raise NotFound('User not found')
    return {'success': True, 'user': user.to_dict(), 'expires_at': ctx.expires_at.isoformat()}


def logout(ctx: Optional[SessionContext]):
    ctx = require_session(ctx)
    with unit_of_work('logout'):
        revoke_session(ctx)
    return {'success': True}
