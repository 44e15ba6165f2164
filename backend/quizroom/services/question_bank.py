"""Question bank and answer ledger.

Questions and answers are written once by the room admin and never
changed. The ledger keeps one submission per (user, question); its rows
are the authoritative record of what a participant has answered.
"""
from quizroom import db
from quizroom.errors import NotFound
from quizroom.models import Answer, AnswerSubmission, Question


def build_answer(question: Question, text: str, is_correct: bool) -> Answer:
    return Answer(question=question, text=text, is_correct=bool(is_correct))


def create_question(room_id, text: str, answers) -> Question:
    """Stage a question and all of its answers, then flush them together.

    Callers run this inside a unit of work so a failing answer insert rolls
    the question back as well.
    """
    question = Question(room_id=room_id, text=text)
    db.session.add(question)
    for answer in answers:
        db.session.add(build_answer(question, answer['text'], answer['is_correct']))
    db.session.flush()
    return question


def list_questions(room_id):
    return Question.query.filter_by(room_id=room_id).order_by(Question.id.asc()).all()


def get_question_or_404(question_id) -> Question:
    question = db.session.get(Question, question_id)
    if question is None:
        raise NotFound('Question not found')
    return question


def get_answer_for_question(question: Question, answer_id) -> Answer:
    answer = Answer.query.filter_by(id=answer_id, question_id=question.id).first()
    if answer is None:
        raise NotFound('Answer not found for this question')
    return answer


def record_submission(user_id, question: Question, answer: Answer) -> AnswerSubmission:
    """Upsert the user's chosen answer for `question`."""
    submission = AnswerSubmission.query.filter_by(user_id=user_id, question_id=question.id).first()
    if submission is None:
        submission = AnswerSubmission(user_id=user_id, question_id=question.id, answer_id=answer.id)
        db.session.add(submission)
    else:
        submission.answer_id = answer.id
    db.session.flush()
    return submission


def answered_question_ids(user_id, room_id):
    rows = (
        db.session.query(AnswerSubmission.question_id)
        .join(Question, AnswerSubmission.question_id == Question.id)
        .filter(AnswerSubmission.user_id == user_id, Question.room_id == room_id)
        .order_by(AnswerSubmission.question_id.asc())
        .all()
    )
    return [r[0] for r in rows]
