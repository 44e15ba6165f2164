from sqlalchemy import distinct, func

from quizroom import db
from quizroom.models import Answer, AnswerSubmission, Membership, Question


def count_correct_submissions(user_id, room_id) -> int:
    """Number of distinct questions in the room the user currently has right."""
    return (
        db.session.query(func.count(distinct(AnswerSubmission.question_id)))
        .join(Answer, AnswerSubmission.answer_id == Answer.id)
        .join(Question, AnswerSubmission.question_id == Question.id)
        .filter(
            AnswerSubmission.user_id == user_id,
            Question.room_id == room_id,
            Answer.is_correct.is_(True),
        )
        .scalar()
    ) or 0


def recompute_score(membership: Membership) -> int:
    """Refresh the stored score from the answer ledger.

    The score is never incremented in place: at most one point per
    question, however often the question is answered.
    """
    db.session.flush()
    membership.score = count_correct_submissions(membership.user_id, membership.room_id)
    db.session.add(membership)
    return membership.score
