from datetime import datetime, timezone

from flask_login import UserMixin

from quizroom import db


def utcnow():
    """Naive UTC timestamp; SQLite drops tzinfo so we store naive values everywhere."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    # Name is the lookup key for get-or-create, so it is unique in storage
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }


class Room(db.Model):
    __tablename__ = 'room'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    is_active = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def is_admin(self, user_id):
        return user_id is not None and self.created_by == user_id

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_by': self.created_by,
            'is_active': self.is_active,
        }


class Membership(db.Model):
    __tablename__ = 'membership'
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), primary_key=True)
    has_accepted = db.Column(db.Boolean, default=False, nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    joined_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint('score >= 0', name='ck_membership_score_non_negative'),
    )

    user = db.relationship('User')

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'name': self.user.name if self.user else None,
            'room_id': self.room_id,
            'has_accepted': self.has_accepted,
            'score': self.score,
        }


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)

    room = db.relationship('Room')
    answers = db.relationship('Answer', back_populates='question', order_by='Answer.id')

    def to_dict(self, include_correct=False):
        return {
            'id': self.id,
            'room_id': self.room_id,
            'text': self.text,
            'answers': [a.to_dict(include_correct=include_correct) for a in self.answers],
        }


class Answer(db.Model):
    __tablename__ = 'answer'
    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)

    question = db.relationship('Question', back_populates='answers')

    def to_dict(self, include_correct=False):
        data = {
            'id': self.id,
            'text': self.text,
        }
        if include_correct:
            data['is_correct'] = self.is_correct
        return data


class AnswerSubmission(db.Model):
    __tablename__ = 'answer_submission'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False, index=True)
    answer_id = db.Column(db.Integer, db.ForeignKey('answer.id'), nullable=False)
    submitted_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'question_id', name='uq_answer_submission_user_question'),
    )


class SessionToken(db.Model):
    __tablename__ = 'session_token'
    id = db.Column(db.Integer, primary_key=True)
    # Only a digest is stored; the raw token lives client-side
    token_hash = db.Column(db.String(64), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    issued_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    revoked_at = db.Column(db.DateTime, nullable=True)

    def is_valid(self, now=None):
        now = now or utcnow()
        return self.revoked_at is None and now < self.expires_at
