"""create user, room, membership, question, answer, submission and session tables

Revision ID: 5b2e7c91d0a4
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b2e7c91d0a4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Tables may already exist when the schema was bootstrapped with `flask db-reset`
    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_user_name', 'user', ['name'], unique=True)

    if 'room' not in existing_tables:
        op.create_table(
            'room',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('created_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_room_name', 'room', ['name'], unique=True)

    if 'membership' not in existing_tables:
        op.create_table(
            'membership',
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), primary_key=True),
            sa.Column('room_id', sa.Integer(), sa.ForeignKey('room.id'), primary_key=True),
            sa.Column('has_accepted', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('joined_at', sa.DateTime(), nullable=False),
            sa.CheckConstraint('score >= 0', name='ck_membership_score_non_negative'),
        )

    if 'question' not in existing_tables:
        op.create_table(
            'question',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('room_id', sa.Integer(), sa.ForeignKey('room.id'), nullable=False),
            sa.Column('text', sa.Text(), nullable=False),
        )
        op.create_index('ix_question_room_id', 'question', ['room_id'])

    if 'answer' not in existing_tables:
        op.create_table(
            'answer',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('question_id', sa.Integer(), sa.ForeignKey('question.id'), nullable=False),
            sa.Column('text', sa.Text(), nullable=False),
            sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
        )
        op.create_index('ix_answer_question_id', 'answer', ['question_id'])

    if 'answer_submission' not in existing_tables:
        op.create_table(
            'answer_submission',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('question_id', sa.Integer(), sa.ForeignKey('question.id'), nullable=False),
            sa.Column('answer_id', sa.Integer(), sa.ForeignKey('answer.id'), nullable=False),
            sa.Column('submitted_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint('user_id', 'question_id', name='uq_answer_submission_user_question'),
        )
        op.create_index('ix_answer_submission_user_id', 'answer_submission', ['user_id'])
        op.create_index('ix_answer_submission_question_id', 'answer_submission', ['question_id'])

    if 'session_token' not in existing_tables:
        op.create_table(
            'session_token',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('token_hash', sa.String(length=64), nullable=False),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('issued_at', sa.DateTime(), nullable=False),
            sa.Column('expires_at', sa.DateTime(), nullable=False),
            sa.Column('revoked_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_session_token_token_hash', 'session_token', ['token_hash'], unique=True)
        op.create_index('ix_session_token_user_id', 'session_token', ['user_id'])


def downgrade():
    op.drop_table('session_token')
    op.drop_table('answer_submission')
    op.drop_table('answer')
    op.drop_table('question')
    op.drop_table('membership')
    op.drop_table('room')
    op.drop_table('user')
