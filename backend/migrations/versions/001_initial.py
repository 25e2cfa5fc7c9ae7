"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all database tables for the Expert Test backend:
- users: Accounts with role (admin | user)
- questions: Question bank grouped by competence
- answers: Answer options with correctness flag
- test_results: One row per completed test attempt
- competence_results: Per-competence sub-scores of an attempt
- user_answers: Selected answer options with the question verdict

Also creates indexes for common query patterns.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Users Table ───────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('password_salt', sa.String(64), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )

    # ── Questions Table ───────────────────────────────────────
    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('competence', sa.String(255), nullable=False),
        sa.Column('question_type', sa.String(20), nullable=False,
                  server_default='single_choice'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_questions_competence', 'questions', ['competence'])

    # ── Answers Table ─────────────────────────────────────────
    op.create_table(
        'answers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('questions.id'), nullable=False),
        sa.Column('answer_text', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_answers_question_id', 'answers', ['question_id'])

    # ── Test Results Table ────────────────────────────────────
    op.create_table(
        'test_results',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id'), nullable=False),
        sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('percentage', sa.Float(), nullable=False, server_default='0'),
        sa.Column('completed_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_test_results_user_id', 'test_results', ['user_id'])
    op.create_index('ix_test_results_completed_at', 'test_results', ['completed_at'])

    # ── Competence Results Table ──────────────────────────────
    op.create_table(
        'competence_results',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_result_id', sa.Integer(),
                  sa.ForeignKey('test_results.id'), nullable=False),
        sa.Column('competence', sa.String(255), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('percentage', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_index('ix_competence_results_test_result_id',
                    'competence_results', ['test_result_id'])

    # ── User Answers Table ────────────────────────────────────
    op.create_table(
        'user_answers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_result_id', sa.Integer(),
                  sa.ForeignKey('test_results.id'), nullable=False),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('questions.id'), nullable=False),
        sa.Column('answer_id', sa.Integer(),
                  sa.ForeignKey('answers.id'), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_user_answers_test_result_id', 'user_answers', ['test_result_id'])
    op.create_index('ix_user_answers_question_id', 'user_answers', ['question_id'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index('ix_user_answers_question_id', table_name='user_answers')
    op.drop_index('ix_user_answers_test_result_id', table_name='user_answers')
    op.drop_table('user_answers')
    op.drop_index('ix_competence_results_test_result_id', table_name='competence_results')
    op.drop_table('competence_results')
    op.drop_index('ix_test_results_completed_at', table_name='test_results')
    op.drop_index('ix_test_results_user_id', table_name='test_results')
    op.drop_table('test_results')
    op.drop_index('ix_answers_question_id', table_name='answers')
    op.drop_table('answers')
    op.drop_index('ix_questions_competence', table_name='questions')
    op.drop_table('questions')
    op.drop_table('users')
