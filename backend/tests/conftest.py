"""
Shared fixtures: an in-memory SQLite database recreated for every test,
a TestClient bound to the application, and factories for users and
questions.
"""

import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from expertcheck.main import app
from expertcheck.database import SessionLocal, create_tables, drop_tables
from expertcheck.models.user import User, ROLE_ADMIN, ROLE_USER
from expertcheck.models.question import Question, Answer, SINGLE_CHOICE
from expertcheck.security import create_access_token, hash_password


@pytest.fixture(autouse=True)
def reset_database():
    drop_tables()
    create_tables()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    def _make_user(username, role=ROLE_USER, password="secret"):
        password_hash, salt = hash_password(password)
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=password_hash,
            password_salt=salt,
            role=role,
            created_at=datetime.now(timezone.utc)
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


def bearer(user):
    return {"Authorization": "Bearer {}".format(
        create_access_token(user.id, user.email, user.role))}


@pytest.fixture
def user(make_user):
    return make_user("alice")


@pytest.fixture
def admin(make_user):
    return make_user("root", role=ROLE_ADMIN)


@pytest.fixture
def user_headers(user):
    return bearer(user)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def make_question(db):
    """
    Create a question with answers given as (text, is_correct) pairs.

    Returns the question id and the list of answer ids in the given order.
    """
    def _make_question(text, competence, answers, question_type=SINGLE_CHOICE):
        question = Question(question_text=text, competence=competence,
                            question_type=question_type)
        db.add(question)
        db.flush()
        answer_ids = []
        for answer_text, correct in answers:
            answer = Answer(question_id=question.id, answer_text=answer_text,
                            is_correct=correct)
            db.add(answer)
            db.flush()
            answer_ids.append(answer.id)
        db.commit()
        return question.id, answer_ids
    return _make_question
