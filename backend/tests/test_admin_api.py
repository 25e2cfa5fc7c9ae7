"""API tests for question bank administration."""

import pytest

from expertcheck.models.question import Question, Answer, MULTIPLE_CHOICE
from expertcheck.models.user_answer import UserAnswer


@pytest.mark.parametrize("method, path", [
    ("get", "/api/admin/questions"),
    ("post", "/api/admin/questions"),
    ("put", "/api/admin/questions/1"),
    ("delete", "/api/admin/questions/1"),
    ("get", "/api/admin/questions/1/check"),
    ("post", "/api/admin/answers"),
    ("put", "/api/admin/answers/1"),
    ("delete", "/api/admin/answers/1"),
    ("get", "/api/admin/stats"),
])
def test_admin_routes_are_gated(client, user_headers, method, path):
    kwargs = {"json": {}} if method in ("post", "put") else {}

    anonymous = getattr(client, method)(path, **kwargs)
    assert anonymous.status_code == 401
    assert anonymous.json()["success"] is False

    regular = getattr(client, method)(path, headers=user_headers, **kwargs)
    assert regular.status_code == 403
    assert regular.json()["success"] is False


def test_create_question_defaults_to_single_choice(client, db, admin_headers):
    resp = client.post("/api/admin/questions", headers=admin_headers, json={
        "question_text": "  What does ACID stand for?  ",
        "competence": "SQL",
    })

    assert resp.status_code == 201
    question = resp.json()["question"]
    assert question["question_type"] == "single_choice"
    assert question["question_text"] == "What does ACID stand for?"
    assert db.get(Question, question["id"]).competence == "SQL"


@pytest.mark.parametrize("body", [
    {"competence": "SQL"},
    {"question_text": "Q?"},
    {"question_text": "  ", "competence": "SQL"},
])
def test_create_question_requires_text_and_competence(client, admin_headers, body):
    resp = client.post("/api/admin/questions", headers=admin_headers, json=body)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_create_question_rejects_unknown_type(client, admin_headers):
    resp = client.post("/api/admin/questions", headers=admin_headers, json={
        "question_text": "Q?", "competence": "SQL", "question_type": "essay",
    })
    assert resp.status_code == 400


def test_list_questions_nests_answers(client, admin_headers, make_question):
    q1, a1 = make_question("Q1", "SQL", [("A", True), ("B", False)])
    q2, _ = make_question("Q2", "Algorithms", [])

    body = client.get("/api/admin/questions", headers=admin_headers).json()

    assert [q["id"] for q in body["questions"]] == [q1, q2]
    first = body["questions"][0]
    assert [(a["id"], a["is_correct"]) for a in first["answers"]] == [(a1[0], True), (a1[1], False)]
    assert body["questions"][1]["answers"] == []


def test_update_question_changes_only_given_fields(client, db, admin_headers, make_question):
    qid, _ = make_question("Old text", "SQL", [("A", True)])

    resp = client.put("/api/admin/questions/{}".format(qid), headers=admin_headers,
                      json={"question_type": MULTIPLE_CHOICE})

    assert resp.status_code == 200
    question = resp.json()["question"]
    assert question["question_text"] == "Old text"
    assert question["question_type"] == MULTIPLE_CHOICE
    assert question["updated_at"] is not None


def test_update_missing_question(client, admin_headers):
    resp = client.put("/api/admin/questions/999", headers=admin_headers,
                      json={"question_text": "x"})
    assert resp.status_code == 404


def test_delete_question_removes_dependents(client, db, admin_headers, user_headers, make_question):
    qid, answers = make_question("Q", "SQL", [("A", True), ("B", False)])
    other_qid, other_answers = make_question("Other", "SQL", [("C", True)])
    client.post("/api/results/save", headers=user_headers, json={
        "answers": [{"questionId": qid, "answerIds": [answers[0]]},
                    {"questionId": other_qid, "answerIds": [other_answers[0]]}],
        "questions": [],
    })

    check = client.get("/api/admin/questions/{}/check".format(qid), headers=admin_headers).json()
    assert check["stats"]["usedInTests"] == 1
    assert check["stats"]["usedByUsers"] == 1
    assert check["stats"]["canDelete"] is False

    resp = client.delete("/api/admin/questions/{}".format(qid), headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["stats"] == {"answersDeleted": 2, "userAnswersDeleted": 1}
    assert db.get(Question, qid) is None
    assert db.query(Answer).filter_by(question_id=qid).count() == 0
    assert db.query(UserAnswer).filter_by(question_id=qid).count() == 0
    assert db.query(UserAnswer).filter_by(question_id=other_qid).count() == 1


def test_check_unused_question(client, admin_headers, make_question):
    qid, _ = make_question("Q", "SQL", [("A", True)])
    stats = client.get("/api/admin/questions/{}/check".format(qid), headers=admin_headers).json()["stats"]
    assert stats == {"questionId": qid, "usedInTests": 0, "usedByUsers": 0, "canDelete": True}


def test_delete_missing_question(client, admin_headers):
    resp = client.delete("/api/admin/questions/999", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_answer_crud(client, db, admin_headers, make_question):
    qid, _ = make_question("Q", "SQL", [])

    created = client.post("/api/admin/answers", headers=admin_headers, json={
        "question_id": qid, "answer_text": "HAVING", "is_correct": True,
    })
    assert created.status_code == 201
    answer_id = created.json()["answer"]["id"]

    updated = client.put("/api/admin/answers/{}".format(answer_id), headers=admin_headers,
                         json={"is_correct": False})
    assert updated.status_code == 200
    assert updated.json()["answer"]["answer_text"] == "HAVING"
    assert updated.json()["answer"]["is_correct"] is False

    deleted = client.delete("/api/admin/answers/{}".format(answer_id), headers=admin_headers)
    assert deleted.status_code == 200
    assert db.get(Answer, answer_id) is None


def test_create_answer_validation(client, admin_headers):
    missing = client.post("/api/admin/answers", headers=admin_headers, json={"answer_text": "x"})
    assert missing.status_code == 400

    unknown = client.post("/api/admin/answers", headers=admin_headers,
                          json={"question_id": 999, "answer_text": "x"})
    assert unknown.status_code == 404


def test_update_and_delete_missing_answer(client, admin_headers):
    assert client.put("/api/admin/answers/999", headers=admin_headers,
                      json={"answer_text": "x"}).status_code == 404
    assert client.delete("/api/admin/answers/999", headers=admin_headers).status_code == 404


def test_delete_answer_used_in_results_is_rejected(client, db, admin_headers, user_headers, make_question):
    qid, answers = make_question("Q", "SQL", [("A", True), ("B", False)])
    client.post("/api/results/save", headers=user_headers, json={
        "answers": [{"questionId": qid, "answerIds": [answers[1]]}],
        "questions": [],
    })

    resp = client.delete("/api/admin/answers/{}".format(answers[1]), headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert db.get(Answer, answers[1]) is not None


def test_admin_stats(client, admin_headers, make_question):
    make_question("Q1", "SQL", [("A", True), ("B", False)])
    stats = client.get("/api/admin/stats", headers=admin_headers).json()["stats"]
    assert stats["total_questions"] == 1
    assert stats["total_answers"] == 2
    assert stats["total_users"] >= 1
    assert stats["total_test_results"] == 0
