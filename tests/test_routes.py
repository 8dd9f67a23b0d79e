from conftest import login_headers

from bharatrewards.db.kv_store import KeyValueStore
from bharatrewards.services.storage_service import CUSTOM_QUESTIONS_KEY


def issue_puzzles(client, admin_headers, headers, answers):
    """Add one custom puzzle per answer and fetch them as a quiz.

    Returns (question id, answer) pairs in the order they were served.
    """
    by_text = {}
    for i, answer in enumerate(answers):
        text = f"Riddle {i}"
        client.post("/admin/questions", headers=admin_headers, json={
            "type": "PUZZLE", "questionText": text, "correctAnswer": answer,
        })
        by_text[text] = answer

    body = client.get("/quiz/PUZZLE", params={"count": len(answers)}, headers=headers).json()
    return [(q["id"], by_text[q["questionText"]]) for q in body["questions"]]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestAuthRoutes:
    def test_register_returns_token_and_user(self, client):
        response = client.post("/auth/register", json={"name": "A", "email": "a@x.com", "password": "pw"})
        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["name"] == "A"
        assert "password" not in body["user"]

    def test_duplicate_register(self, client):
        payload = {"name": "A", "email": "a@x.com", "password": "pw"}
        client.post("/auth/register", json=payload)
        response = client.post("/auth/register", json=payload)
        assert response.status_code == 400

    def test_bad_login(self, client, user_headers):
        response = client.post("/auth/login", json={"email": "asha@x.com", "password": "nope"})
        assert response.status_code == 401

    def test_me_and_logout(self, client, user_headers):
        me = client.get("/auth/me", headers=user_headers)
        assert me.status_code == 200
        assert me.json()["email"] == "asha@x.com"
        assert me.json()["walletBalance"] == 0

        assert client.post("/auth/logout", headers=user_headers).status_code == 204
        assert client.get("/auth/me", headers=user_headers).status_code == 401

    def test_requires_token(self, client):
        assert client.get("/auth/me").status_code in (401, 403)


class TestQuizRoutes:
    def test_fallback_quiz_without_credential(self, client, user_headers):
        response = client.get("/quiz/MATH", params={"count": 3}, headers=user_headers)
        assert response.status_code == 200
        body = response.json()
        assert len(body["questions"]) == 3
        assert body["sources"]["FALLBACK"] == 3
        assert body["fallbackUsed"] is True
        assert all(q["source"] == "FALLBACK" for q in body["questions"])

    def test_custom_questions_come_first(self, client, admin_headers, user_headers):
        created = client.post("/admin/questions", headers=admin_headers, json={
            "type": "PUZZLE", "questionText": "What has hands but cannot clap?", "correctAnswer": "clock",
        })
        assert created.status_code == 201

        body = client.get("/quiz/PUZZLE", params={"count": 2}, headers=user_headers).json()
        assert body["questions"][0]["id"] == created.json()["id"]
        assert body["questions"][0]["source"] == "CUSTOM"
        assert body["sources"] == {"CUSTOM": 1, "GENERATED": 0, "FALLBACK": 1}

    def test_unknown_category(self, client, user_headers):
        assert client.get("/quiz/HISTORY", headers=user_headers).status_code == 422

    def test_count_limits(self, client, user_headers):
        assert client.get("/quiz/MATH", params={"count": 0}, headers=user_headers).status_code == 422
        assert client.get("/quiz/MATH", params={"count": 500}, headers=user_headers).status_code == 422

    def test_questions_are_sent_without_answers(self, client, user_headers):
        body = client.get("/quiz/MATH", params={"count": 3}, headers=user_headers).json()
        assert all("correctAnswer" not in q for q in body["questions"])

    def test_correct_answer_earns_points(self, client, admin_headers, user_headers):
        [(question_id, answer)] = issue_puzzles(client, admin_headers, user_headers, ["clock"])

        response = client.post("/quiz/check", headers=user_headers, json={
            "questionId": question_id, "userAnswer": answer,
        })
        body = response.json()
        assert body["correct"] is True
        assert body["correctAnswer"] == "clock"
        assert body["pointsAwarded"] == 10
        assert body["user"]["points"] == 10
        assert body["user"]["solvedCount"] == 1
        assert client.get("/auth/me", headers=user_headers).json()["points"] == 10

    def test_wrong_answer_earns_nothing(self, client, admin_headers, user_headers):
        [(question_id, _)] = issue_puzzles(client, admin_headers, user_headers, ["clock"])

        body = client.post("/quiz/check", headers=user_headers, json={
            "questionId": question_id, "userAnswer": "watch",
        }).json()
        assert body["correct"] is False
        assert body["correctAnswer"] == "clock"
        assert body["pointsAwarded"] == 0

    def test_self_graded_answer_earns_nothing(self, client, user_headers):
        client.get("/quiz/MATH", params={"count": 3}, headers=user_headers)

        for _ in range(3):
            response = client.post("/quiz/check", headers=user_headers, json={
                "questionId": "made-up", "correctAnswer": "x", "userAnswer": "x",
            })
            assert response.status_code == 404
        assert client.get("/auth/me", headers=user_headers).json()["points"] == 0

    def test_question_can_be_answered_once(self, client, admin_headers, user_headers):
        [(question_id, answer)] = issue_puzzles(client, admin_headers, user_headers, ["clock"])
        payload = {"questionId": question_id, "userAnswer": answer}

        assert client.post("/quiz/check", headers=user_headers, json=payload).status_code == 200
        assert client.post("/quiz/check", headers=user_headers, json=payload).status_code == 404
        assert client.get("/auth/me", headers=user_headers).json()["points"] == 10

    def test_questions_belong_to_the_session(self, client, admin_headers, user_headers):
        [(question_id, answer)] = issue_puzzles(client, admin_headers, user_headers, ["clock"])
        client.post("/auth/register", json={"name": "B", "email": "b@x.com", "password": "pw"})
        other = login_headers(client, "b@x.com", "pw")

        response = client.post("/quiz/check", headers=other, json={"questionId": question_id, "userAnswer": answer})
        assert response.status_code == 404
        assert client.get("/auth/me", headers=other).json()["points"] == 0


class TestRedeemFlow:
    def _earn(self, client, admin_headers, headers, times):
        for question_id, answer in issue_puzzles(client, admin_headers, headers, ["a", "b", "c"][:times]):
            client.post("/quiz/check", headers=headers, json={"questionId": question_id, "userAnswer": answer})

    def test_request_and_approve(self, client, admin_headers, user_headers):
        client.put("/admin/settings", headers=admin_headers, json={
            "minRedeemPoints": 20, "pointsPerQuestion": 10, "currencyRate": 10,
        })
        self._earn(client, admin_headers, user_headers, 3)

        created = client.post("/redeem", headers=user_headers, json={"points": 20})
        assert created.status_code == 201
        request = created.json()
        assert request["status"] == "PENDING"
        assert request["amount"] == 2.0
        assert client.get("/auth/me", headers=user_headers).json()["points"] == 10

        mine = client.get("/redeem", headers=user_headers).json()
        assert [r["id"] for r in mine] == [request["id"]]

        approved = client.post(f"/admin/redeem-requests/{request['id']}/approve", headers=admin_headers)
        assert approved.status_code == 200
        assert approved.json()["status"] == "APPROVED"

        again = client.post(f"/admin/redeem-requests/{request['id']}/reject", headers=admin_headers)
        assert again.status_code == 409

        users = client.get("/admin/users", headers=admin_headers).json()
        asha = next(u for u in users if u["email"] == "asha@x.com")
        assert asha["walletBalance"] == 2.0

    def test_below_minimum(self, client, user_headers):
        response = client.post("/redeem", headers=user_headers, json={"points": 10})
        assert response.status_code == 400

    def test_unknown_request(self, client, admin_headers):
        response = client.post("/admin/redeem-requests/missing/approve", headers=admin_headers)
        assert response.status_code == 404

    def test_bad_decision(self, client, admin_headers):
        response = client.post("/admin/redeem-requests/missing/maybe", headers=admin_headers)
        assert response.status_code == 400


class TestAdminRoutes:
    def test_non_admin_is_forbidden(self, client, user_headers):
        assert client.get("/admin/users", headers=user_headers).status_code == 403

    def test_seeded_admin_listed(self, client, admin_headers):
        users = client.get("/admin/users", headers=admin_headers).json()
        assert [u["role"] for u in users] == ["ADMIN"]

    def test_edit_user(self, client, admin_headers, user_headers):
        user_id = client.get("/auth/me", headers=user_headers).json()["id"]

        response = client.patch(f"/admin/users/{user_id}", headers=admin_headers, json={"points": 99})

        assert response.status_code == 200
        assert response.json()["points"] == 99
        assert response.json()["name"] == "Asha"

    def test_edit_unknown_user(self, client, admin_headers):
        response = client.patch("/admin/users/missing", headers=admin_headers, json={"points": 1})
        assert response.status_code == 404

    def test_settings_round_trip(self, client, admin_headers):
        payload = {"minRedeemPoints": 500, "pointsPerQuestion": 5, "currencyRate": 20.0}
        assert client.put("/admin/settings", headers=admin_headers, json=payload).json() == payload
        assert client.get("/admin/settings", headers=admin_headers).json() == payload
        assert client.get("/settings").json() == payload

    def test_question_crud(self, client, admin_headers):
        created = client.post("/admin/questions", headers=admin_headers, json={
            "type": "QUIZ",
            "questionText": "National animal of India?",
            "options": ["Tiger", "Lion", "Elephant", "Cow"],
            "correctAnswer": "Tiger",
        }).json()

        listed = client.get("/admin/questions", params={"category": "QUIZ"}, headers=admin_headers).json()
        assert [q["id"] for q in listed] == [created["id"]]
        assert client.get("/admin/questions", params={"category": "MATH"}, headers=admin_headers).json() == []

        assert client.delete(f"/admin/questions/{created['id']}", headers=admin_headers).status_code == 204
        assert client.delete(f"/admin/questions/{created['id']}", headers=admin_headers).status_code == 404

    def test_quiz_question_needs_options(self, client, admin_headers):
        response = client.post("/admin/questions", headers=admin_headers, json={
            "type": "QUIZ", "questionText": "Q?", "correctAnswer": "A",
        })
        assert response.status_code == 422


class TestConcurrentWrites:
    def test_stale_write_returns_409(self, client, admin_headers, monkeypatch):
        payload = {"type": "PUZZLE", "questionText": "Riddle?", "correctAnswer": "a"}
        assert client.post("/admin/questions", headers=admin_headers, json=payload).status_code == 201

        read = KeyValueStore.get_versioned

        def stale_read(self, key):
            value, version = read(self, key)
            if key == CUSTOM_QUESTIONS_KEY:
                version -= 1
            return value, version

        monkeypatch.setattr(KeyValueStore, "get_versioned", stale_read)

        response = client.post("/admin/questions", headers=admin_headers, json=payload)
        assert response.status_code == 409
        assert response.json() == {"detail": "Data changed while saving, please retry"}
