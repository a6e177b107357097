# =============================================================================
# /rooms endpoints: teacher and student flows over HTTP
# =============================================================================

import pytest

from app.config import settings


@pytest.fixture
def owner_headers(teacher, auth_headers):
    return auth_headers(teacher)


@pytest.fixture
def room_code(client, owner_headers):
    response = client.post("/rooms", headers=owner_headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def generate(client, code, headers, **overrides):
    body = {"subject": "Science", "topic": "Cells", "difficulty": "medium", "question_count": 3}
    body.update(overrides)
    return client.post(f"/rooms/{code}/generate", json=body, headers=headers)


class TestRoomLifecycle:
    def test_requires_authentication(self, client):
        assert client.post("/rooms").status_code == 401

    def test_create_returns_waiting_room(self, client, owner_headers, teacher):
        data = client.post("/rooms", headers=owner_headers).json()["data"]

        assert len(data["id"]) == 6 and data["id"].isdigit()
        assert data["status"] == "waiting"
        assert data["owner_id"] == teacher.id
        assert data["poll_interval_seconds"] == settings.poll_interval_seconds

    def test_full_session(self, client, room_code, owner_headers, make_user, auth_headers):
        student = make_user("Student")
        student_headers = auth_headers(student)

        joined = client.post(f"/rooms/{room_code}/join", headers=student_headers)
        assert joined.json()["data"]["participants"] == [student.id]

        pushed = generate(client, room_code, owner_headers)
        assert pushed.status_code == 200
        assert pushed.json()["data"]["status"] == "ready"
        assert pushed.json()["data"]["fallback_used"] is False
        assert len(pushed.json()["data"]["questions"]) == 3

        progress = client.put(
            f"/rooms/{room_code}/progress",
            json={"current_question_index": 2, "completed": True, "score": 3},
            headers=student_headers
        )
        assert progress.json()["data"]["student_progress"][str(student.id)]["score"] == 3

        ended = client.put(f"/rooms/{room_code}/end", headers=owner_headers)
        assert ended.json()["data"]["status"] == "completed"
        assert ended.json()["data"]["is_active"] is False

        snapshot = client.get(f"/rooms/{room_code}", headers=student_headers).json()["data"]
        assert snapshot["student_progress"][str(student.id)]["completed"] is True

        board = client.get(f"/rooms/{room_code}/leaderboard", headers=owner_headers).json()["data"]
        assert board["leaderboard"][0]["user_id"] == student.id
        assert board["leaderboard"][0]["rank"] == 1

    def test_join_twice_keeps_single_membership(self, client, room_code, make_user, auth_headers):
        headers = auth_headers(make_user())
        client.post(f"/rooms/{room_code}/join", headers=headers)
        response = client.post(f"/rooms/{room_code}/join", headers=headers)
        assert len(response.json()["data"]["participants"]) == 1


class TestRoomErrors:
    def test_unknown_room_is_404(self, client, owner_headers):
        assert client.get("/rooms/000000", headers=owner_headers).status_code == 404
        assert client.post("/rooms/000000/join", headers=owner_headers).status_code == 404
        assert client.get("/rooms/000000/leaderboard", headers=owner_headers).status_code == 404

    def test_only_owner_can_push(self, client, room_code, make_user, auth_headers):
        response = generate(client, room_code, auth_headers(make_user()))
        assert response.status_code == 403

    def test_only_owner_can_end(self, client, room_code, make_user, auth_headers):
        response = client.put(f"/rooms/{room_code}/end", headers=auth_headers(make_user()))
        assert response.status_code == 403

    def test_push_after_end_is_rejected(self, client, room_code, owner_headers):
        client.put(f"/rooms/{room_code}/end", headers=owner_headers)
        assert generate(client, room_code, owner_headers).status_code == 400

    def test_question_count_above_maximum(self, client, room_code, owner_headers):
        response = generate(client, room_code, owner_headers, question_count=settings.max_question_count + 1)
        assert response.status_code == 400

    def test_generator_outage_uses_fallback(self, client, room_code, owner_headers, fake_generator):
        fake_generator.fail = True

        data = generate(client, room_code, owner_headers, question_count=4).json()["data"]

        assert data["fallback_used"] is True
        assert len(data["questions"]) == 4
        assert data["config"]["question_count"] == 4


class TestPushPreparedQuiz:
    def test_push_prepared_questions(self, client, room_code, owner_headers, sample_questions):
        body = {
            "questions": [q.model_dump(mode="json") for q in sample_questions],
            "config": {"subject": "Science", "topic": "Cells", "difficulty": "easy", "question_count": 3}
        }

        response = client.put(f"/rooms/{room_code}/quiz", json=body, headers=owner_headers)

        assert response.status_code == 200
        assert [q["id"] for q in response.json()["data"]["questions"]] == ["q-0", "q-1", "q-2"]

    def test_invalid_question_is_rejected(self, client, room_code, owner_headers):
        body = {
            "questions": [{"id": "x", "type": "mcq", "text": "No options"}],
            "config": {"subject": "Science", "topic": "Cells", "question_count": 1}
        }
        response = client.put(f"/rooms/{room_code}/quiz", json=body, headers=owner_headers)
        assert response.status_code == 422

    def test_count_mismatch_is_rejected(self, client, room_code, owner_headers, sample_questions):
        body = {
            "questions": [q.model_dump(mode="json") for q in sample_questions],
            "config": {"subject": "Science", "topic": "Cells", "question_count": 10}
        }

        response = client.put(f"/rooms/{room_code}/quiz", json=body, headers=owner_headers)

        assert response.status_code == 400
        assert client.get(f"/rooms/{room_code}", headers=owner_headers).json()["data"]["status"] == "waiting"


class TestTeacherHistory:
    def test_lists_own_rooms_newest_first(self, client, owner_headers, make_user, auth_headers):
        first = client.post("/rooms", headers=owner_headers).json()["data"]["id"]
        second = client.post("/rooms", headers=owner_headers).json()["data"]["id"]
        client.post("/rooms", headers=auth_headers(make_user()))

        rooms = client.get("/rooms/teacher/history", headers=owner_headers).json()["data"]["rooms"]

        assert [room["id"] for room in rooms] == [second, first]
