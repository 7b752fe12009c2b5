"""
Test API endpoints.
"""
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from fastapi.testclient import TestClient


def register(client: TestClient, event_id, student_id):
    return client.post(f"/api/v1/events/{event_id}/register", json={"student_id": str(student_id)})


def cancel(client: TestClient, event_id, student_id):
    return client.post(f"/api/v1/events/{event_id}/cancel", json={"student_id": str(student_id)})


class TestRegisterEndpoint:
    def test_register_success(self, client: TestClient, make_event, make_student):
        event = make_event()
        student = make_student()

        response = register(client, event.id, student.id)

        assert response.status_code == 200
        data = response.json()
        assert data["event_id"] == str(event.id)
        assert data["student_id"] == str(student.id)
        assert data["status"] == "registered"
        assert data["canceled_at"] is None
        assert "registered_at" in data

    def test_register_twice_returns_same_registration(self, client: TestClient, make_event, make_student):
        event = make_event(capacity=1)
        student = make_student()

        first = register(client, event.id, student.id)
        second = register(client, event.id, student.id)

        assert first.status_code == second.status_code == 200
        assert first.json()["registered_at"] == second.json()["registered_at"]

    def test_register_no_seats(self, client: TestClient, make_event, make_student):
        event = make_event(capacity=2)
        for _ in range(2):
            assert register(client, event.id, make_student().id).status_code == 200

        response = register(client, event.id, make_student().id)

        assert response.status_code == 409
        assert response.json() == {"detail": "no seats", "error": "precondition_failed"}

    def test_register_deadline_passed(self, client: TestClient, make_event, make_student, now):
        event = make_event(signup_deadline=now - timedelta(seconds=1))

        response = register(client, event.id, make_student().id)

        assert response.status_code == 409
        assert response.json()["detail"] == "deadline passed"

    def test_register_unpublished(self, client: TestClient, make_event, make_student):
        event = make_event(is_published=False)

        response = register(client, event.id, make_student().id)

        assert response.status_code == 409
        assert response.json()["detail"] == "not published"

    def test_register_unknown_event(self, client: TestClient, make_student):
        response = register(client, uuid.uuid4(), make_student().id)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_register_validation(self, client: TestClient, make_event):
        event = make_event()

        assert client.post(f"/api/v1/events/{event.id}/register", json={}).status_code == 422
        assert register(client, event.id, "not-a-uuid").status_code == 422
        assert register(client, "not-a-uuid", uuid.uuid4()).status_code == 422


class TestCancelEndpoint:
    def test_cancel_success(self, client: TestClient, make_event, make_student):
        event = make_event()
        student = make_student()
        register(client, event.id, student.id)

        response = cancel(client, event.id, student.id)

        assert response.status_code == 204
        assert response.content == b""
        status = client.get(f"/api/v1/events/{event.id}/registrations/{student.id}")
        assert status.json()["registered"] is False

    def test_cancel_not_registered(self, client: TestClient, make_event, make_student):
        event = make_event()

        response = cancel(client, event.id, make_student().id)

        assert response.status_code == 404
        assert response.json() == {"detail": "registration not found", "error": "not_found"}

    def test_cancel_then_register_again(self, client: TestClient, make_event, make_student):
        event = make_event(capacity=1)
        student = make_student()
        register(client, event.id, student.id)
        cancel(client, event.id, student.id)

        response = register(client, event.id, student.id)

        assert response.status_code == 200
        count = client.get(f"/api/v1/events/{event.id}/registrations/count")
        assert count.json() == {"event_id": str(event.id), "count": 1}


class TestListingEndpoints:
    def test_list_registrations(self, client: TestClient, make_event, make_student):
        event = make_event()
        student = make_student("Katherine Johnson")
        register(client, event.id, student.id)

        response = client.get(f"/api/v1/events/{event.id}/registrations")

        assert response.status_code == 200
        assert response.json() == [
            {
                "student_id": str(student.id),
                "student_name": "Katherine Johnson",
                "student_email": student.email,
                "registered_at": response.json()[0]["registered_at"],
            }
        ]

    def test_list_registrations_empty(self, client: TestClient, make_event):
        event = make_event()

        response = client.get(f"/api/v1/events/{event.id}/registrations")

        assert response.status_code == 200
        assert response.json() == []

    def test_registration_status(self, client: TestClient, make_event, make_student):
        event = make_event()
        student = make_student()
        register(client, event.id, student.id)

        response = client.get(f"/api/v1/events/{event.id}/registrations/{student.id}")

        assert response.status_code == 200
        assert response.json() == {"event_id": str(event.id), "student_id": str(student.id), "registered": True}

    def test_event_stats(self, client: TestClient, make_event, make_student):
        event = make_event(title="Open Day", capacity=3)
        register(client, event.id, make_student().id)

        response = client.get(f"/api/v1/events/{event.id}/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["event_id"] == str(event.id)
        assert data["title"] == "Open Day"
        assert data["capacity"] == 3
        assert data["active_count"] == 1
        assert data["seats_left"] == 2

    def test_event_stats_not_found(self, client: TestClient):
        response = client.get(f"/api/v1/events/{uuid.uuid4()}/stats")
        assert response.status_code == 404


class TestAPIIntegration:
    def test_concurrent_api_registrations(self, client: TestClient, make_event, make_student):
        """Concurrent requests must not overfill the event."""
        event_id = make_event(capacity=3).id
        student_ids = [make_student().id for _ in range(10)]

        with ThreadPoolExecutor(max_workers=10) as executor:
            statuses = list(executor.map(lambda sid: register(client, event_id, sid).status_code, student_ids))

        assert statuses.count(200) == 3
        assert statuses.count(409) == 7
        stats = client.get(f"/api/v1/events/{event_id}/stats").json()
        assert stats["active_count"] == 3
        assert stats["seats_left"] == 0


class TestStudentRegistrationsEndpoint:
    def test_lists_active_registrations_latest_start_first(
        self, client: TestClient, make_event, make_student, now
    ):
        student = make_student()
        early = make_event(title="Welcome Week", starts_at=now + timedelta(days=1))
        late = make_event(title="Graduation Ball", starts_at=now + timedelta(days=30))
        canceled = make_event(title="Film Night", starts_at=now + timedelta(days=15))
        for event in (early, late, canceled):
            assert register(client, event.id, student.id).status_code == 200
        cancel(client, canceled.id, student.id)

        response = client.get(f"/api/v1/students/{student.id}/registrations")

        assert response.status_code == 200
        data = response.json()
        assert [item["title"] for item in data] == ["Graduation Ball", "Welcome Week"]
        assert data[0]["event_id"] == str(late.id)
        assert set(data[0]) == {"event_id", "title", "starts_at", "signup_deadline", "registered_at"}

    def test_student_without_registrations(self, client: TestClient, make_student):
        response = client.get(f"/api/v1/students/{make_student().id}/registrations")

        assert response.status_code == 200
        assert response.json() == []

    def test_invalid_student_id(self, client: TestClient):
        assert client.get("/api/v1/students/not-a-uuid/registrations").status_code == 422

    def test_register_unknown_student(self, client: TestClient, make_event):
        response = register(client, make_event().id, uuid.uuid4())

        assert response.status_code == 404
        assert response.json() == {"detail": "student not found", "error": "not_found"}
