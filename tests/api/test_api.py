from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from job_tracker.api.main import app, get_database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_database] = lambda: db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def _create_job(client, user="user-1", **overrides):
    body = {"company": "Acme", "role": "Engineer", "date_applied": "2024-01-05", "location": "Remote"}
    body.update(overrides)
    response = client.post(f"/api/users/{user}/jobs", json=body)
    assert response.status_code == 201
    return response.json()


# ── jobs ───────────────────────────────────────────────────────────────────────

def test_job_crud(client):
    job = _create_job(client, notes="first call")
    assert job["status"] == "Applied"

    response = client.patch(f"/api/jobs/{job['id']}", json={"status": "Interview"})
    assert response.status_code == 200
    assert response.json()["status"] == "Interview"

    [listed] = client.get("/api/users/user-1/jobs").json()
    assert listed["id"] == job["id"]

    assert client.delete(f"/api/jobs/{job['id']}").status_code == 204
    assert client.get("/api/users/user-1/jobs").json() == []


def test_unknown_job_is_404(client):
    assert client.patch("/api/jobs/missing", json={"role": "x"}).status_code == 404
    assert client.delete("/api/jobs/missing").status_code == 404


def test_bad_status_is_rejected(client):
    response = client.post(
        "/api/users/user-1/jobs",
        json={"company": "Acme", "role": "Engineer", "date_applied": "2024-01-05", "status": "Ghosted"},
    )
    assert response.status_code == 422


@pytest.mark.parametrize("field", ["status", "company", "role", "date_applied", "location"])
def test_null_on_required_job_field_is_422(client, field):
    job = _create_job(client)
    response = client.patch(f"/api/jobs/{job['id']}", json={field: None})
    assert response.status_code == 422
    [listed] = client.get("/api/users/user-1/jobs").json()
    assert listed == job


def test_clearing_optional_job_fields(client):
    job = _create_job(client, notes="old", link="https://acme.example")
    updated = client.patch(f"/api/jobs/{job['id']}", json={"notes": None, "link": None}).json()
    assert updated["notes"] is None
    assert updated["link"] is None


# ── tasks ──────────────────────────────────────────────────────────────────────

def test_task_flow(client):
    job = _create_job(client)
    response = client.post(
        "/api/users/user-1/tasks",
        json={"title": "Prep", "due_date": "2024-06-01", "priority": "High", "job_id": job["id"]},
    )
    assert response.status_code == 201
    task = response.json()
    assert task["priority"] == "high"
    assert task["job_info"] == {"company": "Acme", "role": "Engineer"}

    due = client.get("/api/users/user-1/tasks/due", params={"today": "2024-06-01"}).json()
    assert [t["id"] for t in due] == [task["id"]]

    done = client.post(f"/api/tasks/{task['id']}/complete", json={"completed": True}).json()
    assert done["completed"] is True
    assert client.get("/api/users/user-1/tasks/due", params={"today": "2024-06-01"}).json() == []

    assert client.delete(f"/api/tasks/{task['id']}").status_code == 204
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404


def test_invalid_priority_is_rejected(client):
    response = client.post("/api/users/user-1/tasks", json={"title": "Prep", "due_date": "2024-06-01", "priority": "asap"})
    assert response.status_code == 422


def test_null_task_title_is_422(client):
    task = client.post("/api/users/user-1/tasks", json={"title": "Prep", "due_date": "2024-06-01"}).json()
    response = client.patch(f"/api/tasks/{task['id']}", json={"title": None})
    assert response.status_code == 422
    assert [t["title"] for t in client.get("/api/users/user-1/tasks").json()] == ["Prep"]


# ── analytics ──────────────────────────────────────────────────────────────────

def test_analytics_uses_camel_case_keys(client):
    _create_job(client, status="Offer")
    client.post(
        "/api/users/user-1/tasks",
        json={"title": "Soon", "due_date": (date.today() + timedelta(days=1)).isoformat()},
    )
    body = client.get("/api/users/user-1/analytics").json()
    assert body["totalApplications"] == 1
    assert body["byStatus"]["Offer"] == 1
    assert body["responseRate"] == 100
    assert body["totalTasks"] == 1
    assert body["tasksByPriority"]["medium"] == 1


def test_analytics_for_new_user(client):
    body = client.get("/api/users/nobody/analytics").json()
    assert body["totalApplications"] == 0
    assert "averageResponseTime" not in body
    assert body["totalTasks"] == 0


# ── export ─────────────────────────────────────────────────────────────────────

def test_csv_export_download(client):
    _create_job(client, company="Acme, Inc.")
    response = client.post("/api/users/user-1/export", json={"format": "csv", "exportName": "mine"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="mine-' in response.headers["content-disposition"]
    assert '"Acme, Inc."' in response.text


def test_export_name_cannot_break_the_header(client):
    _create_job(client)
    response = client.post(
        "/api/users/user-1/export",
        json={"format": "csv", "exportName": 'a"b\r\nSet-Cookie: x=1'},
    )
    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="a_b_Set-Cookie_x_1-')
    assert disposition.endswith('.csv"')
    assert "set-cookie" not in response.headers


def test_export_with_camel_case_filters(client):
    _create_job(client, company="Acme", notes="secret")
    _create_job(client, company="Globex", date_applied="2023-06-01")
    response = client.post(
        "/api/users/user-1/export",
        json={"format": "json", "filters": {"startDate": "2024-01-01", "includeNotes": True}},
    )
    jobs = response.json()["jobs"]
    assert [j["company"] for j in jobs] == ["Acme"]
    assert jobs[0]["notes"] == "secret"


def test_unknown_format_is_400(client):
    response = client.post("/api/users/user-1/export", json={"format": "docx"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Unsupported export format: docx"


# ── scheduled exports ──────────────────────────────────────────────────────────

def test_email_destination_without_address_is_422(client):
    response = client.post(
        "/api/users/user-1/scheduled-exports",
        json={"frequency": "weekly", "options": {"format": "csv"}, "destination": "email", "email": ""},
    )
    assert response.status_code == 422
    assert response.json()["detail"] == "Please check the export settings and try again."
    assert client.get("/api/users/user-1/scheduled-exports").json() == []


def test_scheduled_export_lifecycle(client):
    response = client.post(
        "/api/users/user-1/scheduled-exports",
        json={
            "frequency": "monthly",
            "options": {"format": "pdf", "filters": {"includeTasks": True}},
            "destination": "download",
        },
    )
    assert response.status_code == 201
    created = response.json()
    assert created["userId"] == "user-1"
    assert created["options"]["filters"]["includeTasks"] is True
    assert "email" not in created

    assert client.get("/api/users/user-1/scheduled-exports").json() == [created]
    assert client.delete(f"/api/scheduled-exports/{created['id']}").status_code == 204
    assert client.delete(f"/api/scheduled-exports/{created['id']}").status_code == 404


def test_scheduled_export_with_unknown_format_is_400(client):
    response = client.post(
        "/api/users/user-1/scheduled-exports",
        json={"frequency": "daily", "options": {"format": "docx"}, "destination": "download"},
    )
    assert response.status_code == 400
