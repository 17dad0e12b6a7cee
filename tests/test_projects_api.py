"""Tests for project submission, editing, review and hiding."""

import pytest

from models.project import ProjectModel
from models.user import UserModel
from utils.project_manager import ProjectManager


def _payload(**overrides):
    body = {
        "title": "Weather CLI",
        "description": "Fetches the forecast",
        "techStack": "Python",
        "week": 1,
        "githubRepo": "https://github.com/alice/weather",
    }
    body.update(overrides)
    return body


def _create(client, headers, **overrides):
    response = client.post("/api/projects", json=_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_sets_server_owned_fields(client, alice):
    user, headers = alice

    response = client.post(
        "/api/projects",
        json=_payload(status="Approved", userId="someone-else"),
        headers=headers,
    )
    assert response.status_code == 201
    project = response.json()
    assert project["status"] == "Under Review"
    assert project["userId"] == user["id"]
    assert project["userName"] == "Alice"
    assert project["isHidden"] is False
    assert len(project["id"]) == 24


@pytest.mark.parametrize("week", [0, 53])
def test_create_rejects_week_out_of_range(client, alice, week):
    _, headers = alice

    response = client.post("/api/projects", json=_payload(week=week), headers=headers)
    assert response.status_code == 422


def test_create_rejects_duplicate_week(client, alice):
    _, headers = alice
    _create(client, headers, week=3)

    response = client.post(
        "/api/projects", json=_payload(week=3, title="Other"), headers=headers
    )
    assert response.status_code == 409


def test_same_week_allowed_for_different_users(client, alice, bob):
    _create(client, alice[1], week=5)
    _create(client, bob[1], week=5)


def test_owner_lists_only_own_projects(client, alice, bob):
    _create(client, alice[1], week=2)
    _create(client, alice[1], week=1)
    _create(client, bob[1], week=1)

    response = client.get("/api/projects", headers=alice[1])
    assert response.status_code == 200
    projects = response.json()
    assert [p["week"] for p in projects] == [1, 2]
    assert all(p["userId"] == alice[0]["id"] for p in projects)


def test_update_of_foreign_project_is_not_found(client, alice, bob):
    project = _create(client, alice[1])

    response = client.put(
        f"/api/projects/{project['id']}", json={"title": "Hijacked"}, headers=bob[1]
    )
    assert response.status_code == 404
    assert "Hijacked" not in response.text

    mine = client.get("/api/projects", headers=alice[1]).json()
    assert mine[0]["title"] == "Weather CLI"


def test_update_with_malformed_id_is_bad_request(client, alice):
    response = client.put(
        "/api/projects/not-an-id", json={"title": "x"}, headers=alice[1]
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid project ID"


def test_update_keeps_tech_stack_and_ignores_owner_status(client, alice):
    project = _create(client, alice[1])

    response = client.put(
        f"/api/projects/{project['id']}",
        json={"title": "Weather TUI", "status": "Approved", "userId": "other"},
        headers=alice[1],
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Weather TUI"
    assert updated["techStack"] == "Python"
    assert updated["status"] == "Under Review"
    assert updated["userId"] == alice[0]["id"]


def test_update_to_taken_week_conflicts(client, alice):
    _create(client, alice[1], week=1)
    second = _create(client, alice[1], week=2)

    response = client.put(
        f"/api/projects/{second['id']}", json={"week": 1}, headers=alice[1]
    )
    assert response.status_code == 409


def test_owner_delete_removes_project(client, alice, db_session):
    project = _create(client, alice[1])

    response = client.delete(f"/api/projects/{project['id']}", headers=alice[1])
    assert response.status_code == 200
    assert response.json()["message"] == "Project deleted successfully"
    assert db_session.query(ProjectModel).count() == 0


def test_delete_of_foreign_project_is_not_found(client, alice, bob):
    project = _create(client, alice[1])

    response = client.delete(f"/api/projects/{project['id']}", headers=bob[1])
    assert response.status_code == 404


def test_admin_delete_hides_instead_of_deleting(client, alice, admin):
    project = _create(client, alice[1])

    response = client.delete(f"/api/projects/{project['id']}", headers=admin[1])
    assert response.status_code == 200
    assert response.json()["message"] == "Project hidden from admin view"

    assert client.get("/api/projects", headers=admin[1]).json() == []
    owner_view = client.get("/api/projects", headers=alice[1]).json()
    assert len(owner_view) == 1
    assert owner_view[0]["isHidden"] is True


def test_hidden_project_still_occupies_week(client, alice, admin):
    project = _create(client, alice[1], week=4)
    client.delete(f"/api/projects/{project['id']}", headers=admin[1])

    response = client.post("/api/projects", json=_payload(week=4), headers=alice[1])
    assert response.status_code == 409


def test_admin_approves_project(client, alice, admin):
    project = _create(client, alice[1])

    stats = client.get("/api/projects/stats", headers=admin[1]).json()
    assert stats["counts"]["Approved"] == 0
    assert stats["counts"]["Under Review"] == 1

    response = client.put(
        f"/api/projects/{project['id']}", json={"status": "Approved"}, headers=admin[1]
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Approved"

    stats = client.get("/api/projects/stats", headers=admin[1]).json()
    assert stats == {
        "total": 1,
        "counts": {"Not Started": 0, "Under Review": 0, "Approved": 1},
    }
    assert client.get("/api/projects", headers=alice[1]).json()[0]["status"] == "Approved"


def test_admin_status_change_requires_status(client, alice, admin):
    project = _create(client, alice[1])

    response = client.put(
        f"/api/projects/{project['id']}", json={"title": "x"}, headers=admin[1]
    )
    assert response.status_code == 400


def test_admin_status_change_rejects_unknown_status(client, alice, admin):
    project = _create(client, alice[1])

    response = client.put(
        f"/api/projects/{project['id']}", json={"status": "Done"}, headers=admin[1]
    )
    assert response.status_code == 422


def test_admin_status_change_of_missing_project(client, admin):
    response = client.put(
        f"/api/projects/{'0' * 24}", json={"status": "Approved"}, headers=admin[1]
    )
    assert response.status_code == 404


def test_owner_name_is_snapshotted(client, alice, admin, db_session):
    _create(client, alice[1])

    model = db_session.query(UserModel).filter(UserModel.email == "a@x.com").one()
    model.name = "Alicia"
    db_session.commit()

    projects = client.get("/api/projects", headers=admin[1]).json()
    assert projects[0]["userName"] == "Alice"


def test_admin_list_filters(client, alice, bob, admin):
    _create(client, alice[1], week=1, title="Weather CLI")
    _create(client, alice[1], week=2, title="Chess engine")
    bob_project = _create(client, bob[1], week=2, title="Todo app")
    client.put(
        f"/api/projects/{bob_project['id']}", json={"status": "Approved"}, headers=admin[1]
    )

    def titles(**params):
        response = client.get("/api/projects", params=params, headers=admin[1])
        assert response.status_code == 200
        return sorted(p["title"] for p in response.json())

    assert titles() == ["Chess engine", "Todo app", "Weather CLI"]
    assert titles(week=2) == ["Chess engine", "Todo app"]
    assert titles(status="Approved") == ["Todo app"]
    assert titles(search="chess") == ["Chess engine"]
    assert titles(search="bob") == ["Todo app"]


def test_stats_are_admin_only(client, alice):
    response = client.get("/api/projects/stats", headers=alice[1])
    assert response.status_code == 403


def test_owner_can_clear_optional_links(client, alice):
    project = _create(client, alice[1], url="https://weather.example.com")

    response = client.put(
        f"/api/projects/{project['id']}",
        json={"githubRepo": None, "url": None},
        headers=alice[1],
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["githubRepo"] is None
    assert updated["url"] is None
    assert updated["title"] == "Weather CLI"


def test_null_required_fields_are_kept(client, alice):
    project = _create(client, alice[1])

    response = client.put(
        f"/api/projects/{project['id']}",
        json={"title": None, "week": None},
        headers=alice[1],
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Weather CLI"
    assert response.json()["week"] == 1


def test_week_clash_past_the_check_is_still_a_conflict(client, alice, monkeypatch):
    _create(client, alice[1], week=7)
    # Another request won the race after this one checked the week
    monkeypatch.setattr(ProjectManager, "_week_taken", lambda self, *args, **kwargs: False)

    response = client.post(
        "/api/projects", json=_payload(week=7, title="Second"), headers=alice[1]
    )
    assert response.status_code == 409

    second = _create(client, alice[1], week=8)
    response = client.put(
        f"/api/projects/{second['id']}", json={"week": 7}, headers=alice[1]
    )
    assert response.status_code == 409
    weeks = sorted(p["week"] for p in client.get("/api/projects", headers=alice[1]).json())
    assert weeks == [7, 8]
