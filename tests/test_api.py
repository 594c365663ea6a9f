from datetime import datetime, timedelta, timezone
import re

from fastapi.testclient import TestClient

from timesheets.config import Settings
from timesheets.main import create_app


def today():
    return datetime.now(timezone.utc).date()


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    health = client.get("/health").json()
    assert health == {"status": "healthy", "database": "connected", "scheduler": "running"}
    assert "app.log" in client.get("/logs/info").json()["log_files"]


def test_endpoints_require_sign_in(client):
    assert client.get("/entries/mine").status_code == 401
    response = client.get("/analytics/summary", headers={"Authorization": "Bearer bogus"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_login_logout_cycle(client, auth_headers):
    assert client.get("/auth/me", headers=auth_headers).json()["display_name"] == "Alice"

    login = client.post("/auth/login", json={"email": "alice@example.com", "password": "s3cret-pass"})
    assert login.status_code == 200

    assert client.post("/auth/logout", headers=auth_headers).status_code == 200
    assert client.get("/auth/me", headers=auth_headers).status_code == 401


def test_bad_credentials(client, auth_headers):
    response = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert response.status_code == 401


def test_projects_and_entries_flow(client, auth_headers):
    created = client.post("/projects", json={"name": " Apollo "}, headers=auth_headers)
    assert created.status_code == 201
    project_id = created.json()["id"]

    assert [p["name"] for p in client.get("/projects", headers=auth_headers).json()] == ["Apollo"]

    saved = client.post("/entries", json={
        "project_id": project_id,
        "task": "kickoff",
        "hours": 1.5,
        "date": today().isoformat(),
    }, headers=auth_headers)
    assert saved.status_code == 201
    assert saved.json()["message"].startswith("Saved - ID: ")

    mine = client.get("/entries/mine", headers=auth_headers).json()
    assert len(mine) == 1
    assert mine[0]["project_name"] == "Apollo"
    assert mine[0]["user_name"] == "Alice"


def test_blank_project_name_rejected(client, auth_headers):
    response = client.post("/projects", json={"name": "   "}, headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["field"] == "name"


def test_non_numeric_and_negative_hours_rejected(client, auth_headers):
    for hours in ["abc", -2]:
        response = client.post("/entries", json={"task": "x", "hours": hours}, headers=auth_headers)
        assert response.status_code == 422
    assert client.get("/entries/mine", headers=auth_headers).json() == []


def test_analytics_summary_and_export(client, auth_headers):
    day = today()
    for hours, offset, name in [(2, 0, "A"), (5, 8, "A"), (1.25, 0, None)]:
        body = {"task": "work", "hours": hours, "date": (day - timedelta(days=offset)).isoformat()}
        if name:
            body["project_name"] = name
        assert client.post("/entries", json=body, headers=auth_headers).status_code == 201

    analytics = client.get("/analytics/projects", params={"days": 7}, headers=auth_headers).json()
    assert analytics["days"] == 7
    assert {p["name"]: p["total"] for p in analytics["projects"]} == {"A": 2.0, "(manual)": 1.25}

    wide = client.get("/analytics/projects", params={"days": 30}, headers=auth_headers).json()
    assert {p["name"]: p["total"] for p in wide["projects"]} == {"A": 7.0, "(manual)": 1.25}

    summary = client.get("/analytics/summary", headers=auth_headers).json()
    assert summary["today_total"] == 3.25

    export = client.get("/analytics/export", params={"days": 7}, headers=auth_headers)
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert 'filename="timesheet_export_7d.csv"' in export.headers["content-disposition"]
    lines = export.text.split("\n")
    assert lines[0] == "userName,projectName,task,hours,date"
    assert len(lines) == 3
    assert f'"Alice","A","work",2,{day.isoformat()}' in lines


def test_window_bounds(client, auth_headers):
    assert client.get("/analytics/projects", params={"days": 0}, headers=auth_headers).status_code == 422
    assert client.get("/analytics/export", params={"days": 366}, headers=auth_headers).status_code == 422


def test_default_window(client, auth_headers):
    assert client.get("/analytics/projects", headers=auth_headers).json()["days"] == 7


def test_timer_start_stop(client, auth_headers):
    state = client.get("/timer", headers=auth_headers).json()
    assert state == {"running": False, "elapsed_seconds": 0, "hours": 0.0, "display": "00:00:00"}

    started = client.post("/timer/start", headers=auth_headers).json()
    assert started["running"] is True

    stopped = client.post("/timer/stop", headers=auth_headers).json()
    assert stopped["running"] is False
    assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", stopped["display"])


def test_unconfigured_store_fails_fast(tmp_path):
    settings = Settings(database_url="", log_dir=str(tmp_path / "logs"))
    with TestClient(create_app(settings)) as client:
        assert client.get("/health").json()["database"] == "not configured"

        response = client.post(
            "/entries", json={"hours": 1}, headers={"Authorization": "Bearer anything"}
        )
        assert response.status_code == 503
        assert "not configured" in response.json()["detail"]

        assert client.post("/auth/login", json={"email": "a@b.c", "password": "x"}).status_code == 503
