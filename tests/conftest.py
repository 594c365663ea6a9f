from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo
import pytest
from fastapi.testclient import TestClient

from timesheets.config import Settings
from timesheets.database import Database
from timesheets.main import create_app
from timesheets.models.schemas import TimeEntry
from timesheets.services.store import DocumentStore
from timesheets.services.identity_service import IdentityService

UTC = ZoneInfo("UTC")

# Wednesday
NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


def make_entry(**fields) -> TimeEntry:
    values = {
        "user_id": "u1",
        "user_name": "alice@example.com",
        "project_name": "A",
        "task": "",
        "hours": 1.0,
        "date": date(2024, 1, 10),
    }
    values.update(fields)
    return TimeEntry(**values)


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'store.db'}")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    store = DocumentStore(database)
    yield store
    store.close()


@pytest.fixture
def identity(database):
    return IdentityService(database)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'app.db'}",
        log_dir=str(tmp_path / "logs"),
        timezone="UTC",
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def auth_headers(client):
    response = client.post("/auth/register", json={
        "email": "alice@example.com",
        "password": "s3cret-pass",
        "display_name": "Alice",
    })
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}
