from fastapi.testclient import TestClient

from taskflow import models
from taskflow.demo_seed import DEMO_PASSWORD, seed_demo_data


def test_seed_is_repeatable(db_session):
    first = seed_demo_data(db_session)
    second = seed_demo_data(db_session)

    assert set(first) == set(second)
    assert db_session.query(models.Project).count() == 1
    assert db_session.query(models.User).count() == 3
    assert db_session.query(models.Task).count() == 5


def test_seeded_owner_sees_demo_project(client: TestClient, db_session):
    ids = seed_demo_data(db_session)

    login = client.post("/api/auth/login", json={"email": "alice@example.com", "password": DEMO_PASSWORD})
    assert login.status_code == 200, login.text
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    stats = client.get(f"/api/stats/projects/{ids['project']}", headers=headers).json()
    assert stats["totalTasks"] == 5
    assert stats["totalMembers"] == 2
    assert stats["completedTasks"] == 1
    assert stats["overdueTasks"] == 1
    assert stats["status"] == "AT_RISK"
