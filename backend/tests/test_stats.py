from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from taskflow import models
from taskflow.services import stats_service

from .utils import add_member, create_project, create_task, error_message, register_user


def _iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


def _project_stats(client: TestClient, headers, project_id: int) -> dict:
    resp = client.get(f"/api/stats/projects/{project_id}", headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_project_stats_ten_task_scenario(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    project_id = create_project(client, headers, name="Ten")
    for i in range(3):
        create_task(client, headers, project_id, title=f"Done {i}", status="DONE")
    for i in range(2):
        create_task(client, headers, project_id, title=f"Overdue {i}", deadline=_iso(-timedelta(days=2)))
    for i in range(5):
        create_task(client, headers, project_id, title=f"Open {i}", priority="LOW")

    stats = _project_stats(client, headers, project_id)
    assert stats["projectName"] == "Ten"
    assert stats["totalTasks"] == 10
    assert stats["completedTasks"] == 3
    assert stats["pendingTasks"] == 7
    assert stats["activeTasks"] == 7
    assert stats["overdueTasks"] == 2
    assert stats["completionRate"] == 30.0
    assert stats["status"] == "AT_RISK"
    assert stats["doneTasks"] == 3
    assert stats["todoTasks"] == 7
    assert stats["lowPriorityTasks"] == 5
    assert stats["mediumPriorityTasks"] == 5
    assert stats["totalMembers"] == 1


def test_project_health_labels(client: TestClient):
    _, headers = register_user(client, "a@example.com")

    empty = create_project(client, headers, name="Empty")
    assert _project_stats(client, headers, empty)["status"] == "NO_TASKS"
    assert _project_stats(client, headers, empty)["completionRate"] == 0.0

    delayed = create_project(client, headers, name="Delayed")
    for i in range(2):
        create_task(client, headers, delayed, title=f"Late {i}", deadline=_iso(-timedelta(days=1)))
    for i in range(2):
        create_task(client, headers, delayed, title=f"Fine {i}")
    assert _project_stats(client, headers, delayed)["status"] == "DELAYED"

    on_track = create_project(client, headers, name="On track")
    create_task(client, headers, on_track, title="Finished", status="DONE")
    create_task(client, headers, on_track, title="Not due yet", deadline=_iso(timedelta(days=5)))
    stats = _project_stats(client, headers, on_track)
    assert stats["completionRate"] == 50.0
    assert stats["status"] == "ON_TRACK"

    slow = create_project(client, headers, name="Slow")
    create_task(client, headers, slow, title="Finished", status="DONE")
    for i in range(2):
        create_task(client, headers, slow, title=f"Open {i}")
    stats = _project_stats(client, headers, slow)
    assert stats["completionRate"] == 33.33
    assert stats["status"] == "AT_RISK"


def test_project_stats_requires_membership(client: TestClient):
    _, a_headers = register_user(client, "a@example.com")
    _, c_headers = register_user(client, "c@example.com")
    project_id = create_project(client, a_headers)
    assert client.get(f"/api/stats/projects/{project_id}", headers=c_headers).status_code == 403
    assert client.get("/api/stats/projects/9999", headers=a_headers).status_code == 404


def test_all_project_stats(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    first = create_project(client, headers, name="First")
    second = create_project(client, headers, name="Second")
    create_task(client, headers, second, title="Something")

    stats = client.get("/api/stats/projects", headers=headers).json()
    assert [s["projectId"] for s in stats] == [second, first]
    assert [s["totalTasks"] for s in stats] == [1, 0]


def test_dashboard_stats(client: TestClient, db_session):
    a_id, a_headers = register_user(client, "a@example.com")
    b_id, b_headers = register_user(client, "b@example.com")
    own = create_project(client, a_headers, name="Own")
    shared = create_project(client, b_headers, name="Shared")
    add_member(client, b_headers, shared, a_id)
    hidden = create_project(client, b_headers, name="Hidden")

    # Midday, so "today" windows do not depend on when the suite runs
    now = datetime(2030, 6, 12, 12, 0, tzinfo=timezone.utc)
    create_task(
        client,
        a_headers,
        own,
        title="Due today",
        deadline=(now + timedelta(hours=6)).isoformat(),
        assigneeId=a_id,
    )
    create_task(client, a_headers, own, title="Due in three days", deadline=(now + timedelta(days=3)).isoformat())
    create_task(
        client,
        a_headers,
        own,
        title="Long overdue",
        deadline=(now - timedelta(days=3)).isoformat(),
        priority="HIGH",
    )
    create_task(client, b_headers, shared, title="Done shared", status="DONE", assigneeId=a_id)
    create_task(client, b_headers, shared, title="Critical shared", priority="CRITICAL", assigneeId=b_id)
    create_task(client, b_headers, hidden, title="Not visible")

    resp = client.get("/api/stats/dashboard", headers=a_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["totalProjects"] == 2
    assert body["totalTasks"] == 5
    assert body["completionRate"] == 20.0

    user = db_session.get(models.User, a_id)
    stats = stats_service.get_dashboard_stats(db_session, user, now=now)
    assert stats.total_projects == 2
    assert stats.projects_i_own == 1
    assert stats.projects_as_member == 1
    assert stats.total_tasks == 5
    assert stats.tasks_assigned_to_me == 2
    assert stats.unassigned_tasks == 2
    assert stats.todo_tasks == 4
    assert stats.done_tasks == 1
    assert stats.high_priority_tasks == 1
    assert stats.critical_tasks == 1
    assert stats.medium_priority_tasks == 3
    assert stats.overdue_tasks == 1
    assert stats.due_today_tasks == 1
    assert stats.due_this_week_tasks == 2
    assert stats.completion_rate == 20.0


def test_user_stats_and_on_time_rate(client: TestClient):
    a_id, a_headers = register_user(client, "a@example.com", full_name="User A")
    project_id = create_project(client, a_headers)

    create_task(client, a_headers, project_id, title="No deadline done", status="DONE", assigneeId=a_id)
    create_task(
        client,
        a_headers,
        project_id,
        title="Finished late",
        status="DONE",
        deadline=_iso(-timedelta(days=1)),
        assigneeId=a_id,
    )
    create_task(
        client, a_headers, project_id, title="Still open", priority="CRITICAL", assigneeId=a_id
    )
    create_task(client, a_headers, project_id, title="Someone else's")

    resp = client.get(f"/api/stats/users/{a_id}", headers=a_headers)
    assert resp.status_code == 200, resp.text
    stats = resp.json()
    assert stats["userName"] == "User A"
    assert stats["userEmail"] == "a@example.com"
    assert stats["totalAssignedTasks"] == 3
    assert stats["completedTasks"] == 2
    assert stats["pendingTasks"] == 1
    assert stats["completionRate"] == 66.67
    assert stats["onTimeRate"] == 50.0
    assert stats["criticalTasks"] == 1
    assert stats["mediumPriorityTasks"] == 2
    assert stats["lowPriorityTasks"] == 0
    assert stats["projectsCount"] == 1


def test_user_stats_visibility(client: TestClient):
    a_id, a_headers = register_user(client, "a@example.com")
    b_id, b_headers = register_user(client, "b@example.com")
    c_id, c_headers = register_user(client, "c@example.com")

    # Nobody has memberships yet; only self is allowed
    assert client.get(f"/api/stats/users/{c_id}", headers=c_headers).status_code == 200
    denied = client.get(f"/api/stats/users/{b_id}", headers=a_headers)
    assert denied.status_code == 403
    assert error_message(denied) == "You don't have access to this user's statistics"

    # A and B each own an unrelated project: the check only needs some membership on both sides
    create_project(client, a_headers, name="A only")
    create_project(client, b_headers, name="B only")
    assert client.get(f"/api/stats/users/{b_id}", headers=a_headers).status_code == 200
    assert client.get(f"/api/stats/users/{c_id}", headers=a_headers).status_code == 403

    assert client.get("/api/stats/users/9999", headers=a_headers).status_code == 404

    empty = client.get(f"/api/stats/users/{c_id}", headers=c_headers).json()
    assert empty["completionRate"] == 0.0
    assert empty["onTimeRate"] == 0.0
