from fastapi.testclient import TestClient

from taskflow.services.task_queries import MAX_PAGE_INDEX

from .utils import add_member, create_project, create_task, register_user


def test_search_keyword_and_status_scenario(client: TestClient):
    _, a_headers = register_user(client, "a@example.com")
    _, c_headers = register_user(client, "c@example.com")
    project_id = create_project(client, a_headers, name="Alpha")
    other_id = create_project(client, c_headers, name="Elsewhere")

    create_task(client, a_headers, project_id, title="Fix BUG in login")
    create_task(client, a_headers, project_id, title="Refactor parser", description="Related to a bug report")
    create_task(client, a_headers, project_id, title="Bug triage meeting", status="IN_PROGRESS")
    create_task(client, a_headers, project_id, title="Write documentation")
    create_task(client, c_headers, other_id, title="Foreign bug")

    resp = client.get("/api/tasks/search", params={"keyword": "bug", "status": "TODO"}, headers=a_headers)
    assert resp.status_code == 200, resp.text
    page = resp.json()
    assert page["totalElements"] == 2
    assert {t["title"] for t in page["content"]} == {"Fix BUG in login", "Refactor parser"}
    assert all(t["status"] == "TODO" for t in page["content"])


def test_search_filters_combine(client: TestClient):
    a_id, a_headers = register_user(client, "a@example.com")
    b_id, b_headers = register_user(client, "b@example.com")
    first = create_project(client, a_headers, name="First")
    second = create_project(client, a_headers, name="Second")
    add_member(client, a_headers, second, b_id)

    create_task(client, a_headers, first, title="Critical alpha", priority="CRITICAL", assigneeId=a_id)
    create_task(client, a_headers, second, title="Critical beta", priority="CRITICAL", assigneeId=b_id)
    create_task(client, a_headers, second, title="Low beta", priority="LOW")

    all_critical = client.get("/api/tasks/search", params={"priority": "CRITICAL"}, headers=a_headers).json()
    assert all_critical["totalElements"] == 2

    by_assignee = client.get(
        "/api/tasks/search", params={"priority": "CRITICAL", "assigneeId": b_id}, headers=a_headers
    ).json()
    assert [t["title"] for t in by_assignee["content"]] == ["Critical beta"]
    assert by_assignee["content"][0]["assigneeName"] == "Test User"

    by_project = client.get("/api/tasks/search", params={"projectId": second}, headers=a_headers).json()
    assert by_project["totalElements"] == 2

    # B is not a member of "First": the filter yields nothing instead of an error
    hidden = client.get("/api/tasks/search", params={"projectId": first}, headers=b_headers)
    assert hidden.status_code == 200
    assert hidden.json()["totalElements"] == 0
    assert hidden.json()["empty"] is True


def test_search_keyword_is_literal(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    project_id = create_project(client, headers)
    create_task(client, headers, project_id, title="Reach 100% coverage")
    create_task(client, headers, project_id, title="Unrelated work")

    page = client.get("/api/tasks/search", params={"keyword": "%"}, headers=headers).json()
    assert [t["title"] for t in page["content"]] == ["Reach 100% coverage"]

    blank = client.get("/api/tasks/search", params={"keyword": "   "}, headers=headers).json()
    assert blank["totalElements"] == 2


def test_page_envelope_arithmetic(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    project_id = create_project(client, headers)
    for i in range(25):
        create_task(client, headers, project_id, title=f"Task {i:02d}")

    url = f"/api/projects/{project_id}/tasks/paged"
    first = client.get(url, params={"page": 0, "size": 10}, headers=headers).json()
    assert first["pageNumber"] == 0
    assert first["pageSize"] == 10
    assert first["totalElements"] == 25
    assert first["totalPages"] == 3
    assert first["first"] is True
    assert first["last"] is False
    assert len(first["content"]) == 10
    # Default ordering: newest first
    assert first["content"][0]["title"] == "Task 24"

    last = client.get(url, params={"page": 2, "size": 10}, headers=headers).json()
    assert len(last["content"]) == 5
    assert last["first"] is False
    assert last["last"] is True
    assert last["empty"] is False

    beyond = client.get(url, params={"page": 7, "size": 10}, headers=headers).json()
    assert beyond["empty"] is True
    assert beyond["last"] is True

    clamped = client.get(url, params={"size": 500}, headers=headers).json()
    assert clamped["pageSize"] == 100
    assert clamped["totalPages"] == 1
    assert len(clamped["content"]) == 25


def test_sorting_and_fallback(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    project_id = create_project(client, headers)
    for title in ("Charlie task", "Alpha task", "Bravo task"):
        create_task(client, headers, project_id, title=title)

    url = f"/api/projects/{project_id}/tasks/paged"
    asc = client.get(url, params={"sortBy": "title", "sortDir": "ASC"}, headers=headers).json()
    assert [t["title"] for t in asc["content"]] == ["Alpha task", "Bravo task", "Charlie task"]

    desc = client.get(url, params={"sortBy": "title", "sortDir": "sideways"}, headers=headers).json()
    assert [t["title"] for t in desc["content"]] == ["Charlie task", "Bravo task", "Alpha task"]

    # Unknown field falls back to createdAt
    fallback = client.get(url, params={"sortBy": "hacked", "sortDir": "asc"}, headers=headers).json()
    assert [t["title"] for t in fallback["content"]] == ["Charlie task", "Alpha task", "Bravo task"]


def test_paged_and_unpaged_agree(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    project_id = create_project(client, headers)
    create_task(client, headers, project_id, title="One high", priority="HIGH")
    create_task(client, headers, project_id, title="Two high", priority="HIGH")
    create_task(client, headers, project_id, title="Three low", priority="LOW")

    plain = client.get(f"/api/projects/{project_id}/tasks/priority/HIGH", headers=headers).json()
    paged = client.get(f"/api/projects/{project_id}/tasks/priority/HIGH/paged", headers=headers).json()
    assert [t["id"] for t in plain] == [t["id"] for t in paged["content"]]
    assert paged["totalElements"] == 2

    by_status = client.get(f"/api/projects/{project_id}/tasks/status/TODO/paged", headers=headers).json()
    assert by_status["totalElements"] == 3


def test_invalid_paging_parameters(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    project_id = create_project(client, headers)
    url = f"/api/projects/{project_id}/tasks/paged"
    assert client.get(url, params={"page": -1}, headers=headers).status_code == 400
    assert client.get(url, params={"size": 0}, headers=headers).status_code == 400


def test_huge_page_index_returns_empty_last_page(client: TestClient):
    _, headers = register_user(client, "a@example.com")
    project_id = create_project(client, headers)
    create_task(client, headers, project_id, title="Only task", deadline="2000-01-01T00:00:00Z")

    for url in (
        f"/api/projects/{project_id}/tasks/paged",
        f"/api/projects/{project_id}/tasks/overdue/paged",
        "/api/tasks/search",
    ):
        resp = client.get(url, params={"page": 10**17, "size": 100}, headers=headers)
        assert resp.status_code == 200, resp.text
        page = resp.json()
        assert page["pageNumber"] == MAX_PAGE_INDEX
        assert page["totalElements"] == 1
        assert page["content"] == []
        assert page["empty"] is True
        assert page["last"] is True
