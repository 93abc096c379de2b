from typing import Any, Optional

from fastapi.testclient import TestClient

DEFAULT_PASSWORD = "secret123"


def register_user(
    client: TestClient, email: str, full_name: str = "Test User", password: str = DEFAULT_PASSWORD
) -> tuple[int, dict[str, str]]:
    """Register a user and return (user_id, auth headers)."""
    resp = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "fullName": full_name},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["userId"], {"Authorization": f"Bearer {body['token']}"}


def create_project(
    client: TestClient, headers: dict[str, str], name: str = "Alpha", description: str = "desc"
) -> int:
    resp = client.post("/api/projects", json={"name": name, "description": description}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def add_member(client: TestClient, headers: dict[str, str], project_id: int, user_id: int) -> None:
    resp = client.post(f"/api/projects/{project_id}/members", json={"userId": user_id}, headers=headers)
    assert resp.status_code == 201, resp.text


def create_task(
    client: TestClient,
    headers: dict[str, str],
    project_id: int,
    title: str = "Write tests",
    **fields: Any,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"title": title, **fields}
    resp = client.post(f"/api/projects/{project_id}/tasks", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def error_message(resp) -> Optional[str]:
    return resp.json().get("message")
