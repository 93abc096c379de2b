from __future__ import annotations

from datetime import timedelta
from typing import Dict

from sqlalchemy.orm import Session

from taskflow import models
from taskflow.core.logging import get_logger
from taskflow.core.security import hash_password
from taskflow.db import SessionLocal
from taskflow.schemas import ProjectRole, TaskPriority, TaskStatus, UserRole
from taskflow.time_utils import utc_now

logger = get_logger(__name__)

DEMO_PREFIX = "DEMO_"
DEMO_PASSWORD = "demo123"

DEMO_USERS = [
    {"email": "alice@example.com", "full_name": "Alice Owner"},
    {"email": "bob@example.com", "full_name": "Bob Member"},
    {"email": "carol@example.com", "full_name": "Carol Outsider"},
]


def _get_or_create_user(db: Session, email: str, full_name: str) -> models.User:
    user = db.query(models.User).filter(models.User.email == email).first()
    if user:
        return user
    user = models.User(
        email=email,
        full_name=full_name,
        hashed_password=hash_password(DEMO_PASSWORD),
        role=UserRole.USER,
    )
    db.add(user)
    db.flush()
    return user


def _clear_demo(db: Session) -> None:
    # Memberships and tasks follow through ON DELETE CASCADE
    db.query(models.Project).filter(models.Project.name.like(f"{DEMO_PREFIX}%")).delete(
        synchronize_session=False
    )
    db.commit()
    # Rows removed by the database cascade may still sit in the identity map
    db.expunge_all()


def seed_demo_data(db: Session | None = None) -> Dict[str, int]:
    """
    (Re)create a small demo workspace: three users, one project owned by Alice
    with Bob as a member, and a spread of tasks across statuses and deadlines.

    Returns ids of the created rows, keyed by name.
    """
    own_session = db is None
    db = db or SessionLocal()
    try:
        _clear_demo(db)
        users = {data["email"]: _get_or_create_user(db, **data) for data in DEMO_USERS}
        alice = users["alice@example.com"]
        bob = users["bob@example.com"]

        project = models.Project(
            name=f"{DEMO_PREFIX}Website Relaunch",
            description="Demo project with tasks in every state",
            owner_id=alice.id,
        )
        db.add(project)
        db.flush()
        db.add_all(
            [
                models.ProjectMember(project_id=project.id, user_id=alice.id, role=ProjectRole.OWNER),
                models.ProjectMember(project_id=project.id, user_id=bob.id, role=ProjectRole.MEMBER),
            ]
        )

        now = utc_now()
        tasks_data = [
            ("Design landing page", TaskStatus.DONE, TaskPriority.HIGH, now - timedelta(days=3), alice.id),
            ("Fix login bug", TaskStatus.IN_PROGRESS, TaskPriority.CRITICAL, now - timedelta(days=1), bob.id),
            ("Write release notes", TaskStatus.TODO, TaskPriority.LOW, now + timedelta(days=2), None),
            ("Review analytics setup", TaskStatus.REVIEW, TaskPriority.MEDIUM, now + timedelta(days=10), bob.id),
            ("Plan retrospective", TaskStatus.TODO, TaskPriority.MEDIUM, None, alice.id),
        ]
        tasks = []
        for title, status, priority, deadline, assignee_id in tasks_data:
            tasks.append(
                models.Task(
                    title=title,
                    description=f"{DEMO_PREFIX}{title.lower()}",
                    status=status,
                    priority=priority,
                    deadline=deadline,
                    project_id=project.id,
                    assignee_id=assignee_id,
                    completed_at=now - timedelta(days=4) if status == TaskStatus.DONE else None,
                )
            )
        db.add_all(tasks)
        db.commit()

        result = {"project": project.id, **{u.full_name: u.id for u in users.values()}}
        logger.info("demo_data_seeded", project_id=project.id, tasks=len(tasks))
        return result
    except Exception:
        db.rollback()
        raise
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    seed_demo_data()
