# tests/conftest.py

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Добавляем корень backend в PYTHONPATH, чтобы импортировался пакет taskflow
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Отдельный файл БД для тестов, чтобы не трогать dev-базу
os.environ.setdefault("DB_URL", "sqlite:///./taskflow_test.db")
os.environ.setdefault("TESTING", "1")

import taskflow.models  # noqa: E402, F401
from taskflow.core.rate_limit import limiter  # noqa: E402
from taskflow.db import Base, SessionLocal, engine  # noqa: E402
from taskflow.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    """
    Перед каждым тестом пересоздаём структуру БД,
    чтобы тесты не влияли друг на друга.
    Также сбрасываем rate limiter, чтобы лимиты не накапливались между тестами.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    # Сброс rate limiter storage для изоляции тестов
    limiter.reset()
    yield


@pytest.fixture()
def client() -> TestClient:
    """
    Фикстура HTTP-клиента для тестирования FastAPI-приложения.
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
