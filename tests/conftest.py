"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path

# Point the app at a throwaway SQLite file before anything imports database
_DB_DIR = tempfile.mkdtemp(prefix="shortlinks-tests-")
os.environ["ENVIRONMENT"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"

import pytest
from fastapi.testclient import TestClient

import database
import main
import models


@pytest.fixture(autouse=True)
def clean_db():
    """Empty the links table after every test."""
    yield
    with database.SessionLocal() as session:
        session.query(models.Link).delete()
        session.commit()


@pytest.fixture
def db():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(main.app)


@pytest.fixture
def sample_url():
    return "https://example.com/page"
