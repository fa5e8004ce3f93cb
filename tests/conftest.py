# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from estate_intel.adapters.memory_repo import InMemoryPropertyRepository
from estate_intel.adapters.sql_repo import SqlPropertyRepository
from estate_intel.api.http import app, get_repo


def condo_project_rows():
    """
    Subject unit p1 on floor 15 of project "proj-1" plus three sold-comparable
    units averaging 90,000/sqm.
    """
    return [
        {
            "id": "p1", "category": "CONDO", "price": 5_000_000, "size": 50, "floor": 15,
            "area": "Jomtien", "city": "Pattaya", "project_id": "proj-1",
        },
        {"id": "p2", "category": "CONDO", "price": 4_500_000, "size": 50, "floor": 8,
         "area": "Jomtien", "city": "Pattaya", "project_id": "proj-1"},
        {"id": "p3", "category": "CONDO", "price": 3_600_000, "size": 40, "floor": 12,
         "area": "Jomtien", "city": "Pattaya", "project_id": "proj-1"},
        {"id": "p4", "category": "CONDO", "price": 5_400_000, "size": 60, "floor": 20,
         "area": "Jomtien", "city": "Pattaya", "project_id": "proj-1"},
    ]


@pytest.fixture
def memory_repo():
    return InMemoryPropertyRepository(condo_project_rows())


@pytest.fixture
def sql_repo(tmp_path):
    repo = SqlPropertyRepository(f"sqlite:///{tmp_path}/test.db")
    repo.upsert_many(condo_project_rows())
    return repo


@pytest.fixture
def client(sql_repo):
    app.dependency_overrides[get_repo] = lambda: sql_repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
