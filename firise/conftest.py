import os
from datetime import date

# Cheap hashes for the seeded demo user; must be set before firise.config loads.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from firise.main import create_app
from firise.services.mem_storage import MemStorage
from firise.services.seed import seed_demo_data
from firise.services.sql_storage import SqlStorage

SEED_DAY = date(2023, 9, 20)


@pytest.fixture
def storage():
    return MemStorage()


@pytest.fixture(params=["memory", "sql"])
def seeded_storage(request, tmp_path):
    """Demo data on each backend, so every HTTP test runs against both."""
    if request.param == "memory":
        store = MemStorage()
    else:
        store = SqlStorage(f"sqlite:///{tmp_path / 'firise-seeded.db'}")
    seed_demo_data(store, today=SEED_DAY)
    yield store
    store.close()


@pytest.fixture
def sql_storage(tmp_path):
    store = SqlStorage(f"sqlite:///{tmp_path / 'firise-test.db'}")
    yield store
    store.close()


@pytest.fixture
def app(seeded_storage):
    return create_app(storage=seeded_storage)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
