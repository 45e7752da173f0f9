# tests/conftest.py
import os

# must be set before kyc_ledger.db is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from kyc_ledger import registry
from kyc_ledger.ledger import MemoryLedgerStore
from kyc_ledger.schemas import DataEntry


@pytest.fixture
def store():
    return MemoryLedgerStore()


@pytest.fixture
def alice(store):
    """alice/pw1 with one unapproved field owned by bank1 and one approved field owned by bank2."""
    return registry.register(store, "alice", "pw1", [
        DataEntry(key="dob", value="2000-01-01", approving_institution="bank1"),
        DataEntry(key="address", value="1 Main St", approved=True, approving_institution="bank2"),
    ])


@pytest.fixture
def bob(store):
    return registry.register(store, "bob", "pw2", [])


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from kyc_ledger.db import Base, engine
    from kyc_ledger.main import app

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c
