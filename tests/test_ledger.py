import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kyc_ledger import models  # noqa: F401
from kyc_ledger.db import Base
from kyc_ledger.errors import ConflictError, StorageError
from kyc_ledger.ledger import MemoryLedgerStore, SqlLedgerStore


@pytest.fixture
def session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(bind=engine)()
    yield db
    db.close()


@pytest.fixture(params=["memory", "sql"])
def any_store(request, session):
    return MemoryLedgerStore() if request.param == "memory" else SqlLedgerStore(session)


def test_get_put(any_store):
    assert any_store.get("alice") is None
    any_store.put("alice", "v1")
    any_store.put("alice", "v2")
    assert any_store.get("alice") == "v2"


def test_scan_is_lexical_and_half_open(any_store):
    for k in ["carol", "Bob", "alice", "0x", "dave"]:
        any_store.put(k, "{}")
    assert any_store.scan() == ["0x", "Bob", "alice", "carol", "dave"]
    assert any_store.scan("alice", "dave") == ["alice", "carol"]


def test_sql_writes_are_not_committed(session):
    store = SqlLedgerStore(session)
    store.put("alice", "v1")
    session.rollback()
    assert store.get("alice") is None


class _Broken:
    def get(self, *a, **kw):
        raise OperationalError("select", {}, Exception("disk I/O error"))

    scalars = add = flush = get


def test_backend_failures_become_storage_errors():
    store = SqlLedgerStore(_Broken())
    with pytest.raises(StorageError):
        store.get("alice")
    with pytest.raises(StorageError):
        store.put("alice", "v")
    with pytest.raises(StorageError):
        store.scan()


class _Racing:
    def get(self, *a, **kw):
        return None

    def add(self, obj):
        pass

    def flush(self):
        raise IntegrityError("insert", {}, Exception("UNIQUE constraint failed: ledger_state.key"))


def test_concurrent_insert_is_a_conflict():
    with pytest.raises(ConflictError):
        SqlLedgerStore(_Racing()).put("alice", "v")
