# kyc_ledger/ledger.py
"""
Ledger store seam. The consent logic only ever talks to a LedgerStore:

 - get(key)            -> serialized value or None
 - put(key, value)     -> write, visible to later reads in the same transaction
 - scan(low, high)     -> keys in lexical order, low <= key < high

SqlLedgerStore writes through the caller's SQLAlchemy session and never commits;
the command layer owns the transaction. MemoryLedgerStore backs the unit tests.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kyc_ledger import models
from kyc_ledger.errors import ConflictError, StorageError

log = logging.getLogger(__name__)


class LedgerStore:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError

    def scan(self, low: str = "", high: Optional[str] = None) -> List[str]:
        raise NotImplementedError


class MemoryLedgerStore(LedgerStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._state: Dict[str, str] = dict(initial or {})

    def get(self, key):
        return self._state.get(key)

    def put(self, key, value):
        self._state[key] = value

    def scan(self, low="", high=None):
        return sorted(k for k in self._state if k >= low and (high is None or k < high))


class SqlLedgerStore(LedgerStore):
    def __init__(self, db: Session):
        self.db = db

    def get(self, key):
        try:
            row = self.db.get(models.LedgerState, key)
        except SQLAlchemyError as e:
            log.error("ledger read failed for %s: %s", key, e)
            raise StorageError("error retrieving ledger state") from e
        return row.value if row is not None else None

    def put(self, key, value):
        try:
            row = self.db.get(models.LedgerState, key)
            if row is None:
                self.db.add(models.LedgerState(key=key, value=value))
            else:
                row.value = value
            self.db.flush()
        except IntegrityError as e:
            log.warning("concurrent write to %s: %s", key, e)
            raise ConflictError(f"{key!r} was written concurrently") from e
        except SQLAlchemyError as e:
            log.error("ledger write failed for %s: %s", key, e)
            raise StorageError("error writing ledger state") from e

    def scan(self, low="", high=None):
        q = select(models.LedgerState.key).where(models.LedgerState.key >= low)
        if high is not None:
            q = q.where(models.LedgerState.key < high)
        try:
            keys = list(self.db.scalars(q))
        except SQLAlchemyError as e:
            log.error("ledger scan failed: %s", e)
            raise StorageError("error accessing ledger state") from e
        # lexical order by code point regardless of the database collation
        return sorted(keys)
