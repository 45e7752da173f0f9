# kyc_ledger/models.py
from sqlalchemy import Column, String, DateTime, JSON, Text
import datetime
import uuid
from kyc_ledger.db import Base

def gen_uuid():
    return str(uuid.uuid4())

class LedgerState(Base):
    """One ledger key and its serialized value (a Person record)."""
    __tablename__ = "ledger_state"
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

class Audit(Base):
    __tablename__ = "audit"
    event_id = Column(String, primary_key=True, default=gen_uuid)
    actor = Column(String)
    action = Column(String)
    target = Column(String)
    ts = Column(DateTime, default=datetime.datetime.utcnow)
    meta = Column(JSON, default={})
