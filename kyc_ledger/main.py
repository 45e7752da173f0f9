# kyc_ledger/main.py
from fastapi import FastAPI, Depends, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List
import logging
import os

from kyc_ledger.db import SessionLocal, init_db
from kyc_ledger import models, registry, merger, approval, consent, projector
from kyc_ledger import schemas
from kyc_ledger.errors import ConflictError, LedgerError, NotFoundError, StorageError
from kyc_ledger.ledger import SqlLedgerStore

logging.basicConfig(level=os.environ.get("KYC_LOG_LEVEL", "INFO"),
                    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="KYC Ledger - consent and approval service")

# Initialize DB
init_db()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(status_code=exc.status_code,
                        content={"error": type(exc).__name__, "detail": exc.detail})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # unmatched routes and the like, in the same envelope as LedgerError
    error = NotFoundError.__name__ if exc.status_code == 404 else "HTTPError"
    return JSONResponse(status_code=exc.status_code, headers=getattr(exc, "headers", None),
                        content={"error": error, "detail": exc.detail})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    msgs = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
    return JSONResponse(status_code=422, content={"error": "ValidationError", "detail": msgs})


def commit(db: Session, actor: str, action: str, target: str, **meta):
    """Audit and commit one command. Nothing is written unless the whole command got here."""
    try:
        db.add(models.Audit(actor=actor, action=action, target=target, meta=meta))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log.warning("commit of %s on %s lost a race: %s", action, target, e)
        raise ConflictError(f"{target!r} was written concurrently") from e
    except SQLAlchemyError as e:
        db.rollback()
        log.error("commit of %s on %s failed: %s", action, target, e)
        raise StorageError("error writing ledger state") from e
    log.info("%s: %s -> %s", action, actor, target)


def transact(db: Session, fn):
    """Run fn(store); roll back on any failure so a command is all-or-nothing."""
    store = SqlLedgerStore(db)
    try:
        return fn(store)
    except Exception:
        db.rollback()
        raise


# --- Commands

@app.post("/persons", response_model=schemas.OkOut, status_code=201)
def register_person(payload: schemas.RegisterIn, db: Session = Depends(get_db)):
    transact(db, lambda store: registry.register(store, payload.id, payload.secret, payload.data))
    commit(db, payload.id, "register", payload.id, entries=len(payload.data))
    return {"ok": True}

@app.post("/persons/{person_id}/data", response_model=schemas.OkOut)
def merge_data(person_id: str, payload: schemas.MergeIn, db: Session = Depends(get_db)):
    def run(store):
        owner = registry.authenticate(store, person_id, payload.secret)
        registry.save_person(store, merger.merge(owner, payload.data))
    transact(db, run)
    commit(db, person_id, "merge_data", person_id, keys=[e.key for e in payload.data])
    return {"ok": True}

@app.post("/persons/{owner_id}/data/{key}/approve", response_model=schemas.OkOut)
def approve_data(owner_id: str, key: str, payload: schemas.ApproveIn, db: Session = Depends(get_db)):
    def run(store):
        owner = registry.require_person(store, owner_id)
        registry.save_person(store, approval.approve(payload.institution, owner, key))
    transact(db, run)
    commit(db, payload.institution, "approve", owner_id, key=key)
    return {"ok": True}

@app.post("/persons/{owner_id}/data/{key}/requests", response_model=schemas.OkOut)
def request_access(owner_id: str, key: str, payload: schemas.AccessIn, db: Session = Depends(get_db)):
    def run(store):
        owner = registry.require_person(store, owner_id)
        registry.save_person(store, consent.request_access(payload.requestor, owner, key))
    transact(db, run)
    commit(db, payload.requestor, "request_access", owner_id, key=key)
    return {"ok": True}

@app.post("/persons/{owner_id}/data/{key}/grants", response_model=schemas.OkOut)
def grant_access(owner_id: str, key: str, payload: schemas.AccessIn, db: Session = Depends(get_db)):
    def run(store):
        owner = registry.require_person(store, owner_id)
        registry.save_person(store, consent.grant_access(owner, payload.requestor, key))
    transact(db, run)
    commit(db, owner_id, "grant_access", payload.requestor, key=key)
    return {"ok": True}

@app.post("/persons/{owner_id}/data/{key}/revoke", response_model=schemas.OkOut)
def revoke_access(owner_id: str, key: str, payload: schemas.AccessIn, db: Session = Depends(get_db)):
    def run(store):
        owner = registry.require_person(store, owner_id)
        registry.save_person(store, consent.revoke_access(owner, payload.requestor, key))
    transact(db, run)
    commit(db, owner_id, "revoke_access", payload.requestor, key=key)
    return {"ok": True}


# --- Queries

@app.get("/approvals/pending", response_model=List[schemas.PendingApproval])
def pending_approvals(institution: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return approval.list_pending_approvals(SqlLedgerStore(db), institution)

@app.get("/persons/{person_id}", response_model=schemas.PersonOut)
def get_person(person_id: str, x_person_secret: str = Header(...), db: Session = Depends(get_db)):
    person = registry.authenticate(SqlLedgerStore(db), person_id, x_person_secret)
    return schemas.PersonOut(id=person.id, data=person.data)

@app.get("/persons/{owner_id}/view", response_model=schemas.SecurePerson)
def get_person_for_requestor(owner_id: str, requestor: str = Query(..., min_length=1),
                             x_person_secret: str = Header(...), db: Session = Depends(get_db)):
    view = projector.project_for(SqlLedgerStore(db), requestor, x_person_secret, owner_id)
    if view is None:
        raise NotFoundError(f"person {owner_id!r} not found")
    return view
