# kyc_ledger/approval.py
import logging
from typing import Iterator, List

from kyc_ledger.errors import AuthorizationError, NotFoundError
from kyc_ledger.ledger import LedgerStore
from kyc_ledger.registry import load_person
from kyc_ledger.schemas import PendingApproval, Person

log = logging.getLogger(__name__)


def approve(institution: str, owner: Person, data_key: str) -> Person:
    """Mark owner's entry approved. Only the entry's own approving institution may do so."""
    entry = owner.entry(data_key)
    if entry is None:
        raise NotFoundError(f"data key {data_key!r} not found for {owner.id!r}")
    if institution != entry.approving_institution:
        log.warning("%s tried to approve %s/%s owned by institution %s",
                    institution, owner.id, data_key, entry.approving_institution)
        raise AuthorizationError(f"{institution!r} is not the approving institution for {data_key!r}")
    approved = owner.model_copy(deep=True)
    approved.entry(data_key).approved = True
    return approved


def iter_persons(store: LedgerStore) -> Iterator[Person]:
    # Per-key reads only; a write racing the scan may or may not be observed.
    for key in store.scan():
        person = load_person(store, key)
        if person is not None:
            yield person


def list_pending_approvals(store: LedgerStore, institution: str) -> List[PendingApproval]:
    pending = [
        PendingApproval(id=person.id, data=entry)
        for person in iter_persons(store)
        for entry in person.data
        if entry.approving_institution == institution and not entry.approved
    ]
    log.debug("%d pending approvals for %s", len(pending), institution)
    return pending
