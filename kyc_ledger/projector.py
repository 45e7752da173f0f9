# kyc_ledger/projector.py
from typing import Optional

from kyc_ledger.consent import can_read
from kyc_ledger.errors import AuthenticationError, NotFoundError
from kyc_ledger.ledger import LedgerStore
from kyc_ledger.registry import authenticate, load_person
from kyc_ledger.schemas import Person, SecureDataEntry, SecurePerson


def redact(owner: Person, requestor: str) -> SecurePerson:
    """
    Render owner's record as requestor may see it: values only where access was
    granted, a request flag, approval passed through. Never the digest or the
    consent lists themselves.
    """
    return SecurePerson(
        id=owner.id,
        data=[
            SecureDataEntry(
                key=e.key,
                value=e.value if can_read(e, requestor) else None,
                approved=e.approved,
                request_sent=requestor in e.visibility_requests,
            )
            for e in owner.data
        ],
    )


def project_for(store: LedgerStore, requestor: str, secret: str, owner_id: str) -> Optional[SecurePerson]:
    """Returns None when the owner does not exist."""
    try:
        authenticate(store, requestor, secret)
    except NotFoundError as e:
        # unknown requestors fail the same way as wrong secrets
        raise AuthenticationError("incorrect password provided") from e
    owner = load_person(store, owner_id)
    if owner is None:
        return None
    return redact(owner, requestor)
