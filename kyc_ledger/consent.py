# kyc_ledger/consent.py
"""
Visibility consent for a single data entry of a single owner.

A requestor id is in at most one of visibility_list / visibility_requests:
granting moves it from requests to the list, revoking only takes it off the
list. Requesting while already granted is a no-op. Every function returns a
new Person and raises NotFoundError for an unknown key.
"""
import logging

from kyc_ledger.errors import NotFoundError
from kyc_ledger.schemas import DataEntry, Person

log = logging.getLogger(__name__)


def _entry_of(person: Person, data_key: str) -> DataEntry:
    entry = person.entry(data_key)
    if entry is None:
        raise NotFoundError(f"data key {data_key!r} not found for {person.id!r}")
    return entry


def request_access(requestor: str, owner: Person, data_key: str) -> Person:
    updated = owner.model_copy(deep=True)
    entry = _entry_of(updated, data_key)
    if requestor in entry.visibility_list:
        log.debug("%s already granted %s/%s, request ignored", requestor, owner.id, data_key)
        return updated
    if requestor not in entry.visibility_requests:
        entry.visibility_requests.append(requestor)
    return updated


def grant_access(owner: Person, requestor: str, data_key: str) -> Person:
    updated = owner.model_copy(deep=True)
    entry = _entry_of(updated, data_key)
    if requestor not in entry.visibility_list:
        entry.visibility_list.append(requestor)
    entry.visibility_requests = [r for r in entry.visibility_requests if r != requestor]
    return updated


def revoke_access(owner: Person, requestor: str, data_key: str) -> Person:
    updated = owner.model_copy(deep=True)
    entry = _entry_of(updated, data_key)
    entry.visibility_list = [r for r in entry.visibility_list if r != requestor]
    return updated


def can_read(entry: DataEntry, requestor: str) -> bool:
    return requestor in entry.visibility_list
