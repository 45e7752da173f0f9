# kyc_ledger/registry.py
"""
Identity registry: creates Person records and checks shared secrets.

Every other component loads and saves a Person through load_person/save_person,
so (de)serialization and its failure modes live in one place.
"""
import logging
from typing import List, Optional

import pydantic

from kyc_ledger.errors import AuthenticationError, ConflictError, NotFoundError, StorageError, from_pydantic
from kyc_ledger.ledger import LedgerStore
from kyc_ledger.schemas import DataEntry, Person
from kyc_ledger.utils import digest_matches, hash_value

log = logging.getLogger(__name__)


def load_person(store: LedgerStore, person_id: str) -> Optional[Person]:
    raw = store.get(person_id)
    if raw is None:
        return None
    try:
        return Person.model_validate_json(raw)
    except pydantic.ValidationError as e:
        log.error("stored record for %s is not a valid person", person_id)
        raise StorageError(f"corrupt ledger record for {person_id!r}") from e


def require_person(store: LedgerStore, person_id: str) -> Person:
    person = load_person(store, person_id)
    if person is None:
        raise NotFoundError(f"person {person_id!r} not found")
    return person


def save_person(store: LedgerStore, person: Person) -> None:
    store.put(person.id, person.to_json())


def register(store: LedgerStore, person_id: str, secret: str, entries: List[DataEntry]) -> Person:
    if store.get(person_id) is not None:
        raise ConflictError(f"person {person_id!r} already exists")
    try:
        person = Person(id=person_id, password_digest=hash_value(secret), data=entries)
    except pydantic.ValidationError as e:
        raise from_pydantic(e) from e
    save_person(store, person)
    log.info("registered person %s with %d data entries", person_id, len(person.data))
    return person


def authenticate(store: LedgerStore, person_id: str, secret: str) -> Person:
    person = require_person(store, person_id)
    if not digest_matches(secret, person.password_digest):
        log.warning("authentication failed for %s", person_id)
        raise AuthenticationError("incorrect password provided")
    return person

