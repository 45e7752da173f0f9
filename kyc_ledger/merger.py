# kyc_ledger/merger.py
import logging
from typing import List

from kyc_ledger.errors import ValidationError
from kyc_ledger.schemas import DataEntry, Person

log = logging.getLogger(__name__)


def merge(owner: Person, incoming: List[DataEntry]) -> Person:
    """
    Apply incoming field updates to an already authenticated owner.

    Entries are matched by key across the owner's whole list. A match takes the
    new value and drops back to unapproved; approval, institution and consent
    lists of the existing entry are kept. Unknown keys are appended as supplied.
    A batch repeating a key is rejected whole. Returns a new Person, the owner
    passed in is left untouched.
    """
    keys = [e.key for e in incoming]
    dupes = sorted({k for k in keys if keys.count(k) > 1})
    if dupes:
        raise ValidationError(f"duplicate data keys in update: {dupes}")

    merged = owner.model_copy(deep=True)
    index = {e.key: e for e in merged.data}
    changed, added = 0, 0
    for new in incoming:
        existing = index.get(new.key)
        if existing is not None:
            existing.value = new.value
            existing.approved = False
            changed += 1
        else:
            entry = new.model_copy(deep=True)
            merged.data.append(entry)
            index[entry.key] = entry
            added += 1
    log.info("merged data for %s: %d updated, %d added", owner.id, changed, added)
    return merged
