# kyc_ledger/utils.py
import hashlib
import hmac
from typing import Iterable, List

def hash_value(val: str) -> str:
    return hashlib.sha256(val.encode()).hexdigest()

def digest_matches(secret: str, digest: str) -> bool:
    """Compare digest(secret) with a stored digest. No salt, equality is the whole check."""
    return hmac.compare_digest(hash_value(secret).encode(), digest.encode())

def unique(ids: Iterable[str]) -> List[str]:
    # set semantics with a stable, first-seen order
    return list(dict.fromkeys(ids))
