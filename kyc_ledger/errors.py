# kyc_ledger/errors.py
"""Error taxonomy shared by every component.

Each error carries the HTTP status the API layer answers with.
"""


class LedgerError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(LedgerError):
    """Wrong argument shape or a malformed payload."""
    status_code = 422


class AuthenticationError(LedgerError):
    """Shared secret does not match the stored digest."""
    status_code = 401


class AuthorizationError(LedgerError):
    """Caller is authenticated but lacks rights, e.g. the wrong approving institution."""
    status_code = 403


class NotFoundError(LedgerError):
    status_code = 404


class ConflictError(LedgerError):
    """Registration over an id that already exists."""
    status_code = 409


class StorageError(LedgerError):
    """The ledger store failed or returned something undecodable."""
    status_code = 503


def from_pydantic(e) -> ValidationError:
    """Flatten a pydantic validation failure into our ValidationError."""
    return ValidationError("; ".join(err["msg"] for err in e.errors()))
