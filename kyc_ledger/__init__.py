# kyc_ledger/__init__.py
"""Per-identity KYC records gated by institutional approval and peer consent."""

__version__ = "0.1.0"
