"""
mintgate: signature-gated issuance for a fungible balance ledger.
"""

from .core import AuthorizationVerifier, MintController, MintResult
from .errors import (
    InvalidNonce,
    InvalidSignature,
    InvalidSigner,
    MalformedSignature,
    MintError,
    ReentrantCall,
    Unauthorized,
)
from .interfaces import AdminCheck, Ledger
from .state import AdminTable, BalanceTable, NonceTable

__all__ = [
    "AuthorizationVerifier",
    "MintController",
    "MintResult",
    "InvalidNonce",
    "InvalidSignature",
    "InvalidSigner",
    "MalformedSignature",
    "MintError",
    "ReentrantCall",
    "Unauthorized",
    "AdminCheck",
    "Ledger",
    "AdminTable",
    "BalanceTable",
    "NonceTable",
]
