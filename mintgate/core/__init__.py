"""
Core mint authorization protocol
"""

from .authorization import (
    AuthorizationVerifier,
    mint_message,
    mint_message_hash,
    recover_signer,
    signed_message_hash,
)
from .controller import MintController, MintResult

__all__ = [
    "AuthorizationVerifier",
    "mint_message",
    "mint_message_hash",
    "recover_signer",
    "signed_message_hash",
    "MintController",
    "MintResult",
]
