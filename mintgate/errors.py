"""Exception types for the mint authorization protocol.

Every error carries a stable ``code`` so callers that prefer result objects
(``MintController.try_mint``) can branch without string matching.
"""

from __future__ import annotations


class MintError(Exception):
    """Base class for rejected issuer operations."""

    code = "mint_error"


class InvalidSigner(MintError):
    """Raised when the null identity is supplied where a real signer is required."""

    code = "invalid_signer"


class InvalidNonce(MintError):
    code = "invalid_nonce"

    def __init__(self, *, expected: int, presented: int) -> None:
        self.expected = expected
        self.presented = presented
        super().__init__(f"invalid nonce: expected {expected}, got {presented}")


class InvalidSignature(MintError):
    """Raised when an authorization does not recover to the trusted signer."""

    code = "invalid_signature"


class MalformedSignature(InvalidSignature):
    """Raised when signature bytes are rejected before or during recovery."""

    code = "malformed_signature"


class Unauthorized(MintError):
    code = "unauthorized"


class ReentrantCall(MintError):
    """Raised when ``mint`` is re-entered while a mint is in progress."""

    code = "reentrant_call"
