"""
Mint authorization hashing and signer recovery.

Signing scheme (fixed; changing any byte invalidates every outstanding,
not-yet-consumed authorization):

    message     = encode_packed(["address", "uint256", "uint256"], [account, amount, nonce])
    digest      = keccak256(message)                                  # 32 bytes
    signed_hash = keccak256(b"\\x19Ethereum Signed Message:\\n32" || digest)
    signature   = r (32) || s (32) || v (1),  v in {27, 28},  s <= N/2

`message` is always 20 + 32 + 32 = 84 bytes, so distinct (account, amount,
nonce) triples never share an encoding. The EIP-191 prefix binds the signature
to "signed personal message" semantics, so it can never double as a raw
transaction signature.
"""

from __future__ import annotations

from typing import Union

from eth_abi.packed import encode_packed
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import keccak

from ..errors import MalformedSignature
from ..state.canonical import ZERO_ADDRESS, canonical_address, hex_to_bytes, require_uint256


SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

SIGNATURE_LENGTH = 65
MESSAGE_LENGTH = 84
PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n32"

SignatureLike = Union[bytes, bytearray, str]


def mint_message(account: str, amount: int, nonce: int) -> bytes:
    acct = canonical_address(account)
    amount = require_uint256(amount, name="amount")
    nonce = require_uint256(nonce, name="nonce")
    return encode_packed(["address", "uint256", "uint256"], [acct, amount, nonce])


def mint_message_hash(account: str, amount: int, nonce: int) -> bytes:
    return keccak(mint_message(account, amount, nonce))


def signed_message_hash(digest: bytes) -> bytes:
    """EIP-191 version 0x45 transform of a 32-byte digest."""
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != 32:
        raise TypeError("digest must be 32 bytes")
    return keccak(PERSONAL_MESSAGE_PREFIX + bytes(digest))


def signature_bytes(signature: SignatureLike) -> bytes:
    """
    Decode and structurally validate a 65-byte recoverable signature.

    Raises:
        MalformedSignature: wrong length, v not in {27, 28}, r out of range,
            or s not in the lower half of the curve order
    """
    if isinstance(signature, str):
        try:
            raw = hex_to_bytes(signature, name="signature")
        except ValueError as exc:
            raise MalformedSignature(str(exc)) from exc
    elif isinstance(signature, (bytes, bytearray)):
        raw = bytes(signature)
    else:
        raise MalformedSignature(f"signature must be bytes or hex str, got {type(signature).__name__}")

    if len(raw) != SIGNATURE_LENGTH:
        raise MalformedSignature(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}")
    r = int.from_bytes(raw[0:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    v = raw[64]
    if v not in (27, 28):
        raise MalformedSignature(f"invalid recovery id v={v}")
    if not 0 < r < SECP256K1_N:
        raise MalformedSignature("signature r out of range")
    if not 0 < s <= SECP256K1_HALF_N:
        raise MalformedSignature("signature s is not canonical (high-s or zero)")
    return raw


def recover_signer(digest: bytes, signature: SignatureLike) -> str:
    """Recover the checksum address that signed `digest` under the personal-message transform."""
    raw = signature_bytes(signature)
    try:
        recovered = Account.recover_message(encode_defunct(primitive=bytes(digest)), signature=raw)
    except Exception as exc:
        raise MalformedSignature(f"signature recovery failed: {exc}") from exc
    recovered = canonical_address(recovered, name="recovered")
    if recovered == ZERO_ADDRESS:
        raise MalformedSignature("signature recovered to the zero address")
    return recovered


class AuthorizationVerifier:
    """
    Stateless verifier for mint authorizations.

    The trusted signer is passed on every call; the verifier holds no state and
    may be shared across threads.
    """

    def verify(
        self,
        account: str,
        amount: int,
        nonce: int,
        signature: SignatureLike,
        trusted_signer: str,
    ) -> bool:
        digest = mint_message_hash(account, amount, nonce)
        recovered = recover_signer(digest, signature)
        return recovered == canonical_address(trusted_signer, name="trusted_signer")
