"""
Mint authorization signing for the off-chain signer.
"""

from typing import Union

from eth_account import Account
from eth_account.messages import encode_defunct

from ..core.authorization import mint_message_hash

PrivateKey = Union[bytes, str]


def signer_address(private_key: PrivateKey) -> str:
    """Checksum address controlled by `private_key`."""
    return Account.from_key(private_key).address


def sign_mint_authorization(private_key: PrivateKey, account: str, amount: int, nonce: int) -> str:
    """
    Authorize `account` to mint `amount` units using its nonce `nonce`.

    Args:
        private_key: secp256k1 private key (32 bytes or 0x hex)
        account: Account that will submit the mint
        amount: Units to mint
        nonce: The account's current nonce at submission time

    Returns:
        0x-prefixed 65-byte signature (r || s || v, v in {27, 28})
    """
    digest = mint_message_hash(account, amount, nonce)
    signed = Account.sign_message(encode_defunct(primitive=digest), private_key=private_key)
    return "0x" + bytes(signed.signature).hex()
