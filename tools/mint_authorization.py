#!/usr/bin/env python3
"""
Hash, sign and verify mint authorizations from the command line.

Examples:
  python3 tools/mint_authorization.py hash --account 0x... --amount 100 --nonce 0
  python3 tools/mint_authorization.py sign --account 0x... --amount 100 --nonce 0 --key-file signer.key
  python3 tools/mint_authorization.py verify --account 0x... --amount 100 --nonce 0 \\
      --signature 0x... --signer 0x...

The key file holds a single 0x-prefixed hex private key.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mintgate.agents.mint_signer import sign_mint_authorization, signer_address
from mintgate.core.authorization import AuthorizationVerifier, mint_message_hash, signed_message_hash
from mintgate.errors import MalformedSignature


logger = logging.getLogger("mint_authorization")


def _read_key(path: Path) -> str:
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        raise ValueError(f"key file is empty: {path}")
    return text


def _add_triple_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--account", required=True, help="Account that will submit the mint (0x address)")
    p.add_argument("--amount", required=True, type=int, help="Units to mint")
    p.add_argument("--nonce", required=True, type=int, help="Account's current nonce")


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Mint authorization helper.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_hash = sub.add_parser("hash", help="Print the message hash and its personal-message digest")
    _add_triple_args(p_hash)

    p_sign = sub.add_parser("sign", help="Sign an authorization")
    _add_triple_args(p_sign)
    p_sign.add_argument("--key-file", required=True, type=Path, help="File containing the signer private key")

    p_verify = sub.add_parser("verify", help="Check an authorization against a signer")
    _add_triple_args(p_verify)
    p_verify.add_argument("--signature", required=True, help="0x-prefixed 65-byte signature")
    p_verify.add_argument("--signer", required=True, help="Trusted signer address")

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if args.cmd == "hash":
            digest = mint_message_hash(args.account, args.amount, args.nonce)
            print(f"message_hash=0x{digest.hex()}")
            print(f"signed_hash=0x{signed_message_hash(digest).hex()}")
            return 0

        if args.cmd == "sign":
            key = _read_key(args.key_file)
            logger.debug("signing for %s as %s", args.account, signer_address(key))
            print(sign_mint_authorization(key, args.account, args.amount, args.nonce))
            return 0

        try:
            ok = AuthorizationVerifier().verify(args.account, args.amount, args.nonce, args.signature, args.signer)
        except MalformedSignature as exc:
            print(f"malformed signature: {exc}")
            return 1
        if not ok:
            print("signature does not recover to signer")
            return 1
        print("ok")
        return 0
    except (OSError, TypeError, ValueError) as exc:
        print(f"mint_authorization error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
