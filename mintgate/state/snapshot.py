"""
Issuer state snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / persistence.
- Round-trippable into a `MintController` with its in-memory tables.
- Explicit versioning.

The persisted state is exactly {signer, nonce table, balances}; name and symbol
ride along as metadata.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Tuple

from ..interfaces import AdminCheck
from .balances import BalanceTable
from .canonical import canonical_address, canonical_json_bytes, domain_sep_bytes, require_uint256, sha256_hex
from .nonces import NonceTable

if TYPE_CHECKING:
    from ..core.controller import MintController


ISSUER_SNAPSHOT_VERSION = 1


def _require_str(value: Any, *, name: str, max_len: int = 256) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    if not value:
        raise ValueError(f"{name} must be non-empty")
    if len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_list(value: Any, *, name: str) -> list:
    if not isinstance(value, list):
        raise TypeError(f"{name} must be a list")
    return value


@dataclass(frozen=True)
class IssuerSnapshot:
    """
    Deterministic, versioned snapshot of issuer state.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_bytes(self) -> bytes:
        payload = domain_sep_bytes("issuer_snapshot", version=self.version) + self.canonical_bytes()
        return hashlib.sha256(payload).digest()

    def commitment_hex(self) -> str:
        payload = domain_sep_bytes("issuer_snapshot", version=self.version) + self.canonical_bytes()
        return sha256_hex(payload)

    def write(self, path: Path) -> None:
        """Write canonical JSON atomically (temp file + rename)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_bytes(self.canonical_bytes())
        os.replace(tmp, path)


def snapshot_from_controller(
    controller: "MintController",
    *,
    balances: BalanceTable,
    version: int = ISSUER_SNAPSHOT_VERSION,
) -> IssuerSnapshot:
    if version != ISSUER_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")

    # One critical section: a mint in flight on another thread is either
    # fully visible or not at all.
    with controller.locked():
        signer = controller.signer
        nonces = controller.nonces()
        all_balances = balances.get_all_balances()
        supply = balances.total_supply()

    nonce_entries = [{"account": acct, "nonce": int(n)} for acct, n in nonces.items() if n]
    nonce_entries.sort(key=lambda e: e["account"].lower())

    balance_entries = [{"account": acct, "amount": int(amt)} for acct, amt in all_balances.items()]
    balance_entries.sort(key=lambda e: e["account"].lower())

    data: Dict[str, Any] = {
        "version": int(version),
        "name": controller.name,
        "symbol": controller.symbol,
        "signer": signer,
        "nonces": nonce_entries,
        "balances": balance_entries,
        "total_supply": int(supply),
    }
    return IssuerSnapshot(version=version, data=data)


def controller_from_snapshot(
    snapshot: Mapping[str, Any],
    *,
    admin: AdminCheck,
) -> Tuple["MintController", BalanceTable]:
    """
    Rebuild a controller (and its balance table) from `IssuerSnapshot.data`.

    Raises TypeError/ValueError on malformed input; `InvalidSigner` if the
    persisted signer is the null identity.
    """
    from ..core.controller import MintController

    if not isinstance(snapshot, Mapping):
        raise TypeError("snapshot must be an object")
    version = snapshot.get("version")
    if version != ISSUER_SNAPSHOT_VERSION or isinstance(version, bool):
        raise ValueError(f"unsupported snapshot version: {version!r}")

    name = _require_str(snapshot.get("name"), name="name")
    symbol = _require_str(snapshot.get("symbol"), name="symbol")
    signer = _require_str(snapshot.get("signer"), name="signer")

    nonces = NonceTable()
    for i, entry in enumerate(_require_list(snapshot.get("nonces"), name="nonces")):
        if not isinstance(entry, Mapping):
            raise TypeError(f"nonces[{i}] must be an object")
        acct = canonical_address(entry.get("account"), name=f"nonces[{i}].account")
        nonces.load(acct, require_uint256(entry.get("nonce"), name=f"nonces[{i}].nonce"))

    balances = BalanceTable()
    for i, entry in enumerate(_require_list(snapshot.get("balances"), name="balances")):
        if not isinstance(entry, Mapping):
            raise TypeError(f"balances[{i}] must be an object")
        acct = canonical_address(entry.get("account"), name=f"balances[{i}].account")
        balances.load(acct, require_uint256(entry.get("amount"), name=f"balances[{i}].amount"))

    total_supply = require_uint256(snapshot.get("total_supply"), name="total_supply")
    if total_supply != balances.total_supply():
        raise ValueError(f"total_supply mismatch: declared {total_supply}, balances sum to {balances.total_supply()}")

    controller = MintController(name, symbol, signer, ledger=balances, admin=admin, nonces=nonces)
    return controller, balances
