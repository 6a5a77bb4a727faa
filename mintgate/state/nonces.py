"""
Nonce table for replay protection (v1).

We track, per account, the next authorization index that account must present.
Policy is strict sequential nonces: exactly one authorization per index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Set

from .canonical import canonical_address, require_uint256


@dataclass
class NonceTable:
    """
    Mutable mapping: account -> next expected nonce.

    Unseen accounts read as 0. Only the mint controller advances entries.
    """

    _next: Dict[str, int] = field(default_factory=dict)
    # Accounts seeded by `load`, including zero entries that are never stored.
    _loaded: Set[str] = field(default_factory=set, repr=False)

    def current_nonce(self, account: str) -> int:
        acct = canonical_address(account)
        v = self._next.get(acct, 0)
        if not isinstance(v, int) or isinstance(v, bool) or v < 0:
            raise ValueError(f"invalid stored nonce for {account!r}: {v!r}")
        return int(v)

    def advance(self, account: str) -> int:
        """Increment the account's counter by exactly one and return the new value."""
        acct = canonical_address(account)
        nxt = self.current_nonce(acct) + 1
        self._next[acct] = nxt
        return nxt

    def restore(self, account: str, nonce: int) -> None:
        """
        Undo a single `advance` that belongs to a failed unit of work.

        Only the immediately preceding advance can be undone: the stored value
        must be exactly `nonce + 1`.
        """
        acct = canonical_address(account)
        nonce = require_uint256(nonce, name="nonce")
        if self.current_nonce(acct) != nonce + 1:
            raise ValueError(f"cannot restore nonce {nonce} for {acct}: no matching advance")
        if nonce == 0:
            self._next.pop(acct, None)
        else:
            self._next[acct] = nonce

    def load(self, account: str, nonce: int) -> None:
        """Seed an entry while rebuilding state from a snapshot."""
        acct = canonical_address(account)
        nonce = require_uint256(nonce, name="nonce")
        if acct in self._next or acct in self._loaded:
            raise ValueError(f"duplicate nonce entry for {acct}")
        self._loaded.add(acct)
        if nonce:
            self._next[acct] = nonce

    def get_all(self) -> Mapping[str, int]:
        # Return a shallow copy to avoid accidental mutation during iteration.
        return dict(self._next)
