"""
Capability interfaces consumed by the issuer core.

The controller depends on these contracts only. Reference in-memory
implementations live in `mintgate.state.balances` and `mintgate.state.admin`.
"""

from __future__ import annotations


class Ledger:
    """Balance bookkeeping. Each call must be atomic with respect to the caller."""

    def credit(self, account: str, amount: int) -> None:
        raise NotImplementedError

    def debit(self, account: str, amount: int) -> None:
        raise NotImplementedError

    def balance_of(self, account: str) -> int:
        raise NotImplementedError

    def total_supply(self) -> int:
        raise NotImplementedError


class AdminCheck:
    """Administrative rights. The controller only ever calls `is_admin`."""

    def is_admin(self, caller: str) -> bool:
        raise NotImplementedError

    def transfer_admin_rights(self, caller: str, new_admin: str) -> None:
        raise NotImplementedError
