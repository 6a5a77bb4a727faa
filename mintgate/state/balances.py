"""
Single-asset balance tracking with deterministic ordering.

Implements the `Ledger` capability: BalanceTable[Address] -> Amount, plus a
running total supply.
"""

from typing import Dict

from ..interfaces import Ledger
from .canonical import ZERO_ADDRESS, canonical_address, require_uint256


# Type aliases
Address = str  # EIP-55 checksummed 20-byte hex string
Amount = int  # Non-negative integer, fits in uint256


class InsufficientBalance(ValueError):
    def __init__(self, account: Address, balance: Amount, amount: Amount) -> None:
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__(f"Insufficient balance for {account}: {balance} < {amount}")


class BalanceTable(Ledger):
    """
    Deterministic balance table mapping account -> amount.

    Note: this class stores balances in a plain dict. Do not rely on dict
    iteration order for hashing; callers sort keys explicitly at serialization
    boundaries (see `mintgate/state/snapshot.py`).
    """

    def __init__(self):
        """Initialize empty balance table."""
        self._balances: Dict[Address, Amount] = {}
        self._total_supply: Amount = 0

    def _account(self, account: Address) -> Address:
        acct = canonical_address(account)
        if acct == ZERO_ADDRESS:
            raise ValueError("zero address cannot hold a balance")
        return acct

    def balance_of(self, account: Address) -> Amount:
        """Get balance for account. Returns 0 if not found."""
        return self._balances.get(canonical_address(account), 0)

    def total_supply(self) -> Amount:
        return self._total_supply

    def credit(self, account: Address, amount: Amount) -> None:
        """
        Create `amount` new units in `account`.

        Raises:
            ValueError: If account is the zero address, or the new balance or
                supply would not fit in uint256
        """
        acct = self._account(account)
        amount = require_uint256(amount, name="amount")
        new_balance = self.balance_of(acct) + amount
        new_supply = self._total_supply + amount
        require_uint256(new_supply, name="total_supply")
        self._set(acct, new_balance)
        self._total_supply = new_supply

    def debit(self, account: Address, amount: Amount) -> None:
        """
        Destroy `amount` units held by `account`.

        Raises:
            InsufficientBalance: If the account holds less than `amount`
        """
        acct = self._account(account)
        amount = require_uint256(amount, name="amount")
        current = self.balance_of(acct)
        if amount > current:
            raise InsufficientBalance(acct, current, amount)
        self._set(acct, current - amount)
        self._total_supply -= amount

    def load(self, account: Address, amount: Amount) -> None:
        """Seed a balance while rebuilding state from a snapshot."""
        acct = self._account(account)
        if acct in self._balances:
            raise ValueError(f"duplicate balance entry for {acct}")
        self.credit(acct, amount)

    def _set(self, account: Address, amount: Amount) -> None:
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop(account, None)
        else:
            self._balances[account] = amount

    def get_all_balances(self) -> Dict[Address, Amount]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries, supply={self._total_supply})"
