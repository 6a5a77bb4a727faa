"""
State management for the mint issuer
"""

from .admin import AdminTable
from .balances import BalanceTable, InsufficientBalance
from .nonces import NonceTable
from .snapshot import IssuerSnapshot, controller_from_snapshot, snapshot_from_controller

__all__ = [
    "AdminTable",
    "BalanceTable",
    "InsufficientBalance",
    "NonceTable",
    "IssuerSnapshot",
    "controller_from_snapshot",
    "snapshot_from_controller",
]
