"""
Single-holder administrative rights (the `AdminCheck` capability).
"""

from __future__ import annotations

import logging

from ..errors import InvalidSigner, Unauthorized
from ..interfaces import AdminCheck
from .canonical import canonical_address, is_zero_address


logger = logging.getLogger(__name__)


class AdminTable(AdminCheck):
    def __init__(self, admin: str) -> None:
        if is_zero_address(admin):
            raise InvalidSigner("admin must not be the zero address")
        self._admin = canonical_address(admin, name="admin")

    @property
    def admin(self) -> str:
        return self._admin

    def is_admin(self, caller: str) -> bool:
        return canonical_address(caller, name="caller") == self._admin

    def transfer_admin_rights(self, caller: str, new_admin: str) -> None:
        if not self.is_admin(caller):
            raise Unauthorized(f"{caller} does not hold administrative rights")
        if is_zero_address(new_admin):
            raise InvalidSigner("new admin must not be the zero address")
        previous = self._admin
        self._admin = canonical_address(new_admin, name="new_admin")
        logger.info("admin rights transferred from %s to %s", previous, self._admin)
