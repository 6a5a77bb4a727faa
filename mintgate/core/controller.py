"""
Mint controller: the imperative shell around nonce tracking and signer recovery.

`mint` checks, in order:
1. the presented nonce equals the caller's current nonce (`InvalidNonce`),
2. the signature recovers to the current trusted signer (`InvalidSignature`).

On success the nonce is advanced and the ledger credited as one unit of work.
A failure at any point leaves nonces, balances and the signer untouched.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from ..errors import InvalidNonce, InvalidSignature, InvalidSigner, MintError, ReentrantCall, Unauthorized
from ..interfaces import AdminCheck, Ledger
from ..state.canonical import canonical_address, is_zero_address, require_uint256
from ..state.nonces import NonceTable
from .authorization import AuthorizationVerifier, SignatureLike


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintResult:
    ok: bool
    error: Optional[str] = None
    code: Optional[str] = None


def _require_signer(value: str, *, name: str) -> str:
    try:
        if is_zero_address(value):
            raise InvalidSigner(f"{name} must not be the zero address")
        return canonical_address(value, name=name)
    except (TypeError, ValueError) as exc:
        raise InvalidSigner(f"{name} is not a valid address: {exc}") from exc


class MintController:
    def __init__(
        self,
        name: str,
        symbol: str,
        initial_signer: str,
        *,
        ledger: Ledger,
        admin: AdminCheck,
        verifier: Optional[AuthorizationVerifier] = None,
        nonces: Optional[NonceTable] = None,
    ) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("name must be a non-empty str")
        if not isinstance(symbol, str) or not symbol:
            raise ValueError("symbol must be a non-empty str")
        self._name = name
        self._symbol = symbol
        self._signer = _require_signer(initial_signer, name="initial_signer")
        self._ledger = ledger
        self._admin = admin
        self._verifier = verifier if verifier is not None else AuthorizationVerifier()
        self._nonces = nonces if nonces is not None else NonceTable()

        # Serializes state mutation across threads. Reentrant so a ledger
        # callback may still rotate the signer or burn on the same thread.
        self._lock = threading.RLock()
        self._call_state = threading.local()

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def signer(self) -> str:
        return self._signer

    def nonces(self) -> Dict[str, int]:
        """Copy of every non-zero nonce entry, keyed by checksum address."""
        with self._lock:
            return dict(self._nonces.get_all())

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the state lock so several reads observe one consistent state."""
        with self._lock:
            yield

    def current_nonce(self, account: str) -> int:
        return self._nonces.current_nonce(account)

    def balance_of(self, account: str) -> int:
        return self._ledger.balance_of(account)

    def total_supply(self) -> int:
        return self._ledger.total_supply()

    @contextmanager
    def _non_reentrant(self) -> Iterator[None]:
        if getattr(self._call_state, "minting", False):
            raise ReentrantCall("mint is already in progress in this context")
        self._call_state.minting = True
        try:
            with self._lock:
                yield
        finally:
            self._call_state.minting = False

    def mint(self, caller: str, amount: int, nonce: int, signature: SignatureLike) -> None:
        caller = canonical_address(caller, name="caller")
        amount = require_uint256(amount, name="amount")
        nonce = require_uint256(nonce, name="nonce")

        with self._non_reentrant():
            expected = self._nonces.current_nonce(caller)
            if nonce != expected:
                raise InvalidNonce(expected=expected, presented=nonce)
            if not self._verifier.verify(caller, amount, nonce, signature, self._signer):
                raise InvalidSignature(f"authorization for {caller} nonce {nonce} not signed by the trusted signer")

            self._nonces.advance(caller)
            try:
                self._ledger.credit(caller, amount)
            except BaseException:
                self._nonces.restore(caller, nonce)
                raise

        logger.debug("mint accepted: account=%s amount=%d nonce=%d", caller, amount, nonce)

    def try_mint(self, caller: str, amount: int, nonce: int, signature: SignatureLike) -> MintResult:
        """Like `mint()` but reports protocol rejections instead of raising them."""
        try:
            self.mint(caller, amount, nonce, signature)
        except MintError as exc:
            logger.debug("mint rejected: account=%s nonce=%r code=%s", caller, nonce, exc.code)
            return MintResult(ok=False, error=str(exc), code=exc.code)
        return MintResult(ok=True)

    def rotate_signer(self, caller: str, new_signer: str) -> None:
        try:
            caller = canonical_address(caller, name="caller")
        except (TypeError, ValueError) as exc:
            raise Unauthorized(f"caller is not a valid address: {exc}") from exc
        if not self._admin.is_admin(caller):
            raise Unauthorized(f"{caller} does not hold administrative rights")
        signer = _require_signer(new_signer, name="new_signer")
        with self._lock:
            previous = self._signer
            self._signer = signer
        logger.info("trusted signer rotated from %s to %s", previous, signer)

    def burn(self, caller: str, amount: int) -> None:
        caller = canonical_address(caller, name="caller")
        amount = require_uint256(amount, name="amount")
        with self._lock:
            self._ledger.debit(caller, amount)
        logger.debug("burn: account=%s amount=%d", caller, amount)
