# [TESTER] v1

from __future__ import annotations

import threading
from typing import Callable, Optional

import pytest

from mintgate.agents.mint_signer import sign_mint_authorization, signer_address
from mintgate.core.controller import MintController
from mintgate.errors import InvalidNonce, ReentrantCall
from mintgate.state.admin import AdminTable
from mintgate.state.balances import BalanceTable
from mintgate.state.snapshot import IssuerSnapshot, controller_from_snapshot, snapshot_from_controller


S_KEY = "0x" + "11" * 32
T_KEY = "0x" + "22" * 32
ADMIN = "0x" + "ad" * 20
ALICE = "0x" + "aa" * 20


class HookedLedger(BalanceTable):
    """Balance table that runs a callback in the middle of `credit`."""

    def __init__(self) -> None:
        super().__init__()
        self.on_credit: Optional[Callable[[], None]] = None

    def credit(self, account: str, amount: int) -> None:
        hook, self.on_credit = self.on_credit, None
        if hook is not None:
            hook()
        super().credit(account, amount)


class FailingLedger(BalanceTable):
    def credit(self, account: str, amount: int) -> None:
        raise RuntimeError("ledger unavailable")


def _make(ledger: BalanceTable) -> MintController:
    return MintController("Example Token", "EXT", signer_address(S_KEY), ledger=ledger, admin=AdminTable(ADMIN))


def test_nested_mint_from_credit_fails_and_outer_mint_is_rolled_back() -> None:
    ledger = HookedLedger()
    controller = _make(ledger)
    sig0 = sign_mint_authorization(S_KEY, ALICE, 100, 0)

    # During the credit step the stored nonce is already 1, so this is the
    # authorization a reentrant caller would try to squeeze in.
    sig1 = sign_mint_authorization(S_KEY, ALICE, 100, 1)
    ledger.on_credit = lambda: controller.mint(ALICE, 100, 1, sig1)

    with pytest.raises(ReentrantCall):
        controller.mint(ALICE, 100, 0, sig0)

    assert controller.current_nonce(ALICE) == 0
    assert ledger.balance_of(ALICE) == 0
    assert ledger.total_supply() == 0


def test_nested_mint_rejection_does_not_consume_a_second_nonce() -> None:
    ledger = HookedLedger()
    controller = _make(ledger)
    sig0 = sign_mint_authorization(S_KEY, ALICE, 100, 0)
    sig1 = sign_mint_authorization(S_KEY, ALICE, 100, 1)
    seen: list[str] = []

    def _nested() -> None:
        result = controller.try_mint(ALICE, 100, 1, sig1)
        seen.append(result.code or "ok")

    ledger.on_credit = _nested
    controller.mint(ALICE, 100, 0, sig0)

    assert seen == ["reentrant_call"]
    assert controller.current_nonce(ALICE) == 1
    assert ledger.balance_of(ALICE) == 100

    # The guard is released afterwards: the same authorization is usable once.
    controller.mint(ALICE, 100, 1, sig1)
    assert controller.current_nonce(ALICE) == 2


def test_rotation_from_credit_callback_does_not_deadlock() -> None:
    ledger = HookedLedger()
    controller = _make(ledger)
    ledger.on_credit = lambda: controller.rotate_signer(ADMIN, signer_address(T_KEY))

    controller.mint(ALICE, 1, 0, sign_mint_authorization(S_KEY, ALICE, 1, 0))
    assert controller.signer == signer_address(T_KEY)
    assert controller.current_nonce(ALICE) == 1


def test_failed_credit_leaves_nonce_unchanged() -> None:
    controller = _make(FailingLedger())
    sig = sign_mint_authorization(S_KEY, ALICE, 100, 0)
    with pytest.raises(RuntimeError, match="ledger unavailable"):
        controller.mint(ALICE, 100, 0, sig)
    assert controller.current_nonce(ALICE) == 0


def test_concurrent_submissions_of_one_authorization_succeed_once() -> None:
    ledger = BalanceTable()
    controller = _make(ledger)
    sig = sign_mint_authorization(S_KEY, ALICE, 100, 0)

    n_threads = 8
    barrier = threading.Barrier(n_threads)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def _submit() -> None:
        barrier.wait()
        try:
            controller.mint(ALICE, 100, 0, sig)
            outcome = "ok"
        except InvalidNonce:
            outcome = "invalid_nonce"
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=_submit) for _ in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("invalid_nonce") == n_threads - 1
    assert ledger.balance_of(ALICE) == 100
    assert controller.current_nonce(ALICE) == 1


def _snapshot_during_credit(ledger: HookedLedger, controller: MintController, *, fail: bool) -> list[IssuerSnapshot]:
    """Start a snapshot on a second thread from inside `credit`, then let the credit finish or fail."""
    started = threading.Event()
    taken: list[IssuerSnapshot] = []

    def _take() -> None:
        started.set()
        taken.append(snapshot_from_controller(controller, balances=ledger))

    worker = threading.Thread(target=_take)

    def _hook() -> None:
        worker.start()
        assert started.wait(timeout=5)
        # The worker blocks on the controller lock; give it time to get there.
        worker.join(timeout=0.2)
        if fail:
            raise RuntimeError("ledger unavailable")

    ledger.on_credit = _hook
    sig = sign_mint_authorization(S_KEY, ALICE, 100, 0)
    if fail:
        with pytest.raises(RuntimeError, match="ledger unavailable"):
            controller.mint(ALICE, 100, 0, sig)
    else:
        controller.mint(ALICE, 100, 0, sig)

    worker.join(timeout=5)
    assert not worker.is_alive()
    return taken


def test_snapshot_from_other_thread_never_sees_a_rolled_back_nonce() -> None:
    ledger = HookedLedger()
    controller = _make(ledger)

    (snap,) = _snapshot_during_credit(ledger, controller, fail=True)

    assert snap.data["nonces"] == []
    assert snap.data["balances"] == []
    restored, _ = controller_from_snapshot(snap.data, admin=AdminTable(ADMIN))
    assert restored.current_nonce(ALICE) == 0
    assert controller.current_nonce(ALICE) == 0


def test_snapshot_from_other_thread_sees_a_completed_mint_whole() -> None:
    ledger = HookedLedger()
    controller = _make(ledger)

    (snap,) = _snapshot_during_credit(ledger, controller, fail=False)

    restored, restored_balances = controller_from_snapshot(snap.data, admin=AdminTable(ADMIN))
    assert restored.current_nonce(ALICE) == 1
    assert restored_balances.balance_of(ALICE) == 100
    assert snap.data["total_supply"] == 100
