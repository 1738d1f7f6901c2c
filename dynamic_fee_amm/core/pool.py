"""Two-asset constant product pool with a volatility-driven fee."""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from dynamic_fee_amm.core.config import DEFAULT_POOL_CONFIG, PRECISION, PoolConfig
from dynamic_fee_amm.core.custody import TokenCustody
from dynamic_fee_amm.core.errors import (
    AmbiguousDirection,
    CustodyError,
    EmptyPool,
    IdenticalAssets,
    InvalidAddress,
    InvalidInput,
    ReentrantCall,
    SlippageExceeded,
    TransferFailed,
)
from dynamic_fee_amm.core.events import AddLiquidityEvent, EventLog, FeeUpdatedEvent, SwapEvent
from dynamic_fee_amm.core.fee import FeeController
from dynamic_fee_amm.core.history import PriceHistory, PriceSnapshot

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee: int) -> int:
    """Output of a fee-on-input constant product swap.

    Only (1 - fee) of the input moves the curve, but the full input is
    added to reserves afterwards, so the fee stays in the pool.

    Args:
        amount_in: Gross input amount
        reserve_in: Reserve of the input asset
        reserve_out: Reserve of the output asset
        fee: Fee rate in scale units

    Returns:
        Output amount, truncated toward zero
    """
    effective_in = amount_in * (PRECISION - fee) // PRECISION
    return reserve_out * effective_in // (reserve_in + effective_in)


def _wall_clock() -> int:
    return int(time.time())


def _require_amount(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise InvalidInput(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class _Checkpoint:
    reserve_a: int
    reserve_b: int
    k_last: int
    fee_state: tuple[int, int]
    history: tuple[PriceSnapshot, ...]
    event_count: int


@dataclass(eq=False)
class DynamicFeePool:
    """Constant product pool whose fee follows recent price volatility.

    Implements x * y = k pricing with a fee-on-input that stays in the pool.
    After each swap the new price is recorded and the fee controller
    recomputes the fee for the *next* call; a trade never pays a fee
    influenced by itself.

    Every mutating call is all-or-nothing. Internal effects are applied
    first, token custody is settled last, and any failure after validation
    restores the pool to its pre-call state. Calls are serialized by a
    per-pool re-entrant lock; custody callbacks may read the pool but any
    swap or deposit they attempt raises ReentrantCall.
    """
    token_a: TokenCustody
    token_b: TokenCustody
    config: PoolConfig = DEFAULT_POOL_CONFIG
    clock: Callable[[], int] = _wall_clock
    name: str = ""
    fee_controller: FeeController = field(init=False, repr=False)
    events: EventLog = field(init=False, repr=False)
    _reserve_a: int = field(default=0, init=False)
    _reserve_b: int = field(default=0, init=False)
    _k_last: int = field(default=0, init=False)
    _history: PriceHistory = field(init=False, repr=False)
    _lock: threading.RLock = field(init=False, repr=False)
    _settling: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        for token in (self.token_a, self.token_b):
            if not token.address or token.address.lower() == ZERO_ADDRESS:
                raise InvalidAddress(f"invalid token address {token.address!r}")
        if self.token_a.address.lower() == self.token_b.address.lower():
            raise IdenticalAssets(f"both sides are {self.token_a.address!r}")

        if not self.name:
            self.name = f"{self.token_a.address}/{self.token_b.address}"
        self.fee_controller = FeeController(self.config)
        self.events = EventLog()
        self._history = PriceHistory(self.config.max_history)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read queries
    # ------------------------------------------------------------------

    @property
    def reserve_a(self) -> int:
        with self._lock:
            return self._reserve_a

    @property
    def reserve_b(self) -> int:
        with self._lock:
            return self._reserve_b

    def get_reserves(self) -> tuple[int, int]:
        with self._lock:
            return self._reserve_a, self._reserve_b

    @property
    def k_last(self) -> int:
        """Reserve product after the last liquidity deposit (informational)."""
        with self._lock:
            return self._k_last

    @property
    def current_fee(self) -> int:
        """Fee rate, in scale units, that the next swap will pay."""
        with self._lock:
            return self.fee_controller.current_fee

    @property
    def volatility_accumulator(self) -> int:
        with self._lock:
            return self.fee_controller.volatility_accumulator

    @property
    def price_history(self) -> tuple[PriceSnapshot, ...]:
        with self._lock:
            return self._history.snapshots()

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return self._reserve_a == 0 and self._reserve_b == 0

    def get_current_price(self) -> int:
        """Spot price of A in units of B, scaled by PRECISION.

        Raises:
            EmptyPool: If either reserve is zero
        """
        with self._lock:
            if self._reserve_a == 0 or self._reserve_b == 0:
                raise EmptyPool("no liquidity to price")
            return self._reserve_b * PRECISION // self._reserve_a

    def quote_swap(self, amount_a_in: int, amount_b_in: int) -> tuple[int, int]:
        """Preview (amount_a_out, amount_b_out) of a swap at the current fee."""
        _require_amount("amount_a_in", amount_a_in)
        _require_amount("amount_b_in", amount_b_in)
        with self._lock:
            return self._quote(amount_a_in, amount_b_in)

    # ------------------------------------------------------------------
    # Mutating calls
    # ------------------------------------------------------------------

    def add_liquidity(
        self,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
        *,
        provider: str,
        timestamp: Optional[int] = None,
    ) -> tuple[int, int]:
        """Deposit both assets in the current reserve ratio.

        An empty pool takes the desired amounts as given, which sets the
        initial price. Otherwise the larger side is scaled down to match the
        pool ratio, and the result must respect the caller's minimums.

        Returns:
            (amount_a, amount_b) actually deposited

        Raises:
            InvalidInput: Malformed amounts, or a one-sided first deposit
            SlippageExceeded: The ratio-matched amount is below its minimum
            TransferFailed: The provider could not be debited
            ReentrantCall: Called from a custody callback of this pool
        """
        for arg, value in (
            ("amount_a_desired", amount_a_desired),
            ("amount_b_desired", amount_b_desired),
            ("amount_a_min", amount_a_min),
            ("amount_b_min", amount_b_min),
        ):
            _require_amount(arg, value)

        with self._lock:
            self._ensure_not_settling()
            if self._reserve_a == 0 and self._reserve_b == 0:
                if amount_a_desired == 0 or amount_b_desired == 0:
                    raise InvalidInput("initial deposit must include both assets")
                amount_a, amount_b = amount_a_desired, amount_b_desired
            else:
                optimal_b = amount_a_desired * self._reserve_b // self._reserve_a
                if optimal_b <= amount_b_desired:
                    if optimal_b < amount_b_min:
                        raise SlippageExceeded("amount_b", optimal_b, amount_b_min)
                    amount_a, amount_b = amount_a_desired, optimal_b
                else:
                    optimal_a = amount_b_desired * self._reserve_a // self._reserve_b
                    if optimal_a < amount_a_min:
                        raise SlippageExceeded("amount_a", optimal_a, amount_a_min)
                    amount_a, amount_b = optimal_a, amount_b_desired

            now = self._now(timestamp)
            checkpoint = self._checkpoint()
            try:
                self._reserve_a += amount_a
                self._reserve_b += amount_b
                self._k_last = self._reserve_a * self._reserve_b
                self.events.append(AddLiquidityEvent(provider, amount_a, amount_b))
                self._update_fee(now)

                self._settle(
                    provider,
                    debits=[(self.token_a, amount_a), (self.token_b, amount_b)],
                    credits=[],
                )
            except BaseException:
                self._restore(checkpoint)
                logger.warning("add_liquidity by %s rolled back", provider)
                raise

            logger.debug(
                "%s: %s added %d A / %d B, reserves=(%d, %d)",
                self.name, provider, amount_a, amount_b,
                self._reserve_a, self._reserve_b,
            )
            return amount_a, amount_b

    def swap(
        self,
        amount_a_in: int,
        amount_b_in: int,
        amount_a_out_min: int = 0,
        amount_b_out_min: int = 0,
        *,
        sender: str,
        timestamp: Optional[int] = None,
    ) -> tuple[int, int]:
        """Swap one asset for the other at the current fee.

        Exactly one of ``amount_a_in`` / ``amount_b_in`` must be non-zero.

        Returns:
            (amount_a_out, amount_b_out); the side that was paid in is 0

        Raises:
            InvalidInput: Both inputs are zero, or an amount is malformed
            AmbiguousDirection: Both inputs are non-zero
            EmptyPool: Either reserve is zero
            SlippageExceeded: Output is below the caller's minimum
            ArithmeticFault: Volatility estimate hit a zero reference price
            TransferFailed: The sender could not be debited or credited
            ReentrantCall: Called from a custody callback of this pool
        """
        for arg, value in (
            ("amount_a_in", amount_a_in),
            ("amount_b_in", amount_b_in),
            ("amount_a_out_min", amount_a_out_min),
            ("amount_b_out_min", amount_b_out_min),
        ):
            _require_amount(arg, value)

        with self._lock:
            self._ensure_not_settling()
            fee = self.fee_controller.current_fee
            amount_a_out, amount_b_out = self._quote(amount_a_in, amount_b_in)
            if amount_a_in > 0:
                if amount_b_out < amount_b_out_min:
                    raise SlippageExceeded("amount_b_out", amount_b_out, amount_b_out_min)
                token_in, token_out = self.token_a, self.token_b
                paid_in, paid_out = amount_a_in, amount_b_out
            else:
                if amount_a_out < amount_a_out_min:
                    raise SlippageExceeded("amount_a_out", amount_a_out, amount_a_out_min)
                token_in, token_out = self.token_b, self.token_a
                paid_in, paid_out = amount_b_in, amount_a_out

            now = self._now(timestamp)
            checkpoint = self._checkpoint()
            try:
                self._reserve_a += amount_a_in - amount_a_out
                self._reserve_b += amount_b_in - amount_b_out
                self.events.append(
                    SwapEvent(sender, amount_a_in, amount_b_in, amount_a_out, amount_b_out)
                )
                self._history.record(now, self._reserve_a, self._reserve_b)
                self._update_fee(now)

                self._settle(
                    sender,
                    debits=[(token_in, paid_in)],
                    credits=[(token_out, paid_out)],
                )
            except BaseException:
                self._restore(checkpoint)
                logger.warning("swap by %s rolled back", sender)
                raise

            logger.debug(
                "%s: %s swapped in=(%d, %d) out=(%d, %d) fee=%d",
                self.name, sender, amount_a_in, amount_b_in,
                amount_a_out, amount_b_out, fee,
            )
            return amount_a_out, amount_b_out

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _quote(self, amount_a_in: int, amount_b_in: int) -> tuple[int, int]:
        if amount_a_in == 0 and amount_b_in == 0:
            raise InvalidInput("one of amount_a_in / amount_b_in must be non-zero")
        if amount_a_in > 0 and amount_b_in > 0:
            raise AmbiguousDirection("only one of amount_a_in / amount_b_in may be non-zero")
        if self._reserve_a == 0 or self._reserve_b == 0:
            raise EmptyPool("cannot swap against an empty pool")

        fee = self.fee_controller.current_fee
        if amount_a_in > 0:
            return 0, get_amount_out(amount_a_in, self._reserve_a, self._reserve_b, fee)
        return get_amount_out(amount_b_in, self._reserve_b, self._reserve_a, fee), 0

    def _update_fee(self, now: int) -> None:
        if self.fee_controller.update(now, self._history.snapshots()):
            self.events.append(FeeUpdatedEvent(self.fee_controller.current_fee))

    def _settle(
        self,
        account: str,
        debits: list[tuple[TokenCustody, int]],
        credits: list[tuple[TokenCustody, int]],
    ) -> None:
        """Pull all debits, then pay all credits.

        Whatever a collaborator raises, debits already taken are paid back
        first. Custody rejections surface as TransferFailed; anything else
        propagates unchanged. Swaps and deposits on this pool are refused
        while settlement runs.
        """
        taken: list[tuple[TokenCustody, int]] = []
        self._settling = True
        try:
            for token, amount in debits:
                token.debit(account, amount)
                taken.append((token, amount))
            for token, amount in credits:
                token.credit(account, amount)
        except CustodyError as exc:
            self._refund(account, taken)
            raise TransferFailed(str(exc)) from exc
        except BaseException:
            self._refund(account, taken)
            raise
        finally:
            self._settling = False

    @staticmethod
    def _refund(account: str, taken: list[tuple[TokenCustody, int]]) -> None:
        for token, amount in reversed(taken):
            token.credit(account, amount)

    def _ensure_not_settling(self) -> None:
        if self._settling:
            raise ReentrantCall(f"{self.name} is settling a transfer")

    def _now(self, timestamp: Optional[int]) -> int:
        return self.clock() if timestamp is None else timestamp

    def _checkpoint(self) -> _Checkpoint:
        return _Checkpoint(
            reserve_a=self._reserve_a,
            reserve_b=self._reserve_b,
            k_last=self._k_last,
            fee_state=self.fee_controller.snapshot(),
            history=self._history.snapshots(),
            event_count=len(self.events),
        )

    def _restore(self, checkpoint: _Checkpoint) -> None:
        self._reserve_a = checkpoint.reserve_a
        self._reserve_b = checkpoint.reserve_b
        self._k_last = checkpoint.k_last
        self.fee_controller.restore(checkpoint.fee_state)
        self._history.replace(checkpoint.history)
        self.events.truncate(checkpoint.event_count)
