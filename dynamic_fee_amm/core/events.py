"""Event records emitted by pool state transitions."""

from dataclasses import dataclass
from typing import Iterator, TypeVar, Union


@dataclass(frozen=True)
class SwapEvent:
    """A completed swap. Exactly one of the input amounts is non-zero."""
    sender: str
    amount_a_in: int
    amount_b_in: int
    amount_a_out: int
    amount_b_out: int


@dataclass(frozen=True)
class AddLiquidityEvent:
    """Liquidity deposited by a provider."""
    provider: str
    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class FeeUpdatedEvent:
    """The fee applied to the next call changed."""
    new_fee: int


PoolEvent = Union[SwapEvent, AddLiquidityEvent, FeeUpdatedEvent]

E = TypeVar("E")


class EventLog:
    """Append-only record of pool events.

    The pool may truncate the log back to a checkpoint when it rolls back a
    failed operation; nothing else removes entries.
    """

    def __init__(self) -> None:
        self._events: list[PoolEvent] = []

    def append(self, event: PoolEvent) -> None:
        self._events.append(event)

    def truncate(self, length: int) -> None:
        del self._events[length:]

    def of_type(self, event_type: type[E]) -> list[E]:
        """Return all events of the given type, oldest first."""
        return [e for e in self._events if isinstance(e, event_type)]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[PoolEvent]:
        return iter(list(self._events))

    def __getitem__(self, index: int) -> PoolEvent:
        return self._events[index]
