"""Token custody interface the pool settles through."""

import logging
from abc import ABC, abstractmethod

from dynamic_fee_amm.core.errors import InsufficientAllowance, InsufficientBalance

logger = logging.getLogger(__name__)


class TokenCustody(ABC):
    """Abstract custody of one fungible token on behalf of a pool.

    The pool never touches balances directly. It asks the custody to pull
    funds from an account (``debit``) or pay funds out to one (``credit``).
    Implementations raise InsufficientBalance or InsufficientAllowance when
    the movement cannot be covered, and must leave balances unchanged when
    they do.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Identifier of the token."""

    @abstractmethod
    def debit(self, account: str, amount: int) -> None:
        """Move ``amount`` from ``account`` into the pool."""

    @abstractmethod
    def credit(self, account: str, amount: int) -> None:
        """Move ``amount`` from the pool to ``account``."""


class InMemoryToken(TokenCustody):
    """Token ledger kept in memory, approving a single custodian account.

    Accounts grant the custodian an allowance with ``approve``; ``debit``
    spends it the way an ERC-20 ``transferFrom`` would.
    """

    def __init__(self, address: str, custodian: str = "pool"):
        self._address = address
        self.custodian = custodian
        self._balances: dict[str, int] = {}
        self._allowances: dict[str, int] = {}

    @property
    def address(self) -> str:
        return self._address

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str) -> int:
        """Amount the custodian may still pull from ``owner``."""
        return self._allowances.get(owner, 0)

    def mint(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        self._balances[account] = self.balance_of(account) + amount

    def approve(self, owner: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        self._allowances[owner] = amount

    def debit(self, account: str, amount: int) -> None:
        allowance = self.allowance(account)
        if allowance < amount:
            raise InsufficientAllowance(account, amount, allowance)
        self._move(account, self.custodian, amount)
        self._allowances[account] = allowance - amount

    def credit(self, account: str, amount: int) -> None:
        self._move(self.custodian, account, amount)

    def _move(self, source: str, target: str, amount: int) -> None:
        available = self.balance_of(source)
        if available < amount:
            raise InsufficientBalance(source, amount, available)
        self._balances[source] = available - amount
        self._balances[target] = self.balance_of(target) + amount
        logger.debug("%s: %s -> %s %d", self._address, source, target, amount)

    def __repr__(self) -> str:
        return f"InMemoryToken({self._address!r})"
