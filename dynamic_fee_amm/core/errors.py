"""Exceptions raised by the pool engine and its custody collaborators."""


class PoolError(Exception):
    """Base class for every failure of a pool operation.

    A PoolError is terminal to the call that raised it; the pool is left
    exactly as it was before the call.
    """


class InvalidAddress(PoolError):
    """A token address is empty or the zero address."""


class IdenticalAssets(PoolError):
    """Both sides of the pool were given the same token."""


class SlippageExceeded(PoolError):
    """A computed amount fell below the caller's minimum."""

    def __init__(self, side: str, amount: int, minimum: int):
        super().__init__(f"{side}: got {amount}, minimum {minimum}")
        self.side = side
        self.amount = amount
        self.minimum = minimum


class EmptyPool(PoolError):
    """The operation needs both reserves to be non-zero."""


class InvalidInput(PoolError, ValueError):
    """An amount argument is malformed or both swap inputs are zero."""


class AmbiguousDirection(PoolError, ValueError):
    """Both swap inputs are non-zero."""


class ArithmeticFault(PoolError, ArithmeticError):
    """Division by a zero reference price during volatility estimation."""


class TransferFailed(PoolError):
    """The custody collaborator rejected a debit or credit."""


class ReentrantCall(PoolError):
    """A swap or deposit was attempted while the pool was settling custody."""


class CustodyError(Exception):
    """Raised by a TokenCustody when it cannot move funds."""

    def __init__(self, account: str, amount: int, available: int):
        super().__init__(
            f"{self.__class__.__name__}: account={account!r} "
            f"amount={amount} available={available}"
        )
        self.account = account
        self.amount = amount
        self.available = available


class InsufficientBalance(CustodyError):
    pass


class InsufficientAllowance(CustodyError):
    pass
