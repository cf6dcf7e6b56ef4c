"""Pool operation errors."""


class PoolError(Exception):
    """Base class for recoverable liquidity pool failures."""


class InvalidAmount(PoolError):
    """A liquidity or swap amount was zero or negative."""


class InsufficientLiquidity(PoolError):
    """The operation would overdraw one of the pool balances."""
