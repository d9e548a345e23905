"""Exception types raised by the pipeline."""


class ChainflowError(Exception):
    """Base class for pipeline errors."""


class ConfigError(ChainflowError, ValueError):
    """Missing or invalid configuration detected at startup."""


class ChainRejection(ChainflowError):
    """A transaction was rejected before broadcast or reverted on-chain."""

    def __init__(self, message: str, tx_hash: str | None = None):
        self.message = message
        self.tx_hash = tx_hash
        super().__init__(message if tx_hash is None else f"{message} (tx {tx_hash})")


class ConfirmationTimeout(ChainRejection):
    """A submitted transaction was not mined before the configured deadline."""


class PoolNotFound(ChainflowError):
    """The factory has no usable pool for the requested pair and fee tier."""

    def __init__(self, token_a: str, token_b: str, fee: int, reason: str = "no pool"):
        self.token_a = token_a
        self.token_b = token_b
        self.fee = fee
        super().__init__(f"Pool not found for {token_a}/{token_b} at fee {fee}: {reason}")
