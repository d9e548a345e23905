"""Core interfaces for the swap-and-deposit pipeline.

Each contract is modelled as a narrow protocol exposing only the calls the
pipeline makes. State-changing methods submit a transaction signed by the
wallet the handle is bound to and return only once it has been mined.
"""

from typing import Protocol

from .types import SwapParameters, TxReceipt


class Erc20Token(Protocol):
    """Fungible token contract."""

    async def approve(self, spender: str, amount: int) -> TxReceipt:
        """Set the allowance of ``spender`` to ``amount`` smallest units."""
        ...


class PoolFactory(Protocol):
    """Exchange factory contract."""

    async def get_pool(self, token_a: str, token_b: str, fee: int) -> str:
        """Return the pool address for an unordered pair and fee tier."""
        ...


class PoolContract(Protocol):
    """Exchange pool contract (read-only)."""

    async def token0(self) -> str:
        ...

    async def token1(self) -> str:
        ...

    async def fee(self) -> int:
        ...


class SwapRouter(Protocol):
    """Exchange router contract."""

    async def exact_input_single(self, params: SwapParameters) -> TxReceipt:
        """Swap a fixed input amount through a single pool."""
        ...


class LendingPool(Protocol):
    """Lending protocol pool contract."""

    async def deposit(
        self, asset: str, amount: int, on_behalf_of: str, referral_code: int
    ) -> TxReceipt:
        """Deposit ``amount`` of ``asset`` credited to ``on_behalf_of``."""
        ...


class ChainClient(Protocol):
    """Connected wallet plus contract handle factory."""

    @property
    def address(self) -> str:
        """Address of the signing wallet."""
        ...

    def erc20(self, address: str) -> Erc20Token:
        ...

    def factory(self, address: str) -> PoolFactory:
        ...

    def pool(self, address: str) -> PoolContract:
        ...

    def router(self, address: str) -> SwapRouter:
        ...

    def lending_pool(self, address: str) -> LendingPool:
        ...


class AlertSink(Protocol):
    """Alert sink protocol."""

    async def push(self, message: str) -> None:
        """Push alert message."""
        ...
