"""Shared fixtures: an in-memory chain that records every contract call."""

import pytest

from chainflow.config.settings import (
    AAVE_LENDING_POOL_ADDRESS,
    LINK,
    UNISWAP_FACTORY_ADDRESS,
    UNISWAP_ROUTER_ADDRESS,
    USDC,
)
from chainflow.core.errors import ChainRejection
from chainflow.core.types import PipelineConfig, SwapParameters, TxReceipt

WALLET = "0x1111111111111111111111111111111111111111"
POOL = "0x2222222222222222222222222222222222222222"


class RecordingChain:
    """Mock chain client recording calls in order.

    Add a call name (``approve``, ``get_pool``, ``token0``, ``token1``,
    ``fee``, ``exact_input_single``, ``deposit``) to ``fail_on`` to make it
    raise ``ChainRejection``.
    """

    def __init__(self):
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.pool_address = POOL
        # Factory ordering: LINK sorts before USDC
        self.token0 = LINK.address
        self.token1 = USDC.address
        self.pool_fee = 3000
        self._tx_counter = 0

    @property
    def address(self) -> str:
        return WALLET

    def record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise ChainRejection(f"{name} reverted")

    def receipt(self) -> TxReceipt:
        self._tx_counter += 1
        tx_hash = "0x" + f"{self._tx_counter:064x}"
        return TxReceipt(
            tx_hash=tx_hash,
            block_number=100 + self._tx_counter,
            status=1,
            gas_used=50000,
            explorer_url=f"https://sepolia.etherscan.io/tx/{tx_hash}",
        )

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def erc20(self, address: str) -> "MockToken":
        return MockToken(self, address)

    def factory(self, address: str) -> "MockFactory":
        return MockFactory(self, address)

    def pool(self, address: str) -> "MockPool":
        return MockPool(self, address)

    def router(self, address: str) -> "MockRouter":
        return MockRouter(self, address)

    def lending_pool(self, address: str) -> "MockLendingPool":
        return MockLendingPool(self, address)


class MockToken:
    def __init__(self, chain: RecordingChain, address: str):
        self.chain = chain
        self.address = address

    async def approve(self, spender: str, amount: int) -> TxReceipt:
        self.chain.record("approve", self.address, spender, amount)
        return self.chain.receipt()


class MockFactory:
    def __init__(self, chain: RecordingChain, address: str):
        self.chain = chain
        self.address = address

    async def get_pool(self, token_a: str, token_b: str, fee: int) -> str:
        self.chain.record("get_pool", token_a, token_b, fee)
        return self.chain.pool_address


class MockPool:
    def __init__(self, chain: RecordingChain, address: str):
        self.chain = chain
        self.address = address

    async def token0(self) -> str:
        self.chain.record("token0", self.address)
        return self.chain.token0

    async def token1(self) -> str:
        self.chain.record("token1", self.address)
        return self.chain.token1

    async def fee(self) -> int:
        self.chain.record("fee", self.address)
        return self.chain.pool_fee


class MockRouter:
    def __init__(self, chain: RecordingChain, address: str):
        self.chain = chain
        self.address = address

    async def exact_input_single(self, params: SwapParameters) -> TxReceipt:
        self.chain.record("exact_input_single", self.address, params)
        return self.chain.receipt()


class MockLendingPool:
    def __init__(self, chain: RecordingChain, address: str):
        self.chain = chain
        self.address = address

    async def deposit(
        self, asset: str, amount: int, on_behalf_of: str, referral_code: int
    ) -> TxReceipt:
        self.chain.record(
            "deposit", self.address, asset, amount, on_behalf_of, referral_code
        )
        return self.chain.receipt()


class RecordingAlertSink:
    """Alert sink keeping pushed messages."""

    def __init__(self):
        self.messages: list[str] = []

    async def push(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def chain():
    """Fresh recording chain."""
    return RecordingChain()


@pytest.fixture
def alerts():
    """Recording alert sink."""
    return RecordingAlertSink()


@pytest.fixture
def pipeline_config():
    """USDC -> LINK pipeline configuration."""
    return PipelineConfig(
        token_in=USDC,
        token_out=LINK,
        router_address=UNISWAP_ROUTER_ADDRESS,
        factory_address=UNISWAP_FACTORY_ADDRESS,
        lending_pool_address=AAVE_LENDING_POOL_ADDRESS,
        fee_tier=3000,
        referral_code=0,
    )
