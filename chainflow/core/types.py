"""Core data types for the swap-and-deposit pipeline."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def checksum(address: str) -> str:
    """Validate an EVM address and return its checksum form."""
    if not Web3.is_address(address):
        raise ValueError(f"Invalid address: {address}")
    return Web3.to_checksum_address(address)


class TokenDescriptor(BaseModel):
    """Token identity with its decimal precision."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(description="Token contract address")
    decimals: int = Field(ge=0, description="Decimal precision of the token")
    symbol: str | None = Field(default=None, description="Display symbol")

    @field_validator("address")
    @classmethod
    def _checksum_address(cls, value: str) -> str:
        return checksum(value)

    @property
    def label(self) -> str:
        return self.symbol or self.address


class SwapParameters(BaseModel):
    """Exact-input single-hop swap parameters."""

    model_config = ConfigDict(frozen=True)

    token_in: str = Field(description="Input token address")
    token_out: str = Field(description="Output token address")
    fee: int = Field(ge=0, description="Pool fee tier in hundredths of a bip")
    recipient: str = Field(description="Address receiving the output tokens")
    amount_in: int = Field(ge=0, description="Input amount in smallest units")
    # No minimum-output or price-bound protection
    amount_out_minimum: int = Field(default=0, ge=0)
    sqrt_price_limit_x96: int = Field(default=0, ge=0)

    @field_validator("token_in", "token_out", "recipient")
    @classmethod
    def _checksum_address(cls, value: str) -> str:
        return checksum(value)

    def as_call_args(self) -> dict[str, str | int]:
        """Return the struct expected by the router's exactInputSingle."""
        return {
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "fee": self.fee,
            "recipient": self.recipient,
            "amountIn": self.amount_in,
            "amountOutMinimum": self.amount_out_minimum,
            "sqrtPriceLimitX96": self.sqrt_price_limit_x96,
        }


class PoolInfo(BaseModel):
    """Liquidity pool state read from the factory and pool contracts.

    token0/token1 are in the order the pool reports them, which need not
    match the logical swap direction.
    """

    model_config = ConfigDict(frozen=True)

    pool_address: str = Field(description="Pool contract address")
    token0: str = Field(description="Pool token0 address")
    token1: str = Field(description="Pool token1 address")
    fee: int = Field(ge=0, description="Pool fee tier")

    def contains(self, address: str) -> bool:
        target = address.lower()
        return target in (self.token0.lower(), self.token1.lower())


class TxReceipt(BaseModel):
    """Confirmation record of a mined transaction."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str = Field(description="Transaction hash")
    block_number: int | None = Field(default=None, description="Block number")
    status: int = Field(default=1, description="1 for success, 0 for revert")
    gas_used: int | None = Field(default=None, description="Gas consumed")
    explorer_url: str | None = Field(default=None, description="Block explorer link")


class PipelineConfig(BaseModel):
    """Fixed addresses and parameters for one pipeline instance."""

    model_config = ConfigDict(frozen=True)

    token_in: TokenDescriptor = Field(description="Token sold in the swap")
    token_out: TokenDescriptor = Field(description="Token bought and deposited")
    router_address: str = Field(description="Swap router address")
    factory_address: str = Field(description="Pool factory address")
    lending_pool_address: str = Field(description="Lending pool address")
    fee_tier: int = Field(default=3000, ge=0, description="Pool fee tier")
    referral_code: int = Field(default=0, ge=0, description="Lending referral code")

    @field_validator("router_address", "factory_address", "lending_pool_address")
    @classmethod
    def _checksum_address(cls, value: str) -> str:
        return checksum(value)


class PipelineState(str, Enum):
    """States of the swap-and-deposit pipeline."""

    IDLE = "idle"
    APPROVING_INPUT = "approving_input"
    RESOLVING_POOL = "resolving_pool"
    SWAPPING = "swapping"
    APPROVING_OUTPUT = "approving_output"
    DEPOSITING = "depositing"
    COMPLETE = "complete"
    FAILED = "failed"


class PipelineResult(BaseModel):
    """Outcome of one pipeline run."""

    state: PipelineState = Field(description="Terminal state")
    failed_at: PipelineState | None = Field(
        default=None, description="State in which the run failed"
    )
    error: str | None = Field(default=None, description="Failure message")
    error_type: str | None = Field(default=None, description="Failure class name")
    receipts: dict[str, TxReceipt] = Field(
        default_factory=dict, description="Receipts keyed by step label"
    )
    pool: PoolInfo | None = Field(default=None, description="Resolved pool")
    transitions: list[PipelineState] = Field(
        default_factory=list, description="States visited, in order"
    )

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.COMPLETE
