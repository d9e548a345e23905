"""Web3-backed chain client and contract handles."""

import asyncio
from typing import Any

import structlog
from eth_account.signers.local import LocalAccount
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, Web3Exception

from ..core.errors import ChainRejection, ConfigError, ConfirmationTimeout
from ..core.types import SwapParameters, TxReceipt
from .abis import (
    ERC20_ABI,
    LENDING_POOL_ABI,
    SWAP_ROUTER_ABI,
    UNISWAP_V3_FACTORY_ABI,
    UNISWAP_V3_POOL_ABI,
)

logger = structlog.get_logger(__name__)


def _is_retryable_error(exception) -> bool:
    """Check if a read failure is a transient transport error."""
    return isinstance(exception, (OSError, asyncio.TimeoutError))


async def _disconnect(w3: AsyncWeb3) -> None:
    disconnect = getattr(w3.provider, "disconnect", None)
    if disconnect is not None:
        await disconnect()


class Web3ChainClient:
    """Signing chain client on top of AsyncWeb3.

    Transactions are submitted one at a time with the pending nonce and are
    never retried; read-only calls retry transient transport failures.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        explorer_tx_url: str = "https://sepolia.etherscan.io/tx/{tx_hash}",
        gas_multiplier: float = 1.2,
        confirmation_timeout: float | None = None,
        chain_id: int | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            w3: Connected AsyncWeb3 instance
            account: Signing account
            explorer_tx_url: Block explorer URL template with a {tx_hash} field
            gas_multiplier: Safety multiplier applied to gas estimates
            confirmation_timeout: Receipt wait deadline in seconds, None for no deadline
            chain_id: Chain id to pin in transactions (filled by web3 if None)
        """
        self.w3 = w3
        self.account = account
        self.explorer_tx_url = explorer_tx_url
        self.gas_multiplier = gas_multiplier
        self.confirmation_timeout = confirmation_timeout
        self.chain_id = chain_id

    @classmethod
    async def connect(
        cls, rpc_url: str, account: LocalAccount, **kwargs: Any
    ) -> "Web3ChainClient":
        """Open an HTTP provider and verify the endpoint answers.

        Raises:
            ConfigError: If the RPC endpoint is unreachable or invalid
        """
        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        try:
            if not await w3.is_connected():
                raise ConfigError(f"RPC connection failed: {rpc_url[:50]}")
            chain_id = await w3.eth.chain_id
        except ConfigError:
            await _disconnect(w3)
            raise
        except (OSError, ValueError, Web3Exception) as e:
            await _disconnect(w3)
            logger.error("RPC connection failed", error=str(e))
            raise ConfigError(f"RPC connection failed: {rpc_url[:50]}") from e

        logger.info(
            "Connected to chain",
            chain_id=chain_id,
            address=account.address,
        )
        return cls(w3, account, chain_id=chain_id, **kwargs)

    async def close(self) -> None:
        await _disconnect(self.w3)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def address(self) -> str:
        return self.account.address

    def explorer_url(self, tx_hash: str) -> str:
        return self.explorer_tx_url.format(tx_hash=tx_hash)

    def erc20(self, address: str) -> "Web3Erc20":
        return Web3Erc20(self, address)

    def factory(self, address: str) -> "Web3PoolFactory":
        return Web3PoolFactory(self, address)

    def pool(self, address: str) -> "Web3Pool":
        return Web3Pool(self, address)

    def router(self, address: str) -> "Web3SwapRouter":
        return Web3SwapRouter(self, address)

    def lending_pool(self, address: str) -> "Web3LendingPool":
        return Web3LendingPool(self, address)

    def contract(self, address: str, abi: list[dict]):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    )
    async def _call(self, fn) -> Any:
        return await fn.call()

    async def read(self, fn, what: str) -> Any:
        """Execute a read-only contract call.

        Raises:
            ChainRejection: If the node rejects the call
        """
        try:
            return await self._call(fn)
        except (Web3Exception, ValueError) as e:
            logger.error("Contract read failed", call=what, error=str(e))
            raise ChainRejection(f"{what} call failed: {e}") from e

    async def transact(self, fn, action: str) -> TxReceipt:
        """Sign, submit and wait for a state-changing contract call.

        Args:
            fn: Bound web3 contract function
            action: Short label used in logs and errors

        Returns:
            Receipt of the mined transaction

        Raises:
            ChainRejection: If the call is rejected before broadcast or reverts
            ConfirmationTimeout: If the configured receipt deadline expires
        """
        sender = self.address
        try:
            estimated_gas = await fn.estimate_gas({"from": sender})
            tx_params = {
                "from": sender,
                "nonce": await self.w3.eth.get_transaction_count(sender, "pending"),
                "gas": int(estimated_gas * self.gas_multiplier),
            }
            if self.chain_id is not None:
                tx_params["chainId"] = self.chain_id

            tx = await fn.build_transaction(tx_params)
            signed = self.account.sign_transaction(tx)
            raw_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, ValueError) as e:
            logger.error("Transaction rejected", action=action, error=str(e))
            raise ChainRejection(f"{action} rejected: {e}") from e

        tx_hash = Web3.to_hex(raw_hash)
        logger.debug("Transaction sent", action=action, tx_hash=tx_hash)

        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                raw_hash, timeout=self.confirmation_timeout
            )
        except TimeExhausted as e:
            logger.error(
                "Transaction confirmation timeout",
                action=action,
                tx_hash=tx_hash,
                timeout=self.confirmation_timeout,
            )
            raise ConfirmationTimeout(f"{action} not mined in time", tx_hash) from e

        result = TxReceipt(
            tx_hash=tx_hash,
            block_number=receipt.get("blockNumber"),
            status=receipt.get("status", 0),
            gas_used=receipt.get("gasUsed"),
            explorer_url=self.explorer_url(tx_hash),
        )

        if result.status != 1:
            logger.error("Transaction reverted", action=action, tx_hash=tx_hash)
            raise ChainRejection(f"{action} reverted on-chain", tx_hash)

        logger.debug(
            "Transaction confirmed",
            action=action,
            tx_hash=tx_hash,
            block_number=result.block_number,
            gas_used=result.gas_used,
        )
        return result


class Web3Erc20:
    """ERC-20 token handle."""

    def __init__(self, client: Web3ChainClient, address: str) -> None:
        self.client = client
        self.contract = client.contract(address, ERC20_ABI)

    async def approve(self, spender: str, amount: int) -> TxReceipt:
        fn = self.contract.functions.approve(Web3.to_checksum_address(spender), amount)
        return await self.client.transact(fn, "approve")


class Web3PoolFactory:
    """Uniswap v3 style factory handle."""

    def __init__(self, client: Web3ChainClient, address: str) -> None:
        self.client = client
        self.contract = client.contract(address, UNISWAP_V3_FACTORY_ABI)

    async def get_pool(self, token_a: str, token_b: str, fee: int) -> str:
        fn = self.contract.functions.getPool(
            Web3.to_checksum_address(token_a), Web3.to_checksum_address(token_b), fee
        )
        return await self.client.read(fn, "getPool")


class Web3Pool:
    """Uniswap v3 style pool handle."""

    def __init__(self, client: Web3ChainClient, address: str) -> None:
        self.client = client
        self.contract = client.contract(address, UNISWAP_V3_POOL_ABI)

    async def token0(self) -> str:
        return await self.client.read(self.contract.functions.token0(), "token0")

    async def token1(self) -> str:
        return await self.client.read(self.contract.functions.token1(), "token1")

    async def fee(self) -> int:
        return await self.client.read(self.contract.functions.fee(), "fee")


class Web3SwapRouter:
    """Swap router handle."""

    def __init__(self, client: Web3ChainClient, address: str) -> None:
        self.client = client
        self.contract = client.contract(address, SWAP_ROUTER_ABI)

    async def exact_input_single(self, params: SwapParameters) -> TxReceipt:
        fn = self.contract.functions.exactInputSingle(params.as_call_args())
        return await self.client.transact(fn, "exactInputSingle")


class Web3LendingPool:
    """Lending pool handle."""

    def __init__(self, client: Web3ChainClient, address: str) -> None:
        self.client = client
        self.contract = client.contract(address, LENDING_POOL_ABI)

    async def deposit(
        self, asset: str, amount: int, on_behalf_of: str, referral_code: int
    ) -> TxReceipt:
        fn = self.contract.functions.deposit(
            Web3.to_checksum_address(asset),
            amount,
            Web3.to_checksum_address(on_behalf_of),
            referral_code,
        )
        return await self.client.transact(fn, "deposit")
