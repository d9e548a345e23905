"""Liquidity pool resolution."""

import asyncio

import structlog
from web3 import Web3

from ..core.errors import PoolNotFound
from ..core.interfaces import ChainClient, PoolFactory
from ..core.types import ZERO_ADDRESS, PoolInfo, TokenDescriptor

logger = structlog.get_logger(__name__)


def _is_zero_address(address: str | None) -> bool:
    if not address or address == ZERO_ADDRESS:
        return True
    try:
        return int(address, 16) == 0
    except ValueError:
        return False


async def resolve_pool(
    wallet: ChainClient,
    factory: PoolFactory,
    token_a: TokenDescriptor,
    token_b: TokenDescriptor,
    fee_tier: int,
) -> PoolInfo:
    """Locate the pool for a token pair and read its token ordering and fee.

    The pool is looked up on every call. A missing pool fails here rather
    than at swap submission.

    Args:
        wallet: Chain client used to bind the pool contract
        factory: Pool factory handle
        token_a: First token of the unordered pair
        token_b: Second token of the unordered pair
        fee_tier: Fee tier to look up

    Returns:
        Pool address with token0, token1 and fee as reported by the pool

    Raises:
        PoolNotFound: If the factory returns the zero address, or the pool
            does not hold the requested pair
    """
    pool_address = await factory.get_pool(token_a.address, token_b.address, fee_tier)

    if _is_zero_address(pool_address):
        logger.error(
            "Pool not found",
            token_a=token_a.label,
            token_b=token_b.label,
            fee_tier=fee_tier,
        )
        raise PoolNotFound(token_a.address, token_b.address, fee_tier)

    pool = wallet.pool(pool_address)
    try:
        async with asyncio.TaskGroup() as tg:
            token0_task = tg.create_task(pool.token0())
            token1_task = tg.create_task(pool.token1())
            fee_task = tg.create_task(pool.fee())
    except ExceptionGroup as eg:
        # Remaining reads are cancelled; surface the first failure unwrapped
        raise eg.exceptions[0]

    info = PoolInfo(
        pool_address=Web3.to_checksum_address(pool_address),
        token0=Web3.to_checksum_address(token0_task.result()),
        token1=Web3.to_checksum_address(token1_task.result()),
        fee=fee_task.result(),
    )

    if not (info.contains(token_a.address) and info.contains(token_b.address)):
        raise PoolNotFound(
            token_a.address,
            token_b.address,
            fee_tier,
            reason=f"pool {info.pool_address} holds {info.token0}/{info.token1}",
        )

    logger.info(
        "Pool resolved",
        pool_address=info.pool_address,
        token0=info.token0,
        token1=info.token1,
        fee=info.fee,
    )
    return info

