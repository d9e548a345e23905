"""Exact-input single-hop swap step."""

import structlog

from ..core.interfaces import SwapRouter
from ..core.types import PoolInfo, SwapParameters, TokenDescriptor, TxReceipt

logger = structlog.get_logger(__name__)


def build_swap_params(
    pool: PoolInfo,
    token_in: TokenDescriptor,
    token_out: TokenDescriptor,
    recipient: str,
    amount_in: int,
) -> SwapParameters:
    """Build exact-input swap parameters from resolved pool data.

    The direction comes from ``token_in``/``token_out``; the pool's
    token0/token1 ordering is irrelevant here. Minimum output and price
    limit are both 0, so any output amount is accepted.

    Args:
        pool: Resolved pool, supplies the fee tier
        token_in: Token sold
        token_out: Token bought
        recipient: Address receiving the output
        amount_in: Input amount in smallest units

    Returns:
        Swap parameters for the router
    """
    if not (pool.contains(token_in.address) and pool.contains(token_out.address)):
        raise ValueError(
            f"Pool {pool.pool_address} does not trade {token_in.label}/{token_out.label}"
        )

    return SwapParameters(
        token_in=token_in.address,
        token_out=token_out.address,
        fee=pool.fee,
        recipient=recipient,
        amount_in=amount_in,
        amount_out_minimum=0,
        sqrt_price_limit_x96=0,
    )


async def swap(router: SwapRouter, params: SwapParameters) -> TxReceipt:
    """Submit the swap and wait for it to be mined.

    The amount received is not read back. Reverts propagate as-is.

    Args:
        router: Router handle bound to the signing wallet
        params: Exact-input swap parameters

    Returns:
        Receipt of the swap transaction
    """
    logger.info(
        "Submitting swap",
        token_in=params.token_in,
        token_out=params.token_out,
        fee=params.fee,
        amount_in=params.amount_in,
        amount_out_minimum=params.amount_out_minimum,
    )

    receipt = await router.exact_input_single(params)

    logger.info(
        "Swap executed",
        tx_hash=receipt.tx_hash,
        explorer_url=receipt.explorer_url,
    )
    return receipt
