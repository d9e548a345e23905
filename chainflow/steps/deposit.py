"""Lending pool deposit step."""

import structlog

from ..core.interfaces import LendingPool
from ..core.types import TxReceipt

logger = structlog.get_logger(__name__)


async def deposit(
    lending_pool: LendingPool,
    token_address: str,
    amount: int,
    on_behalf_of: str,
    referral_code: int = 0,
) -> TxReceipt:
    """Deposit ``amount`` smallest units of a token into the lending pool.

    No balance or allowance check is made before submission; an uncovered
    amount surfaces as an on-chain rejection.
    """
    logger.info(
        "Submitting deposit",
        token=token_address,
        amount=amount,
        on_behalf_of=on_behalf_of,
    )

    receipt = await lending_pool.deposit(
        token_address, amount, on_behalf_of, referral_code
    )

    logger.info(
        "Deposit executed",
        tx_hash=receipt.tx_hash,
        explorer_url=receipt.explorer_url,
    )
    return receipt
