"""Token allowance step."""

from decimal import Decimal

import structlog

from ..core.interfaces import ChainClient
from ..core.types import TxReceipt
from ..core.units import to_base_units

logger = structlog.get_logger(__name__)


async def approve(
    wallet: ChainClient,
    token_address: str,
    spender: str,
    amount: Decimal | int | str,
    decimals: int,
) -> TxReceipt:
    """Grant ``spender`` an allowance over a token held by the wallet.

    The allowance replaces any previous one. Returns only after the approval
    has been mined; chain errors propagate unchanged.

    Args:
        wallet: Chain client bound to the owner wallet
        token_address: Token contract address
        spender: Contract allowed to transfer the tokens
        amount: Allowance in display units
        decimals: Token decimal precision

    Returns:
        Receipt of the approval transaction
    """
    base_amount = to_base_units(amount, decimals)

    logger.info(
        "Approving token",
        token=token_address,
        spender=spender,
        amount=str(amount),
        base_amount=base_amount,
        owner=wallet.address,
    )

    receipt = await wallet.erc20(token_address).approve(spender, base_amount)

    logger.debug("Approval confirmed", token=token_address, tx_hash=receipt.tx_hash)
    return receipt
