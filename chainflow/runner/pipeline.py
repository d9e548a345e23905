"""Swap-and-deposit pipeline runner."""

import argparse
import asyncio
import sys
from decimal import Decimal, InvalidOperation

import structlog

from ..alerts.telegram import NoopAlertSink, TelegramAlertSink
from ..chain.signers import load_wallet
from ..chain.web3_client import Web3ChainClient
from ..config.settings import AppSettings, load_settings
from ..core.errors import ConfigError
from ..core.interfaces import AlertSink, ChainClient
from ..core.types import PipelineConfig, PipelineResult, PipelineState, TxReceipt
from ..core.units import to_base_units
from ..steps.approve import approve
from ..steps.deposit import deposit
from ..steps.pool import resolve_pool
from ..steps.swap import build_swap_params, swap

logger = structlog.get_logger(__name__)


class SwapDepositPipeline:
    """Approve, swap, approve and deposit, one confirmed transaction at a time.

    States advance Idle -> ApprovingInput -> ResolvingPool -> Swapping ->
    ApprovingOutput -> Depositing -> Complete. The first error moves the run
    to Failed; transactions already mined are left in place.
    """

    def __init__(
        self,
        wallet: ChainClient,
        config: PipelineConfig,
        alerts: AlertSink | None = None,
    ) -> None:
        self.wallet = wallet
        self.config = config
        self.alerts = alerts or NoopAlertSink()
        self.state = PipelineState.IDLE
        self.transitions: list[PipelineState] = [PipelineState.IDLE]

    def _enter(self, state: PipelineState) -> None:
        logger.debug("Pipeline transition", from_state=self.state.value, to_state=state.value)
        self.state = state
        self.transitions.append(state)

    async def _notify(self, message: str) -> None:
        try:
            await self.alerts.push(message)
        except Exception as e:
            logger.warning("Alert delivery failed", error=str(e))

    async def run(
        self,
        swap_amount: Decimal | int | str,
        deposit_amount: Decimal | int | str | None = None,
    ) -> PipelineResult:
        """Execute one full pipeline run.

        Errors are logged and reported in the result, never raised.

        Args:
            swap_amount: Input token amount in display units
            deposit_amount: Output token amount to approve and deposit in
                display units; defaults to ``swap_amount``

        Returns:
            Terminal state, receipts and the failing state if any
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"Pipeline already ran (state={self.state.value})")

        cfg = self.config
        receipts: dict[str, TxReceipt] = {}
        pool = None
        if deposit_amount is None:
            deposit_amount = swap_amount

        logger.info(
            "Starting pipeline",
            wallet=self.wallet.address,
            token_in=cfg.token_in.label,
            token_out=cfg.token_out.label,
            swap_amount=str(swap_amount),
            deposit_amount=str(deposit_amount),
        )

        try:
            amount_in = to_base_units(swap_amount, cfg.token_in.decimals)
            deposit_base = to_base_units(deposit_amount, cfg.token_out.decimals)

            self._enter(PipelineState.APPROVING_INPUT)
            receipts["approve_input"] = await approve(
                self.wallet,
                cfg.token_in.address,
                cfg.router_address,
                swap_amount,
                cfg.token_in.decimals,
            )

            self._enter(PipelineState.RESOLVING_POOL)
            pool = await resolve_pool(
                self.wallet,
                self.wallet.factory(cfg.factory_address),
                cfg.token_in,
                cfg.token_out,
                cfg.fee_tier,
            )

            self._enter(PipelineState.SWAPPING)
            params = build_swap_params(
                pool, cfg.token_in, cfg.token_out, self.wallet.address, amount_in
            )
            receipts["swap"] = await swap(self.wallet.router(cfg.router_address), params)
            await self._notify(
                f"Swap executed: {receipts['swap'].explorer_url or receipts['swap'].tx_hash}"
            )

            self._enter(PipelineState.APPROVING_OUTPUT)
            receipts["approve_output"] = await approve(
                self.wallet,
                cfg.token_out.address,
                cfg.lending_pool_address,
                deposit_amount,
                cfg.token_out.decimals,
            )

            self._enter(PipelineState.DEPOSITING)
            receipts["deposit"] = await deposit(
                self.wallet.lending_pool(cfg.lending_pool_address),
                cfg.token_out.address,
                deposit_base,
                self.wallet.address,
                cfg.referral_code,
            )
            await self._notify(
                f"Deposit executed: {receipts['deposit'].explorer_url or receipts['deposit'].tx_hash}"
            )

            self._enter(PipelineState.COMPLETE)

        except Exception as e:
            failed_at = self.state
            self._enter(PipelineState.FAILED)
            logger.error(
                "Pipeline failed",
                failed_at=failed_at.value,
                error=str(e),
                error_type=type(e).__name__,
                confirmed_txs=[r.tx_hash for r in receipts.values()],
            )
            await self._notify(f"Pipeline failed while {failed_at.value}: {e}")
            return PipelineResult(
                state=PipelineState.FAILED,
                failed_at=failed_at,
                error=str(e),
                error_type=type(e).__name__,
                receipts=receipts,
                pool=pool,
                transitions=list(self.transitions),
            )

        logger.info(
            "Pipeline complete",
            swap_tx=receipts["swap"].tx_hash,
            deposit_tx=receipts["deposit"].tx_hash,
        )
        return PipelineResult(
            state=PipelineState.COMPLETE,
            receipts=receipts,
            pool=pool,
            transitions=list(self.transitions),
        )


def create_alert_sink(settings: AppSettings) -> AlertSink:
    """Pick Telegram when configured, otherwise log alerts."""
    if settings.telegram_bot_token and settings.telegram_admin_ids:
        logger.info("Using Telegram alert sink")
        return TelegramAlertSink(
            bot_token=settings.telegram_bot_token,
            admin_user_ids=settings.telegram_admin_ids,
        )
    logger.info("Using noop alert sink (no Telegram config)")
    return NoopAlertSink()


async def run_pipeline(
    settings: AppSettings,
    swap_amount: Decimal,
    deposit_amount: Decimal | None = None,
) -> PipelineResult:
    """Connect the wallet and run the pipeline once.

    Raises:
        ConfigError: If the wallet or RPC endpoint cannot be set up
    """
    account = load_wallet(settings)
    client = await Web3ChainClient.connect(
        settings.rpc_url,
        account,
        explorer_tx_url=settings.explorer_tx_url,
        gas_multiplier=settings.gas_multiplier,
        confirmation_timeout=settings.confirmation_timeout_seconds,
    )
    alerts = create_alert_sink(settings)

    async with client:
        try:
            pipeline = SwapDepositPipeline(client, settings.pipeline_config(), alerts)
            return await pipeline.run(swap_amount, deposit_amount)
        finally:
            if isinstance(alerts, TelegramAlertSink):
                await alerts.close()


def _amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError(f"amount must be positive: {value!r}")
    return amount


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Swap a stablecoin and deposit the proceeds into a lending pool"
    )
    parser.add_argument(
        "amount", type=_amount, help="Swap amount in input token units (e.g. 1)"
    )
    parser.add_argument(
        "--config", default=None, help="Optional YAML configuration file path"
    )
    parser.add_argument(
        "--deposit-amount",
        type=_amount,
        default=None,
        help="Output token amount to deposit (defaults to the swap amount)",
    )
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
        result = await run_pipeline(settings, args.amount, args.deposit_amount)
    except ConfigError as e:
        logger.error("Configuration error", error=str(e))
        return 1

    return 0 if result.succeeded else 1


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
