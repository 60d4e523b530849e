"""Settlement engine — pays each restaurant its share of a paid order.

Siblings from one checkout are settled one after another with a short pause
between transfers. Each order is recorded in its own unit of work, so one
restaurant's failed payout never undoes another's. Transfer failures are
returned as results and written to the order; they are never raised.

Outcomes per order:
    payout account linked, transfer accepted  → success / completed
    payout account linked, transfer failed    → failed / pending (manual)
    no payout account                         → not_attempted / pending (manual)
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.gateway.port import GatewayError, PaymentGateway
from ordering.order.order import Order, TransferStatus
from ordering.order.pricing import DEFAULT_COMMISSION_RATE, split_commission
from ordering.restaurant.restaurant import Restaurant

logger = structlog.get_logger(__name__)

@dataclass(frozen=True)
class SettlementResult:
    order_id: str
    order_number: str
    restaurant_id: str
    success: bool
    transfer_status: str
    platform_commission: float
    transfer_amount: float
    transfer_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class SettlementReport:
    results: tuple[SettlementResult, ...]

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded

    @property
    def total_transferred(self) -> float:
        return sum(result.transfer_amount for result in self.results if result.success)

    @property
    def total_commission(self) -> float:
        return sum(result.platform_commission for result in self.results)


class SettlementEngine:
    def __init__(
        self,
        gateway: PaymentGateway,
        currency: str = "INR",
        pause_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._gateway = gateway
        self._currency = currency
        self._pause_seconds = pause_seconds
        self._sleep = sleep

    def settle(self, orders, source_transaction_id) -> SettlementReport:
        results = []
        for index, order in enumerate(orders):
            if index and self._pause_seconds > 0:
                self._sleep(self._pause_seconds)
            try:
                results.append(self.settle_order(order, source_transaction_id))
            except Exception as exc:
                logger.exception("settlement_order_error", order_id=str(order.id))
                results.append(
                    SettlementResult(
                        order_id=str(order.id),
                        order_number=order.order_number,
                        restaurant_id=str(order.restaurant_id),
                        success=False,
                        transfer_status=TransferStatus.FAILED.value,
                        platform_commission=0.0,
                        transfer_amount=0.0,
                        error=f"Settlement not recorded: {exc}",
                    )
                )

        report = SettlementReport(results=tuple(results))
        logger.info(
            "settlement_summary",
            source_transaction_id=source_transaction_id,
            order_count=len(results),
            succeeded=report.succeeded,
            failed=report.failed,
            total_transferred=report.total_transferred,
            total_commission=report.total_commission,
        )
        return report

    def settle_order(self, order, source_transaction_id) -> SettlementResult:
        restaurant = self._restaurant(order.restaurant_id)
        commission_rate = restaurant.commission_rate if restaurant else DEFAULT_COMMISSION_RATE
        commission, transfer_amount = split_commission(order.grand_total, commission_rate)
        account = restaurant.payout_account_id if restaurant else None

        transfer_id = None
        error = None
        if not account:
            status = TransferStatus.NOT_ATTEMPTED
            error = "No payout account linked"
        else:
            try:
                outcome = self._gateway.transfer(
                    destination_account=account,
                    amount=transfer_amount,
                    currency=self._currency,
                    source_transaction_id=source_transaction_id,
                    metadata={
                        "order_id": str(order.id),
                        "order_number": order.order_number,
                        "restaurant_id": str(order.restaurant_id),
                        "grand_total": order.grand_total,
                        "platform_commission": commission,
                        "commission_rate": commission_rate,
                    },
                )
            except Exception as exc:
                logger.exception(
                    "settlement_transfer_error",
                    order_id=str(order.id),
                    restaurant_id=str(order.restaurant_id),
                    gateway_error=isinstance(exc, GatewayError),
                )
                status, error = TransferStatus.FAILED, str(exc) or exc.__class__.__name__
            else:
                if outcome.success:
                    status, transfer_id = TransferStatus.SUCCESS, outcome.transfer_id
                else:
                    status, error = TransferStatus.FAILED, outcome.failure_reason or "Transfer rejected"

        self._record(order.id, commission, transfer_amount, status, transfer_id, error)

        log = logger.info if status == TransferStatus.SUCCESS else logger.warning
        log(
            "settlement_attempted",
            order_id=str(order.id),
            order_number=order.order_number,
            restaurant_id=str(order.restaurant_id),
            transfer_status=status.value,
            transfer_amount=transfer_amount,
            platform_commission=commission,
            transfer_id=transfer_id,
            error=error,
        )
        return SettlementResult(
            order_id=str(order.id),
            order_number=order.order_number,
            restaurant_id=str(order.restaurant_id),
            success=status == TransferStatus.SUCCESS,
            transfer_status=status.value,
            platform_commission=commission,
            transfer_amount=transfer_amount,
            transfer_id=transfer_id,
            error=error,
        )

    def transfer_status(self, order_id) -> dict:
        """Recorded settlement fields plus the gateway's view of the transfer, if any."""
        order = current_domain.repository_for(Order).get(order_id)
        status = {
            "order_id": str(order.id),
            "transfer_id": order.transfer_id,
            "transfer_status": order.transfer_status,
            "settlement_status": order.settlement_status,
            "transfer_amount": order.transfer_amount,
            "platform_commission": order.platform_commission,
            "gateway": None,
        }
        if order.transfer_id:
            status["gateway"] = self._gateway.fetch_transfer(order.transfer_id)
        return status

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def _restaurant(restaurant_id) -> Restaurant | None:
        try:
            return current_domain.repository_for(Restaurant).get(str(restaurant_id))
        except ObjectNotFoundError:
            logger.warning("settlement_restaurant_missing", restaurant_id=str(restaurant_id))
            return None

    @staticmethod
    def _record(order_id, commission, transfer_amount, status, transfer_id, error):
        with UnitOfWork():
            repo = current_domain.repository_for(Order)
            order = repo.get(order_id)
            order.record_settlement(
                platform_commission=commission,
                transfer_amount=transfer_amount,
                transfer_status=status.value,
                transfer_id=transfer_id,
                failure_reason=error,
            )
            repo.add(order)
