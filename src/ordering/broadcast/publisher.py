"""Order event publisher — turns order changes into channel messages.

Publishing happens after the write has committed and can never fail the
caller: any broadcaster error is logged and discarded for that message.
"""

import structlog

from ordering.broadcast.port import Broadcaster, customer_channel, staff_channel
from ordering.order.snapshot import serialize_order

logger = structlog.get_logger(__name__)

ORDER_CREATED = "order.created"
ORDER_STATUS_CHANGED = "order.statusChanged"
ORDER_LINE_CHANGED = "order.lineChanged"
ORDER_CANCELLED = "order.cancelled"


class OrderEventPublisher:
    def __init__(self, broadcaster: Broadcaster) -> None:
        self._broadcaster = broadcaster

    def order_created(self, order) -> None:
        message = self._message(ORDER_CREATED, order, status=order.status)
        self._send(self._staff_channels(order), message)

    def status_changed(self, order, initiated_by="staff") -> None:
        message = self._message(ORDER_STATUS_CHANGED, order, status=order.status, initiatedBy=initiated_by)
        self._send(self._all_channels(order), message)

    def line_changed(self, order, change) -> None:
        message = self._message(ORDER_LINE_CHANGED, order, status=order.status, change=change)
        self._send(self._all_channels(order), message)

    def cancelled(self, order) -> None:
        """Publish both the status change and the cancellation, marked with who cancelled."""
        initiated_by = order.cancelled_by or "staff"
        self.status_changed(order, initiated_by=initiated_by)
        message = self._message(ORDER_CANCELLED, order, status=order.status, initiatedBy=initiated_by)
        self._send(self._all_channels(order), message)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def _message(event, order, **extra) -> dict:
        return {"event": event, "orderId": str(order.id), **extra, "order": serialize_order(order)}

    @staticmethod
    def _staff_channels(order) -> list[str]:
        return [staff_channel(), staff_channel(order.restaurant_id)]

    def _all_channels(self, order) -> list[str]:
        return [*self._staff_channels(order), customer_channel(order.id)]

    def _send(self, channels, message) -> None:
        for channel in channels:
            try:
                self._broadcaster.publish(channel, message)
            except Exception as exc:
                logger.warning(
                    "broadcast_failed",
                    channel=channel,
                    event_type=message["event"],
                    order_id=message["orderId"],
                    error=str(exc),
                )
