"""WebSocket feeds for staff dashboards and guests following an order.

    /ws/staff                   every order event
    /ws/staff/{restaurant_id}   one restaurant's orders
    /ws/orders/{order_id}       one order, starting with its current snapshot

Messages are pushed at most once. A client that reconnects should re-read
the order over HTTP rather than expect missed events to be replayed.
"""

import asyncio

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from protean.exceptions import ObjectNotFoundError

from ordering.broadcast.port import customer_channel, staff_channel
from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.snapshot import serialize_order

logger = structlog.get_logger(__name__)

ORDER_NOT_FOUND_CLOSE_CODE = 4404

realtime_router = APIRouter(prefix="/ws", tags=["realtime"])


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("websocket_disconnected", path=websocket.url.path)


async def _forward(websocket: WebSocket, subscription) -> None:
    while True:
        message = await subscription.next_message()
        await websocket.send_json(message)


async def _stream(websocket: WebSocket, channel: str, snapshot: dict | None = None) -> None:
    hub = websocket.app.state.services.broadcaster
    subscription = hub.subscribe(channel)
    try:
        await websocket.send_json({"event": "connected", "channel": channel})
        if snapshot is not None:
            await websocket.send_json({"event": "order.snapshot", "orderId": snapshot["id"], "order": snapshot})

        tasks = {
            asyncio.create_task(_wait_for_disconnect(websocket)),
            asyncio.create_task(_forward(websocket, subscription)),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if task.exception() is not None and not isinstance(task.exception(), WebSocketDisconnect):
                raise task.exception()
    finally:
        hub.unsubscribe(subscription)


@realtime_router.websocket("/staff")
async def staff_feed(websocket: WebSocket):
    await websocket.accept()
    await _stream(websocket, staff_channel())


@realtime_router.websocket("/staff/{restaurant_id}")
async def restaurant_feed(websocket: WebSocket, restaurant_id: str):
    await websocket.accept()
    await _stream(websocket, staff_channel(restaurant_id))


@realtime_router.websocket("/orders/{order_id}")
async def order_feed(websocket: WebSocket, order_id: str):
    await websocket.accept()
    with ordering.domain_context():
        try:
            order = ordering.repository_for(Order).get(order_id)
        except ObjectNotFoundError:
            await websocket.close(code=ORDER_NOT_FOUND_CLOSE_CODE)
            return
        snapshot = serialize_order(order)
    await _stream(websocket, customer_channel(order_id), snapshot=snapshot)
