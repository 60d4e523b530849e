"""Plain-dict rendering of an Order for push notifications and API responses."""


def _iso(value):
    return value.isoformat() if value is not None else None


def serialize_line(line) -> dict:
    return {
        "id": str(line.id),
        "menu_item_id": str(line.menu_item_id),
        "name": line.name,
        "quantity": line.quantity,
        "unit_price": line.unit_price,
        "notes": line.notes,
    }


def serialize_order(order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "group_id": str(order.group_id) if order.group_id else None,
        "restaurant_id": str(order.restaurant_id),
        "fulfillment_type": order.fulfillment_type,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "lines": [serialize_line(line) for line in order.lines],
        "subtotal": order.subtotal,
        "service_charge": order.service_charge,
        "tax": order.tax,
        "grand_total": order.grand_total,
        "transfer_status": order.transfer_status,
        "settlement_status": order.settlement_status,
        "cancelled_by": order.cancelled_by,
        "revision": order.revision,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }
