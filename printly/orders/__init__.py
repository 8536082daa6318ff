"""
Orders — the order lifecycle service.

    from printly.orders import OrderService, DocumentRequest

    service = OrderService(orders, centers, blobs, settings)
    result = await service.create_order(uid, center_id, [DocumentRequest(upload)])
    await service.cancel_order(order_id, Actor(uid))
"""

from printly.orders._request import DocumentRequest
from printly.orders._service import OrderService

__all__ = ("DocumentRequest", "OrderService")
