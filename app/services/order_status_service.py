# app/services/order_status_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.unit_of_work import transaction
from app.domain.errors import InvalidStatusTransitionError, OrderNotFoundError
from app.domain.order_status import (
    OrderEventType,
    OrderStatus,
    ensure_transition,
    restocks_on,
)
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.services.notification_service import NotificationService
from app.services.order_service import order_to_dict
from app.utils.logging import get_logger

logger = get_logger(__name__)


class OrderStatusService:
    """
    Maszyna stanow zamowienia.

    Przejscie jest walidowane wzgledem statusu wczytanego w tej samej
    transakcji, a zapis idzie przez compare-and-set na version, wiec dwa
    rownolegle przejscia z tego samego stanu nie moga oba przejsc.
    """

    def __init__(self, db: Session, notifications: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.notifications = notifications or NotificationService()

    def update_status(
        self,
        order_id: int,
        target: OrderStatus,
        actor_id: int,
        tracking_number: str | None = None,
    ) -> Dict[str, Any]:
        with transaction(self.db):
            order = self.repo.get_order(order_id)

            if not order:
                raise OrderNotFoundError(order_id)

            current = OrderStatus(order.status)
            ensure_transition(current, target)

            values: Dict[str, Any] = {"status": target.value}
            if tracking_number:
                values["tracking_number"] = tracking_number

            rowcount = self.repo.compare_and_set(order.id, order.version, values)
            if rowcount == 0:
                # ktos zmienil zamowienie miedzy odczytem a zapisem
                now = self.repo.current_status(order.id)
                logger.info(f"Concurrent status change on order {order_id}: now {now}")
                raise InvalidStatusTransitionError(now or current.value, target.value)

            if restocks_on(current, target):
                for item in sorted(order.items, key=lambda i: i.product_id):
                    if self.products.increment(item.product_id, item.quantity) == 0:
                        logger.warning(
                            f"Product {item.product_id} missing while restocking order {order_id}"
                        )

            payload: Dict[str, Any] = {"from": current.value, "to": target.value}
            if tracking_number:
                payload["trackingNumber"] = tracking_number

            self.repo.add_event(order.id, OrderEventType.STATUS_CHANGE.value, str(actor_id), payload)

        logger.info(f"Order {order_id} status updated to {target.value} by user {actor_id}")

        if target == OrderStatus.SHIPPED and tracking_number:
            self.notifications.notify_shipment(order_id, tracking_number)

        return order_to_dict(self.repo.get_order(order_id))
