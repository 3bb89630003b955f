# app/services/notification_service.py
from app.tasks.integrations import screen_order_task, notify_shipment_task
from app.utils.settings import SHIPPING_CARRIER
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Efekty uboczne po commicie (fraud screening, powiadomienie przewoznika).
    Używa Celery do asynchronicznego przetwarzania, wynik nie wplywa na zamowienie.
    """

    @staticmethod
    def request_fraud_screening(order_id: int) -> None:
        try:
            screen_order_task.delay(order_id)
        except Exception as e:
            logger.error(f"Failed to enqueue fraud screening for order {order_id}: {e}")

    @staticmethod
    def notify_shipment(order_id: int, tracking_number: str, carrier: str | None = None) -> None:
        try:
            notify_shipment_task.delay(order_id, tracking_number, carrier or SHIPPING_CARRIER)
        except Exception as e:
            logger.error(f"Failed to enqueue shipping notification for order {order_id}: {e}")
