# app/tasks/integrations.py
from requests import RequestException

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.services.fraud_client import FraudClient
from app.services.fraud_service import FraudScreeningService
from app.services.shipping_client import ShippingClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="app.tasks.integrations.screen_order_task")
def screen_order_task(order_id: int):
    logger.info(f"Fraud screening started for order {order_id}")

    db = SessionLocal()
    try:
        risk = FraudScreeningService(db, FraudClient()).screen(order_id)
    finally:
        db.close()

    return {"order_id": order_id, "risk": risk}


@celery_app.task(name="app.tasks.integrations.notify_shipment_task")
def notify_shipment_task(order_id: int, tracking_number: str, carrier: str):
    try:
        ShippingClient().notify_shipment(order_id, tracking_number, carrier)
    except RequestException as e:
        # best-effort, status zamowienia juz zapisany
        logger.error(f"Shipping notification failed for order {order_id}: {e}")
        return {"order_id": order_id, "status": "failed"}

    logger.info(f"Shipping notification sent for order {order_id}")
    return {"order_id": order_id, "status": "sent"}
