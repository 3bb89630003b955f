# app/services/shipping_client.py
import requests

from app.utils.retry import http_retry
from app.utils.settings import SHIPPING_WEBHOOK_URL, SHIPPING_API_KEY, SHIPPING_CARRIER
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ShippingClient:
    def __init__(self, url: str | None = None, api_key: str | None = None, timeout: int = 2):
        self.url = url or SHIPPING_WEBHOOK_URL
        self.api_key = SHIPPING_API_KEY if api_key is None else api_key
        self.timeout = timeout

    @http_retry()
    def notify_shipment(self, order_id: int, tracking_number: str, carrier: str | None = None) -> None:
        carrier = carrier or SHIPPING_CARRIER
        logger.info(f"ShippingClient POST {self.url} for order {order_id}")

        resp = requests.post(
            self.url,
            json={
                "orderId": order_id,
                "trackingNumber": tracking_number,
                "carrier": carrier,
            },
            headers={"X-Shipping-API-Key": self.api_key},
            timeout=self.timeout,
        )
        resp.raise_for_status()
