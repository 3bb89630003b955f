# app/services/fraud_client.py
import requests

from app.utils.retry import http_retry
from app.utils.settings import FRAUD_SERVICE_URL, FRAUD_API_KEY
from app.utils.logging import get_logger

logger = get_logger(__name__)


class FraudClient:
    def __init__(self, url: str | None = None, api_key: str | None = None, timeout: int = 2):
        self.url = url or FRAUD_SERVICE_URL
        self.api_key = FRAUD_API_KEY if api_key is None else api_key
        self.timeout = timeout

    @http_retry()
    def score(self, order_summary: dict) -> float:
        """Zwraca ryzyko 0..1 dla zamowienia."""
        logger.info(f"FraudClient POST {self.url} for order {order_summary.get('orderId')}")

        resp = requests.post(
            self.url,
            json=order_summary,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return float(resp.json()["riskScore"])
