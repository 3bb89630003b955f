# app/services/fraud_service.py
import math

from sqlalchemy.orm import Session

from app.data.models.order_event import SYSTEM_ACTOR
from app.data.unit_of_work import transaction
from app.domain.order_status import OrderEventType, OrderStatus
from app.repos.order_repo import OrderRepo
from app.services.fraud_client import FraudClient
from app.utils.settings import FRAUD_RISK_THRESHOLD
from app.utils.logging import get_logger

logger = get_logger(__name__)


class FraudScreeningService:
    """
    Ocena ryzyka zamowienia po jego utworzeniu.
    Blad serwisu fraudowego = ryzyko 0 (fail-open), zamowienie zostaje.
    """

    def __init__(self, db: Session, client: FraudClient, threshold: float = FRAUD_RISK_THRESHOLD):
        self.db = db
        self.repo = OrderRepo(db)
        self.client = client
        self.threshold = threshold

    def screen(self, order_id: int) -> float | None:
        order = self.repo.get_order(order_id)

        if not order:
            logger.warning(f"Fraud screening skipped, order {order_id} not found")
            return None

        if order.status != OrderStatus.PENDING.value:
            logger.info(f"Fraud screening skipped, order {order_id} is {order.status}")
            return None

        summary = {
            "orderId": order.id,
            "userId": order.user_id,
            "total": str(order.total),
            "itemsCount": len(order.items),
        }
        loaded_version = order.version

        # koniec odczytu, polaczenie nie czeka w transakcji na HTTP
        self.db.commit()

        risk = self._score(summary)

        if risk <= self.threshold:
            logger.info(f"Order {order_id} passed fraud screening (risk {risk})")
            return risk

        with transaction(self.db):
            rowcount = self.repo.compare_and_set(
                order_id,
                loaded_version,
                {"status": OrderStatus.PENDING_REVIEW.value},
            )
            if rowcount == 0:
                # zamowienie zdazylo zmienic status, nie cofamy go
                logger.warning(f"Order {order_id} changed before it could be flagged (risk {risk})")
                return risk

            self.repo.add_event(
                order_id,
                OrderEventType.FRAUD_FLAGGED.value,
                SYSTEM_ACTOR,
                {"riskScore": risk},
            )

        logger.warning(f"Order {order_id} flagged for fraud review", risk_score=risk)
        return risk

    def _score(self, summary: dict) -> float:
        order_id = summary["orderId"]
        try:
            risk = float(self.client.score(summary))
        except Exception as e:
            logger.error(f"Fraud check failed for order {order_id}: {e}")
            return 0.0

        # ryzyko spoza 0..1 traktujemy jak awarie serwisu
        if not (math.isfinite(risk) and 0.0 <= risk <= 1.0):
            logger.error(f"Fraud check returned invalid risk {risk!r} for order {order_id}")
            return 0.0
        return risk
