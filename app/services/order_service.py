# app/services/order_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.address import AddressModel
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.unit_of_work import transaction
from app.domain.errors import (
    InsufficientStockError,
    OrderAccessDeniedError,
    OrderNotFoundError,
    PriceMismatchError,
    ProductNotFoundError,
)
from app.domain.order_status import OrderEventType, OrderStatus
from app.domain.schemas import OrderCreate, OrderItemIn
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.services.notification_service import NotificationService
from app.utils.settings import FRAUD_CHECK_ENABLED
from app.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PricedItem:
    product_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal


def _address_to_dict(address: AddressModel) -> Dict[str, Any]:
    return {
        "street": address.street,
        "city": address.city,
        "country": address.country,
        "postal_code": address.postal_code,
    }


def order_to_dict(order: OrderModel, events=None) -> Dict[str, Any]:
    data = {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total": order.total,
        "payment_method": order.payment_method,
        "customer_note": order.customer_note,
        "idempotency_key": order.idempotency_key,
        "tracking_number": order.tracking_number,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "price": i.price,
                "subtotal": i.subtotal,
            }
            for i in order.items
        ],
        "shipping_address": _address_to_dict(order.shipping_address),
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }
    if events is not None:
        data["billing_address"] = _address_to_dict(order.billing_address)
        data["events"] = [
            {
                "type": e.type,
                "user_id": e.user_id,
                "payload": e.payload,
                "created_at": e.created_at,
            }
            for e in events
        ]
    return data


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.
    commands: create_order
    query: get_order, list_orders (tylko odczyt)
    """

    def __init__(
        self,
        db: Session,
        notifications: NotificationService | None = None,
        fraud_check_enabled: bool = FRAUD_CHECK_ENABLED,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.notifications = notifications or NotificationService()
        self.fraud_check_enabled = fraud_check_enabled

    #commands
    def create_order(self, user_id: int, payload: OrderCreate) -> Tuple[Dict[str, Any], bool]:
        """
        Use Case: Tworzenie zamówienia z koszyka klienta.

        1. Idempotency key juz uzyty -> zwraca istniejace zamowienie, bez efektow ubocznych
           (klucz innego uzytkownika -> OrderAccessDeniedError)
        2. Wycenia pozycje wg katalogu
        3. W jednej transakcji: order + items, warunkowy decrement stanu, event CREATED
        4. Po commicie: fraud screening (async, best-effort)

        Zwraca (zamowienie, created). created=False oznacza powtorzone zadanie.
        """
        key = str(payload.idempotency_key) if payload.idempotency_key else None

        if key:
            existing = self.repo.get_by_idempotency_key(key)
            if existing:
                logger.info(f"Idempotency key {key} already used by order {existing.id}")
                return self._replay(existing, user_id), False

        priced, total = self._price_items(payload.items)

        shipping = payload.shipping_address
        billing = payload.billing_address or shipping

        try:
            with transaction(self.db):
                order = self.repo.create_order(
                    OrderModel(
                        user_id=user_id,
                        status=OrderStatus.PENDING.value,
                        total=total,
                        payment_method=payload.payment_method.value,
                        customer_note=payload.customer_note,
                        idempotency_key=key,
                        shipping_address=AddressModel(**shipping.model_dump()),
                        billing_address=AddressModel(**billing.model_dump()),
                        items=[
                            OrderItemModel(
                                product_id=p.product_id,
                                quantity=p.quantity,
                                price=p.price,
                                subtotal=p.subtotal,
                            )
                            for p in priced
                        ],
                    )
                )

                # warunkowy decrement, 0 rows affected = ktos nas wyprzedzil
                # blokady wierszy zawsze w kolejnosci product_id
                for p in sorted(priced, key=lambda p: p.product_id):
                    if self.products.conditional_decrement(p.product_id, p.quantity) == 0:
                        logger.info(f"Insufficient stock for product {p.product_id}, rolling back")
                        raise InsufficientStockError(p.product_id)

                self.repo.add_event(
                    order.id,
                    OrderEventType.CREATED.value,
                    str(user_id),
                    {"status": OrderStatus.PENDING.value, "total": str(total)},
                )
                order_id = order.id

        except IntegrityError:
            # rownolegle zadanie z tym samym kluczem wygralo wyscig
            if key:
                existing = self.repo.get_by_idempotency_key(key)
                if existing:
                    logger.info(f"Concurrent retry with key {key} resolved to order {existing.id}")
                    return self._replay(existing, user_id), False
            raise

        logger.info(f"Order {order_id} created for user {user_id}", order_id=order_id, total=str(total))

        if self.fraud_check_enabled:
            self.notifications.request_fraud_screening(order_id)

        return order_to_dict(self.repo.get_order(order_id)), True

    def _replay(self, existing: OrderModel, user_id: int) -> Dict[str, Any]:
        """Powtorzony klucz: zwraca zamowienie, klucz innego uzytkownika -> 403."""
        if existing.user_id != user_id:
            logger.warning(f"User {user_id} replayed idempotency key of order {existing.id}")
            raise OrderAccessDeniedError(existing.id)
        return order_to_dict(existing)

    def _price_items(self, items: List[OrderItemIn]) -> Tuple[List[PricedItem], Decimal]:
        """Cena zawsze z katalogu, cena klienta tylko do porownania."""
        catalog = self.products.get_products(i.product_id for i in items)

        priced = []
        for item in items:
            product = catalog.get(item.product_id)
            if product is None:
                raise ProductNotFoundError(item.product_id)

            price = Decimal(product.price).quantize(CENT)
            if item.price != price:
                raise PriceMismatchError(item.product_id, price, item.price)

            priced.append(
                PricedItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=price,
                    subtotal=(price * item.quantity).quantize(CENT),
                )
            )

        total = sum((p.subtotal for p in priced), Decimal("0.00"))
        return priced, total

    #query
    def get_order(self, order_id: int, user_id: int, is_admin: bool = False) -> Dict[str, Any]:
        """
        Use Case: Pobranie zamówienia (Query).
        Wlasciciel albo admin, inni dostaja 403.
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFoundError(order_id)

        if order.user_id != user_id and not is_admin:
            logger.warning(f"User {user_id} denied access to order {order_id}")
            raise OrderAccessDeniedError(order_id)

        return order_to_dict(order, events=self.repo.recent_events(order_id, limit=10))

    def list_orders(
        self,
        page: int,
        limit: int,
        status: OrderStatus | None = None,
        user_id: int | None = None,
    ) -> Dict[str, Any]:
        """user_id=None -> wszystkie zamowienia (widok admina)."""
        orders, total = self.repo.list_orders(
            page=page,
            limit=limit,
            user_id=user_id,
            status=status.value if status else None,
        )

        return {
            "data": [order_to_dict(o) for o in orders],
            "meta": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": -(-total // limit),
            },
        }
