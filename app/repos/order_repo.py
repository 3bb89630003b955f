# app/repos/order_repo.py
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from app.data.models.order import OrderModel
from app.data.models.order_event import OrderEventModel


class OrderRepo:
    """
    Dostep do zamowien. Metody zapisujace robia tylko flush(),
    commit/rollback nalezy do transaction() w serwisie.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(
                selectinload(OrderModel.items),
                selectinload(OrderModel.shipping_address),
                selectinload(OrderModel.billing_address),
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_by_idempotency_key(self, key: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.idempotency_key == key)
            .options(selectinload(OrderModel.items))
        ).scalar_one_or_none()

    def add_event(self, order_id: int, event_type: str, user_id: str, payload: Dict[str, Any]) -> OrderEventModel:
        event = OrderEventModel(
            order_id=order_id,
            type=event_type,
            user_id=str(user_id),
            payload=payload,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def compare_and_set(self, order_id: int, old_version: int, new_data: Dict[str, Any]) -> int:
        """
        Optimistic locking na polu version:
        update orders set status=..., version=3 where id=1 and version=2
        """
        values = dict(new_data)
        values["version"] = old_version + 1
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.version == old_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def current_status(self, order_id: int) -> Optional[str]:
        return self.db.execute(
            select(OrderModel.status).where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def recent_events(self, order_id: int, limit: int = 10) -> List[OrderEventModel]:
        return list(
            self.db.execute(
                select(OrderEventModel)
                .where(OrderEventModel.order_id == order_id)
                .order_by(OrderEventModel.created_at.desc(), OrderEventModel.id.desc())
                .limit(limit)
            ).scalars().all()
        )

    def list_orders(
        self,
        page: int,
        limit: int,
        user_id: int | None = None,
        status: str | None = None,
    ) -> Tuple[List[OrderModel], int]:
        filters = []
        if user_id is not None:
            filters.append(OrderModel.user_id == user_id)
        if status is not None:
            filters.append(OrderModel.status == status)

        rows = self.db.execute(
            select(OrderModel)
            .where(*filters)
            .options(
                selectinload(OrderModel.items),
                selectinload(OrderModel.shipping_address),
            )
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()

        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*filters)
        ).scalar_one()

        return list(rows), total
