# app/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import (
    Requester,
    checkout_rate_limit,
    get_notifications,
    get_requester,
    require_roles,
)
from app.data.database import get_db
from app.domain.errors import (
    InvalidStatusTransitionError,
    OrderAccessDeniedError,
    OrderConflictError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from app.domain.order_status import OrderStatus
from app.domain.schemas import (
    OrderCreate,
    OrderDetailOut,
    OrderOut,
    OrderPage,
    OrderStatusUpdate,
)
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService
from app.services.order_status_service import OrderStatusService
from app.utils.settings import (
    ORDERS_PAGE_SIZE_DEFAULT,
    ORDERS_PAGE_SIZE_MAX,
    ORDERS_PAGE_SIZE_MIN,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, notifications: NotificationService):
    return OrderService(db, notifications=notifications)


@router.post(
    "/",
    response_model=OrderOut,
    status_code=201,
    dependencies=[Depends(checkout_rate_limit)],
)
def create_order(
    payload: OrderCreate,
    requester: Requester = Depends(get_requester),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notifications),
):
    """
    Tworzy zamówienie. Powtórzony idempotency key -> 409 z istniejącym zamówieniem.
    """
    svc = get_service(db, notifications)
    try:
        order, created = svc.create_order(requester.user_id, payload)
    except OrderAccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except OrderConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ProductNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception(f"Order creation failed for user {requester.user_id}")
        raise HTTPException(status_code=500, detail="Order creation failed")

    if not created:
        return JSONResponse(
            status_code=409,
            content=OrderOut.model_validate(order).model_dump(mode="json"),
        )
    return order


@router.get("/user", response_model=OrderPage)
def list_user_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(ORDERS_PAGE_SIZE_DEFAULT, ge=ORDERS_PAGE_SIZE_MIN, le=ORDERS_PAGE_SIZE_MAX),
    status: OrderStatus | None = Query(None),
    requester: Requester = Depends(get_requester),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.list_orders(page=page, limit=limit, status=status, user_id=requester.user_id)
    except Exception:
        logger.exception(f"Order history fetch failed for user {requester.user_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch orders")


@router.get("/admin", response_model=OrderPage)
def list_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(ORDERS_PAGE_SIZE_DEFAULT, ge=ORDERS_PAGE_SIZE_MIN, le=ORDERS_PAGE_SIZE_MAX),
    status: OrderStatus | None = Query(None),
    requester: Requester = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.list_orders(page=page, limit=limit, status=status)
    except Exception:
        logger.exception("Admin order fetch failed")
        raise HTTPException(status_code=500, detail="Failed to fetch orders")


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(
    order_id: int,
    requester: Requester = Depends(get_requester),
    db: Session = Depends(get_db),
):
    """
    Pobiera szczegóły zamówienia (pozycje, adresy, ostatnie 10 eventów).
    """
    svc = OrderService(db)
    try:
        return svc.get_order(order_id, requester.user_id, is_admin=requester.is_admin)
    except OrderAccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception(f"Order details fetch failed for order {order_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch order details")


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    requester: Requester = Depends(require_roles("admin", "order_manager")),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notifications),
):
    svc = OrderStatusService(db, notifications=notifications)
    try:
        return svc.update_status(
            order_id,
            payload.status,
            actor_id=requester.user_id,
            tracking_number=payload.tracking_number,
        )
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception(f"Order status update failed for order {order_id}")
        raise HTTPException(status_code=500, detail="Failed to update order status")
