from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from app.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)

    status = Column(String, nullable=False, default="PENDING", index=True)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False)
    customer_note = Column(String(500), nullable=True)
    idempotency_key = Column(String(36), nullable=True, unique=True)
    tracking_number = Column(String, nullable=True)

    # optimistic locking, tak jak w koszyku
    version = Column(Integer, nullable=False, default=1)

    shipping_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)
    billing_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
    events = relationship(
        "OrderEventModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderEventModel.id",
    )
    shipping_address = relationship("AddressModel", foreign_keys=[shipping_address_id])
    billing_address = relationship("AddressModel", foreign_keys=[billing_address_id])
