#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.product import ProductModel
from app.data.models.address import AddressModel
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.models.order_event import OrderEventModel, SYSTEM_ACTOR

__all__ = [
    "ProductModel",
    "AddressModel",
    "OrderModel",
    "OrderItemModel",
    "OrderEventModel",
    "SYSTEM_ACTOR",
]
