# app/domain/errors.py
"""
Bledy domeny zamowien.

Kazdy blad dziedziczy tez po wbudowanym wyjatku (ValueError, LookupError,
PermissionError), wiec routery moga je lapac tak jak reszta serwisow.
"""


class OrderError(Exception):
    """Bazowy blad domeny zamowien."""


class OrderConflictError(OrderError):
    """Stan magazynu albo katalogu zmienil sie od czasu pobrania koszyka."""


class InsufficientStockError(OrderConflictError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Insufficient stock for product {product_id}")


class PriceMismatchError(OrderConflictError):
    def __init__(self, product_id: int, expected, got):
        self.product_id = product_id
        self.expected = expected
        self.got = got
        super().__init__(
            f"Price for product {product_id} changed: expected {expected}, got {got}"
        )


class ProductNotFoundError(OrderError, ValueError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class InvalidStatusTransitionError(OrderError, ValueError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid status transition: {current} -> {target}")


class OrderNotFoundError(OrderError, LookupError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class OrderAccessDeniedError(OrderError, PermissionError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__("Access denied")
