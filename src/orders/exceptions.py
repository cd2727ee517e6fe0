"""Order domain errors.

Raised by the order engine when a request cannot be honoured. The API layer
maps ``NotFoundError`` subclasses to 404 and ``BusinessRuleError``
subclasses to 400.
"""


class OrderError(Exception):
    """Base class for all order domain errors."""


class NotFoundError(OrderError):
    """A referenced entity does not exist."""


class BusinessRuleError(OrderError):
    """The request is well formed but violates an ordering rule."""


class OrderNotFound(NotFoundError):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class ProductNotFound(NotFoundError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ProductUnavailable(BusinessRuleError):
    def __init__(self, product_id, name: str):
        self.product_id = product_id
        self.name = name
        super().__init__(f"Product {name} is not available")


class InsufficientStock(BusinessRuleError):
    def __init__(self, product_id, name: str, requested: int, available: int):
        self.product_id = product_id
        self.name = name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {name}: "
            f"requested {requested}, available {available}"
        )


class IllegalTransition(BusinessRuleError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current} to {requested}")
