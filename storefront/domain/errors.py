"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``storefront.api.errors`` turns them into JSON
responses using ``status_code``.
"""

from typing import Optional


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Malformed or missing input, rejected before any lookup."""
    status_code = 400


class NotFoundError(StorefrontError):
    status_code = 404


class BusinessRuleError(StorefrontError):
    status_code = 400


class ProductUnavailableError(BusinessRuleError):
    def __init__(self, product_id: str, product_name: str):
        super().__init__(f"Product {product_name} is not available")
        self.product_id = product_id
        self.product_name = product_name


class InsufficientStockError(BusinessRuleError):
    def __init__(self, product_id: str, product_name: str, available: int):
        super().__init__(f"Insufficient stock for {product_name}. Available: {available}")
        self.product_id = product_id
        self.product_name = product_name
        self.available = available


class AuthenticationError(StorefrontError):
    status_code = 401


class PersistenceError(StorefrontError):
    """Storage failure; the whole unit of work has been rolled back."""

    def __init__(self, message: str = "Error creating order", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
