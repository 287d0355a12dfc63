"""Checkout and order management.

``OrderService.place_order`` is the only multi-row write in the system: it
validates a cart, locks the referenced products, decrements stock and stores
the order in a single unit of work. Either everything commits or nothing does.
"""

from decimal import Decimal
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from shared.core import get_logger
from storefront.domain.errors import (
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    ProductUnavailableError,
    InsufficientStockError,
    PersistenceError,
)
from storefront.domain.models import Order, OrderItem, PaymentMethod, PaymentStatus, OrderStatus
from storefront.infrastructure.unit_of_work import UnitOfWork
from .schemas import OrderCreate, OrderUpdate

logger = get_logger(__name__)

CUSTOMER_FIELDS = ("name", "phone", "address", "city", "pincode")
DEFAULT_DELIVERY_CHARGE = Decimal("50")
CENTS = Decimal("0.01")

# Nothing has been captured when the order is created, whatever the method.
INITIAL_PAYMENT_STATUS = {
    PaymentMethod.COD: PaymentStatus.UNPAID,
    PaymentMethod.QR: PaymentStatus.UNPAID,
    PaymentMethod.RAZORPAY: PaymentStatus.UNPAID,
}

def validate_order_request(data: OrderCreate) -> tuple[list, dict, PaymentMethod]:
    """Check the request shape. Touches no storage.

    Returns the cart entries, the cleaned customer block and the payment method.
    """
    if not data.items:
        raise ValidationError("Order must contain at least one item")

    for item in data.items:
        if item.qty <= 0:
            raise ValidationError(f"Quantity for product {item.product_id} must be a positive integer")

    customer = data.customer.model_dump() if data.customer else {}
    cleaned = {field: (customer.get(field) or "").strip() for field in CUSTOMER_FIELDS}
    if not all(cleaned.values()):
        raise ValidationError("All customer details are required")

    try:
        method = PaymentMethod(data.payment_method)
    except ValueError:
        raise ValidationError("Invalid payment method") from None

    return list(data.items), cleaned, method

class OrderService:
    def __init__(self, uow: UnitOfWork, delivery_charge: Optional[Decimal] = None):
        self.uow = uow
        self.delivery_charge = DEFAULT_DELIVERY_CHARGE if delivery_charge is None else Decimal(delivery_charge)

    def place_order(self, data: OrderCreate) -> Order:
        cart, customer, method = validate_order_request(data)

        with self.uow as uow:
            try:
                products = uow.products.lock_many(item.product_id for item in cart)

                subtotal = Decimal("0")
                lines = []
                for item in cart:
                    product = products.get(item.product_id)
                    if product is None:
                        raise NotFoundError(f"Product {item.product_id} not found")
                    if not product.is_active:
                        raise ProductUnavailableError(product.id, product.name)
                    if item.qty > product.stock_qty:
                        raise InsufficientStockError(product.id, product.name, product.stock_qty)

                    price = Decimal(product.price)
                    lines.append(OrderItem(product_id=product.id, name=product.name, price=price, qty=item.qty))
                    subtotal += price * item.qty
                    product.stock_qty -= item.qty

                order = Order(
                    items=lines,
                    customer_name=customer["name"],
                    customer_phone=customer["phone"],
                    customer_address=customer["address"],
                    customer_city=customer["city"],
                    customer_pincode=customer["pincode"],
                    delivery_charge=self.delivery_charge,
                    total_amount=(subtotal + self.delivery_charge).quantize(CENTS),
                    payment_method=method.value,
                    payment_status=INITIAL_PAYMENT_STATUS[method].value,
                    order_status=OrderStatus.PENDING.value,
                )
                uow.orders.add(order)
                uow.commit()
            except (NotFoundError, BusinessRuleError) as exc:
                logger.warning(
                    f"Order rejected: {exc.message}",
                    extra={'extra_fields': {'error': type(exc).__name__, 'items': len(cart)}}
                )
                raise
            except SQLAlchemyError as exc:
                logger.error("Order placement failed in storage", exc_info=True)
                raise PersistenceError("Error creating order", cause=exc) from exc

        logger.info(
            f"Order {order.id} placed",
            extra={
                'extra_fields': {
                    'order_id': order.id,
                    'items': len(lines),
                    'total_amount': str(order.total_amount),
                    'payment_method': order.payment_method,
                }
            }
        )
        return order

    def get(self, order_id: str) -> Order:
        with self.uow as uow:
            order = uow.orders.get(order_id)
            if not order:
                raise NotFoundError("Order not found")
            return order

    def list(self, order_status: Optional[str] = None, payment_status: Optional[str] = None) -> list[Order]:
        with self.uow as uow:
            return uow.orders.list(order_status=order_status, payment_status=payment_status)

    def update_payment_status(self, order_id: str, payment_status: PaymentStatus) -> Order:
        # No transition guard: any status may move to any other.
        with self.uow as uow:
            order = uow.orders.get(order_id)
            if not order:
                raise NotFoundError("Order not found")
            order.payment_status = PaymentStatus(payment_status).value
            uow.commit()
        logger.info(f"Order {order_id} payment status set to {order.payment_status}")
        return order

    def update(self, order_id: str, data: OrderUpdate) -> Order:
        with self.uow as uow:
            order = uow.orders.get(order_id)
            if not order:
                raise NotFoundError("Order not found")
            if data.order_status is not None:
                order.order_status = data.order_status.value
            if data.payment_status is not None:
                order.payment_status = data.payment_status.value
            uow.commit()
        logger.info(f"Order {order_id} updated by admin")
        return order
