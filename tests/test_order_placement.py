import threading
from decimal import Decimal
import pytest
from sqlalchemy.exc import OperationalError
from storefront.application.order_service import OrderService
from storefront.application.product_service import ProductService
from storefront.application.schemas import ProductUpdate
from storefront.domain.errors import (
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    ProductUnavailableError,
    InsufficientStockError,
    PersistenceError,
)
from storefront.domain.models import PaymentStatus
from storefront.infrastructure.repository import OrderRepository
from storefront.infrastructure.unit_of_work import UnitOfWork

def test_place_order_decrements_stock_and_adds_delivery_charge(uow, make_product, order_request, stock_of):
    widget = make_product(name="Widget", price="100", stock=10)

    order = OrderService(uow).place_order(order_request((widget.id, 2)))

    assert order.id
    assert order.total_amount == Decimal("250.00")
    assert order.delivery_charge == Decimal("50")
    assert order.payment_status == "Unpaid"
    assert order.order_status == "Pending"
    assert [(i.product_id, i.name, i.price, i.qty) for i in order.items] == [
        (widget.id, "Widget", Decimal("100"), 2)
    ]
    assert stock_of(widget.id) == 8

    stored = OrderService(uow).get(order.id)
    assert stored.total_amount == Decimal("250.00")
    assert stored.customer["city"] == "Pune"

def test_total_sums_every_line_with_configured_charge(uow, make_product, order_request):
    pen = make_product(name="Pen", price="19.99", stock=10)
    pad = make_product(name="Pad", price="5.50", stock=10)

    order = OrderService(uow, Decimal("75")).place_order(order_request((pen.id, 3), (pad.id, 2)))

    assert order.total_amount == Decimal("145.97")
    assert len(order.items) == 2

def test_later_item_short_on_stock_rolls_back_earlier_items(uow, make_product, order_request, stock_of):
    widget = make_product(name="Widget", price="100", stock=10)
    gadget = make_product(name="Gadget", price="40", stock=0)

    with pytest.raises(InsufficientStockError) as excinfo:
        OrderService(uow).place_order(order_request((widget.id, 1), (gadget.id, 1)))

    assert excinfo.value.available == 0
    assert excinfo.value.product_name == "Gadget"
    assert excinfo.value.message == "Insufficient stock for Gadget. Available: 0"
    assert stock_of(widget.id) == 10
    assert OrderService(uow).list() == []

def test_unknown_product_aborts_the_whole_order(uow, make_product, order_request, stock_of):
    widget = make_product(stock=5)

    with pytest.raises(NotFoundError) as excinfo:
        OrderService(uow).place_order(order_request((widget.id, 1), ("missing-id", 1)))

    assert excinfo.value.message == "Product missing-id not found"
    assert stock_of(widget.id) == 5
    assert OrderService(uow).list() == []

def test_inactive_product_is_rejected(uow, make_product, order_request, stock_of):
    retired = make_product(name="Retired Lamp", stock=5, active=False)

    with pytest.raises(ProductUnavailableError) as excinfo:
        OrderService(uow).place_order(order_request((retired.id, 1)))

    assert isinstance(excinfo.value, BusinessRuleError)
    assert excinfo.value.message == "Product Retired Lamp is not available"
    assert stock_of(retired.id) == 5

def test_repeated_lines_draw_from_the_same_stock(uow, make_product, order_request, stock_of):
    widget = make_product(name="Widget", stock=5)

    with pytest.raises(InsufficientStockError) as excinfo:
        OrderService(uow).place_order(order_request((widget.id, 3), (widget.id, 3)))

    assert excinfo.value.available == 2
    assert stock_of(widget.id) == 5

def test_order_lines_keep_their_snapshot(uow, make_product, order_request):
    widget = make_product(name="Widget", price="100", stock=10)
    order = OrderService(uow).place_order(order_request((widget.id, 1)))

    ProductService(uow).update(widget.id, ProductUpdate(name="Widget Pro", price=Decimal("180")))
    ProductService(uow).delete(widget.id)

    stored = OrderService(uow).get(order.id)
    assert stored.items[0].name == "Widget"
    assert stored.items[0].price == Decimal("100")
    assert stored.total_amount == Decimal("150.00")

class _ExplodingSessions:
    def __call__(self):
        raise AssertionError("storage must not be touched")

def test_empty_cart_is_rejected_before_any_lookup(order_request):
    service = OrderService(UnitOfWork(_ExplodingSessions()))

    with pytest.raises(ValidationError) as excinfo:
        service.place_order(order_request())

    assert excinfo.value.message == "Order must contain at least one item"

def test_unknown_payment_method_is_rejected_before_any_lookup(order_request):
    service = OrderService(UnitOfWork(_ExplodingSessions()))

    with pytest.raises(ValidationError) as excinfo:
        service.place_order(order_request(("p1", 1), payment_method="BITCOIN"))

    assert excinfo.value.message == "Invalid payment method"

@pytest.mark.parametrize("field", ["name", "phone", "address", "city", "pincode"])
def test_every_customer_field_is_required(order_request, field):
    service = OrderService(UnitOfWork(_ExplodingSessions()))

    with pytest.raises(ValidationError) as excinfo:
        service.place_order(order_request(("p1", 1), **{field: "   "}))

    assert excinfo.value.message == "All customer details are required"

@pytest.mark.parametrize("qty", [0, -2])
def test_quantity_must_be_positive(order_request, qty):
    service = OrderService(UnitOfWork(_ExplodingSessions()))

    with pytest.raises(ValidationError) as excinfo:
        service.place_order(order_request(("p1", qty)))

    assert excinfo.value.message == "Quantity for product p1 must be a positive integer"

@pytest.mark.parametrize("method", ["COD", "QR", "RAZORPAY"])
def test_new_orders_start_unpaid_for_every_method(uow, make_product, order_request, method):
    widget = make_product(stock=3)

    order = OrderService(uow).place_order(order_request((widget.id, 1), payment_method=method))

    assert order.payment_method == method
    assert order.payment_status == "Unpaid"

def test_rejected_cart_can_be_resubmitted_with_the_same_outcome(uow, make_product, order_request, stock_of):
    widget = make_product(name="Widget", stock=1)

    for _ in range(2):
        with pytest.raises(InsufficientStockError) as excinfo:
            OrderService(uow).place_order(order_request((widget.id, 4)))
        assert excinfo.value.available == 1

    assert stock_of(widget.id) == 1

def test_storage_failure_rolls_back_stock(uow, make_product, order_request, stock_of, monkeypatch):
    widget = make_product(stock=10)

    def failing_add(self, order):
        self.session.add(order)
        self.session.flush()
        raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))

    monkeypatch.setattr(OrderRepository, "add", failing_add)

    with pytest.raises(PersistenceError) as excinfo:
        OrderService(uow).place_order(order_request((widget.id, 2)))

    assert excinfo.value.message == "Error creating order"
    assert isinstance(excinfo.value.cause, OperationalError)
    monkeypatch.undo()
    assert stock_of(widget.id) == 10
    assert OrderService(uow).list() == []

def test_concurrent_checkouts_for_the_last_unit(session_factory, make_product, order_request, stock_of):
    widget = make_product(name="Widget", stock=1)
    barrier = threading.Barrier(2)
    placed, rejected, unexpected = [], [], []

    def checkout():
        barrier.wait()
        try:
            placed.append(OrderService(UnitOfWork(session_factory)).place_order(order_request((widget.id, 1))))
        except InsufficientStockError as exc:
            rejected.append(exc)
        except Exception as exc:
            unexpected.append(exc)

    threads = [threading.Thread(target=checkout) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert unexpected == []
    assert len(placed) == 1
    assert len(rejected) == 1
    assert rejected[0].available == 0
    assert stock_of(widget.id) == 0

def test_payment_status_moves_freely(uow, make_product, order_request):
    order = OrderService(uow).place_order(order_request((make_product(stock=2).id, 1)))
    service = OrderService(uow)

    for status in (PaymentStatus.PENDING_VERIFICATION, PaymentStatus.PAID, PaymentStatus.UNPAID):
        assert service.update_payment_status(order.id, status).payment_status == status.value

    assert service.get(order.id).payment_status == "Unpaid"

def test_payment_status_for_unknown_order(uow):
    with pytest.raises(NotFoundError) as excinfo:
        OrderService(uow).update_payment_status("nope", PaymentStatus.PAID)

    assert excinfo.value.message == "Order not found"
