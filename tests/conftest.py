from decimal import Decimal
import pytest
from fastapi.testclient import TestClient
from storefront.main import app
from storefront.core_settings import Settings, get_settings
from storefront.domain.models import Product
from storefront.infrastructure.db import build_engine, build_session_factory, get_session_factory, init_models
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.application.auth_service import AuthService
from storefront.application.product_service import clear_category_cache
from storefront.application.schemas import OrderCreate

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"

@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    init_models(engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)

@pytest.fixture
def uow(session_factory):
    return UnitOfWork(session_factory)

@pytest.fixture
def settings():
    return Settings(
        DELIVERY_CHARGE=Decimal("50"),
        JWT_SECRET="test-secret",
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
    )

@pytest.fixture(autouse=True)
def _fresh_category_cache():
    clear_category_cache()
    yield
    clear_category_cache()

@pytest.fixture
def make_product(session_factory):
    def _make(name="Widget", price="100.00", stock=10, active=True, category="General", description=None):
        with UnitOfWork(session_factory) as uow:
            product = uow.products.add(Product(
                name=name,
                description=description or f"{name} description",
                price=Decimal(price),
                category=category,
                images=[],
                stock_qty=stock,
                is_active=active,
            ))
            uow.commit()
        return product
    return _make

@pytest.fixture
def stock_of(session_factory):
    def _stock(product_id):
        with UnitOfWork(session_factory) as uow:
            return uow.products.get(product_id).stock_qty
    return _stock

@pytest.fixture
def order_payload():
    """Build a checkout body; each line is a (product_id, qty) pair."""
    def _payload(*lines, payment_method="COD", **customer):
        body = {
            "items": [{"productId": product_id, "qty": qty} for product_id, qty in lines],
            "customer": {
                "name": "Asha Rao",
                "phone": "9876543210",
                "address": "12 MG Road",
                "city": "Pune",
                "pincode": "411001",
                **customer,
            },
            "paymentMethod": payment_method,
        }
        return body
    return _payload

@pytest.fixture
def order_request(order_payload):
    def _request(*lines, **kwargs):
        return OrderCreate.model_validate(order_payload(*lines, **kwargs))
    return _request

@pytest.fixture
def client(session_factory, settings):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def admin_headers(client, session_factory, settings):
    AuthService(UnitOfWork(session_factory), settings).ensure_admin(ADMIN_USERNAME, ADMIN_PASSWORD)
    resp = client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['accessToken']}"}
