from storefront.application.product_service import ProductService
from storefront.core_settings import get_settings
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.seed import seed, DEMO_PRODUCTS

def test_seed_populates_empty_catalog_once(session_factory):
    assert seed(session_factory) == len(DEMO_PRODUCTS)
    assert seed(session_factory) == 0

    products = ProductService(UnitOfWork(session_factory)).list_all()
    assert len(products) == len(DEMO_PRODUCTS)
    assert all(p.is_active and p.stock_qty > 0 for p in products)

def test_seed_creates_admin(session_factory):
    seed(session_factory)

    with UnitOfWork(session_factory) as uow:
        admin = uow.admins.get_by_username(get_settings().ADMIN_USERNAME)

    assert admin is not None
    assert admin.password_hash != get_settings().ADMIN_PASSWORD
