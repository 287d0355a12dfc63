"""Populate an empty database with the bootstrap admin and a demo catalog.

Usage: ``storefront-seed`` (or ``python -m storefront.seed``). Products are
only inserted when the catalog is empty, so running it twice is harmless.
"""

from decimal import Decimal
from sqlalchemy import select, func
from shared.core import setup_logging, get_logger
from storefront.core_settings import get_settings
from storefront.domain.models import Product
from storefront.infrastructure.db import get_engine, get_session_factory, init_models
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.application.auth_service import AuthService

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    ("Noise Cancelling Headphones", "Over-ear wireless headphones with a 30 hour battery.", "2999", "Electronics", 50),
    ("Fitness Tracker Watch", "Heart rate, GPS and sleep tracking with a week of battery life.", "4499", "Electronics", 30),
    ("Organic Cotton T-Shirt", "Crew neck tee in soft organic cotton.", "599", "Clothing", 100),
    ("RFID Leather Wallet", "Slim genuine leather wallet with six card slots.", "899", "Accessories", 75),
    ("Insulated Steel Bottle", "Keeps drinks cold for 24 hours or hot for 12.", "799", "Home & Kitchen", 60),
    ("Cushioned Yoga Mat", "Non-slip 6mm mat for yoga and floor workouts.", "1299", "Sports", 40),
    ("20000mAh Power Bank", "Fast-charging battery pack with two USB-C ports.", "1499", "Electronics", 80),
    ("Road Running Shoes", "Lightweight breathable trainers for daily runs.", "3499", "Footwear", 45),
]

def seed(session_factory=None) -> int:
    """Create the admin account and demo products; return how many products were added."""
    settings = get_settings()
    session_factory = session_factory or get_session_factory()

    AuthService(UnitOfWork(session_factory), settings).ensure_admin(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)

    with UnitOfWork(session_factory) as uow:
        existing = uow.session.scalar(select(func.count()).select_from(Product))
        if existing:
            logger.info(f"Catalog already has {existing} products, skipping")
            return 0
        for name, description, price, category, stock in DEMO_PRODUCTS:
            uow.products.add(Product(
                name=name,
                description=description,
                price=Decimal(price),
                category=category,
                images=[],
                stock_qty=stock,
                is_active=True,
            ))
        uow.commit()

    logger.info(f"Seeded {len(DEMO_PRODUCTS)} products")
    return len(DEMO_PRODUCTS)

def main():
    settings = get_settings()
    setup_logging(service_name="storefront-seed", level=settings.LOG_LEVEL)
    init_models(get_engine())
    seed()

if __name__ == "__main__":
    main()
