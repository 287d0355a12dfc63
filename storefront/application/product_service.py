from decimal import Decimal
from typing import Optional
from cachetools import TTLCache
from shared.core import get_logger
from storefront.domain.errors import NotFoundError
from storefront.domain.models import Product
from storefront.infrastructure.unit_of_work import UnitOfWork
from .schemas import ProductCreate, ProductUpdate

logger = get_logger(__name__)

CATEGORIES_KEY = "categories"
_category_cache = TTLCache(maxsize=1, ttl=60)

def configure_category_cache(ttl: int) -> None:
    """Replace the category cache, e.g. after settings are loaded."""
    global _category_cache
    _category_cache = TTLCache(maxsize=1, ttl=ttl)

def clear_category_cache() -> None:
    _category_cache.clear()

class ProductService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def catalog(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort: Optional[str] = None,
    ) -> list[Product]:
        """Customer-facing listing: active products only."""
        with self.uow as uow:
            return uow.products.search(
                active_only=True,
                search=search.strip() if search else None,
                category=category,
                min_price=min_price,
                max_price=max_price,
                sort=sort or "newest",
            )

    def list_all(self) -> list[Product]:
        with self.uow as uow:
            return uow.products.search(active_only=False)

    def get(self, product_id: str) -> Product:
        with self.uow as uow:
            product = uow.products.get(product_id)
            if not product:
                raise NotFoundError("Product not found")
            return product

    def categories(self) -> list[str]:
        cached = _category_cache.get(CATEGORIES_KEY)
        if cached is not None:
            return cached
        with self.uow as uow:
            categories = uow.products.categories()
        _category_cache[CATEGORIES_KEY] = categories
        return categories

    def create(self, data: ProductCreate) -> Product:
        with self.uow as uow:
            product = uow.products.add(Product(**data.model_dump()))
            uow.commit()
        clear_category_cache()
        logger.info(f"Product {product.id} created", extra={'extra_fields': {'product_id': product.id, 'name': product.name}})
        return product

    def update(self, product_id: str, data: ProductUpdate) -> Product:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        with self.uow as uow:
            product = uow.products.get(product_id)
            if not product:
                raise NotFoundError("Product not found")
            for field, value in changes.items():
                setattr(product, field, value)
            uow.commit()
        clear_category_cache()
        logger.info(f"Product {product_id} updated", extra={'extra_fields': {'fields': sorted(changes)}})
        return product

    def delete(self, product_id: str) -> None:
        # Physical delete. Placed orders keep their own name/price snapshot.
        with self.uow as uow:
            product = uow.products.get(product_id)
            if not product:
                raise NotFoundError("Product not found")
            uow.products.delete(product)
            uow.commit()
        clear_category_cache()
        logger.info(f"Product {product_id} deleted")
