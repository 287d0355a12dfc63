from decimal import Decimal
from typing import Iterable, Optional
from sqlalchemy import select, or_
from sqlalchemy.orm import Session
from storefront.domain.models import Product, Order, AdminUser, User

PRODUCT_SORTS = {
    "newest": (Product.created_at.desc(),),
    "price-low": (Product.price.asc(), Product.created_at.desc()),
    "price-high": (Product.price.desc(), Product.created_at.desc()),
}

class ProductRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, product_id: str) -> Optional[Product]:
        return self.session.get(Product, product_id)

    def lock_many(self, product_ids: Iterable[str]) -> dict[str, Product]:
        """Read and row-lock the given products for the rest of the transaction.

        Rows are locked in ascending id order so two checkouts touching the same
        products always queue on them in the same sequence.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        stmt = select(Product).where(Product.id.in_(ids)).order_by(Product.id).with_for_update()
        return {p.id: p for p in self.session.scalars(stmt)}

    def search(
        self,
        *,
        active_only: bool = True,
        search: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort: str = "newest",
    ) -> list[Product]:
        stmt = select(Product)
        if active_only:
            stmt = stmt.where(Product.is_active.is_(True))
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        if category:
            stmt = stmt.where(Product.category == category)
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        stmt = stmt.order_by(*PRODUCT_SORTS.get(sort, PRODUCT_SORTS["newest"]))
        return list(self.session.scalars(stmt))

    def categories(self) -> list[str]:
        stmt = (
            select(Product.category)
            .where(Product.is_active.is_(True))
            .distinct()
            .order_by(Product.category)
        )
        return list(self.session.scalars(stmt))

    def add(self, product: Product) -> Product:
        self.session.add(product)
        return product

    def delete(self, product: Product) -> None:
        self.session.delete(product)

class OrderRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, order_id: str) -> Optional[Order]:
        return self.session.get(Order, order_id)

    def add(self, order: Order) -> Order:
        self.session.add(order)
        return order

    def list(self, order_status: Optional[str] = None, payment_status: Optional[str] = None) -> list[Order]:
        stmt = select(Order)
        if order_status:
            stmt = stmt.where(Order.order_status == order_status)
        if payment_status:
            stmt = stmt.where(Order.payment_status == payment_status)
        stmt = stmt.order_by(Order.created_at.desc())
        return list(self.session.scalars(stmt))

class AdminRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_username(self, username: str) -> Optional[AdminUser]:
        stmt = select(AdminUser).where(AdminUser.username == username.lower())
        return self.session.scalars(stmt).first()

    def add(self, admin: AdminUser) -> AdminUser:
        self.session.add(admin)
        return admin

class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        return self.session.scalars(stmt).first()

    def add(self, user: User) -> User:
        self.session.add(user)
        return user
