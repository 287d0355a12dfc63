from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query
from storefront.core_settings import Settings, get_settings
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.application.order_service import OrderService
from storefront.application.product_service import ProductService
from storefront.application.auth_service import AuthService
from storefront.application.customer_service import CustomerService
from storefront.application.schemas import (
    OrderCreate, OrderRead, OrderList, OrderUpdate, PaymentStatusUpdate,
    ProductCreate, ProductUpdate, ProductRead, ProductList,
    AdminLogin, TokenResponse,
    UserRegister, UserLogin, UserUpdate, UserRead, UserSession,
)
from storefront.domain.models import OrderStatus, PaymentStatus
from .deps import get_uow, require_admin, require_customer

products_router = APIRouter(prefix="/api/products", tags=["products"])
orders_router = APIRouter(prefix="/api/orders", tags=["orders"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])
users_router = APIRouter(prefix="/api/users", tags=["users"])

# --- public catalog ---

@products_router.get("", response_model=ProductList)
def list_products(
    search: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None, max_length=100),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    sort: Optional[str] = Query(None, description="newest | price-low | price-high"),
    uow: UnitOfWork = Depends(get_uow),
):
    """Active products, newest first unless another sort is requested"""
    products = ProductService(uow).catalog(search, category, min_price, max_price, sort)
    return {"count": len(products), "data": products}

@products_router.get("/categories", response_model=list[str])
def list_categories(uow: UnitOfWork = Depends(get_uow)):
    return ProductService(uow).categories()

@products_router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: str, uow: UnitOfWork = Depends(get_uow)):
    return ProductService(uow).get(product_id)

# --- checkout ---

@orders_router.post("", response_model=OrderRead, status_code=201)
def create_order(
    payload: OrderCreate,
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
):
    return OrderService(uow, settings.DELIVERY_CHARGE).place_order(payload)

@orders_router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: str, uow: UnitOfWork = Depends(get_uow)):
    return OrderService(uow).get(order_id)

@orders_router.patch("/{order_id}/payment-status", response_model=OrderRead)
def update_payment_status(order_id: str, payload: PaymentStatusUpdate, uow: UnitOfWork = Depends(get_uow)):
    """Customer "I paid" action; also usable by the back office"""
    return OrderService(uow).update_payment_status(order_id, payload.payment_status)

# --- back office ---

@admin_router.post("/login", response_model=TokenResponse)
def admin_login(
    payload: AdminLogin,
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
):
    return AuthService(uow, settings).login(payload)

@admin_router.get("/products", response_model=ProductList, dependencies=[Depends(require_admin)])
def admin_list_products(uow: UnitOfWork = Depends(get_uow)):
    products = ProductService(uow).list_all()
    return {"count": len(products), "data": products}

@admin_router.post("/products", response_model=ProductRead, status_code=201, dependencies=[Depends(require_admin)])
def admin_create_product(payload: ProductCreate, uow: UnitOfWork = Depends(get_uow)):
    return ProductService(uow).create(payload)

@admin_router.put("/products/{product_id}", response_model=ProductRead, dependencies=[Depends(require_admin)])
def admin_update_product(product_id: str, payload: ProductUpdate, uow: UnitOfWork = Depends(get_uow)):
    return ProductService(uow).update(product_id, payload)

@admin_router.delete("/products/{product_id}", dependencies=[Depends(require_admin)])
def admin_delete_product(product_id: str, uow: UnitOfWork = Depends(get_uow)):
    ProductService(uow).delete(product_id)
    return {"message": "Product deleted successfully"}

@admin_router.get("/orders", response_model=OrderList, dependencies=[Depends(require_admin)])
def admin_list_orders(
    status: Optional[OrderStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    uow: UnitOfWork = Depends(get_uow),
):
    orders = OrderService(uow).list(
        order_status=status.value if status else None,
        payment_status=payment_status.value if payment_status else None,
    )
    return {"count": len(orders), "data": orders}

@admin_router.patch("/orders/{order_id}", response_model=OrderRead, dependencies=[Depends(require_admin)])
def admin_update_order(order_id: str, payload: OrderUpdate, uow: UnitOfWork = Depends(get_uow)):
    return OrderService(uow).update(order_id, payload)

# --- customer accounts ---

@users_router.post("/register", response_model=UserSession, status_code=201)
def register_user(
    payload: UserRegister,
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
):
    return CustomerService(uow, settings).register(payload)

@users_router.post("/login", response_model=UserSession)
def login_user(
    payload: UserLogin,
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
):
    return CustomerService(uow, settings).login(payload)

@users_router.get("/profile", response_model=UserRead)
def get_profile(
    user_id: str = Depends(require_customer),
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
):
    return CustomerService(uow, settings).profile(user_id)

@users_router.put("/profile", response_model=UserRead)
def update_profile(
    payload: UserUpdate,
    user_id: str = Depends(require_customer),
    uow: UnitOfWork = Depends(get_uow),
    settings: Settings = Depends(get_settings),
):
    return CustomerService(uow, settings).update_profile(user_id, payload)
