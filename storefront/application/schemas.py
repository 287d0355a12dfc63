from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Optional
from storefront.domain.models import PaymentStatus, OrderStatus

class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

# --- checkout ---

class CartItemIn(CamelModel):
    product_id: str
    # No coercion: JSON true or "2" is rejected rather than read as an integer
    qty: int = Field(strict=True)

class CustomerIn(CamelModel):
    # Presence is checked by the order service so that a missing field yields
    # the same "All customer details are required" message as a blank one.
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None

class OrderCreate(CamelModel):
    items: list[CartItemIn] = []
    customer: Optional[CustomerIn] = None
    payment_method: Optional[str] = None

class PaymentStatusUpdate(CamelModel):
    payment_status: PaymentStatus

class OrderUpdate(CamelModel):
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None

class OrderItemRead(CamelModel):
    product_id: str
    name: str
    price: float
    qty: int

class CustomerRead(CamelModel):
    name: str
    phone: str
    address: str
    city: str
    pincode: str

class OrderRead(CamelModel):
    id: str
    items: list[OrderItemRead]
    customer: CustomerRead
    delivery_charge: float
    total_amount: float
    payment_method: str
    payment_status: str
    order_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class OrderList(CamelModel):
    count: int
    data: list[OrderRead]

# --- catalog ---

class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    images: list[str] = []
    stock_qty: int = Field(default=0, ge=0)
    is_active: bool = True

class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    images: Optional[list[str]] = None
    stock_qty: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

class ProductRead(CamelModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    images: list[str] = []
    stock_qty: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ProductList(CamelModel):
    count: int
    data: list[ProductRead]

# --- admin auth ---

class AdminLogin(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None

class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"

# --- customer accounts ---

class UserRegister(CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)

class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

class UserUpdate(CamelModel):
    # Blank values leave the stored field unchanged
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None

class UserRead(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

class UserSession(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
