# storefront/domain/schemas.py
import re
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

_STRONG_PASSWORD = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$")
_PASSWORD_MESSAGE = (
    "Password must contain: at least 8 characters, 1 uppercase, 1 lowercase, 1 number, and 1 special character"
)


def _check_password(value: str) -> str:
    if not _STRONG_PASSWORD.match(value):
        raise ValueError(_PASSWORD_MESSAGE)
    return value


StrongPassword = Annotated[str, AfterValidator(_check_password)]


class CamelModel(BaseModel):
    """JSON bodies use camelCase, python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# =====================================================
# AUTH / PROFILE
# =====================================================
class RegisterIn(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: StrongPassword
    role: Literal["customer", "admin"] = "customer"


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenOut(CamelModel):
    token: str


class ForgotPasswordIn(CamelModel):
    email: EmailStr


class ResetPasswordIn(CamelModel):
    email: EmailStr
    token: str = Field(..., min_length=1)
    new_password: StrongPassword


class ProfileUpdateIn(CamelModel):
    full_name: str | None = Field(None, min_length=3, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=255)
    password: StrongPassword | None = None


# =====================================================
# CART / CHECKOUT
# =====================================================
class CartIn(CamelModel):
    product_id: int = Field(..., gt=0)
    size_id: int = Field(..., gt=0)
    variant_id: int = Field(..., gt=0)
    amount: int


class CheckoutIn(CamelModel):
    """Method ids are checked by the checkout service so a missing one is a plain ValidationError."""

    payment_method_id: int | None = None
    order_method_id: int | None = None
    full_name: str | None = None
    email: str | None = None
    address: str | None = None
    phone: str | None = None


class CheckoutOut(CamelModel):
    transaction_id: int
    no_invoice: str
    date_transaction: datetime
    delivery_fee: Decimal
    admin_fee: Decimal
    tax: Decimal
    total_transaction: Decimal


class StatusUpdateIn(CamelModel):
    status_id: int | str | None = None


# =====================================================
# ADMIN: PRODUCTS / USERS / CATALOG
# =====================================================
class ProductIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    price: Decimal = Field(..., gt=0)
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    rating: Decimal = Field(Decimal("5"), ge=0, le=5)
    is_flash_sale: bool = False
    stock: int = Field(0, ge=0)
    is_active: bool = True
    is_favourite: bool = False
    images: List[str] = Field(default_factory=list)
    size_ids: List[int] = Field(default_factory=list)
    category_ids: List[int] = Field(default_factory=list)
    variant_ids: List[int] = Field(default_factory=list)


class ProductUpdateIn(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    price: Decimal | None = Field(None, gt=0)
    discount_percent: Decimal | None = Field(None, ge=0, le=100)
    rating: Decimal | None = Field(None, ge=0, le=5)
    is_flash_sale: bool | None = None
    stock: int | None = Field(None, ge=0)
    is_active: bool | None = None
    is_favourite: bool | None = None
    images: List[str] | None = None
    size_ids: List[int] | None = None
    category_ids: List[int] | None = None
    variant_ids: List[int] | None = None


class UserCreateIn(CamelModel):
    full_name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: StrongPassword
    phone: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=255)
    role: Literal["customer", "admin"] = "customer"


class UserUpdateIn(CamelModel):
    full_name: str | None = Field(None, min_length=3, max_length=100)
    email: EmailStr | None = None
    password: StrongPassword | None = None
    phone: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=255)
    role: Literal["customer", "admin"] | None = None


class CatalogItemIn(CamelModel):
    """Body for sizes, variants and categories; cost is ignored for categories."""

    name: str = Field(..., min_length=1, max_length=50)
    cost: Decimal = Field(Decimal("0"), ge=0)


class CatalogItemUpdateIn(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    cost: Decimal | None = Field(None, ge=0)
