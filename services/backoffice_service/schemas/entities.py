"""Canonical entity shapes and the normalization boundary.

The API is inconsistent about field names (``phoneNumber`` vs
``phone_number``, ``customer_id`` vs ``costumer.id``). Every fetched payload
passes through ``normalize`` exactly once; code downstream only ever sees
the canonical field names below.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, model_validator
from services.backoffice_service.schemas.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Resource,
)

# A variant is either a flat key or a path into a nested object.
Variant = Union[str, tuple[str, ...]]

_CUSTOMER_ID_VARIANTS: tuple[Variant, ...] = (
    "costumer_id",
    "customerId",
    "costumerId",
    ("customer", "id"),
    ("costumer", "id"),
)


def _lookup(data: dict, variant: Variant) -> Any:
    if isinstance(variant, str):
        return data.get(variant)
    current: Any = data
    for key in variant:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


class CanonicalModel(BaseModel):
    """Read-side entity. Unknown keys are dropped, nulls fall back to defaults."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    field_variants: ClassVar[dict[str, tuple[Variant, ...]]] = {}
    common_variants: ClassVar[dict[str, tuple[Variant, ...]]] = {
        "created_at": ("createdAt",),
        "updated_at": ("updatedAt",),
    }

    @model_validator(mode="before")
    @classmethod
    def resolve_variants(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        resolved = {key: value for key, value in data.items() if value is not None}
        variants = {**cls.common_variants, **cls.field_variants}
        for field_name, candidates in variants.items():
            if resolved.get(field_name) is not None:
                continue
            for candidate in candidates:
                value = _lookup(data, candidate)
                if value is not None:
                    resolved[field_name] = value
                    break
        return resolved


class Business(CanonicalModel):
    field_variants = {"phone_number": ("phoneNumber",)}

    id: int
    name: str = ""
    email: str = ""
    username: str = ""
    address: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Category(CanonicalModel):
    id: int
    name: str = ""
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Product(CanonicalModel):
    field_variants = {
        "category_id": ("categoryId", ("category", "id")),
        "business_id": ("businessId", ("business", "id")),
        "category_name": (("category", "name"),),
        "business_name": (("business", "name"),),
    }

    id: int
    name: str = ""
    description: str = ""
    image: Optional[str] = None
    price: Decimal = Decimal("0")
    quantity: int = 0
    category_id: Optional[int] = None
    business_id: Optional[int] = None
    category_name: Optional[str] = None
    business_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerSummary(CanonicalModel):
    """Customer as embedded in orders and payments; the id may be absent."""

    field_variants = {
        "first_name": ("firstName",),
        "last_name": ("lastName",),
        "phone_number": ("phoneNumber",),
    }

    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Customer(CustomerSummary):
    id: int
    phone_number: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderItem(CanonicalModel):
    field_variants = {
        "product_id": ("productId", ("product", "id")),
        "product_name": (("product", "name"),),
        "unit_price": ("price", ("product", "price")),
    }

    product_id: Optional[int] = None
    quantity: int = 1
    product_name: Optional[str] = None
    unit_price: Optional[Decimal] = None


class Order(CanonicalModel):
    field_variants = {
        "customer_id": _CUSTOMER_ID_VARIANTS,
        "customer": ("costumer",),
        "order_items": ("orderItems", "items"),
        "order_status": ("orderStatus", "status"),
        "order_number": ("orderNumber",),
        "total_amount": ("totalAmount",),
    }

    id: int
    customer_id: Optional[int] = None
    customer: Optional[CustomerSummary] = None
    order_items: list[OrderItem] = []
    order_status: Optional[OrderStatus] = None
    order_number: Optional[str] = None
    total_amount: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Payment(CanonicalModel):
    field_variants = {
        "customer_id": _CUSTOMER_ID_VARIANTS,
        "customer": ("costumer",),
        "payment_date": ("paymentDate",),
        "payment_method": ("paymentMethod",),
        "payment_status": ("paymentStatus",),
        "transaction_id": ("transactionId",),
    }

    id: int
    payment_date: Optional[datetime] = None
    amount: Decimal = Decimal("0")
    payment_method: Optional[PaymentMethod] = None
    payment_status: Optional[PaymentStatus] = None
    transaction_id: str = ""
    customer_id: Optional[int] = None
    customer: Optional[CustomerSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


ENTITY_MODELS: dict[Resource, type[CanonicalModel]] = {
    Resource.BUSINESS: Business,
    Resource.CATEGORY: Category,
    Resource.PRODUCT: Product,
    Resource.CUSTOMER: Customer,
    Resource.ORDER: Order,
    Resource.PAYMENT: Payment,
}


def normalize(resource: Resource, raw: Any) -> CanonicalModel:
    """Map one API payload onto the canonical model for ``resource``.

    Raises pydantic.ValidationError if the payload cannot be coerced.
    """
    return ENTITY_MODELS[resource].model_validate(raw)


def normalize_many(resource: Resource, raw: Any) -> list[CanonicalModel]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise TypeError(f"Expected a list of {resource.value} records, got {type(raw).__name__}")
    return [normalize(resource, item) for item in raw]
