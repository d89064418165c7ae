"""Declarative field definitions for the six back-office resources.

The validation engine, the form controller and the repository client all
read their field lists from here, so a field is declared exactly once.

Drafts are what forms hold: plain dicts of text values (``"12.50"``, ``"3"``)
plus, for orders, a list of item dicts. ``build_payload`` turns a draft into
the JSON body the API expects; ``draft_from_entity`` goes the other way for
edit forms.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, Union

from libs.common.currency import to_decimal_string
from libs.common.datetime_utils import to_iso_timestamp, today
from services.backoffice_service.schemas.entities import CanonicalModel
from services.backoffice_service.schemas.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Resource,
)

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_WHITESPACE_RE = re.compile(r"\s+")

Draft = dict[str, Any]


class FieldKind(str, enum.Enum):
    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    DECIMAL = "decimal"
    INTEGER = "integer"
    ENUM = "enum"
    DATE = "date"
    REFERENCE = "reference"
    ITEMS = "items"


class PayloadError(ValueError):
    """A draft value could not be converted to its wire type."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        super().__init__(f"{field_name}: {message}")


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    label: str
    required: bool = True
    # Key used in API payloads when it differs from ``name``
    wire_name: Optional[str] = None
    # INTEGER: smallest accepted value; DECIMAL: value must be strictly greater
    minimum: Optional[int] = None
    min_length: Optional[int] = None
    # Sent on create only, never on update
    immutable: bool = False
    choices: Optional[type[enum.Enum]] = None
    target: Optional[Resource] = None
    # Creation default: a value or a zero-argument callable
    default: Union[Any, Callable[[], Any], None] = None
    item_fields: tuple["FieldSpec", ...] = ()

    @property
    def wire_key(self) -> str:
        return self.wire_name or self.name

    def default_value(self) -> Any:
        value = self.default() if callable(self.default) else self.default
        return _to_text(value)


@dataclass(frozen=True)
class ResourceSchema:
    resource: Resource
    label: str
    fields: tuple[FieldSpec, ...]
    plural: str = ""

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.resource.value} has no field {name!r}")

    def update_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if not spec.immutable)


def _text(name, label, required=True, **kwargs) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.TEXT, label=label, required=required, **kwargs)


SCHEMAS: dict[Resource, ResourceSchema] = {
    Resource.BUSINESS: ResourceSchema(
        resource=Resource.BUSINESS,
        label="business",
        plural="businesses",
        fields=(
            _text("name", "business name"),
            FieldSpec("email", FieldKind.EMAIL, "email"),
            _text("username", "username"),
            _text("address", "address", required=False),
            _text("logo", "logo URL", required=False),
            FieldSpec("website", FieldKind.URL, "website", required=False),
            FieldSpec("phone_number", FieldKind.PHONE, "phone number", required=False),
        ),
    ),
    Resource.CATEGORY: ResourceSchema(
        resource=Resource.CATEGORY,
        label="category",
        plural="categories",
        fields=(
            _text("name", "category name"),
            _text("description", "description", required=False),
        ),
    ),
    Resource.PRODUCT: ResourceSchema(
        resource=Resource.PRODUCT,
        label="product",
        plural="products",
        fields=(
            _text("name", "product name"),
            _text("description", "product description"),
            _text("image", "image URL", required=False),
            FieldSpec("price", FieldKind.DECIMAL, "price", minimum=0),
            FieldSpec("quantity", FieldKind.INTEGER, "quantity", minimum=0),
            FieldSpec(
                "category_id", FieldKind.REFERENCE, "category", target=Resource.CATEGORY
            ),
            FieldSpec(
                "business_id",
                FieldKind.REFERENCE,
                "business",
                target=Resource.BUSINESS,
                immutable=True,
            ),
        ),
    ),
    Resource.CUSTOMER: ResourceSchema(
        resource=Resource.CUSTOMER,
        label="customer",
        plural="customers",
        fields=(
            _text("first_name", "first name"),
            _text("last_name", "last name"),
            _text("username", "username"),
            FieldSpec("email", FieldKind.EMAIL, "email"),
            FieldSpec("phone_number", FieldKind.PHONE, "phone number", required=False),
            _text("address", "address", required=False),
        ),
    ),
    Resource.ORDER: ResourceSchema(
        resource=Resource.ORDER,
        label="order",
        plural="orders",
        fields=(
            FieldSpec(
                "customer_id",
                FieldKind.REFERENCE,
                "customer",
                wire_name="costumer_id",
                target=Resource.CUSTOMER,
            ),
            FieldSpec(
                "order_items",
                FieldKind.ITEMS,
                "product",
                item_fields=(
                    FieldSpec(
                        "product_id",
                        FieldKind.REFERENCE,
                        "product",
                        target=Resource.PRODUCT,
                    ),
                    FieldSpec("quantity", FieldKind.INTEGER, "quantity", minimum=1),
                ),
            ),
            FieldSpec(
                "order_status",
                FieldKind.ENUM,
                "order status",
                choices=OrderStatus,
                default=OrderStatus.PENDING,
            ),
        ),
    ),
    Resource.PAYMENT: ResourceSchema(
        resource=Resource.PAYMENT,
        label="payment",
        plural="payments",
        fields=(
            FieldSpec("payment_date", FieldKind.DATE, "payment date", default=today),
            FieldSpec("amount", FieldKind.DECIMAL, "amount", minimum=0),
            FieldSpec(
                "payment_method", FieldKind.ENUM, "payment method", choices=PaymentMethod
            ),
            FieldSpec(
                "payment_status",
                FieldKind.ENUM,
                "payment status",
                choices=PaymentStatus,
                default=PaymentStatus.PENDING,
            ),
            _text("transaction_id", "transaction ID", min_length=3),
            FieldSpec(
                "customer_id", FieldKind.REFERENCE, "customer", target=Resource.CUSTOMER
            ),
        ),
    ),
}


def get_schema(resource: Resource) -> ResourceSchema:
    return SCHEMAS[Resource(resource)]


def reference_targets(resource: Resource) -> dict[str, Resource]:
    """Reference field name -> resource it selects from, including item fields."""
    targets: dict[str, Resource] = {}
    for spec in get_schema(resource).fields:
        if spec.kind is FieldKind.REFERENCE:
            targets[spec.name] = spec.target
        for item_spec in spec.item_fields:
            if item_spec.kind is FieldKind.REFERENCE:
                targets[item_spec.name] = item_spec.target
    return targets


def parse_int(value: Any) -> Optional[int]:
    """Strict integer parse for form text: ``"3"`` yes, ``"3.5"`` / ``"abc"`` no."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if value is None:
        return None
    text = str(value).strip()
    if not _INTEGER_RE.match(text):
        return None
    return int(text)


def strip_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


def _to_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        return str(value)
    return value


def new_item() -> Draft:
    """Blank order line as added by the "Add Product" action."""
    return {"product_id": "", "quantity": "1"}


def default_draft(resource: Resource, editing: bool = False) -> Draft:
    """Empty draft for a new form; creation defaults apply only when creating."""
    draft: Draft = {}
    for spec in get_schema(resource).fields:
        if spec.kind is FieldKind.ITEMS:
            draft[spec.name] = []
        elif not editing and spec.default is not None:
            draft[spec.name] = spec.default_value()
        else:
            draft[spec.name] = ""
    return draft


def draft_from_entity(resource: Resource, entity: CanonicalModel) -> Draft:
    """Text-valued draft pre-populated from a fetched entity."""
    draft: Draft = {}
    for spec in get_schema(resource).fields:
        value = getattr(entity, spec.name, None)
        if spec.kind is FieldKind.ITEMS:
            draft[spec.name] = [
                {
                    item_spec.name: _to_text(getattr(item, item_spec.name, None))
                    for item_spec in spec.item_fields
                }
                for item in (value or [])
            ]
        else:
            draft[spec.name] = _to_text(value)
    return draft


def _convert(spec: FieldSpec, value: Any) -> Any:
    if spec.kind is FieldKind.ITEMS:
        if not isinstance(value, list) or not value:
            raise PayloadError(spec.name, "at least one item is required")
        return [
            {
                item_spec.wire_key: _convert(item_spec, item.get(item_spec.name))
                for item_spec in spec.item_fields
            }
            for item in value
        ]

    if spec.kind in (FieldKind.TEXT, FieldKind.EMAIL, FieldKind.PHONE, FieldKind.URL):
        text = str(value or "").strip()
        if spec.kind is FieldKind.PHONE:
            text = strip_whitespace(text)
        if not text:
            if spec.required:
                raise PayloadError(spec.name, "value is required")
            return None
        return text

    if spec.kind is FieldKind.DECIMAL:
        try:
            return to_decimal_string(value)
        except ValueError as exc:
            raise PayloadError(spec.name, str(exc)) from exc

    if spec.kind in (FieldKind.INTEGER, FieldKind.REFERENCE):
        parsed = parse_int(value)
        if parsed is None:
            raise PayloadError(spec.name, f"not an integer: {value!r}")
        return parsed

    if spec.kind is FieldKind.ENUM:
        try:
            return spec.choices(value).value
        except ValueError as exc:
            raise PayloadError(spec.name, f"unknown value {value!r}") from exc

    if spec.kind is FieldKind.DATE:
        try:
            return to_iso_timestamp(value)
        except (TypeError, ValueError) as exc:
            raise PayloadError(spec.name, f"not a date: {value!r}") from exc

    raise PayloadError(spec.name, f"unsupported field kind {spec.kind}")


def build_payload(
    resource: Resource, draft: Mapping[str, Any], for_update: bool = False
) -> dict[str, Any]:
    """Normalize a validated draft to the JSON body sent to the API.

    Immutable fields are left out of update payloads.

    Raises:
        PayloadError if a value cannot be converted; validate the draft first.
    """
    schema = get_schema(resource)
    fields = schema.update_fields() if for_update else schema.fields
    return {spec.wire_key: _convert(spec, draft.get(spec.name)) for spec in fields}
