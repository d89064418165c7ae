"""Back-office schemas package."""

from services.backoffice_service.schemas.entities import (
    ENTITY_MODELS,
    Business,
    CanonicalModel,
    Category,
    Customer,
    CustomerSummary,
    Order,
    OrderItem,
    Payment,
    Product,
    normalize,
    normalize_many,
)
from services.backoffice_service.schemas.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Resource,
)
from services.backoffice_service.schemas.resources import (
    SCHEMAS,
    Draft,
    FieldKind,
    FieldSpec,
    PayloadError,
    ResourceSchema,
    build_payload,
    default_draft,
    draft_from_entity,
    get_schema,
    new_item,
    parse_int,
    reference_targets,
)

__all__ = [
    "ENTITY_MODELS",
    "SCHEMAS",
    "Business",
    "CanonicalModel",
    "Category",
    "Customer",
    "CustomerSummary",
    "Draft",
    "FieldKind",
    "FieldSpec",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PayloadError",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "Resource",
    "ResourceSchema",
    "build_payload",
    "default_draft",
    "draft_from_entity",
    "get_schema",
    "new_item",
    "normalize",
    "normalize_many",
    "parse_int",
    "reference_targets",
]
