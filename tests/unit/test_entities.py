"""Unit tests for the normalization boundary.

The API spells the same field several ways; each test feeds one spelling
and checks the canonical attribute.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError
from services.backoffice_service.schemas import (
    Customer,
    Order,
    OrderStatus,
    Payment,
    PaymentMethod,
    Product,
    Resource,
    normalize,
    normalize_many,
)
from tests.factories import (
    CustomerFactory,
    OrderFactory,
    PaymentFactory,
    ProductFactory,
)


@pytest.mark.unit
def test_customer_camel_case_fields():
    customer = normalize(Resource.CUSTOMER, CustomerFactory.create(phoneNumber="+15551234567"))

    assert isinstance(customer, Customer)
    assert customer.first_name == "Ada"
    assert customer.phone_number == "+15551234567"
    assert customer.full_name == "Ada Obi"


@pytest.mark.unit
def test_snake_case_wins_over_variant():
    raw = {"id": 1, "phone_number": "111", "phoneNumber": "222"}

    assert normalize(Resource.BUSINESS, raw).phone_number == "111"


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        {"id": 1, "customer_id": 9},
        {"id": 1, "costumer_id": 9},
        {"id": 1, "customerId": 9},
        {"id": 1, "customer": {"id": 9}},
        {"id": 1, "costumer": {"id": 9}},
    ],
)
def test_order_customer_id_variants(raw):
    order = normalize(Resource.ORDER, raw)

    assert isinstance(order, Order)
    assert order.customer_id == 9


@pytest.mark.unit
def test_order_embeds_customer_and_items():
    order = normalize(Resource.ORDER, OrderFactory.create())

    assert order.customer.first_name == "Ada"
    assert order.order_items[0].product_id == 1
    assert order.order_items[0].product_name == "Wireless Mouse"
    assert order.order_items[0].quantity == 2
    assert order.order_status is OrderStatus.PENDING
    assert order.total_amount == Decimal("51.00")


@pytest.mark.unit
def test_product_references_from_nested_objects():
    product = normalize(
        Resource.PRODUCT,
        ProductFactory.create(
            category={"id": 3, "name": "Books"}, business={"id": 4, "name": "Acme"}
        ),
    )

    assert isinstance(product, Product)
    assert (product.category_id, product.category_name) == (3, "Books")
    assert (product.business_id, product.business_name) == (4, "Acme")
    assert product.price == Decimal("25.5")


@pytest.mark.unit
def test_null_values_fall_back_to_defaults():
    product = normalize(Resource.PRODUCT, {"id": 1, "name": None, "quantity": None})

    assert product.name == ""
    assert product.quantity == 0
    assert product.category_id is None


@pytest.mark.unit
def test_payment_fields():
    payment = normalize(Resource.PAYMENT, PaymentFactory.create(customer_id=5))

    assert isinstance(payment, Payment)
    assert payment.customer_id == 5
    assert payment.customer is None
    assert payment.payment_method is PaymentMethod.CREDIT_CARD
    assert payment.payment_date.year == 2024


@pytest.mark.unit
def test_entities_are_frozen():
    customer = normalize(Resource.CUSTOMER, CustomerFactory.create())

    with pytest.raises(ValidationError):
        customer.first_name = "Changed"


@pytest.mark.unit
def test_unknown_enum_value_is_rejected():
    with pytest.raises(ValidationError):
        normalize(Resource.ORDER, {"id": 1, "order_status": "LOST"})


@pytest.mark.unit
def test_normalize_many():
    assert normalize_many(Resource.CATEGORY, None) == []
    assert [c.name for c in normalize_many(Resource.CATEGORY, [{"id": 1, "name": "A"}])] == ["A"]
    with pytest.raises(TypeError):
        normalize_many(Resource.CATEGORY, {"id": 1})
