"""Integration tests for the per-resource API clients against the fake backend."""

import pytest
from libs.common.service_client import ApplicationError, TransportError
from services.backoffice_service.schemas import (
    Order,
    OrderStatus,
    Product,
    Resource,
    draft_from_entity,
)
from services.backoffice_service.validation import validate
from tests.factories import CategoryFactory, OrderFactory, ProductFactory

VALID_DRAFTS = {
    Resource.BUSINESS: {
        "name": "Nile Traders",
        "email": "hello@nile.com",
        "username": "nile",
        "website": "https://nile.com",
        "phone_number": "+2348012345678",
    },
    Resource.CATEGORY: {"name": "Books", "description": "Paper and ebooks"},
    Resource.PRODUCT: {
        "name": "Widget",
        "description": "A widget",
        "price": "9.99",
        "quantity": "3",
        "category_id": "1",
        "business_id": "2",
    },
    Resource.CUSTOMER: {
        "first_name": "Ada",
        "last_name": "Obi",
        "username": "ada",
        "email": "ada@example.com",
        "phone_number": "555 123 4567",
    },
    Resource.ORDER: {
        "customer_id": "3",
        "order_items": [{"product_id": "1", "quantity": "2"}],
        "order_status": "PENDING",
    },
    Resource.PAYMENT: {
        "payment_date": "2024-01-01",
        "amount": "10.00",
        "payment_method": "PAYPAL",
        "payment_status": "PENDING",
        "transaction_id": "TXN-1",
        "customer_id": "3",
    },
}


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("resource", list(Resource))
async def test_create_then_fetch_round_trips_to_valid_draft(client, resource):
    """A created record, fetched back, re-validates as error-free."""
    repository = client.for_resource(resource)

    created = await repository.create(VALID_DRAFTS[resource])
    fetched = await repository.get_by_id(created.id)

    assert fetched.id == created.id
    assert validate(resource, draft_from_entity(resource, fetched)) == {}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_all_normalizes_records(client, backend):
    backend.seed("product", ProductFactory.create(id=1, category={"id": 4, "name": "Books"}))

    products = await client.products.list_all()

    assert len(products) == 1
    assert isinstance(products[0], Product)
    assert products[0].category_id == 4
    assert backend.calls() == [("GET", "/api/product")]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_resource_uses_costumer_path(client, backend):
    await client.customers.list_all()

    assert backend.calls() == [("GET", "/api/costumer")]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_sends_patch_without_business_id(client, backend):
    backend.seed("product", ProductFactory.create(id=8))

    await client.products.update(8, VALID_DRAFTS[Resource.PRODUCT])

    assert backend.calls("PATCH") == [("PATCH", "/api/product/8")]
    body = backend.last_body("PATCH")
    assert "business_id" not in body
    assert body["price"] == "9.99"
    assert body["category_id"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_sends_order_in_api_shape(client, backend):
    await client.orders.create(VALID_DRAFTS[Resource.ORDER])

    assert backend.last_body("POST") == {
        "costumer_id": 3,
        "order_items": [{"product_id": 1, "quantity": 2}],
        "order_status": "PENDING",
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_missing_record_raises_application_error(client):
    with pytest.raises(ApplicationError) as exc_info:
        await client.categories.get_by_id(404)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_malformed_record_raises_application_error(client, backend):
    backend.seed("category", CategoryFactory.create(id=1, createdAt="not a date"))

    with pytest.raises(ApplicationError):
        await client.categories.list_all()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unreachable_server_raises_transport_error(client, backend):
    backend.disconnect("GET", "/api/category")

    with pytest.raises(TransportError):
        await client.categories.list_all()


# ---------------------------------------------------------------------------
# Deletes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_delete_targets_one_payment(client, backend):
    backend.seed("payment", {"id": 12, "amount": "5.00"}, {"id": 13, "amount": "6.00"})

    await client.payments.delete(12)

    assert backend.calls("DELETE") == [("DELETE", "/api/payment/12")]
    assert list(backend.records["payment"]) == [13]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_delete_requires_id(client, backend):
    with pytest.raises(ValueError):
        await client.payments.delete(None)

    assert backend.requests == []


# ---------------------------------------------------------------------------
# Order queries
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_by_status(client, backend):
    backend.seed(
        "order",
        OrderFactory.create(id=1, order_status="SHIPPED"),
        OrderFactory.create(id=2, order_status="PENDING"),
    )

    orders = await client.orders.list_by_status(OrderStatus.SHIPPED)

    assert [o.id for o in orders] == [1]
    assert isinstance(orders[0], Order)
    assert backend.calls() == [("GET", "/api/order/filter/SHIPPED")]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_by_customer_and_business(client, backend):
    backend.seed(
        "order",
        OrderFactory.create(id=1, customer={"id": 7}),
        OrderFactory.create(id=2, customer={"id": 8}, business_id=3),
    )

    by_customer = await client.orders.list_by_customer(7)
    by_business = await client.orders.list_by_business(3, page=1)

    assert [o.id for o in by_customer] == [1]
    assert [o.id for o in by_business] == [2]
    assert backend.calls() == [
        ("GET", "/api/order/costumer/7"),
        ("GET", "/api/order/business/3"),
    ]
    assert backend.requests[-1].url.params["page"] == "1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_query_variants_share_failure_contract(client, backend):
    backend.fail("GET", "/api/order/filter/PENDING", 503, {"message": "Service unavailable"})

    with pytest.raises(ApplicationError) as exc_info:
        await client.orders.list_by_status("PENDING")

    assert exc_info.value.message == "Service unavailable"
