"""Unit tests for the draft validation rules.

``validate`` is pure, so every test builds a draft dict and inspects the
returned error map. No HTTP involved.
"""

import pytest
from services.backoffice_service.schemas import Resource, get_schema
from services.backoffice_service.validation import is_submittable, validate

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _valid_drafts():
    return {
        Resource.BUSINESS: {
            "name": "Nile Traders",
            "email": "hello@nile.com",
            "username": "nile",
            "address": "",
            "logo": "",
            "website": "https://nile.com",
            "phone_number": "+2348012345678",
        },
        Resource.CATEGORY: {"name": "Books", "description": ""},
        Resource.PRODUCT: {
            "name": "Widget",
            "description": "A widget",
            "image": "",
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
            "phone_number": "",
            "address": "",
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


def _required_fields():
    for resource in Resource:
        for spec in get_schema(resource).fields:
            if spec.required:
                yield resource, spec.name


# ---------------------------------------------------------------------------
# Totality
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("resource", list(Resource))
def test_valid_draft_has_no_errors(resource):
    draft = _valid_drafts()[resource]

    errors = validate(resource, draft)

    assert errors == {}
    assert is_submittable(errors)


@pytest.mark.unit
@pytest.mark.parametrize("resource,field_name", list(_required_fields()))
def test_missing_required_field_reports_exactly_that_field(resource, field_name):
    """Blanking any one required field yields an error on that key and no other."""
    draft = _valid_drafts()[resource]
    draft[field_name] = [] if field_name == "order_items" else "   "

    errors = validate(resource, draft)

    assert list(errors) == [field_name]
    assert not is_submittable(errors)


@pytest.mark.unit
def test_validate_does_not_mutate_draft():
    draft = _valid_drafts()[Resource.PRODUCT]
    draft["price"] = "-1"
    snapshot = dict(draft)

    validate(Resource.PRODUCT, draft)

    assert draft == snapshot


# ---------------------------------------------------------------------------
# Field formats
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "email,ok",
    [("a@b.co", True), ("not-an-email", False), ("a@b", False), ("", False)],
)
def test_email_pattern(email, ok):
    draft = {**_valid_drafts()[Resource.CUSTOMER], "email": email}

    errors = validate(Resource.CUSTOMER, draft)

    assert ("email" not in errors) is ok


@pytest.mark.unit
def test_email_error_message():
    draft = {**_valid_drafts()[Resource.CUSTOMER], "email": "not-an-email"}

    assert validate(Resource.CUSTOMER, draft)["email"] == "Please enter a valid email address"


@pytest.mark.unit
@pytest.mark.parametrize(
    "phone,ok",
    [
        ("+15551234567", True),
        ("555 123 4567", True),
        ("", True),
        ("abc123", False),
        ("0123456", False),
        ("+1234567890123456789", False),
    ],
)
def test_phone_pattern(phone, ok):
    draft = {**_valid_drafts()[Resource.BUSINESS], "phone_number": phone}

    errors = validate(Resource.BUSINESS, draft)

    assert ("phone_number" not in errors) is ok


@pytest.mark.unit
@pytest.mark.parametrize(
    "website,ok",
    [
        ("https://example.com", True),
        ("http://example.com/shop", True),
        ("", True),
        ("example.com", False),
        ("ftp://example.com", False),
    ],
)
def test_website_pattern(website, ok):
    draft = {**_valid_drafts()[Resource.BUSINESS], "website": website}

    errors = validate(Resource.BUSINESS, draft)

    assert ("website" not in errors) is ok


# ---------------------------------------------------------------------------
# Numbers and references
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_product_with_negative_price_fails_only_on_price():
    draft = {
        "name": "Widget",
        "description": "A widget",
        "price": "-5",
        "quantity": "3",
        "category_id": "1",
        "business_id": "2",
    }

    errors = validate(Resource.PRODUCT, draft)

    assert errors == {"price": "Valid price is required"}


@pytest.mark.unit
@pytest.mark.parametrize("price", ["0", "0.00", "0.001", "0.004", "abc", "NaN", ""])
def test_price_must_be_positive_number(price):
    draft = {**_valid_drafts()[Resource.PRODUCT], "price": price}

    assert "price" in validate(Resource.PRODUCT, draft)


@pytest.mark.unit
def test_product_quantity_allows_zero_but_not_negative():
    draft = _valid_drafts()[Resource.PRODUCT]

    assert "quantity" not in validate(Resource.PRODUCT, {**draft, "quantity": "0"})
    assert "quantity" in validate(Resource.PRODUCT, {**draft, "quantity": "-1"})
    assert "quantity" in validate(Resource.PRODUCT, {**draft, "quantity": "3.5"})


@pytest.mark.unit
@pytest.mark.parametrize("value", ["", "abc", "1.5"])
def test_reference_must_be_integer(value):
    draft = {**_valid_drafts()[Resource.PRODUCT], "category_id": value}

    errors = validate(Resource.PRODUCT, draft)

    assert errors == {"category_id": "Valid category is required"}


@pytest.mark.unit
def test_reference_outside_known_ids_is_rejected():
    draft = _valid_drafts()[Resource.PRODUCT]

    errors = validate(
        Resource.PRODUCT, draft, references={"category_id": {5, 6}, "business_id": {2}}
    )

    assert errors == {"category_id": "Please select an existing category"}


@pytest.mark.unit
def test_business_id_not_checked_when_editing_product():
    draft = {**_valid_drafts()[Resource.PRODUCT], "business_id": ""}

    assert "business_id" in validate(Resource.PRODUCT, draft)
    assert validate(Resource.PRODUCT, draft, editing=True) == {}


# ---------------------------------------------------------------------------
# Orders and payments
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_order_without_items_always_fails():
    draft = {**_valid_drafts()[Resource.ORDER], "order_items": []}

    errors = validate(Resource.ORDER, draft)

    assert errors == {"order_items": "At least one product is required"}


@pytest.mark.unit
def test_order_item_errors_keyed_by_index():
    draft = {
        **_valid_drafts()[Resource.ORDER],
        "order_items": [
            {"product_id": "1", "quantity": "1"},
            {"product_id": "", "quantity": "0"},
        ],
    }

    errors = validate(Resource.ORDER, draft)

    assert errors == {
        "order_items.1.product_id": "Valid product is required",
        "order_items.1.quantity": "Valid quantity is required",
    }


@pytest.mark.unit
def test_unknown_order_status_rejected():
    draft = {**_valid_drafts()[Resource.ORDER], "order_status": "LOST"}

    assert validate(Resource.ORDER, draft) == {"order_status": "Unknown order status"}


@pytest.mark.unit
def test_short_transaction_id_fails_only_on_transaction_id():
    draft = {
        "payment_date": "2024-01-01",
        "amount": "10.00",
        "payment_method": "PAYPAL",
        "payment_status": "PENDING",
        "transaction_id": "ab",
        "customer_id": "3",
    }

    errors = validate(Resource.PAYMENT, draft)

    assert errors == {
        "transaction_id": "Transaction ID is required and must be at least 3 characters long"
    }


@pytest.mark.unit
def test_transaction_id_length_counts_after_trim():
    draft = {**_valid_drafts()[Resource.PAYMENT], "transaction_id": "  ab  "}

    assert "transaction_id" in validate(Resource.PAYMENT, draft)


@pytest.mark.unit
def test_payment_date_must_parse():
    draft = {**_valid_drafts()[Resource.PAYMENT], "payment_date": "01/02/2024"}

    assert validate(Resource.PAYMENT, draft) == {
        "payment_date": "Payment date must be a valid date"
    }


@pytest.mark.unit
def test_amount_that_rounds_to_zero_cents_is_rejected():
    draft = {**_valid_drafts()[Resource.PAYMENT], "amount": "0.004"}

    assert validate(Resource.PAYMENT, draft) == {"amount": "Valid amount is required"}


@pytest.mark.unit
def test_amount_that_rounds_up_to_a_cent_is_accepted():
    draft = {**_valid_drafts()[Resource.PAYMENT], "amount": "0.005"}

    assert validate(Resource.PAYMENT, draft) == {}
