"""Order totals, status tallies and customer enrichment for list views."""

from __future__ import annotations

from collections import Counter
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Sequence

from libs.common.currency import parse_decimal, to_cents
from services.backoffice_service.schemas.entities import (
    Customer,
    CustomerSummary,
    Order,
    Payment,
    Product,
)
from services.backoffice_service.schemas.enums import OrderStatus
from services.backoffice_service.schemas.resources import parse_int


def _price_index(products: Iterable[Product]) -> dict[int, Decimal]:
    return {product.id: product.price for product in products}


def line_subtotal(
    item: Mapping[str, Any], prices: Mapping[int, Decimal]
) -> Optional[Decimal]:
    """Unit price x quantity for one draft order line; None if either is unknown."""
    product_id = parse_int(item.get("product_id"))
    quantity = parse_int(item.get("quantity"))
    if product_id is None or product_id not in prices or quantity is None:
        return None
    return to_cents(prices[product_id] * quantity)


def order_total(
    items: Sequence[Mapping[str, Any]], products: Iterable[Product]
) -> Decimal:
    """Running total shown under the order form; unpriced lines count as zero."""
    prices = _price_index(products)
    total = Decimal("0")
    for item in items:
        subtotal = line_subtotal(item, prices)
        if subtotal is not None:
            total += subtotal
    return to_cents(total)


def status_counts(orders: Iterable[Order]) -> dict[OrderStatus, int]:
    """Orders per status, every status present (zero if unused)."""
    counts = Counter(order.order_status for order in orders if order.order_status)
    return {status: counts.get(status, 0) for status in OrderStatus}


def revenue(payments: Iterable[Payment]) -> Decimal:
    return to_cents(
        sum((parse_decimal(payment.amount) or Decimal("0") for payment in payments), Decimal("0"))
    )


def attach_customers(
    payments: Iterable[Payment], customers: Iterable[Customer]
) -> list[Payment]:
    """Fill in the embedded customer on payments that only carry a customer_id."""
    by_id = {customer.id: customer for customer in customers}
    enriched = []
    for payment in payments:
        if payment.customer is None and payment.customer_id in by_id:
            customer = by_id[payment.customer_id]
            payment = payment.model_copy(
                update={
                    "customer": CustomerSummary(
                        id=customer.id,
                        first_name=customer.first_name,
                        last_name=customer.last_name,
                        username=customer.username,
                        email=customer.email,
                    )
                }
            )
        enriched.append(payment)
    return enriched
