"""Overview numbers for the back office landing page."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from libs.common.logging import get_logger
from libs.common.service_client import ServiceError
from services.backoffice_service.repository import BackofficeClient
from services.backoffice_service.schemas.entities import Customer, Order, Payment, Product
from services.backoffice_service.schemas.enums import OrderStatus, Resource
from services.backoffice_service.summaries import revenue, status_counts
from services.backoffice_service.views import ORDER_VIEW

logger = get_logger(__name__)

RECENT_LIMIT = 5

DASHBOARD_RESOURCES = (
    Resource.PRODUCT,
    Resource.CUSTOMER,
    Resource.ORDER,
    Resource.PAYMENT,
)


@dataclass
class DashboardSnapshot:
    """Whatever could be fetched. A resource that failed has an entry in ``errors``
    and an empty list, so its total reads 0 rather than hiding the whole page."""

    products: list[Product] = field(default_factory=list)
    customers: list[Customer] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    errors: dict[Resource, str] = field(default_factory=dict)

    @property
    def total_products(self) -> int:
        return len(self.products)

    @property
    def total_customers(self) -> int:
        return len(self.customers)

    @property
    def total_orders(self) -> int:
        return len(self.orders)

    @property
    def total_payments(self) -> int:
        return len(self.payments)

    @property
    def recent_orders(self) -> list[Order]:
        return ORDER_VIEW.sort(self.orders, "date")[:RECENT_LIMIT]

    @property
    def featured_products(self) -> list[Product]:
        return self.products[:RECENT_LIMIT]

    @property
    def revenue(self) -> Decimal:
        return revenue(self.payments)

    @property
    def order_status_counts(self) -> dict[OrderStatus, int]:
        return status_counts(self.orders)

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)

    def error_for(self, resource: Resource) -> Optional[str]:
        return self.errors.get(Resource(resource))


async def load_dashboard(client: BackofficeClient) -> DashboardSnapshot:
    """Fetch the four collections at once and keep whatever succeeded."""
    results = await asyncio.gather(
        *(client.for_resource(resource).list_all() for resource in DASHBOARD_RESOURCES),
        return_exceptions=True,
    )

    snapshot = DashboardSnapshot()
    for resource, result in zip(DASHBOARD_RESOURCES, results):
        if isinstance(result, ServiceError):
            logger.error(f"Dashboard could not load {resource.value} list: {result}")
            snapshot.errors[resource] = result.message
            continue
        if isinstance(result, BaseException):
            raise result
        match resource:
            case Resource.PRODUCT:
                snapshot.products = result
            case Resource.CUSTOMER:
                snapshot.customers = result
            case Resource.ORDER:
                snapshot.orders = result
            case Resource.PAYMENT:
                snapshot.payments = result

    if snapshot.is_partial:
        logger.warning(
            "Dashboard loaded with missing data: "
            + ", ".join(resource.value for resource in snapshot.errors)
        )
    return snapshot
