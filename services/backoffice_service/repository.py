"""Per-resource API clients for the back office.

Every call is async and fallible: ``TransportError`` when the API cannot be
reached, ``ApplicationError`` when it rejects the request. Nothing is
retried here; callers surface the failure and let staff resubmit.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx
from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger
from libs.common.service_client import ApplicationError, ServiceClient
from pydantic import ValidationError
from services.backoffice_service.schemas.entities import (
    CanonicalModel,
    normalize,
    normalize_many,
)
from services.backoffice_service.schemas.enums import OrderStatus, Resource
from services.backoffice_service.schemas.resources import build_payload

logger = get_logger(__name__)


class ResourceClient:
    """list/get/create/update/delete for one resource type."""

    def __init__(self, resource: Resource, service: ServiceClient, prefix: str = "/api"):
        self.resource = Resource(resource)
        self.service = service
        self.base_path = f"{prefix}/{self.resource.path_segment}"

    def _one(self, raw: Any) -> Optional[CanonicalModel]:
        # create/update on some resources answer with an empty body
        if not isinstance(raw, dict):
            return None
        try:
            return normalize(self.resource, raw)
        except ValidationError as exc:
            raise ApplicationError(
                f"Unexpected {self.resource.value} record from server",
                response_data=raw,
            ) from exc

    def _many(self, raw: Any) -> list[CanonicalModel]:
        try:
            return normalize_many(self.resource, raw)
        except (TypeError, ValidationError) as exc:
            raise ApplicationError(
                f"Unexpected {self.resource.value} list from server",
                response_data=raw,
            ) from exc

    async def list_all(self) -> list[CanonicalModel]:
        return self._many(await self.service.get(self.base_path))

    async def get_by_id(self, entity_id: int) -> CanonicalModel:
        entity = self._one(await self.service.get(f"{self.base_path}/{entity_id}"))
        if entity is None:
            raise ApplicationError(
                f"{self.resource.value.capitalize()} {entity_id} not found",
                status_code=404,
            )
        return entity

    async def create(self, draft: Mapping[str, Any]) -> Optional[CanonicalModel]:
        payload = build_payload(self.resource, draft)
        logger.info(
            f"Creating {self.resource.value}", extra={"resource": self.resource.value}
        )
        logger.debug(f"Create payload for {self.resource.value}: {payload}")
        return self._one(await self.service.post(self.base_path, json=payload))

    async def update(
        self, entity_id: int, draft: Mapping[str, Any]
    ) -> Optional[CanonicalModel]:
        payload = build_payload(self.resource, draft, for_update=True)
        logger.info(
            f"Updating {self.resource.value} {entity_id}",
            extra={"resource": self.resource.value, "entity_id": entity_id},
        )
        logger.debug(f"Update payload for {self.resource.value} {entity_id}: {payload}")
        return self._one(
            await self.service.patch(f"{self.base_path}/{entity_id}", json=payload)
        )

    async def delete(self, entity_id: int) -> None:
        logger.info(
            f"Deleting {self.resource.value} {entity_id}",
            extra={"resource": self.resource.value, "entity_id": entity_id},
        )
        await self.service.delete(f"{self.base_path}/{entity_id}")


class OrderClient(ResourceClient):
    """Order client with the read-only query variants used by list views."""

    def __init__(self, service: ServiceClient, prefix: str = "/api"):
        super().__init__(Resource.ORDER, service, prefix)

    async def list_by_status(
        self, status: OrderStatus, **params: Any
    ) -> list[CanonicalModel]:
        status = OrderStatus(status)
        return self._many(
            await self.service.get(
                f"{self.base_path}/filter/{status.value}", params=params or None
            )
        )

    async def list_by_customer(self, customer_id: int) -> list[CanonicalModel]:
        return self._many(await self.service.get(f"{self.base_path}/costumer/{customer_id}"))

    async def list_by_business(
        self, business_id: int, **params: Any
    ) -> list[CanonicalModel]:
        return self._many(
            await self.service.get(
                f"{self.base_path}/business/{business_id}", params=params or None
            )
        )


class PaymentClient(ResourceClient):
    """Payment client; delete always targets a single payment by id."""

    def __init__(self, service: ServiceClient, prefix: str = "/api"):
        super().__init__(Resource.PAYMENT, service, prefix)

    async def delete(self, entity_id: int) -> None:
        if entity_id is None:
            raise ValueError("Deleting a payment requires its id")
        await super().delete(entity_id)


class BackofficeClient:
    """The six resource clients over one API connection."""

    def __init__(self, service: ServiceClient, prefix: str = "/api"):
        self.service = service
        self.businesses = ResourceClient(Resource.BUSINESS, service, prefix)
        self.categories = ResourceClient(Resource.CATEGORY, service, prefix)
        self.products = ResourceClient(Resource.PRODUCT, service, prefix)
        self.customers = ResourceClient(Resource.CUSTOMER, service, prefix)
        self.orders = OrderClient(service, prefix)
        self.payments = PaymentClient(service, prefix)
        self._by_resource: dict[Resource, ResourceClient] = {
            client.resource: client
            for client in (
                self.businesses,
                self.categories,
                self.products,
                self.customers,
                self.orders,
                self.payments,
            )
        }

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BackofficeClient":
        settings = settings or get_settings()
        service = ServiceClient.from_settings(settings, transport=transport)
        return cls(service, prefix=settings.BACKOFFICE_API_PREFIX)

    def for_resource(self, resource: Resource) -> ResourceClient:
        return self._by_resource[Resource(resource)]
