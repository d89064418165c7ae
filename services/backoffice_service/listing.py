"""List page state: the loaded collection, its view state and the delete step."""

from __future__ import annotations

import asyncio
from typing import Optional

from libs.common.logging import get_logger
from libs.common.service_client import ServiceError
from services.backoffice_service.deletion import DeleteController, DeleteState
from services.backoffice_service.repository import BackofficeClient
from services.backoffice_service.schemas.entities import CanonicalModel
from services.backoffice_service.schemas.enums import Resource
from services.backoffice_service.schemas.resources import get_schema
from services.backoffice_service.summaries import attach_customers
from services.backoffice_service.views import Projection, ViewState, get_view

logger = get_logger(__name__)


class ListController:
    def __init__(
        self,
        client: BackofficeClient,
        resource: Resource,
        state: Optional[ViewState] = None,
    ):
        self.client = client
        self.resource = Resource(resource)
        self.repository = client.for_resource(self.resource)
        self.view = get_view(self.resource)
        self.state = state or ViewState()
        self.items: list[CanonicalModel] = []
        self.loading = False
        self.error: Optional[str] = None
        self.deletion = DeleteController(self.repository)
        self._generation = 0

    async def load(self) -> bool:
        """Fetch the full collection. Returns False if the fetch failed."""
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None
        try:
            if self.resource is Resource.PAYMENT:
                items = await self._load_payments()
            else:
                items = await self.repository.list_all()
        except ServiceError as exc:
            if generation != self._generation:
                return False
            logger.error(f"Error fetching {self.resource.value} list: {exc}")
            plural = get_schema(self.resource).plural
            self.error = f"Failed to load {plural}. Please try again."
            self.loading = False
            return False
        if generation != self._generation:
            return False
        self.items = items
        self.loading = False
        return True

    async def _load_payments(self) -> list[CanonicalModel]:
        payments, customers = await asyncio.gather(
            self.repository.list_all(),
            self.client.customers.list_all(),
            return_exceptions=True,
        )
        if isinstance(payments, BaseException):
            raise payments
        if isinstance(customers, ServiceError):
            # Payments are still listed, just without the customer name
            logger.warning(f"Could not load customers for payment list: {customers}")
            return payments
        if isinstance(customers, BaseException):
            raise customers
        return attach_customers(payments, customers)

    def set_state(self, state: ViewState) -> None:
        self.state = state

    def visible(self) -> Projection:
        return self.view.project(self.items, self.state)

    def request_delete(self, entity_id: int) -> str:
        return self.deletion.request(entity_id)

    def cancel_delete(self) -> None:
        self.deletion.cancel()

    async def confirm_delete(self) -> bool:
        """Delete the pending record; it leaves ``items`` only once the API agrees."""
        target_id = self.deletion.target_id
        deleted = await self.deletion.confirm()
        if deleted:
            self.items = [item for item in self.items if item.id != target_id]
        return deleted

    @property
    def delete_error(self) -> Optional[str]:
        if self.deletion.state is DeleteState.FAILED:
            return self.deletion.error
        return None

    def close(self) -> None:
        """Leave the page; a load still in flight will not touch this controller."""
        self._generation += 1
        self.loading = False
        self.items = []
        self.error = None
