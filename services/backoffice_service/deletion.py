"""Two-step delete: request (shows the prompt), then confirm or cancel."""

from __future__ import annotations

import enum
from typing import Optional

from libs.common.logging import get_logger
from libs.common.service_client import ServiceError, TransportError
from services.backoffice_service.repository import ResourceClient
from services.backoffice_service.schemas.enums import Resource

logger = get_logger(__name__)

CONFIRM_PROMPTS: dict[Resource, str] = {
    Resource.BUSINESS: "Are you sure you want to delete this business? This will affect all related orders.",
    Resource.CATEGORY: "Are you sure you want to delete this category? This will affect all products in this category.",
    Resource.PRODUCT: "Are you sure you want to delete this product?",
    Resource.CUSTOMER: "Are you sure you want to delete this customer? This will affect all their orders.",
    Resource.ORDER: "Are you sure you want to delete this order? This action cannot be undone.",
    Resource.PAYMENT: "Are you sure you want to delete this payment record? This action cannot be undone.",
}


class DeleteState(str, enum.Enum):
    IDLE = "idle"
    CONFIRM_PENDING = "confirm_pending"
    DELETING = "deleting"
    DELETED = "deleted"
    FAILED = "failed"


class DeleteStateError(RuntimeError):
    """An action was attempted in a state that does not allow it."""


class DeleteController:
    def __init__(self, client: ResourceClient):
        self.client = client
        self.state = DeleteState.IDLE
        self.target_id: Optional[int] = None
        self.error: Optional[str] = None

    @property
    def prompt(self) -> Optional[str]:
        if self.state is not DeleteState.CONFIRM_PENDING:
            return None
        return CONFIRM_PROMPTS[self.client.resource]

    def request(self, entity_id: int) -> str:
        """Ask for confirmation before deleting ``entity_id``; returns the prompt."""
        if self.state is DeleteState.DELETING:
            raise DeleteStateError("A delete is already in progress")
        if entity_id is None:
            raise ValueError("An id is required to delete a record")
        self.target_id = entity_id
        self.error = None
        self.state = DeleteState.CONFIRM_PENDING
        return self.prompt

    def cancel(self) -> None:
        if self.state is DeleteState.DELETING:
            raise DeleteStateError("Cannot cancel a delete that is already running")
        self.state = DeleteState.IDLE
        self.target_id = None

    async def confirm(self) -> bool:
        """Run the confirmed delete. Returns True if the record is gone.

        After a failure the same target can be retried by confirming again.
        """
        if self.state not in (DeleteState.CONFIRM_PENDING, DeleteState.FAILED):
            raise DeleteStateError(f"Nothing to confirm (state: {self.state.value})")
        self.state = DeleteState.DELETING
        try:
            await self.client.delete(self.target_id)
        except TransportError as exc:
            logger.error(f"Error deleting {self.client.resource.value} {self.target_id}: {exc}")
            self.error = "Could not reach the server. Please try again."
            self.state = DeleteState.FAILED
            return False
        except ServiceError as exc:
            logger.error(f"Error deleting {self.client.resource.value} {self.target_id}: {exc}")
            self.error = exc.message
            self.state = DeleteState.FAILED
            return False
        else:
            self.state = DeleteState.DELETED
            return True
        finally:
            if self.state is DeleteState.DELETING:
                self.error = "Failed to delete. Please try again."
                self.state = DeleteState.FAILED
