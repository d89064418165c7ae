"""Create/edit form state for one resource.

States::

    IDLE -> LOADING (edit only) -> EDITING -> SUBMITTING -> SUCCESS
                        |                          |
                        v                          v
                      FAILED (editable)         EDITING + form_error

A failed load leaves the form in FAILED with the default draft, still
editable. A failed save returns to EDITING with a form-level message so the
user can resubmit. ``close`` discards the draft; any response that arrives
afterwards is ignored.
"""

from __future__ import annotations

import asyncio
import enum
from decimal import Decimal
from typing import Any, Optional

from libs.common.logging import get_logger
from libs.common.service_client import ApplicationError, ServiceError, TransportError
from services.backoffice_service.repository import BackofficeClient
from services.backoffice_service.schemas.entities import CanonicalModel
from services.backoffice_service.schemas.enums import Resource
from services.backoffice_service.schemas.resources import (
    Draft,
    FieldKind,
    default_draft,
    draft_from_entity,
    get_schema,
    new_item,
    reference_targets,
)
from services.backoffice_service.summaries import order_total
from services.backoffice_service.validation import (
    ErrorMap,
    item_error_key,
    validate,
)

logger = get_logger(__name__)

# Hibernate's wording when a PATCH tries to re-point a managed association
CONFLICT_MARKERS = ("Identifier of an instance", "was altered")
CONFLICT_STATUS = 409
ITEMS_FIELD = "order_items"


class FormState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class FormStateError(RuntimeError):
    """An action was attempted in a state that does not allow it."""


def is_conflict(exc: ApplicationError) -> bool:
    if exc.status_code == CONFLICT_STATUS:
        return True
    return any(marker in (exc.message or "") for marker in CONFLICT_MARKERS)


class FormController:
    def __init__(
        self,
        client: BackofficeClient,
        resource: Resource,
        entity_id: Optional[int] = None,
    ):
        self.client = client
        self.resource = Resource(resource)
        self.repository = client.for_resource(self.resource)
        self.schema = get_schema(self.resource)
        self.entity_id = entity_id
        self.state = FormState.IDLE
        self.draft: Draft = default_draft(self.resource, editing=self.editing)
        self.errors: ErrorMap = {}
        self.form_error: Optional[str] = None
        self.options: dict[Resource, list[CanonicalModel]] = {}
        self.option_errors: dict[Resource, str] = {}
        self.saved: Optional[CanonicalModel] = None
        self._generation = 0

    @property
    def editing(self) -> bool:
        return self.entity_id is not None

    @property
    def is_editable(self) -> bool:
        return self.state in (FormState.EDITING, FormState.FAILED)

    @property
    def can_submit(self) -> bool:
        return self.is_editable

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _ensure_editable(self) -> None:
        if not self.is_editable:
            raise FormStateError(
                f"{self.schema.label.capitalize()} form is not editable (state: {self.state.value})"
            )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Load selectable options and, when editing, the record itself."""
        self._generation += 1
        generation = self._generation
        self.draft = default_draft(self.resource, editing=self.editing)
        self.errors = {}
        self.form_error = None
        self.saved = None
        self.state = FormState.LOADING if self.editing else FormState.EDITING

        loads = [self._load_options(generation)]
        if self.editing:
            loads.append(self._load_entity(generation))
        await asyncio.gather(*loads)

        if not self._is_stale(generation) and self.state is FormState.LOADING:
            self.state = FormState.EDITING

    async def refresh(self) -> None:
        """Re-fetch the record being edited, replacing the draft."""
        if not self.editing:
            return
        if self.state is FormState.SUBMITTING:
            raise FormStateError("Cannot refresh while saving")
        generation = self._generation
        self.state = FormState.LOADING
        await self._load_entity(generation)
        if not self._is_stale(generation) and self.state is FormState.LOADING:
            self.state = FormState.EDITING

    async def _load_entity(self, generation: int) -> None:
        try:
            entity = await self.repository.get_by_id(self.entity_id)
        except ServiceError as exc:
            if self._is_stale(generation):
                return
            logger.error(f"Error fetching {self.resource.value} {self.entity_id}: {exc}")
            self.form_error = (
                f"Failed to load {self.schema.label}. Please refresh and try again."
            )
            self.state = FormState.FAILED
            return
        if self._is_stale(generation):
            return
        self.draft = draft_from_entity(self.resource, entity)
        self.errors = {}

    async def _load_options(self, generation: int) -> None:
        targets = sorted(set(reference_targets(self.resource).values()), key=lambda r: r.value)
        if not targets:
            return
        results = await asyncio.gather(
            *(self.client.for_resource(target).list_all() for target in targets),
            return_exceptions=True,
        )
        if self._is_stale(generation):
            return
        for target, result in zip(targets, results):
            if isinstance(result, ServiceError):
                logger.error(f"Error fetching {target.value} options: {result}")
                plural = get_schema(target).plural
                self.option_errors[target] = f"Failed to load {plural}. Please refresh the page."
            elif isinstance(result, BaseException):
                raise result
            else:
                self.options[target] = result
                self.option_errors.pop(target, None)

    def known_references(self) -> dict[str, set[int]]:
        """Reference field -> ids the user can currently pick from."""
        return {
            name: {entity.id for entity in self.options[target]}
            for name, target in reference_targets(self.resource).items()
            if target in self.options
        }

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _validate(self) -> ErrorMap:
        return validate(
            self.resource,
            self.draft,
            editing=self.editing,
            references=self.known_references(),
        )

    def _clear_corrected(self, key_prefix: str) -> None:
        if not self.errors:
            return
        current = self._validate()
        for key in list(self.errors):
            related = key == key_prefix or key.startswith(f"{key_prefix}.")
            if related and key not in current:
                del self.errors[key]

    def _touched(self) -> None:
        if self.state is FormState.FAILED:
            self.state = FormState.EDITING

    def update_field(self, name: str, value: Any) -> None:
        self._ensure_editable()
        spec = self.schema.field(name)
        if spec.kind is FieldKind.ITEMS:
            raise ValueError(f"Use the item methods to change {name}")
        if self.editing and spec.immutable:
            raise FormStateError(
                f"{spec.label.capitalize()} cannot be changed after creation"
            )
        self.draft[name] = value
        self._touched()
        self._clear_corrected(name)

    def _items(self) -> list[dict[str, Any]]:
        if self.resource is not Resource.ORDER:
            raise ValueError(f"{self.schema.label.capitalize()} has no line items")
        return self.draft[ITEMS_FIELD]

    def add_item(self) -> int:
        """Append a blank line; returns its index."""
        self._ensure_editable()
        items = self._items()
        items.append(new_item())
        self._touched()
        self._clear_corrected(ITEMS_FIELD)
        return len(items) - 1

    def update_item(self, index: int, name: str, value: Any) -> None:
        self._ensure_editable()
        items = self._items()
        if name not in {spec.name for spec in self.schema.field(ITEMS_FIELD).item_fields}:
            raise KeyError(f"Order items have no field {name!r}")
        items[index] = {**items[index], name: value}
        self._touched()
        self._clear_corrected(item_error_key(ITEMS_FIELD, index, name))

    def remove_item(self, index: int) -> None:
        self._ensure_editable()
        items = self._items()
        del items[index]
        # Shift item errors below the removed line up by one
        shifted: ErrorMap = {}
        for key, message in self.errors.items():
            parts = key.split(".")
            if parts[0] == ITEMS_FIELD and len(parts) == 3:
                position = int(parts[1])
                if position == index:
                    continue
                if position > index:
                    key = item_error_key(ITEMS_FIELD, position - 1, parts[2])
            shifted[key] = message
        self.errors = shifted
        self._touched()
        self._clear_corrected(ITEMS_FIELD)

    def order_total(self) -> Decimal:
        return order_total(self._items(), self.options.get(Resource.PRODUCT, []))

    # ------------------------------------------------------------------
    # Submitting
    # ------------------------------------------------------------------

    async def submit(self) -> bool:
        """Validate and save the draft. Returns True once the record is saved."""
        if self.state is FormState.SUBMITTING:
            raise FormStateError("This form is already being saved")
        self._ensure_editable()

        self.form_error = None
        self.errors = self._validate()
        if self.errors:
            self.state = FormState.EDITING
            return False

        generation = self._generation
        self.state = FormState.SUBMITTING
        try:
            if self.editing:
                saved = await self.repository.update(self.entity_id, self.draft)
            else:
                saved = await self.repository.create(self.draft)
        except TransportError as exc:
            if self._is_stale(generation):
                return False
            logger.error(f"Error saving {self.resource.value}: {exc}")
            self.form_error = f"Failed to save {self.schema.label}. Please try again."
            self.state = FormState.EDITING
            return False
        except ApplicationError as exc:
            if self._is_stale(generation):
                return False
            logger.error(f"Error saving {self.resource.value}: {exc}")
            self.state = FormState.EDITING
            if is_conflict(exc):
                await self._handle_conflict(generation)
            else:
                self.form_error = exc.message or (
                    f"Failed to save {self.schema.label}. Please try again."
                )
            return False
        else:
            if self._is_stale(generation):
                return False
            self.saved = saved
            self.state = FormState.SUCCESS
            logger.info(
                f"Saved {self.resource.value}"
                + (f" {self.entity_id}" if self.editing else "")
            )
            return True
        finally:
            # Unexpected errors still propagate, but the form stays usable
            if self.state is FormState.SUBMITTING and not self._is_stale(generation):
                self.state = FormState.EDITING

    async def _handle_conflict(self, generation: int) -> None:
        message = (
            "A referenced record was changed on the server. "
            "Please refresh and try again."
        )
        self.form_error = message
        if not self.editing:
            return
        await self.refresh()
        # A failed re-fetch must not hide why the save was refused
        if not self._is_stale(generation):
            self.form_error = message

    def close(self) -> None:
        """Leave the form. The draft is discarded and late responses are ignored."""
        self._generation += 1
        self.draft = default_draft(self.resource, editing=self.editing)
        self.errors = {}
        self.form_error = None
        self.options = {}
        self.option_errors = {}
        self.saved = None
        self.state = FormState.IDLE
