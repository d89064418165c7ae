"""Search, filter and sort for list views.

One pipeline serves all six list views; each view only declares which
attributes are searchable, which are categorical filters and which sort
options it offers. ``project`` never mutates the source collection and
re-derives its output every time it is iterated.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence

from libs.common.currency import parse_decimal
from libs.common.datetime_utils import ensure_aware
from services.backoffice_service.schemas.enums import Resource

Extractor = Callable[[Any], Any]


def attr(*path: str) -> Extractor:
    """None-safe attribute path, e.g. ``attr("customer", "first_name")``."""

    def extract(item: Any) -> Any:
        current = item
        for name in path:
            if current is None:
                return None
            current = getattr(current, name, None)
        return current

    return extract


def _token(value: Any) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    return "" if value is None else str(value).strip()


class SortKind(str, enum.Enum):
    TEXT = "text"
    NUMBER = "number"
    # Always most recent first; items without a date go last
    DATE = "date"


@dataclass(frozen=True)
class SortKey:
    extract: Extractor
    kind: SortKind = SortKind.TEXT
    descending: bool = False


@dataclass(frozen=True)
class ViewState:
    """What the user typed and picked above a list. Never mutated in place."""

    search_term: str = ""
    filters: Mapping[str, Any] = field(default_factory=dict)
    sort_key: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))

    def with_search(self, term: str) -> "ViewState":
        return replace(self, search_term=term)

    def with_filter(self, name: str, value: Any) -> "ViewState":
        filters = dict(self.filters)
        if _token(value):
            filters[name] = value
        else:
            filters.pop(name, None)
        return replace(self, filters=filters)

    def with_sort(self, sort_key: Optional[str]) -> "ViewState":
        return replace(self, sort_key=sort_key)

    def cleared(self) -> "ViewState":
        return ViewState()

    @property
    def is_filtered(self) -> bool:
        return bool(self.search_term.strip()) or any(
            _token(value) for value in self.filters.values()
        )


def _text_key(extract: Extractor) -> Callable[[Any], str]:
    return lambda item: _token(extract(item)).casefold()


def _number_key(extract: Extractor) -> Callable[[Any], Any]:
    return lambda item: parse_decimal(extract(item)) or 0


def _date_key(extract: Extractor) -> Callable[[Any], tuple]:
    def key(item: Any) -> tuple:
        value = extract(item)
        if value is None:
            return (1, 0.0)
        return (0, -ensure_aware(value).timestamp())

    return key


class Projection:
    """Lazy, restartable view over a source collection."""

    def __init__(self, view: "CollectionView", items: Iterable[Any], state: ViewState):
        self._view = view
        self._items = items
        self._state = state

    def __iter__(self) -> Iterator[Any]:
        return iter(self._view.apply(self._items, self._state))

    def __len__(self) -> int:
        return len(self._view.apply(self._items, self._state))


@dataclass(frozen=True)
class CollectionView:
    resource: Resource
    search_fields: tuple[Extractor, ...]
    sort_keys: Mapping[str, SortKey]
    default_sort: str
    filter_fields: Mapping[str, Extractor] = field(default_factory=dict)

    def matches(self, item: Any, state: ViewState) -> bool:
        term = state.search_term.strip().casefold()
        if term and not any(
            term in _token(extract(item)).casefold() for extract in self.search_fields
        ):
            return False
        for name, wanted in state.filters.items():
            wanted = _token(wanted)
            if not wanted:
                continue
            if name not in self.filter_fields:
                raise ValueError(f"{self.resource.value} list has no filter {name!r}")
            if _token(self.filter_fields[name](item)) != wanted:
                return False
        return True

    def sort(self, items: Iterable[Any], sort_key: Optional[str] = None) -> list[Any]:
        name = sort_key or self.default_sort
        if name not in self.sort_keys:
            raise ValueError(f"{self.resource.value} list cannot be sorted by {name!r}")
        key = self.sort_keys[name]
        if key.kind is SortKind.DATE:
            return sorted(items, key=_date_key(key.extract))
        if key.kind is SortKind.NUMBER:
            return sorted(items, key=_number_key(key.extract), reverse=key.descending)
        return sorted(items, key=_text_key(key.extract), reverse=key.descending)

    def apply(self, items: Iterable[Any], state: ViewState) -> list[Any]:
        return self.sort(
            (item for item in items if self.matches(item, state)), state.sort_key
        )

    def project(self, items: Sequence[Any], state: ViewState) -> Projection:
        return Projection(self, items, state)


def _full_name(*path: str) -> Extractor:
    first = attr(*path, "first_name")
    last = attr(*path, "last_name")
    return lambda item: f"{first(item) or ''} {last(item) or ''}".strip()


_CREATED = SortKey(attr("created_at"), SortKind.DATE)

BUSINESS_VIEW = CollectionView(
    resource=Resource.BUSINESS,
    search_fields=(attr("name"), attr("username"), attr("email"), attr("address")),
    sort_keys={
        "name": SortKey(attr("name")),
        "username": SortKey(attr("username")),
        "email": SortKey(attr("email")),
        "date": _CREATED,
    },
    default_sort="name",
)

CATEGORY_VIEW = CollectionView(
    resource=Resource.CATEGORY,
    search_fields=(attr("name"), attr("description")),
    sort_keys={"name": SortKey(attr("name")), "date": _CREATED},
    default_sort="name",
)

PRODUCT_VIEW = CollectionView(
    resource=Resource.PRODUCT,
    search_fields=(attr("name"), attr("description")),
    filter_fields={"category_id": attr("category_id"), "business_id": attr("business_id")},
    sort_keys={
        "name": SortKey(attr("name")),
        "price": SortKey(attr("price"), SortKind.NUMBER),
        "quantity": SortKey(attr("quantity"), SortKind.NUMBER),
        "date": _CREATED,
    },
    default_sort="name",
)

CUSTOMER_VIEW = CollectionView(
    resource=Resource.CUSTOMER,
    search_fields=(
        attr("first_name"),
        attr("last_name"),
        attr("username"),
        attr("email"),
        attr("phone_number"),
    ),
    sort_keys={
        "name": SortKey(_full_name()),
        "username": SortKey(attr("username")),
        "email": SortKey(attr("email")),
        "date": _CREATED,
    },
    default_sort="name",
)

ORDER_VIEW = CollectionView(
    resource=Resource.ORDER,
    search_fields=(
        attr("order_number"),
        attr("customer", "first_name"),
        attr("customer", "last_name"),
        attr("customer", "username"),
    ),
    filter_fields={"order_status": attr("order_status"), "customer_id": attr("customer_id")},
    sort_keys={
        "date": _CREATED,
        "amount": SortKey(attr("total_amount"), SortKind.NUMBER, descending=True),
        "status": SortKey(attr("order_status")),
        "customer": SortKey(_full_name("customer")),
    },
    default_sort="date",
)

PAYMENT_VIEW = CollectionView(
    resource=Resource.PAYMENT,
    search_fields=(attr("transaction_id"), attr("amount")),
    filter_fields={
        "payment_status": attr("payment_status"),
        "payment_method": attr("payment_method"),
        "customer_id": attr("customer_id"),
    },
    sort_keys={
        "date": SortKey(attr("payment_date"), SortKind.DATE),
        "amount": SortKey(attr("amount"), SortKind.NUMBER, descending=True),
        "status": SortKey(attr("payment_status")),
        "method": SortKey(attr("payment_method")),
    },
    default_sort="date",
)

VIEWS: dict[Resource, CollectionView] = {
    view.resource: view
    for view in (
        BUSINESS_VIEW,
        CATEGORY_VIEW,
        PRODUCT_VIEW,
        CUSTOMER_VIEW,
        ORDER_VIEW,
        PAYMENT_VIEW,
    )
}


def get_view(resource: Resource) -> CollectionView:
    return VIEWS[Resource(resource)]
