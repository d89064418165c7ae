"""Client-side validation for back-office drafts.

``validate`` is pure: it never mutates the draft and always returns the full
error map for it, keyed by field name (``order_items.<index>.<field>`` for
order lines). A draft may be submitted iff the map is empty.
"""

from __future__ import annotations

import re
from typing import Any, Collection, Mapping, Optional

from libs.common.currency import parse_decimal, to_cents
from libs.common.datetime_utils import parse_datetime
from services.backoffice_service.schemas.enums import Resource
from services.backoffice_service.schemas.resources import (
    FieldKind,
    FieldSpec,
    get_schema,
    parse_int,
    strip_whitespace,
)

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
PHONE_RE = re.compile(r"^[+]?[1-9]\d{0,15}$")
URL_RE = re.compile(r"^https?://.+")

ErrorMap = dict[str, str]
References = Mapping[str, Collection[int]]


def _capitalized(label: str) -> str:
    return label[:1].upper() + label[1:]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def item_error_key(list_name: str, index: int, field_name: str) -> str:
    return f"{list_name}.{index}.{field_name}"


def check_field(
    spec: FieldSpec, value: Any, references: Optional[References] = None
) -> Optional[str]:
    """Error message for a single scalar field, or None if it is valid."""
    label = spec.label
    required_message = f"{_capitalized(label)} is required"

    if spec.kind is FieldKind.TEXT:
        text = str(value or "").strip()
        if spec.min_length and len(text) < spec.min_length and (text or spec.required):
            return (
                f"{required_message} and must be at least "
                f"{spec.min_length} characters long"
            )
        if spec.required and not text:
            return required_message
        return None

    if spec.kind is FieldKind.EMAIL:
        text = str(value or "").strip()
        if not text:
            return required_message if spec.required else None
        if not EMAIL_RE.search(text):
            return "Please enter a valid email address"
        return None

    if spec.kind is FieldKind.PHONE:
        text = str(value or "").strip()
        if not text:
            return required_message if spec.required else None
        if not PHONE_RE.match(strip_whitespace(text)):
            return f"Please enter a valid {label}"
        return None

    if spec.kind is FieldKind.URL:
        text = str(value or "").strip()
        if not text:
            return required_message if spec.required else None
        if not URL_RE.match(text):
            return f"Please enter a valid {label} URL starting with http:// or https://"
        return None

    if spec.kind is FieldKind.DECIMAL:
        parsed = None if _is_blank(value) else parse_decimal(value)
        if parsed is None or to_cents(parsed) <= (spec.minimum or 0):
            return f"Valid {label} is required"
        return None

    if spec.kind is FieldKind.INTEGER:
        parsed = parse_int(value)
        if parsed is None or parsed < (spec.minimum or 0):
            return f"Valid {label} is required"
        return None

    if spec.kind is FieldKind.REFERENCE:
        parsed = parse_int(value)
        if parsed is None:
            return f"Valid {label} is required"
        known = references.get(spec.name) if references else None
        if known is not None and parsed not in known:
            return f"Please select an existing {label}"
        return None

    if spec.kind is FieldKind.ENUM:
        if _is_blank(value):
            return required_message
        allowed = {member.value for member in spec.choices}
        raw = value.value if hasattr(value, "value") else value
        if raw not in allowed:
            return f"Unknown {label}"
        return None

    if spec.kind is FieldKind.DATE:
        if _is_blank(value):
            return required_message
        try:
            parse_datetime(value)
        except (TypeError, ValueError):
            return f"{_capitalized(label)} must be a valid date"
        return None

    raise ValueError(f"check_field does not handle {spec.kind}")


def check_items(
    spec: FieldSpec, value: Any, references: Optional[References] = None
) -> ErrorMap:
    errors: ErrorMap = {}
    if not isinstance(value, list) or not value:
        errors[spec.name] = f"At least one {spec.label} is required"
        return errors
    for index, item in enumerate(value):
        item = item if isinstance(item, Mapping) else {}
        for item_spec in spec.item_fields:
            message = check_field(item_spec, item.get(item_spec.name), references)
            if message:
                errors[item_error_key(spec.name, index, item_spec.name)] = message
    return errors


def validate(
    resource: Resource,
    draft: Mapping[str, Any],
    *,
    editing: bool = False,
    references: Optional[References] = None,
) -> ErrorMap:
    """Map every invalid field of ``draft`` to its error message.

    Args:
        resource: Which resource schema to validate against.
        draft: Field name -> form value (text, or a list of item dicts).
        editing: True for edit forms; immutable fields are then not checked.
        references: Optional reference field name -> ids currently selectable.
            Ids outside the set are rejected.
    """
    errors: ErrorMap = {}
    for spec in get_schema(resource).fields:
        if editing and spec.immutable:
            continue
        value = draft.get(spec.name)
        if spec.kind is FieldKind.ITEMS:
            errors.update(check_items(spec, value, references))
            continue
        message = check_field(spec, value, references)
        if message:
            errors[spec.name] = message
    return errors


def is_submittable(errors: Mapping[str, str]) -> bool:
    return not errors
