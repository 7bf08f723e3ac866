"""Shaping of schema-driven form values before and after an edit."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Set
from dataclasses import dataclass
from typing import Any

from gateway_hierarchy.core.address import SchemaCategory

# Child collections are edited through the tree at a finer address, so the
# node forms hide them and updates carry the existing values over.
CHILD_FIELDS_TO_HIDE: dict[SchemaCategory, tuple[str, ...]] = {
    SchemaCategory.BINDS: ("listeners",),
    SchemaCategory.LISTENERS: ("routes", "tcpRoutes"),
    SchemaCategory.ROUTES: ("backends",),
    SchemaCategory.TCP_ROUTES: ("backends",),
}

_OPTIONAL_COLLECTIONS = ("workloads", "services")


def child_fields(category: SchemaCategory) -> tuple[str, ...]:
    return CHILD_FIELDS_TO_HIDE.get(category, ())


# ---------------------------------------------------------------------------
# Form defaults
# ---------------------------------------------------------------------------


def strip_form_defaults(value: Any, keep_keys: Set[str] | None = None) -> Any:
    """Recursively drop ``None`` values and empty lists.

    Forms fill untouched optional scalars with ``None`` and optional arrays
    with ``[]``. Top-level keys in ``keep_keys`` keep an empty list, because
    the presence of the active field in an exclusive group is what marks it
    as active. Returns ``None`` when nothing is left of a list.
    """
    if value is None:
        return None
    if isinstance(value, list):
        stripped = [s for s in (strip_form_defaults(v) for v in value) if s is not None]
        return stripped or None
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if keep_keys and key in keep_keys and item == []:
                out[key] = []
                continue
            stripped_item = strip_form_defaults(item)
            if stripped_item is not None:
                out[key] = stripped_item
        return out
    return value


# ---------------------------------------------------------------------------
# Child fields
# ---------------------------------------------------------------------------


def form_schema(schema: Mapping[str, Any], category: SchemaCategory) -> dict[str, Any]:
    """Return ``schema`` without the category's child collection fields."""
    hidden = child_fields(category)
    if not hidden:
        return dict(schema)
    properties = {k: v for k, v in (schema.get("properties") or {}).items() if k not in hidden}
    required = [f for f in schema.get("required") or [] if f not in hidden]
    return {**schema, "properties": properties, "required": required}


def form_initial_data(entity: Mapping[str, Any] | None, category: SchemaCategory) -> dict[str, Any]:
    """Initial form data for an entity, without hidden child fields."""
    hidden = child_fields(category)
    return {k: copy.deepcopy(v) for k, v in (entity or {}).items() if k not in hidden}


def preserve_child_fields(
    form_value: Mapping[str, Any],
    existing: Mapping[str, Any],
    category: SchemaCategory,
) -> dict[str, Any]:
    """Replace any child collections in an edited value with the existing entity's."""
    hidden = child_fields(category)
    merged = {k: v for k, v in form_value.items() if k not in hidden}
    for field in hidden:
        if field in existing:
            merged[field] = existing[field]
    return merged


# ---------------------------------------------------------------------------
# Mutually exclusive field groups
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExclusiveOption:
    field_key: str
    label: str


@dataclass(frozen=True)
class ExclusiveGroup:
    group_label: str
    options: tuple[ExclusiveOption, ...]
    default_key: str

    @property
    def field_keys(self) -> tuple[str, ...]:
        return tuple(o.field_key for o in self.options)


# Listener routes/tcpRoutes are hidden from the listener form, so no shipped
# category needs a group today.
MUTUAL_EXCLUSIVE_GROUPS: dict[SchemaCategory, tuple[ExclusiveGroup, ...]] = {}


def exclusive_groups(category: SchemaCategory) -> tuple[ExclusiveGroup, ...]:
    return MUTUAL_EXCLUSIVE_GROUPS.get(category, ())


def detect_active_key(group: ExclusiveGroup, form_data: Mapping[str, Any] | None) -> str:
    """The first option holding a non-empty value, else the group default."""
    if not form_data:
        return group.default_key
    for option in group.options:
        value = form_data.get(option.field_key)
        if isinstance(value, list):
            if value:
                return option.field_key
        elif value is not None:
            return option.field_key
    return group.default_key


def switch_group_key(form_data: Mapping[str, Any] | None, group: ExclusiveGroup, new_key: str) -> dict[str, Any]:
    """Drop every option field of ``group`` except ``new_key``."""
    return {k: v for k, v in (form_data or {}).items() if k not in group.field_keys or k == new_key}


def keep_keys_for(groups: Iterable[ExclusiveGroup], active_keys: Mapping[str, str]) -> frozenset[str]:
    return frozenset(active_keys.get(g.group_label, g.default_key) for g in groups)


# ---------------------------------------------------------------------------
# Persistence cleanup
# ---------------------------------------------------------------------------


def _clean_listener(listener: Mapping[str, Any]) -> dict[str, Any]:
    # routes/tcpRoutes stay even when empty; their presence marks the listener mode.
    return {k: v for k, v in listener.items() if v is not None and v != ""}


def cleanup_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize a document before it is persisted.

    Drops null or blank listener fields, listeners left with no fields, and
    empty optional top-level collections.
    """
    cleaned = dict(document)
    if cleaned.get("binds") is not None:
        binds = []
        for bind in cleaned["binds"]:
            listeners = [_clean_listener(listener) for listener in bind.get("listeners") or []]
            binds.append({**bind, "listeners": [listener for listener in listeners if listener]})
        cleaned["binds"] = binds
    for key in _OPTIONAL_COLLECTIONS:
        if not cleaned.get(key):
            cleaned.pop(key, None)
    return cleaned
