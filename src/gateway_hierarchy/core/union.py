"""Editing state for union-typed (``oneOf`` / ``anyOf``) schema fields.

Two shapes are handled:

* optional wrapper, ``anyOf: [T, {"type": "null"}]``: a toggle that seeds
  ``T``'s defaults when switched on and sets the value to ``None`` when off;
* alternatives, two or more non-null branches: a selected branch index.

Switching branches removes every key owned by any branch (its declared
properties plus its required fields) that the new branch does not own, then
seeds the new branch's defaults. Keys outside all branches are kept.
"""

from __future__ import annotations

import copy
import logging
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_MAX_DEFAULT_DEPTH = 16

_EMPTY_SCALARS: dict[str, Any] = {
    "string": "",
    "integer": 0,
    "number": 0,
    "boolean": False,
    "array": [],
}


class UnionShape(StrEnum):
    OPTIONAL = "optional"
    ALTERNATIVES = "alternatives"


class UnionResolution(BaseModel):
    value: Any = None
    shape: UnionShape
    selected_index: int = 0
    enabled: bool = False
    ambiguous: bool = False
    titles: list[str] = []


# ---------------------------------------------------------------------------
# Schema helpers
# ---------------------------------------------------------------------------


def _lookup_pointer(ref: str, root: dict[str, Any]) -> dict[str, Any] | None:
    if not ref.startswith("#/"):
        return None
    node: Any = root
    for raw in ref[2:].split("/"):
        part = raw.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, dict) else None


def resolve_ref(schema: Any, root: dict[str, Any] | None = None) -> dict[str, Any]:
    """Follow local ``$ref`` pointers; sibling keywords override the target's."""
    if not isinstance(schema, dict):
        return {}
    seen: set[str] = set()
    while "$ref" in schema and root is not None:
        ref = schema["$ref"]
        if not isinstance(ref, str) or ref in seen:
            break
        seen.add(ref)
        target = _lookup_pointer(ref, root)
        if target is None:
            break
        schema = {**target, **{k: v for k, v in schema.items() if k != "$ref"}}
    return schema


def _declared_types(schema: dict[str, Any]) -> list[str]:
    declared = schema.get("type")
    if declared is None:
        return []
    return list(declared) if isinstance(declared, list) else [declared]


def _is_object_like(schema: dict[str, Any]) -> bool:
    types = _declared_types(schema)
    return "object" in types or (not types and "properties" in schema)


def _type_matches(value: Any, type_name: str) -> bool:
    if type_name == "null":
        return value is None
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if type_name == "number":
        return isinstance(value, int | float) and not isinstance(value, bool)
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "array":
        return isinstance(value, list)
    if type_name == "object":
        return isinstance(value, dict)
    return False


def owned_keys(option: Any, root: dict[str, Any] | None = None) -> set[str]:
    """Keys a branch claims: its declared properties plus its required fields."""
    resolved = resolve_ref(option, root)
    return set(resolved.get("properties") or {}) | set(resolved.get("required") or [])


def matches_option(value: Any, option: Any, root: dict[str, Any] | None = None) -> bool:
    """Test whether ``value`` structurally fits a union branch."""
    schema = resolve_ref(option, root)
    if "const" in schema:
        return bool(value == schema["const"])
    if "enum" in schema:
        return value in (schema["enum"] or [])

    types = _declared_types(schema)
    if types and not any(_type_matches(value, t) for t in types):
        return False

    nested = schema.get("oneOf") or schema.get("anyOf")
    if nested and not types:
        return any(matches_option(value, o, root) for o in nested)

    if not isinstance(value, dict):
        return bool(types) or not _is_object_like(schema)

    properties: dict[str, Any] = schema.get("properties") or {}
    required: list[str] = schema.get("required") or []
    if any(key not in value for key in required):
        return False
    for key, prop in properties.items():
        prop_schema = resolve_ref(prop, root)
        if key in value and "const" in prop_schema and value[key] != prop_schema["const"]:
            return False
    if not required and properties and value and not set(value) & set(properties):
        return False
    return True


def default_form_state(schema: Any, root: dict[str, Any] | None = None, _depth: int = 0) -> Any:
    """Return the defaults a form would pre-fill for ``schema``.

    Objects always yield a dict; nested properties only contribute when they
    produce a non-empty default. Anything without a default yields ``None``.
    """
    resolved = resolve_ref(schema, root)
    if "default" in resolved:
        return copy.deepcopy(resolved["default"])
    if "const" in resolved:
        return copy.deepcopy(resolved["const"])
    if not _is_object_like(resolved):
        return None

    result: dict[str, Any] = {}
    if _depth >= _MAX_DEFAULT_DEPTH:
        return result
    for key, prop in (resolved.get("properties") or {}).items():
        value = default_form_state(prop, root, _depth + 1)
        if value is not None and value != {}:
            result[key] = value
    return result


# ---------------------------------------------------------------------------
# Field state
# ---------------------------------------------------------------------------


class UnionField:
    """Per-session editing state for one union-typed field.

    Instances are created when the field is shown and dropped with the edit
    session; the selected index is never persisted.
    """

    def __init__(self, schema: dict[str, Any], value: Any = None, root: dict[str, Any] | None = None) -> None:
        self.root = root if root is not None else schema
        resolved = resolve_ref(schema, self.root)
        options = resolved.get("oneOf") or resolved.get("anyOf") or []
        all_options = [resolve_ref(o, self.root) for o in options]

        null_indices = [i for i, o in enumerate(all_options) if _declared_types(o) == ["null"]]
        self.options = [o for i, o in enumerate(all_options) if i not in null_indices]
        self.shape = (
            UnionShape.OPTIONAL if len(null_indices) == 1 and len(self.options) == 1 else UnionShape.ALTERNATIVES
        )
        self.value = value
        self.ambiguous = False
        self.enabled = value is not None
        self._owned: set[str] = set()
        for option in self.options:
            self._owned |= owned_keys(option, self.root)
        self.selected_index = 0 if self.shape is UnionShape.OPTIONAL else self._detect_index(value)

    @property
    def titles(self) -> list[str]:
        return [o.get("title") or f"Option {i + 1}" for i, o in enumerate(self.options)]

    @property
    def active_keys(self) -> set[str]:
        if not self.options:
            return set()
        return owned_keys(self.options[self.selected_index], self.root)

    def _fallback_index(self) -> int:
        for i, option in enumerate(self.options):
            types = _declared_types(option)
            if not types or "object" in types:
                return i
        return 0

    def _detect_index(self, value: Any) -> int:
        for i, option in enumerate(self.options):
            if matches_option(value, option, self.root):
                return i
        fallback = self._fallback_index()
        if value is not None and self.options:
            self.ambiguous = True
            logger.warning("No union alternative matches the current value; using option %d", fallback)
        return fallback

    def _without_stale_keys(self, value: dict[str, Any], keep: set[str]) -> dict[str, Any]:
        return {k: v for k, v in value.items() if k not in self._owned or k in keep}

    def mount(self) -> Any:
        """Prepare the value when the field is first shown.

        New items are seeded with the selected branch's defaults; existing
        items only lose keys owned by inactive branches.
        """
        if self.shape is UnionShape.OPTIONAL or not self.options:
            return self.value
        if self.value is None:
            defaults = default_form_state(self.options[self.selected_index], self.root)
            if defaults is not None:
                self.value = defaults
        elif isinstance(self.value, dict):
            self.value = self._without_stale_keys(self.value, self.active_keys)
        return self.value

    def select(self, index: int) -> Any:
        """Switch to branch ``index``; selecting the current branch changes nothing."""
        if self.shape is UnionShape.OPTIONAL:
            raise ValueError("Optional fields are switched with toggle(), not select()")
        if not 0 <= index < len(self.options):
            raise ValueError(f"Union option {index} out of range (0..{len(self.options) - 1})")
        if index == self.selected_index:
            return self.value

        next_schema = self.options[index]
        defaults = default_form_state(next_schema, self.root)
        if _is_object_like(next_schema) or not _declared_types(next_schema):
            keep = owned_keys(next_schema, self.root)
            base = self._without_stale_keys(self.value, keep) if isinstance(self.value, dict) else {}
            if isinstance(defaults, dict):
                for key, default in defaults.items():
                    base.setdefault(key, default)
            self.value = base
        else:
            self.value = defaults

        self.selected_index = index
        self.ambiguous = False
        return self.value

    def toggle(self, enabled: bool) -> Any:
        """Enable or disable an optional field."""
        if self.shape is not UnionShape.OPTIONAL:
            raise ValueError("Only optional fields can be toggled")
        if enabled == self.enabled:
            return self.value
        if enabled:
            main = self.options[0]
            defaults = default_form_state(main, self.root)
            if defaults is None:
                types = _declared_types(main)
                defaults = copy.copy(_EMPTY_SCALARS.get(types[0], {})) if types else {}
            self.value = defaults
        else:
            self.value = None
        self.enabled = enabled
        return self.value

    def filtered_value(self) -> Any:
        """The value with keys from inactive branches hidden."""
        if self.shape is UnionShape.ALTERNATIVES and isinstance(self.value, dict):
            return self._without_stale_keys(self.value, self.active_keys)
        return self.value

    def resolution(self) -> UnionResolution:
        return UnionResolution(
            value=self.value,
            shape=self.shape,
            selected_index=self.selected_index,
            enabled=self.enabled,
            ambiguous=self.ambiguous,
            titles=self.titles,
        )


def is_union_schema(schema: Any, root: dict[str, Any] | None = None) -> bool:
    resolved = resolve_ref(schema, root)
    return bool(resolved.get("oneOf") or resolved.get("anyOf"))


def resolve_union_field(
    schema: dict[str, Any],
    value: Any,
    selection: int | bool | None = None,
    root: dict[str, Any] | None = None,
) -> UnionResolution:
    """Stateless entry point: mount the field, or apply one selection or toggle.

    ``selection`` is ``None`` to mount, a bool to toggle an optional field, or
    a branch index for alternatives.
    """
    field = UnionField(schema, value, root)
    if selection is None:
        field.mount()
    elif isinstance(selection, bool):
        field.toggle(selection)
    else:
        field.select(selection)
    return field.resolution()
