"""Utility helpers shared by the catalogue loader."""

from __future__ import annotations

import typing as typ

from site_composer._constants import CONTROL_TYPES, SECTION_ROLES

from .conditions import build_condition
from .models import (
    ArrayFieldSpec,
    EditorFieldSpec,
    FieldOption,
    FieldValidation,
    RegistryError,
)


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: object | None, *, context: str) -> int | None:
    """Return ``value`` as an int, rejecting booleans and other types."""
    match value:
        case None:
            return None
        case bool():
            msg = f"{context} must be an integer, not a boolean."
            raise RegistryError(msg)
        case int():
            return value
        case _:
            msg = f"{context} must be an integer."
            raise RegistryError(msg)


def _build_options(
    payload: object | None, *, context: str
) -> tuple[FieldOption, ...]:
    """Normalise option entries given as mappings or bare strings."""
    if payload is None:
        return ()
    if not isinstance(payload, list):
        msg = f"{context}: 'options' must be a list."
        raise RegistryError(msg)
    options: list[FieldOption] = []
    for entry in payload:
        match entry:
            case {"value": value, **rest}:
                label = rest.get("label", value)
                options.append(FieldOption(value=str(value), label=str(label)))
            case str() as value:
                options.append(FieldOption(value=value, label=value))
            case _:
                msg = f"{context}: invalid option entry {entry!r}."
                raise RegistryError(msg)
    return tuple(options)


def _build_validation(
    payload: typ.Mapping[str, typ.Any] | None, *, context: str
) -> FieldValidation:
    """Build a FieldValidation from the optional ``validation`` mapping."""
    if not payload:
        return FieldValidation()
    return FieldValidation(
        required=bool(payload.get("required", False)),
        min_length=_optional_int(
            payload.get("min_length"), context=f"{context}: min_length"
        ),
        max_length=_optional_int(
            payload.get("max_length"), context=f"{context}: max_length"
        ),
    )


def _build_array_spec(
    payload: typ.Mapping[str, typ.Any] | None, *, context: str
) -> ArrayFieldSpec:
    """Build the item template, bounds, and seed of an array field."""
    if payload is None:
        return ArrayFieldSpec()
    if not isinstance(payload, dict):
        msg = f"{context}: 'array' must be a mapping."
        raise RegistryError(msg)
    item = payload.get("item", "New item")
    if not isinstance(item, str | dict):
        msg = f"{context}: array 'item' must be a string or a mapping."
        raise RegistryError(msg)
    seed = payload.get("seed", []) or []
    if not isinstance(seed, list):
        msg = f"{context}: array 'seed' must be a list."
        raise RegistryError(msg)
    max_items = _optional_int(payload.get("max_items"), context=f"{context}: max_items")
    min_items = _optional_int(payload.get("min_items"), context=f"{context}: min_items")
    return ArrayFieldSpec(
        item_template=dict(item) if isinstance(item, dict) else item,
        id_prefix=str(payload.get("id_prefix", "item")),
        max_items=max_items,
        min_items=min_items or 0,
        seed=tuple(seed),
    )


def _build_field(
    payload: typ.Mapping[str, typ.Any], *, context: str
) -> EditorFieldSpec:
    """Build a single editor field entry."""
    field_id = _optional_str(payload.get("id"))
    if field_id is None:
        msg = f"{context}: editor field is missing 'id'."
        raise RegistryError(msg)
    field_context = f"{context}, field '{field_id}'"
    control_type = payload.get("type", "text")
    if control_type not in CONTROL_TYPES:
        msg = f"{field_context}: unknown control type {control_type!r}."
        raise RegistryError(msg)
    array_payload = payload.get("array")
    if array_payload is not None and control_type != "array":
        msg = f"{field_context}: only array fields may declare 'array'."
        raise RegistryError(msg)
    return EditorFieldSpec(
        id=field_id,
        control_type=control_type,
        label=str(payload.get("label") or field_id),
        condition=build_condition(payload.get("condition"), payload.get("depends_on")),
        placeholder=_optional_str(payload.get("placeholder")),
        options=_build_options(payload.get("options"), context=field_context),
        validation=_build_validation(
            payload.get("validation"), context=field_context
        ),
        unset_default=bool(payload.get("unset_default", False)),
        array=(
            _build_array_spec(array_payload, context=field_context)
            if control_type == "array"
            else None
        ),
    )


def _validate_role(role: object, *, context: str) -> str:
    if role not in SECTION_ROLES:
        msg = f"{context}: unknown section role {role!r}."
        raise RegistryError(msg)
    return typ.cast("str", role)


def _string_list(value: object, *, context: str) -> list[str]:
    """Return ``value`` as a list of strings or raise RegistryError."""
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"{context} must be a list of section ids."
        raise RegistryError(msg)
    return list(value)


__all__ = [
    "_build_array_spec",
    "_build_field",
    "_build_options",
    "_build_validation",
    "_optional_int",
    "_optional_str",
    "_string_list",
    "_validate_role",
]
