"""Visibility predicates for editor fields.

Catalogue entries express visibility in one of two ways: an expression
against the section's own data (``editorMode == "about"``) or a
``{field, value}`` dependency. Both compile into the closed predicate type
defined here, which the editor factory evaluates against live section data.

Examples
--------
>>> cond = parse_condition('editorMode === "join"')
>>> is_visible(cond, {"editorMode": "join"})
True
>>> is_visible(ALWAYS, {})
True
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .models import RegistryError

EXPRESSION_PATTERN = re.compile(
    r"""^\s*(?P<field>[A-Za-z_][A-Za-z0-9_]*)\s*===?\s*(?P<quote>["'])(?P<value>.*)(?P=quote)\s*$"""
)


@dc.dataclass(frozen=True, slots=True)
class Always:
    """Predicate that never hides its field."""


@dc.dataclass(frozen=True, slots=True)
class Equals:
    """Predicate satisfied when ``data[field] == value``."""

    field: str
    value: typ.Any


FieldCondition = Always | Equals

ALWAYS = Always()


def parse_condition(expression: str) -> Equals:
    """Compile an equality expression such as ``mode == "x"``.

    Raises
    ------
    RegistryError
        If ``expression`` is not a single field/string equality.
    """
    match = EXPRESSION_PATTERN.match(expression)
    if match is None:
        msg = f"Unsupported field condition expression: {expression!r}"
        raise RegistryError(msg)
    return Equals(field=match.group("field"), value=match.group("value"))


def build_condition(
    expression: object | None, depends_on: object | None
) -> FieldCondition:
    """Return the predicate described by a catalogue field entry."""
    if expression is not None and depends_on is not None:
        msg = "A field may declare 'condition' or 'depends_on', not both."
        raise RegistryError(msg)
    match expression, depends_on:
        case None, None:
            return ALWAYS
        case str() as text, None:
            return parse_condition(text)
        case None, {"field": str() as field, "value": value}:
            return Equals(field=field, value=value)
        case _:
            msg = (
                "Field conditions must be an expression string or a "
                "'depends_on' mapping with 'field' and 'value'."
            )
            raise RegistryError(msg)


def is_visible(condition: FieldCondition, data: typ.Mapping[str, typ.Any]) -> bool:
    """Interpret ``condition`` against a section's current data."""
    match condition:
        case Always():
            return True
        case Equals(field=field, value=value):
            return data.get(field) == value
        case _:  # pragma: no cover - closed union guard
            msg = f"Unknown field condition: {condition!r}"
            raise TypeError(msg)


__all__ = [
    "ALWAYS",
    "Always",
    "Equals",
    "FieldCondition",
    "build_condition",
    "is_visible",
    "parse_condition",
]
