"""Typed dataclasses describing the section and theme catalogue."""

from __future__ import annotations

import copy
import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from .conditions import FieldCondition


class RegistryError(ValueError):
    """Raised when the section catalogue is invalid or incomplete."""


@dc.dataclass(frozen=True, slots=True)
class FieldOption:
    """A selectable value for select and radio controls."""

    value: str
    label: str


@dc.dataclass(frozen=True, slots=True)
class FieldValidation:
    """Length and presence constraints applied by the editor."""

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None


@dc.dataclass(frozen=True, slots=True)
class ArrayFieldSpec:
    """Item shape, seed, and bounds for an array control.

    Attributes
    ----------
    item_template : str | dict[str, typ.Any]
        Value appended by the editor's add action. Strings produce plain
        string lists; mappings produce object items that receive a fresh
        ``id`` built from ``id_prefix``.
    id_prefix : str
        Prefix for generated object item ids (``"plan"`` gives ``plan-1a2b``).
    max_items : int | None
        Hard cap enforced when adding items; ``None`` means unbounded.
    min_items : int
        Remove actions never shrink the list below this size.
    seed : tuple[typ.Any, ...]
        Items shown when the stored value is missing or not a list.
    """

    item_template: str | dict[str, typ.Any] = "New item"
    id_prefix: str = "item"
    max_items: int | None = None
    min_items: int = 0
    seed: tuple[typ.Any, ...] = ()

    @property
    def holds_strings(self) -> bool:
        """Return True when items are plain strings."""
        return isinstance(self.item_template, str)


@dc.dataclass(frozen=True, slots=True)
class EditorFieldSpec:
    """One editable field of a section's editor panel."""

    id: str
    control_type: str
    label: str
    condition: FieldCondition
    placeholder: str | None = None
    options: tuple[FieldOption, ...] = ()
    validation: FieldValidation = dc.field(default_factory=FieldValidation)
    unset_default: bool = False
    array: ArrayFieldSpec | None = None

    def option_values(self) -> list[str]:
        """Return the raw values accepted by select and radio controls."""
        return [option.value for option in self.options]


@dc.dataclass(frozen=True, slots=True)
class SectionDefinition:
    """Registry entry describing a section type within a theme."""

    id: str
    display_name: str
    component_key: str
    default_data: dict[str, typ.Any]
    editor_fields: tuple[EditorFieldSpec, ...]
    role: str = "content"
    icon: str | None = None

    def defaults(self) -> dict[str, typ.Any]:
        """Return a deep copy of the default payload, safe to mutate."""
        return copy.deepcopy(self.default_data)

    def get_field(self, field_id: str) -> EditorFieldSpec | None:
        """Return the editor field named ``field_id`` if it exists."""
        for field in self.editor_fields:
            if field.id == field_id:
                return field
        return None

    @property
    def is_combined(self) -> bool:
        return self.role == "combined"

    @property
    def is_settings(self) -> bool:
        return self.role == "settings"


@dc.dataclass(frozen=True, slots=True)
class StarterConfig:
    """Built-in composition a theme store seeds itself with."""

    sections: tuple[str, ...] = ()
    data: dict[str, dict[str, typ.Any]] = dc.field(default_factory=dict)

    def section_data(self) -> dict[str, dict[str, typ.Any]]:
        """Return a deep copy of the starter section data."""
        return copy.deepcopy(self.data)


@dc.dataclass(frozen=True, slots=True)
class ThemeConfig:
    """A named catalogue of sections plus per-page-type filters."""

    id: str
    display_name: str
    sections: tuple[SectionDefinition, ...]
    page_types: dict[str, frozenset[str]]
    starter: StarterConfig = dc.field(default_factory=StarterConfig)
    preview_component: str | None = None
    description: str = ""

    def get_section(self, section_id: str) -> SectionDefinition | None:
        """Return the section definition with ``section_id``, if any."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def section_ids(self) -> list[str]:
        return [section.id for section in self.sections]


__all__ = [
    "ArrayFieldSpec",
    "EditorFieldSpec",
    "FieldOption",
    "FieldValidation",
    "RegistryError",
    "SectionDefinition",
    "StarterConfig",
    "ThemeConfig",
]
