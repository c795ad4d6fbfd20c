"""Schema-driven editor panels and their write operations.

:class:`EditorFactory` builds a :class:`PanelNode` for a section from its
catalogue editor fields, reading live data from the dispatcher's active
store. Its write methods coerce input against the field schema before
handing it to the dispatcher; input that does not fit the schema is logged
and ignored.

Examples
--------
>>> from site_composer.builder import create_builder_context
>>> ctx = create_builder_context(active_theme="fitness-trainer")
>>> ctx.dispatcher.initialize_defaults()
>>> editor = EditorFactory(ctx.registry, ctx.dispatcher)
>>> panel = editor.render_editor("fitness-trainer", "whats-included")
>>> panel.control("showWorkoutPlans").value
True
"""

from __future__ import annotations

import base64
import collections.abc as cabc
import copy
import logging
import mimetypes
import re
import typing as typ
import uuid
from pathlib import Path

from site_composer._constants import DOMAIN_SECTION_ID
from site_composer.config import is_visible

from .nodes import ArrayItemNode, ControlNode, PanelNode

if typ.TYPE_CHECKING:
    from site_composer.builder import CompositionDispatcher
    from site_composer.config import (
        ArrayFieldSpec,
        EditorFieldSpec,
        SectionDefinition,
        SectionRegistry,
    )
    from site_composer.domain import SubdomainEditor

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
DEFAULT_MIME_TYPE = "application/octet-stream"


def default_item_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def to_data_url(content: bytes, mime_type: str) -> str:
    """Encode ``content`` as an embeddable ``data:`` URL.

    >>> to_data_url(b"hi", "text/plain")
    'data:text/plain;base64,aGk='
    """
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class InvalidFieldValue(ValueError):
    """Raised internally when input does not fit a field's schema."""


class EditorFactory:
    """Build editor panels and apply edits for the active theme store."""

    def __init__(
        self,
        registry: SectionRegistry,
        dispatcher: CompositionDispatcher,
        *,
        domain_editor: SubdomainEditor | None = None,
        id_factory: cabc.Callable[[str], str] = default_item_id,
    ) -> None:
        self.registry = registry
        self.dispatcher = dispatcher
        self.domain_editor = domain_editor
        self._id_factory = id_factory

    # -- reading -----------------------------------------------------------

    def render_editor(self, theme_id: str, section_id: str) -> PanelNode:
        """Return the editor panel for ``section_id`` with live values."""
        definition = self.registry.get_section_config(theme_id, section_id)
        if definition is None:
            return PanelNode(
                theme_id=theme_id,
                section_id=section_id,
                title=section_id,
                error="Section configuration not found",
            )
        data = self._section_data(section_id)
        visible_against = {**definition.default_data, **data}
        controls = [
            self._control(definition, field, data)
            for field in definition.editor_fields
            if is_visible(field.condition, visible_against)
        ]
        return PanelNode(
            theme_id=theme_id,
            section_id=section_id,
            title=definition.display_name,
            controls=controls,
        )

    def _control(
        self,
        definition: SectionDefinition,
        field: EditorFieldSpec,
        data: cabc.Mapping[str, typ.Any],
    ) -> ControlNode:
        value = self._control_value(definition, field, data)
        node = ControlNode(
            field_id=field.id,
            control_type=field.control_type,
            label=field.label,
            value=value,
            placeholder=field.placeholder,
            options=[(option.value, option.label) for option in field.options],
            required=field.validation.required,
            max_length=field.validation.max_length,
            errors=_validation_errors(field, value),
        )
        if field.array is not None:
            spec = field.array
            node.items = [
                ArrayItemNode(index=i, value=item, removable=len(value) > spec.min_items)
                for i, item in enumerate(value)
            ]
            node.max_items = spec.max_items
            node.can_add = spec.max_items is None or len(value) < spec.max_items
        if (
            definition.id == DOMAIN_SECTION_ID
            and field.id == "subdomain"
            and self.domain_editor is not None
        ):
            node.live = self.domain_editor.snapshot()
            node.value = self.domain_editor.value
        return node

    def _control_value(
        self,
        definition: SectionDefinition,
        field: EditorFieldSpec,
        data: cabc.Mapping[str, typ.Any],
    ) -> typ.Any:
        stored = data.get(field.id)
        match field.control_type:
            case "checkbox":
                return field.unset_default if stored is None else bool(stored)
            case "array":
                return self._array_items(field, stored)
            case "select" | "radio" if stored is None:
                return definition.default_data.get(field.id, "")
            case _:
                return "" if stored is None else stored

    @staticmethod
    def _array_items(field: EditorFieldSpec, stored: object) -> list[typ.Any]:
        spec = field.array
        if spec is None:  # pragma: no cover - loader guarantees a spec
            return []
        items = list(stored) if isinstance(stored, list) else copy.deepcopy(list(spec.seed))
        if spec.max_items is not None:
            items = items[: spec.max_items]
        return items

    def _section_data(self, section_id: str) -> dict[str, typ.Any]:
        return dict(self.dispatcher.state.section_data.get(section_id, {}))

    def _resolve(
        self, section_id: str, field_id: str
    ) -> tuple[SectionDefinition, EditorFieldSpec] | None:
        theme_id = self.dispatcher.active_theme.value
        definition = self.registry.get_section_config(theme_id, section_id)
        if definition is None:
            logger.warning("No section %s in theme %s", section_id, theme_id)
            return None
        field = definition.get_field(field_id)
        if field is None:
            logger.warning("Section %s has no editor field %s", section_id, field_id)
            return None
        return definition, field

    # -- writing -----------------------------------------------------------

    def change_field(self, section_id: str, field_id: str, value: typ.Any) -> bool:
        """Validate ``value`` against the field schema and store it.

        Returns
        -------
        bool
            ``True`` when the value was accepted.
        """
        resolved = self._resolve(section_id, field_id)
        if resolved is None:
            return False
        _, field = resolved
        if (
            section_id == DOMAIN_SECTION_ID
            and field_id == "subdomain"
            and self.domain_editor is not None
        ):
            self.domain_editor.change(str(value))
            return True
        try:
            coerced = self._coerce(field, value)
        except InvalidFieldValue as exc:
            logger.warning("Ignoring value for %s.%s: %s", section_id, field_id, exc)
            return False
        self.dispatcher.update_section_data(section_id, {field_id: coerced})
        return True

    def attach_file(
        self,
        section_id: str,
        field_id: str,
        source: Path | str | bytes,
        *,
        mime_type: str | None = None,
    ) -> str | None:
        """Store a file as a data URL in a file field.

        Parameters
        ----------
        source : Path | str | bytes
            A path to read, or the raw file content.
        mime_type : str | None
            Overrides the type guessed from the file name.

        Returns
        -------
        str | None
            The stored data URL, or ``None`` when the file could not be used.
        """
        resolved = self._resolve(section_id, field_id)
        if resolved is None:
            return None
        _, field = resolved
        if field.control_type != "file":
            logger.warning("Field %s.%s is not a file field", section_id, field_id)
            return None
        if isinstance(source, bytes):
            content = source
            guessed = None
        else:
            path = Path(source)
            try:
                content = path.read_bytes()
            except OSError as exc:
                logger.warning("Cannot read %s for %s.%s: %s", path, section_id, field_id, exc)
                return None
            guessed, _ = mimetypes.guess_type(path.name)
        url = to_data_url(content, mime_type or guessed or DEFAULT_MIME_TYPE)
        self.dispatcher.update_section_data(section_id, {field_id: url})
        return url

    def clear_file(self, section_id: str, field_id: str) -> bool:
        resolved = self._resolve(section_id, field_id)
        if resolved is None or resolved[1].control_type != "file":
            return False
        self.dispatcher.update_section_data(section_id, {field_id: ""})
        return True

    def add_array_item(self, section_id: str, field_id: str) -> bool:
        """Append a fresh item; rejected without writing when at the cap."""
        found = self._array_field(section_id, field_id)
        if found is None:
            return False
        spec, items = found
        if spec.max_items is not None and len(items) >= spec.max_items:
            logger.warning(
                "Cannot add to %s.%s: limit of %d items reached",
                section_id,
                field_id,
                spec.max_items,
            )
            return False
        if isinstance(spec.item_template, str):
            new_item: typ.Any = spec.item_template
        else:
            new_item = {"id": self._id_factory(spec.id_prefix), **copy.deepcopy(spec.item_template)}
        self.dispatcher.update_section_data(section_id, {field_id: [*items, new_item]})
        return True

    def remove_array_item(self, section_id: str, field_id: str, index: int) -> bool:
        found = self._array_field(section_id, field_id)
        if found is None:
            return False
        spec, items = found
        if not 0 <= index < len(items):
            logger.warning("No item %d in %s.%s", index, section_id, field_id)
            return False
        if len(items) <= spec.min_items:
            logger.warning(
                "Cannot remove from %s.%s: at least %d item(s) required",
                section_id,
                field_id,
                spec.min_items,
            )
            return False
        del items[index]
        self.dispatcher.update_section_data(section_id, {field_id: items})
        return True

    def change_array_item(
        self, section_id: str, field_id: str, index: int, value: typ.Any
    ) -> bool:
        """Replace a string item, or merge a mapping into an object item."""
        found = self._array_field(section_id, field_id)
        if found is None:
            return False
        spec, items = found
        if not 0 <= index < len(items):
            logger.warning("No item %d in %s.%s", index, section_id, field_id)
            return False
        if spec.holds_strings:
            if not isinstance(value, str):
                logger.warning("Items of %s.%s must be strings", section_id, field_id)
                return False
            items[index] = value
        else:
            if not isinstance(value, cabc.Mapping):
                logger.warning("Items of %s.%s must be mappings", section_id, field_id)
                return False
            current = items[index] if isinstance(items[index], dict) else {}
            items[index] = {**current, **value}
        self.dispatcher.update_section_data(section_id, {field_id: items})
        return True

    def reset_section(self, section_id: str) -> bool:
        """Restore registry defaults, discarding this section's edits only."""
        theme_id = self.dispatcher.active_theme.value
        definition = self.registry.get_section_config(theme_id, section_id)
        if definition is None:
            logger.warning("No section %s in theme %s", section_id, theme_id)
            return False
        self.dispatcher.replace_section_data(section_id, definition.defaults())
        return True

    def _array_field(
        self, section_id: str, field_id: str
    ) -> tuple[ArrayFieldSpec, list[typ.Any]] | None:
        resolved = self._resolve(section_id, field_id)
        if resolved is None:
            return None
        _, field = resolved
        if field.array is None:
            logger.warning("Field %s.%s is not an array field", section_id, field_id)
            return None
        stored = self._section_data(section_id).get(field_id)
        return field.array, copy.deepcopy(self._array_items(field, stored))

    @staticmethod
    def _coerce(field: EditorFieldSpec, value: typ.Any) -> typ.Any:
        match field.control_type:
            case "text" | "textarea":
                if not isinstance(value, str | int | float) or isinstance(value, bool):
                    msg = f"expected text, got {type(value).__name__}"
                    raise InvalidFieldValue(msg)
                text = str(value)
                limit = field.validation.max_length
                if limit is not None and len(text) > limit:
                    logger.info("Truncating %s to %d characters", field.id, limit)
                    text = text[:limit]
                return text
            case "number":
                return _coerce_number(value)
            case "checkbox":
                if not isinstance(value, bool):
                    msg = f"expected a boolean, got {value!r}"
                    raise InvalidFieldValue(msg)
                return value
            case "select" | "radio":
                allowed = field.option_values()
                if str(value) not in allowed:
                    msg = f"{value!r} is not one of {allowed}"
                    raise InvalidFieldValue(msg)
                return str(value)
            case "color":
                if not isinstance(value, str) or not COLOR_PATTERN.match(value):
                    msg = f"{value!r} is not a hex colour"
                    raise InvalidFieldValue(msg)
                return value
            case "file":
                if not isinstance(value, str):
                    msg = "file fields hold a URL or data URL"
                    raise InvalidFieldValue(msg)
                return value
            case "array":
                return _coerce_array(field, value)
            case _:  # pragma: no cover - loader rejects unknown control types
                msg = f"unsupported control type {field.control_type}"
                raise InvalidFieldValue(msg)


def _coerce_number(value: typ.Any) -> int | float:
    match value:
        case bool():
            msg = "expected a number, got a boolean"
            raise InvalidFieldValue(msg)
        case int() | float():
            return value
        case str() if value.strip():
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                return float(text)
            except ValueError as exc:
                msg = f"{value!r} is not a number"
                raise InvalidFieldValue(msg) from exc
        case _:
            msg = f"{value!r} is not a number"
            raise InvalidFieldValue(msg)


def _coerce_array(field: EditorFieldSpec, value: typ.Any) -> list[typ.Any]:
    spec = field.array
    if spec is None or not isinstance(value, list):
        msg = "expected a list"
        raise InvalidFieldValue(msg)
    if spec.max_items is not None and len(value) > spec.max_items:
        msg = f"at most {spec.max_items} items allowed"
        raise InvalidFieldValue(msg)
    expected = str if spec.holds_strings else dict
    if not all(isinstance(item, expected) for item in value):
        msg = f"items must be {expected.__name__} values"
        raise InvalidFieldValue(msg)
    return copy.deepcopy(value)


def _validation_errors(field: EditorFieldSpec, value: typ.Any) -> list[str]:
    if not isinstance(value, str):
        return []
    rules = field.validation
    errors: list[str] = []
    if rules.required and not value.strip():
        errors.append(f"{field.label} is required")
    if rules.min_length is not None and value and len(value) < rules.min_length:
        errors.append(f"{field.label} must be at least {rules.min_length} characters")
    if rules.max_length is not None and len(value) > rules.max_length:
        errors.append(f"{field.label} must be at most {rules.max_length} characters")
    return errors


__all__ = ["EditorFactory", "InvalidFieldValue", "default_item_id", "to_data_url"]
