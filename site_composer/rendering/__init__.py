"""Section rendering and editor panels."""

from .components import (
    COMPONENT_TEMPLATES,
    Component,
    ComponentRegistry,
    TemplateComponent,
    create_environment,
)
from .editor_factory import EditorFactory, InvalidFieldValue, to_data_url
from .nodes import ArrayItemNode, ControlNode, PanelNode, RenderedNode, error_node
from .section_factory import SECTION_NOT_FOUND, SectionFactory, combined_order

__all__ = [
    "COMPONENT_TEMPLATES",
    "SECTION_NOT_FOUND",
    "ArrayItemNode",
    "Component",
    "ComponentRegistry",
    "ControlNode",
    "EditorFactory",
    "InvalidFieldValue",
    "PanelNode",
    "RenderedNode",
    "SectionFactory",
    "TemplateComponent",
    "combined_order",
    "create_environment",
    "error_node",
    "to_data_url",
]
