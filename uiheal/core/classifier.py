from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uiheal.core.metadata import NodeSnapshot


class ElementType(str, Enum):
    BUTTON = "button"
    LINK = "link"
    INPUT = "input"
    SELECT = "select"
    TEXTAREA = "textarea"
    FORM = "form"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    UNKNOWN = "unknown"


FORM_FIELD_TYPES = frozenset(
    {
        ElementType.INPUT,
        ElementType.SELECT,
        ElementType.TEXTAREA,
        ElementType.CHECKBOX,
        ElementType.RADIO,
    }
)

CLICKABLE_TAGS = frozenset({"button", "a", "select", "summary", "option"})
CLICKABLE_INPUT_TYPES = frozenset({"button", "submit", "reset", "checkbox", "radio", "image"})
INTERACTIVE_ROLES = frozenset({"button", "link", "menuitem", "tab", "checkbox", "radio", "option", "switch"})


def classify_element(node: NodeSnapshot) -> ElementType:
    """Assigns a semantic type; explicit button types win over roles."""

    tag = node.tag
    input_type = (node.type or "").lower()
    if tag == "button" or input_type in {"submit", "button"}:
        return ElementType.BUTTON
    if tag == "a":
        return ElementType.LINK
    if tag == "input":
        if input_type == "checkbox":
            return ElementType.CHECKBOX
        if input_type == "radio":
            return ElementType.RADIO
        return ElementType.INPUT
    if tag == "select":
        return ElementType.SELECT
    if tag == "textarea":
        return ElementType.TEXTAREA
    if tag == "form":
        return ElementType.FORM
    if node.role == "button":
        return ElementType.BUTTON
    if node.role == "link":
        return ElementType.LINK
    return ElementType.UNKNOWN


def is_clickable(node: NodeSnapshot) -> bool:
    if node.pointer_cursor or node.tag in CLICKABLE_TAGS:
        return True
    if node.tag == "input" and (node.type or "").lower() in CLICKABLE_INPUT_TYPES:
        return True
    return node.role in INTERACTIVE_ROLES or "onclick" in node.attributes
