from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uiheal.core.metadata import NodeSnapshot

_IDENTIFIER = re.compile(r"-?[A-Za-z_][A-Za-z0-9_-]*")
_QUOTED = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'')
_BRACKETED = re.compile(r"\[[^\]]*\]")

TEST_ID_ATTRIBUTES = ("data-testid", "data-test")


def infer_locator_type(locator: str) -> str:
    stripped = locator.strip()
    if stripped.startswith("/") or stripped.startswith("("):
        return "xpath"
    return "css"


def css_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def attribute_locator(attribute: str, value: str, tag: str = "") -> str:
    return f"{tag}[{attribute}={css_string(value)}]"


def id_locator(value: str) -> str:
    if _IDENTIFIER.fullmatch(value):
        return f"#{value}"
    return attribute_locator("id", value)


def class_locator(classes: list[str], limit: int = 2) -> str | None:
    usable = [name for name in classes if _IDENTIFIER.fullmatch(name)][:limit]
    if not usable:
        return None
    return "." + ".".join(usable)


def preferred_locator(node: NodeSnapshot) -> str:
    """Builds the most stable locator the node's own attributes allow.

    Preference: id, test-id attribute, aria-label, name, first two classes,
    bare tag name.
    """

    if node.id:
        return id_locator(node.id)
    for attribute in TEST_ID_ATTRIBUTES:
        value = node.attributes.get(attribute)
        if value:
            return attribute_locator(attribute, value)
    aria_label = node.attributes.get("aria-label")
    if aria_label:
        return attribute_locator("aria-label", aria_label)
    name = node.attributes.get("name")
    if name:
        return attribute_locator("name", name)
    classes = class_locator(node.class_list)
    if classes:
        return classes
    return node.tag


def xpath_literal(value: str) -> str | None:
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    return None


def build_xpath(tag: str, element_id: str = "", text: str = "", aria_label: str = "") -> str:
    tag = tag or "*"
    if element_id and xpath_literal(element_id):
        return f"//*[@id={xpath_literal(element_id)}]"
    if text and xpath_literal(text[:40]):
        return f"//{tag}[contains(text(), {xpath_literal(text[:40])})]"
    if aria_label and xpath_literal(aria_label):
        return f"//{tag}[@aria-label={xpath_literal(aria_label)}]"
    return f"//{tag}"


def _without_literals(locator: str) -> str:
    return _QUOTED.sub('""', locator)


def is_id_based(locator: str) -> bool:
    stripped = _without_literals(locator)
    if infer_locator_type(locator) == "xpath":
        return "@id" in stripped
    return bool(re.search(r"#[A-Za-z_\\-]", stripped) or re.search(r"\[\s*id\s*[~|^$*]?=", stripped))


def is_data_attribute_based(locator: str) -> bool:
    stripped = _without_literals(locator)
    return bool(re.search(r"(\[\s*|@)data-", stripped))


def is_aria_based(locator: str) -> bool:
    stripped = _without_literals(locator)
    return bool(re.search(r"(\[\s*|@)aria-", stripped))


def is_position_based(locator: str) -> bool:
    stripped = _without_literals(locator)
    if ":nth-child" in stripped or ":nth-of-type" in stripped or ":nth-last-" in stripped:
        return True
    return infer_locator_type(locator) == "xpath" and bool(re.search(r"\[\s*\d+\s*\]", stripped))


def is_class_based(locator: str) -> bool:
    stripped = _without_literals(locator)
    if infer_locator_type(locator) == "xpath":
        return "@class" in stripped
    return bool(re.search(r"\.[A-Za-z_\\-]", _BRACKETED.sub("", stripped)))
