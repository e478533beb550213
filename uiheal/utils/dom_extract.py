from __future__ import annotations

from typing import Any

from uiheal.core.metadata import BoundingBox, NodeSnapshot

_DESCRIBE_FUNCTION = r"""
const uniqueCss = (node) => {
  const tag = node.tagName.toLowerCase();
  const count = (selector) => {
    try {
      return document.querySelectorAll(selector).length;
    } catch (err) {
      return 0;
    }
  };
  if (node.id && count(`#${CSS.escape(node.id)}`) === 1) return `#${CSS.escape(node.id)}`;
  for (const attr of ["data-testid", "data-test", "name", "aria-label"]) {
    const value = node.getAttribute(attr);
    if (!value) continue;
    const candidate = `${tag}[${attr}="${value.replace(/\\/g, "\\\\").replace(/"/g, '\\"')}"]`;
    if (count(candidate) === 1) return candidate;
  }
  const parts = [];
  let current = node;
  while (current && current.nodeType === 1 && current !== document.documentElement) {
    if (current !== node && current.id && count(`#${CSS.escape(current.id)}`) === 1) {
      parts.unshift(`#${CSS.escape(current.id)}`);
      break;
    }
    let part = current.tagName.toLowerCase();
    const parent = current.parentElement;
    if (parent) {
      const siblings = Array.from(parent.children).filter((item) => item.tagName === current.tagName);
      if (siblings.length > 1) part += `:nth-of-type(${siblings.indexOf(current) + 1})`;
    }
    parts.unshift(part);
    current = parent;
  }
  return parts.join(" > ");
};

const describe = (node, textLimit) => {
  const rect = node.getBoundingClientRect();
  const style = window.getComputedStyle(node);
  const ownText = Array.from(node.childNodes)
    .filter((child) => child.nodeType === Node.TEXT_NODE)
    .map((child) => child.textContent)
    .join(" ")
    .trim();
  return {
    tag: node.tagName.toLowerCase(),
    locator: uniqueCss(node),
    type: node.getAttribute("type") || (node.tagName.toLowerCase() === "input" ? "text" : null),
    text: ((node.innerText || node.textContent || "").trim()).slice(0, textLimit),
    own_text: ownText,
    attributes: Array.from(node.attributes).reduce((acc, attr) => {
      acc[attr.name] = attr.value;
      return acc;
    }, {}),
    parent_tag: node.parentElement ? node.parentElement.tagName.toLowerCase() : "",
    rect: { x: rect.x, y: rect.y, width: rect.width, height: rect.height },
    styles: { display: style.display, visibility: style.visibility, cursor: style.cursor },
  };
};
"""

DESCRIBE_ELEMENT_SCRIPT = _DESCRIBE_FUNCTION + "\nreturn describe(arguments[0], arguments[1]);"

DOM_SNAPSHOT_SCRIPT = _DESCRIBE_FUNCTION + r"""
const limit = arguments[1];
const items = [];
for (const node of document.querySelectorAll("body *")) {
  if (items.length >= limit) break;
  items.push(describe(node, arguments[0]));
}
return items;
"""

ELEMENT_TEXT_SCRIPT = """
const node = arguments[0];
return node ? (node.innerText || node.textContent || "") : null;
"""

PAGE_CONTEXT_SCRIPT = """
return { url: window.location.href, title: document.title };
"""

PAGE_SOURCE_SCRIPT = """
return document.documentElement ? document.documentElement.outerHTML : "";
"""


def node_from_payload(item: dict[str, Any]) -> NodeSnapshot:
    rect = item.get("rect") or {}
    return NodeSnapshot(
        tag=(item.get("tag") or "").lower(),
        locator=item.get("locator") or "",
        type=item.get("type"),
        text=item.get("text") or "",
        own_text=item.get("own_text") or "",
        attributes={str(key): str(value) for key, value in (item.get("attributes") or {}).items()},
        parent_tag=item.get("parent_tag") or "",
        rect=BoundingBox(
            x=float(rect.get("x", 0.0)),
            y=float(rect.get("y", 0.0)),
            width=float(rect.get("width", 0.0)),
            height=float(rect.get("height", 0.0)),
        ),
        styles=dict(item.get("styles") or {}),
    )


def nodes_from_payload(payload: Any) -> list[NodeSnapshot]:
    if not isinstance(payload, list):
        return []
    return [node_from_payload(item) for item in payload if isinstance(item, dict)]
