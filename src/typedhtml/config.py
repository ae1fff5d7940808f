"""Fixed tables shared by the schema registry and the serializer."""

from __future__ import annotations

from typedhtml.types import TypeSpec

# Merged into every element schema unless the declaration overrides them.
# ARIA and XML attributes are not included.
GLOBAL_ATTRIBUTES: dict[str, TypeSpec] = {
    "id": TypeSpec("Id"),
    "class": TypeSpec("ClassList"),
    "accesskey": TypeSpec("String"),
    "autocapitalize": TypeSpec("String"),
    "contenteditable": TypeSpec("Bool"),
    "contextmenu": TypeSpec("Id"),
    "dir": TypeSpec("TextDirection"),
    "draggable": TypeSpec("Bool"),
    "hidden": TypeSpec("Bool"),
    "is": TypeSpec("String"),
    "lang": TypeSpec("LanguageTag"),
    "style": TypeSpec("String"),
    "tabindex": TypeSpec("isize"),
    "title": TypeSpec("String"),
}

# Elements that render as <name/> when they have no children. Curated list,
# not derived from any schema field.
SELF_CLOSING: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "command",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Pseudo-category accepted by elements whose only free-form children are text
TEXT_NODE = "TextNode"

# Categories a text node satisfies
TEXT_CATEGORIES: frozenset[str] = frozenset({"FlowContent", "PhrasingContent", TEXT_NODE})
