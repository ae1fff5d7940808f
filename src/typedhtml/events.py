"""Event handler attributes and the output types that decide their form."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

# Supported DOM events, sorted. `on<event>` attributes must name one of these.
EVENTS: tuple[str, ...] = (
    "abort",
    "autocomplete",
    "autocompleteerror",
    "blur",
    "cancel",
    "canplay",
    "canplaythrough",
    "change",
    "click",
    "close",
    "contextmenu",
    "cuechange",
    "dblclick",
    "drag",
    "dragend",
    "dragenter",
    "dragexit",
    "dragleave",
    "dragover",
    "dragstart",
    "drop",
    "durationchange",
    "emptied",
    "ended",
    "error",
    "focus",
    "input",
    "invalid",
    "keydown",
    "keypress",
    "keyup",
    "load",
    "loadeddata",
    "loadedmetadata",
    "loadstart",
    "mousedown",
    "mouseenter",
    "mouseleave",
    "mousemove",
    "mouseout",
    "mouseover",
    "mouseup",
    "mousewheel",
    "pause",
    "play",
    "playing",
    "progress",
    "ratechange",
    "reset",
    "resize",
    "scroll",
    "seeked",
    "seeking",
    "select",
    "show",
    "sort",
    "stalled",
    "submit",
    "suspend",
    "timeupdate",
    "toggle",
    "volumechange",
    "waiting",
)

EVENT_NAMES = frozenset(EVENTS)


def event_name(attribute: str) -> str | None:
    """The event an `on<event>` attribute binds, or None if it is not one."""
    if attribute.startswith("on") and attribute[2:] in EVENT_NAMES:
        return attribute[2:]
    return None


class OutputType(StrEnum):
    """Render target of a compiled tree.

    ``String`` trees are printed as HTML, so handlers are JavaScript source.
    ``Dom`` trees are walked by an adapter through ``vnode()``, so handlers
    are callables attached to live nodes.
    """

    STRING = "String"
    DOM = "Dom"

    def check_handler(self, value: Any) -> None:
        """Raise TypeError if `value` cannot be a handler for this output type."""
        if self is OutputType.STRING and not isinstance(value, str):
            raise TypeError(f"String output needs a str event handler, got {type(value).__name__}")
        if self is OutputType.DOM and not callable(value):
            raise TypeError(f"Dom output needs a callable event handler, got {type(value).__name__}")


def output_type(name: str) -> OutputType:
    try:
        return OutputType(name)
    except ValueError:
        raise ValueError(f"unknown output type '{name}'; expected String or Dom") from None


@dataclass(frozen=True, slots=True)
class EventHandler:
    """A handler bound to one event name."""

    event: str
    handler: Any
    output: OutputType

    def render(self) -> str | None:
        """Attribute text for printing, or None for handlers that cannot be printed."""
        if self.output is OutputType.STRING:
            return self.handler
        return None

    def attach(self, target: Any) -> Any:
        """Register the handler on a live event target via `add_event_listener`."""
        if self.output is OutputType.STRING:
            raise TypeError("string event handlers can only be rendered, not attached")
        return target.add_event_listener(self.event, self.handler)


def bind(output: OutputType, event: str, value: Any) -> EventHandler:
    """Wrap `value` as a handler for `event`; raises TypeError on a handler of the wrong kind."""
    output.check_handler(value)
    return EventHandler(event, value, output)
