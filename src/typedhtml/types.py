"""Attribute value types: literal parsers, generic coercions, and the HTML enums."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Id(str):
    """A valid HTML ID.

    Non-empty, starts with an alphabetic character, continues with
    alphanumerics and the ``_``, ``-`` and ``.`` characters.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> Id:
        _check_name(value, "ID")
        return super().__new__(cls, value)


class Class(str):
    """A valid CSS class name; same rules as :class:`Id`."""

    __slots__ = ()

    def __new__(cls, value: str) -> Class:
        _check_name(value, "class name")
        return super().__new__(cls, value)


def _check_name(value: str, what: str) -> None:
    if not value:
        raise ValueError(f"{what} cannot be empty")
    if not value[0].isalpha():
        raise ValueError(f"{what} must start with an alphabetic character")
    for ch in value[1:]:
        if not ch.isalnum() and ch not in "_-.":
            raise ValueError(f"{what} can only contain alphanumerics, dash, dot and underscore")


class LanguageTag(str):
    """A BCP 47 language tag (syntax check only)."""

    __slots__ = ()

    def __new__(cls, value: str) -> LanguageTag:
        if not _LANGUAGE_TAG.match(value):
            raise ValueError(f"{value!r} is not a valid language tag")
        return super().__new__(cls, value)


class Mime(str):
    """A media type such as ``text/css``."""

    __slots__ = ()

    def __new__(cls, value: str) -> Mime:
        if not _MIME.match(value):
            raise ValueError(f"{value!r} is not a valid media type")
        return super().__new__(cls, value)


_LANGUAGE_TAG = re.compile(r"^[A-Za-z]{1,8}(-[A-Za-z0-9]{1,8})*$")
_MIME = re.compile(r"^[\w.+-]+/[\w.+-]+(\s*;.*)?$")


class SpacedSet(frozenset):
    """A space separated set of unique values.

    Order and duplicates in the source do not matter: ``"foo bar foo"`` and
    ``"bar foo bar"`` give equal sets, rendered sorted as ``"bar foo"``.
    """

    def __str__(self) -> str:
        return " ".join(sorted(str(v) for v in self))


class SpacedList(tuple):
    """A space separated list of values, order and duplicates preserved."""

    def __str__(self) -> str:
        return " ".join(str(v) for v in self)


# ---------------------------------------------------------------------------
# Enumerated attribute values
# ---------------------------------------------------------------------------


class AreaShape(StrEnum):
    Rectangle = "rect"
    Circle = "circle"
    Polygon = "poly"
    Default = "default"


class BoolOrDefault(StrEnum):
    True_ = "true"
    Default = "default"
    False_ = "false"


class ButtonType(StrEnum):
    Submit = "submit"
    Reset = "reset"
    Button = "button"


class CrossOrigin(StrEnum):
    Anonymous = "anonymous"
    UseCredentials = "use-credentials"


class FormEncodingType(StrEnum):
    UrlEncoded = "application/x-www-form-urlencoded"
    FormData = "multipart/form-data"
    Text = "text/plain"


class FormMethod(StrEnum):
    Post = "post"
    Get = "get"


class FormDialogMethod(StrEnum):
    Post = "post"
    Get = "get"
    Dialog = "dialog"


class HTTPEquiv(StrEnum):
    ContentSecurityPolicy = "content-security-policy"
    Refresh = "refresh"


class ImageDecoding(StrEnum):
    Sync = "sync"
    Async = "async"
    Auto = "auto"


class InputType(StrEnum):
    Button = "button"
    Checkbox = "checkbox"
    Color = "color"
    Date = "date"
    DatetimeLocal = "datetime-local"
    Email = "email"
    File = "file"
    Hidden = "hidden"
    Image = "image"
    Month = "month"
    Number = "number"
    Password = "password"
    Radio = "radio"
    Range = "range"
    Reset = "reset"
    Search = "search"
    Submit = "submit"
    Tel = "tel"
    Text = "text"
    Time = "time"
    Url = "url"
    Week = "week"


class LinkType(StrEnum):
    Alternate = "alternate"
    Author = "author"
    Bookmark = "bookmark"
    Canonical = "canonical"
    External = "external"
    Help = "help"
    Icon = "icon"
    License = "license"
    Manifest = "manifest"
    ModulePreload = "modulepreload"
    Next = "next"
    NoFollow = "nofollow"
    NoOpener = "noopener"
    NoReferrer = "noreferrer"
    PingBack = "pingback"
    Prefetch = "prefetch"
    Preload = "preload"
    Prev = "prev"
    Search = "search"
    ShortLink = "shortlink"
    StyleSheet = "stylesheet"
    Tag = "tag"


class Metadata(StrEnum):
    ApplicationName = "application-name"
    Author = "author"
    Description = "description"
    Generator = "generator"
    Keywords = "keywords"
    Referrer = "referrer"
    Creator = "creator"
    Googlebot = "googlebot"
    Publisher = "publisher"
    Robots = "robots"
    Viewport = "viewport"


class OnOff(StrEnum):
    On = "on"
    Off = "off"


class OrderedListType(StrEnum):
    LowerCaseLetters = "a"
    UpperCaseLetters = "A"
    LowerCaseRomanNumerals = "i"
    UpperCaseRomanNumerals = "I"
    Numbers = "1"


class Preload(StrEnum):
    None_ = "none"
    Metadata = "metadata"
    Auto = "auto"


class ReferrerPolicy(StrEnum):
    NoReferrer = "no-referrer"
    NoReferrerWhenDowngrade = "no-referrer-when-downgrade"
    Origin = "origin"
    OriginWhenCrossOrigin = "origin-when-cross-origin"
    UnsafeUrl = "unsafe-url"


class Role(StrEnum):
    Any = "any"
    Alert = "alert"
    AlertDialog = "alertdialog"
    Application = "application"
    Article = "article"
    Banner = "banner"
    Checkbox = "checkbox"
    Cell = "cell"
    ColumnHeader = "columnheader"
    ComboBox = "combobox"
    Complementary = "complementary"
    ContentInfo = "contentinfo"
    Definition = "definition"
    Dialog = "dialog"
    Directory = "directory"
    Document = "document"
    Feed = "feed"
    Figure = "figure"
    Form = "form"
    Grid = "grid"
    GridCell = "gridcell"
    Group = "group"
    Heading = "heading"
    Image = "img"
    Link = "link"
    List = "list"
    ListBox = "listbox"
    ListItem = "listitem"
    Log = "log"
    Main = "main"
    Marquee = "marquee"
    Math = "math"
    Menu = "menu"
    MenuBar = "menubar"
    MenuItem = "menuitem"
    MenuItemCheckbox = "menuitemcheckbox"
    MenuItemRadio = "menuitemradio"
    Navigation = "navigation"
    None_ = "none"
    Note = "note"
    Option = "option"
    Presentation = "presentation"
    ProgressBar = "progressbar"
    Radio = "radio"
    RadioGroup = "radiogroup"
    Region = "region"
    Row = "row"
    RowGroup = "rowgroup"
    RowHeader = "rowheader"
    ScrollBar = "scrollbar"
    Search = "search"
    SearchBox = "searchbox"
    Separator = "separator"
    Slider = "slider"
    SpinButton = "spinbutton"
    Status = "status"
    Switch = "switch"
    Tab = "tab"
    Table = "table"
    TabList = "tablist"
    TabPanel = "tabpanel"
    Term = "term"
    TextBox = "textbox"
    Timer = "timer"
    ToolBar = "toolbar"
    ToolTip = "tooltip"
    Tree = "tree"
    TreeGrid = "treegrid"


class Sandbox(StrEnum):
    AllowForms = "allow-forms"
    AllowModals = "allow-modals"
    AllowOrientationLock = "allow-orientation-lock"
    AllowPointerLock = "allow-pointer-lock"
    AllowPopups = "allow-popups"
    AllowPopupsToEscapeSandbox = "allow-popups-to-escape-sandbox"
    AllowPresentation = "allow-presentation"
    AllowSameOrigin = "allow-same-origin"
    AllowScripts = "allow-scripts"
    AllowTopNavigation = "allow-top-navigation"
    AllowTopNavigationByUserNavigation = "allow-top-navigation-by-user-navigation"


class TableHeaderScope(StrEnum):
    Row = "row"
    Column = "col"
    RowGroup = "rowgroup"
    ColGroup = "colgroup"
    Auto = "auto"


class TextDirection(StrEnum):
    LeftToRight = "ltr"
    RightToLeft = "rtl"


class VideoKind(StrEnum):
    Subtitles = "subtitles"
    Captions = "captions"
    Descriptions = "descriptions"
    Chapters = "chapters"
    Metadata = "metadata"


class Wrap(StrEnum):
    Hard = "hard"
    Soft = "soft"
    Off = "off"


ENUMS: tuple[type[StrEnum], ...] = (
    AreaShape,
    BoolOrDefault,
    ButtonType,
    CrossOrigin,
    FormEncodingType,
    FormMethod,
    FormDialogMethod,
    HTTPEquiv,
    ImageDecoding,
    InputType,
    LinkType,
    Metadata,
    OnOff,
    OrderedListType,
    Preload,
    ReferrerPolicy,
    Role,
    Sandbox,
    TableHeaderScope,
    TextDirection,
    VideoKind,
    Wrap,
)


# ---------------------------------------------------------------------------
# Type descriptors
# ---------------------------------------------------------------------------


class AttributeType:
    """Descriptor for one declared attribute type.

    ``parse`` turns a quoted literal into a typed value and raises
    ``ValueError`` with a reason on failure. ``coerce`` adapts an arbitrary
    host value into the same type and raises ``TypeError`` or ``ValueError``.
    """

    name = "String"

    def parse(self, literal: str) -> Any:
        return literal

    def coerce(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.parse(value)
        return self.coerce_other(value)

    def coerce_other(self, value: Any) -> Any:
        raise TypeError(f"cannot use a value of type {type(value).__name__} as {self.name}")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class StringType(AttributeType):
    def __init__(self, name: str = "String") -> None:
        self.name = name

    def coerce_other(self, value: Any) -> Any:
        if isinstance(value, (bool, type(None))):
            return super().coerce_other(value)
        return str(value)


class BoolType(AttributeType):
    """Boolean attribute: rendered by presence, never by value."""

    name = "Bool"

    def parse(self, literal: str) -> bool:
        if literal in ("true", ""):
            return True
        if literal == "false":
            return False
        raise ValueError("expected 'true' or 'false'")

    def coerce_other(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return super().coerce_other(value)


@dataclass(repr=False)
class IntType(AttributeType):
    name: str
    minimum: int | None = None

    def parse(self, literal: str) -> int:
        try:
            value = int(literal.strip())
        except ValueError:
            raise ValueError("expected an integer") from None
        return self._check(value)

    def coerce_other(self, value: Any) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return self._check(value)
        return super().coerce_other(value)

    def _check(self, value: int) -> int:
        if self.minimum is not None and value < self.minimum:
            raise ValueError(f"expected an integer >= {self.minimum}")
        return value


class FloatType(AttributeType):
    name = "f64"

    def parse(self, literal: str) -> float:
        try:
            return float(literal)
        except ValueError:
            raise ValueError("expected a number") from None

    def coerce_other(self, value: Any) -> float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return super().coerce_other(value)


class EnumType(AttributeType):
    def __init__(self, enum: type[StrEnum]) -> None:
        self.enum = enum
        self.name = enum.__name__

    def parse(self, literal: str) -> StrEnum:
        try:
            return self.enum(literal)
        except ValueError:
            allowed = ", ".join(repr(m.value) for m in self.enum)
            raise ValueError(f"expected one of {allowed}") from None

    def coerce(self, value: Any) -> StrEnum:
        if isinstance(value, self.enum):
            return value
        if isinstance(value, StrEnum):
            raise TypeError(f"expected {self.name}, got {type(value).__name__}.{value.name}")
        return super().coerce(value)


class ValidatedStringType(AttributeType):
    """String subclass types whose constructor validates: Id, Class, LanguageTag, Mime."""

    def __init__(self, cls: type[str]) -> None:
        self.cls = cls
        self.name = cls.__name__

    def parse(self, literal: str) -> str:
        return self.cls(literal)

    def coerce(self, value: Any) -> str:
        if isinstance(value, self.cls):
            return value
        if isinstance(value, str):
            # Id and Class convert into one another
            return self.cls(str(value))
        return self.coerce_other(value)


class SpacedType(AttributeType):
    """SpacedSet<T> or SpacedList<T>: whitespace separated values of an item type."""

    def __init__(self, container: type[SpacedSet] | type[SpacedList], item: AttributeType) -> None:
        self.container = container
        self.item = item
        self.name = f"{container.__name__}<{item.name}>"

    def parse(self, literal: str) -> SpacedSet | SpacedList:
        return self.container(self.item.parse(part) for part in literal.split())

    def coerce_other(self, value: Any) -> SpacedSet | SpacedList:
        if isinstance(value, Iterable):
            return self.container(self.item.coerce(v) for v in value)
        return super().coerce_other(value)


@dataclass(frozen=True, slots=True)
class TypeSpec:
    """A type as written in a schema declaration, eg. ``SpacedSet<Class>``."""

    name: str
    args: tuple[TypeSpec, ...] = ()

    def __str__(self) -> str:
        if self.args:
            return f"{self.name}<{', '.join(str(a) for a in self.args)}>"
        return self.name


# String aliases carried without validation
STRING_ALIASES = (
    "String",
    "Uri",
    "CharacterEncoding",
    "Datetime",
    "FeaturePolicy",
    "Integrity",
    "Nonce",
    "Target",
)


def _make_types() -> dict[str, AttributeType]:
    types: dict[str, AttributeType] = {}
    for alias in STRING_ALIASES:
        types[alias] = StringType(alias)
    types["Bool"] = BoolType()
    types["isize"] = IntType("isize")
    types["usize"] = IntType("usize", minimum=0)
    types["f64"] = FloatType()
    for cls in (Id, Class, LanguageTag, Mime):
        types[cls.__name__] = ValidatedStringType(cls)
    types["ClassList"] = SpacedType(SpacedSet, types["Class"])
    for enum in ENUMS:
        types[enum.__name__] = EnumType(enum)
    return types


ATTRIBUTE_TYPES: dict[str, AttributeType] = _make_types()

_CONTAINERS: dict[str, type[SpacedSet] | type[SpacedList]] = {
    "SpacedSet": SpacedSet,
    "SpacedList": SpacedList,
}


def resolve_type(spec: TypeSpec) -> AttributeType:
    """Look up the descriptor for a type spec; raises KeyError for unknown types."""
    if spec.name in _CONTAINERS:
        if len(spec.args) != 1:
            raise KeyError(f"{spec.name} takes exactly one type argument")
        return SpacedType(_CONTAINERS[spec.name], resolve_type(spec.args[0]))
    if spec.args:
        raise KeyError(f"{spec.name} does not take type arguments")
    if spec.name not in ATTRIBUTE_TYPES:
        raise KeyError(f"unknown attribute type '{spec.name}'")
    return ATTRIBUTE_TYPES[spec.name]
