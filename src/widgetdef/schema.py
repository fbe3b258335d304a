"""Schema compiler — declarative widget definitions expanded into classes.

define_widget() takes a field schema and a render function and builds a new
Widget subclass. There are four kinds of field:

- shared:    one value per widget type, read-only accessor
- immutable: per instance, set only at construction, read-only accessor
- mutable:   per instance, read/write accessor
- state:     per instance, read/write accessor; bookkeeping that render
             isn't supposed to depend on

Every accessor is a property named <prefix><name>. Mutable and state fields
declared with redraw=True get a setter that redraws the widget after the
write, so assigning to the accessor is all it takes to update the screen.

Usage:
    Counter = define_widget(
        "Counter",
        shared=[field("kind", "box")],
        mutable=[field("count", 0, redraw=True)],
        render=lambda w: str(w.count),
    )
    doc = Document()
    c = Counter()
    c.insert(doc)   # doc.text == "0"
    c.count = 5     # doc.text == "5"
"""

from __future__ import annotations

import builtins
import dataclasses
import keyword
import logging
import sys
from enum import Enum
from typing import Any, Callable, Iterable

from widgetdef import _anchor
from widgetdef._tracking import schedule_redraw
from widgetdef.widget import Widget

logger = logging.getLogger("widgetdef.schema")

# ─── Configuration ───────────────────────────────────────────────────────────
_strict_state = False


def set_strict_state(enabled: bool) -> None:
    """Set the default for whether state fields may be redraw-flagged.

    Off by default: state fields compile exactly like mutable fields. When on,
    define_widget() rejects a state field declared with redraw=True. The
    strict_state argument of define_widget() overrides this per type.
    """
    global _strict_state
    _strict_state = bool(enabled)


# ─── Errors ──────────────────────────────────────────────────────────────────


class WidgetDefinitionError(ValueError):
    """The widget schema is malformed. Nothing was registered."""


class FieldTypeError(TypeError):
    """A value does not match the declared type of its field."""


# ─── Fields ──────────────────────────────────────────────────────────────────


class FieldKind(Enum):
    SHARED = "shared"
    IMMUTABLE = "immutable"
    MUTABLE = "mutable"
    STATE = "state"


@dataclasses.dataclass(frozen=True)
class Field:
    """One schema entry. Build with field() to get type inference."""

    name: str
    default: Any = None
    factory: Callable[[], Any] | None = None
    type: type = object
    doc: str | None = None
    redraw: bool = False
    kind: FieldKind | None = None

    def initial(self) -> Any:
        return self.factory() if self.factory is not None else self.default

    def accepts(self, value: Any) -> bool:
        if isinstance(value, self.type):
            return True
        # A field that starts out as None may go back to None.
        return value is None and self.default is None and self.factory is None

    def check(self, value: Any) -> None:
        if not self.accepts(value):
            raise FieldTypeError(
                f"field {self.name!r} expects {self.type.__name__}, "
                f"got {type(value).__name__}: {value!r}"
            )


def field(
    name: str,
    default: Any = None,
    *,
    factory: Callable[[], Any] | None = None,
    type: type | None = None,
    doc: str | None = None,
    redraw: bool = False,
) -> Field:
    """Declare a field. The type is inferred from the default when omitted.

    A factory is called once per instance, like dataclasses' default_factory.
    """
    if factory is not None and default is not None:
        raise WidgetDefinitionError(f"field {name!r} has both a default and a factory")
    if type is None:
        if factory is not None:
            type = factory if isinstance(factory, builtins.type) else object
        elif default is not None:
            type = builtins.type(default)
        else:
            type = object
    elif not isinstance(type, builtins.type):
        raise WidgetDefinitionError(f"field {name!r}: type must be a class, got {type!r}")
    f = Field(name=name, default=default, factory=factory, type=type, doc=doc, redraw=redraw)
    if factory is None and default is not None and not f.accepts(default):
        raise WidgetDefinitionError(
            f"field {name!r}: default {default!r} is not a {type.__name__}"
        )
    return f


def _coerce(entry: Any, kind: FieldKind) -> Field:
    """Normalize a schema entry: Field, bare name, or (name, default[, options])."""
    if isinstance(entry, Field):
        f = entry
    elif isinstance(entry, str):
        f = field(entry)
    elif isinstance(entry, tuple) and 1 <= len(entry) <= 3:
        name, *rest = entry
        default = rest[0] if rest else None
        options = rest[1] if len(rest) > 1 else {}
        if not isinstance(options, dict):
            raise WidgetDefinitionError(f"options for field {name!r} must be a dict")
        f = field(name, default, **options)
    else:
        raise WidgetDefinitionError(f"cannot read a {kind.value} field from {entry!r}")
    return dataclasses.replace(f, kind=kind)


def _check_symbol(name: Any, what: str) -> None:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise WidgetDefinitionError(f"{what} is not a symbol: {name!r}")


# ─── Generated-type base ─────────────────────────────────────────────────────


class SchemaWidget(Widget):
    """Base of every type built by define_widget().

    Construction takes one keyword argument per immutable, mutable or state
    field (named after the field, not the accessor). Fields not passed get
    their default. Initializers run afterwards, base types first.
    """

    __fields__: dict[str, Field] = {}
    __shared__: dict[str, Any] = {}
    __prefix__: str = ""

    def __init__(self, **initargs: Any) -> None:
        super().__init__()
        cls = type(self)
        for key in initargs:
            f = cls.__fields__.get(key)
            if f is None:
                raise TypeError(f"{cls.__name__}() got an unexpected keyword argument {key!r}")
            if f.kind is FieldKind.SHARED:
                raise TypeError(
                    f"{cls.__name__}() can't set shared field {key!r} per instance; "
                    f"use {cls.__name__}.set_shared()"
                )

        self._values: dict[str, Any] = {}
        for f in cls.__fields__.values():
            if f.kind is FieldKind.SHARED:
                continue
            value = initargs[f.name] if f.name in initargs else f.initial()
            f.check(value)
            self._values[f.name] = value

        for klass in reversed(cls.__mro__):
            initializer = klass.__dict__.get("__initializer__")
            if initializer is not None:
                initializer(self)

    @classmethod
    def fields(cls) -> tuple[Field, ...]:
        return tuple(cls.__fields__.values())

    @classmethod
    def get_shared(cls, name: str) -> Any:
        return cls._shared_store(name)[name]

    @classmethod
    def set_shared(cls, name: str, value: Any) -> None:
        """Change the single class-level value of a shared field."""
        store = cls._shared_store(name)
        cls.__fields__[name].check(value)
        store[name] = value

    @classmethod
    def _shared_store(cls, name: str) -> dict[str, Any]:
        for klass in cls.__mro__:
            store = klass.__dict__.get("__shared__")
            if store is not None and name in store:
                return store
        raise AttributeError(f"{cls.__name__} has no shared field {name!r}")


# Set on every instance by the widget base classes.
_INSTANCE_ATTRIBUTES = frozenset({
    "_id",
    "_visible",
    "_listener_refs",
    "_document",
    "_position",
    "_start",
    "_rendered_length",
    "_values",
})


def _shared_property(f: Field, store: dict[str, Any]) -> property:
    name = f.name

    def getter(self):
        return store[name]

    return property(getter, doc=f.doc)


def _immutable_property(f: Field) -> property:
    name = f.name

    def getter(self):
        return self._values[name]

    return property(getter, doc=f.doc)


def _mutable_property(f: Field) -> property:
    name = f.name

    def getter(self):
        return self._values[name]

    def setter(self, value):
        f.check(value)
        self._values[name] = value

    def redrawing_setter(self, value):
        setter(self, value)
        schedule_redraw(self)

    return property(getter, redrawing_setter if f.redraw else setter, doc=f.doc)


# ─── Compiler ────────────────────────────────────────────────────────────────


def define_widget(
    name: str,
    *,
    prefix: str = "",
    bases: Iterable[type] = (),
    doc: str | None = None,
    shared: Iterable[Any] = (),
    immutable: Iterable[Any] = (),
    mutable: Iterable[Any] = (),
    state: Iterable[Any] = (),
    render: Callable[[Any], str] | None = None,
    initialize: Callable[[Any], None] | None = None,
    strict_state: bool | None = None,
    module: str | None = None,
) -> type[SchemaWidget]:
    """Build, register and return a new widget type.

    render is called with the instance and returns the text to insert.
    initialize, if given, is called with the instance after all fields are set.
    Fields are inherited from generated parent types; a parent's render and
    initializer are inherited too.

    Raises WidgetDefinitionError before anything is created if the schema is
    malformed.
    """
    _check_symbol(name, "Name")
    if not isinstance(prefix, str):
        raise WidgetDefinitionError(f"prefix must be a string, got {prefix!r}")
    bases = tuple(bases)
    for base in bases:
        if not isinstance(base, type):
            raise WidgetDefinitionError(f"parent of {name} is not a class: {base!r}")
    if strict_state is None:
        strict_state = _strict_state

    own = (
        [_coerce(e, FieldKind.SHARED) for e in shared]
        + [_coerce(e, FieldKind.IMMUTABLE) for e in immutable]
        + [_coerce(e, FieldKind.MUTABLE) for e in mutable]
        + [_coerce(e, FieldKind.STATE) for e in state]
    )

    inherited: dict[str, Field] = {}
    for base in reversed(bases):
        if issubclass(base, SchemaWidget):
            inherited.update(base.__fields__)

    seen: set[str] = set()
    for f in own:
        _check_symbol(f.name, f"Field name of {name}")
        if f.name in seen:
            raise WidgetDefinitionError(f"{name} declares field {f.name!r} twice")
        seen.add(f.name)
        if f.redraw and f.kind in (FieldKind.SHARED, FieldKind.IMMUTABLE):
            raise WidgetDefinitionError(
                f"{f.kind.value} field {f.name!r} of {name} can't trigger a redraw"
            )
        if f.redraw and f.kind is FieldKind.STATE and strict_state:
            raise WidgetDefinitionError(
                f"state field {f.name!r} of {name} can't trigger a redraw (strict state)"
            )
        if (
            f.kind is not FieldKind.SHARED
            and f.factory is None
            and builtins.type(f.default).__hash__ is None
        ):
            raise WidgetDefinitionError(
                f"field {f.name!r} of {name} has a mutable default "
                f"{builtins.type(f.default).__name__}; use factory= instead"
            )
        accessor = prefix + f.name
        _check_symbol(accessor, f"Accessor of {name}")
        if hasattr(SchemaWidget, accessor) or accessor in _INSTANCE_ATTRIBUTES:
            raise WidgetDefinitionError(
                f"accessor {accessor!r} of {name} would shadow a widget attribute"
            )

    if render is not None and not callable(render):
        raise WidgetDefinitionError(f"render of {name} is not callable: {render!r}")
    if render is None and not any(
        getattr(b, "render", Widget.render) is not Widget.render for b in bases
    ):
        raise WidgetDefinitionError(f"{name} needs a render function")
    if initialize is not None and not callable(initialize):
        raise WidgetDefinitionError(f"initializer of {name} is not callable: {initialize!r}")

    all_fields = dict(inherited)
    shared_values: dict[str, Any] = {}
    namespace: dict[str, Any] = {
        "__doc__": doc,
        "__prefix__": prefix,
        "__shared__": shared_values,
        "__module__": module or _caller_module(),
    }
    for f in own:
        all_fields[f.name] = f
        accessor = prefix + f.name
        if f.kind is FieldKind.SHARED:
            shared_values[f.name] = f.initial()
            namespace[accessor] = _shared_property(f, shared_values)
        elif f.kind is FieldKind.IMMUTABLE:
            namespace[accessor] = _immutable_property(f)
        else:
            namespace[accessor] = _mutable_property(f)
    namespace["__fields__"] = all_fields

    if render is not None:
        def render_method(self):
            return render(self)

        render_method.__name__ = "render"
        render_method.__qualname__ = f"{name}.render"
        namespace["render"] = render_method
    if initialize is not None:
        namespace["__initializer__"] = initialize

    if any(issubclass(b, SchemaWidget) for b in bases):
        parents = bases
    else:
        parents = bases + (SchemaWidget,)
    try:
        cls = type(name, parents, namespace)
    except TypeError as e:
        raise WidgetDefinitionError(f"can't combine parents of {name}: {e}") from e

    if name in _anchor.widget_types:
        logger.debug("Redefining widget type %s", name)
    _anchor.widget_types[name] = cls
    logger.debug(
        "Defined widget type %s: %d fields, %d redraw-flagged",
        name, len(all_fields), sum(1 for f in own if f.redraw),
    )
    return cls


def get_widget_type(name: str) -> type[SchemaWidget]:
    """Look up a widget type registered by define_widget()."""
    try:
        return _anchor.widget_types[name]
    except KeyError:
        raise KeyError(f"no widget type named {name!r}") from None


def _caller_module() -> str:
    # Two frames up: define_widget()/defwidget() and their caller.
    try:
        frame = sys._getframe(2)
    except ValueError:
        return __name__
    return frame.f_globals.get("__name__", __name__)


# ─── Keyword-segment form ────────────────────────────────────────────────────

SEGMENT_KEYWORDS = (
    ":shared",
    ":immutable",
    ":mutable",
    ":state",
    ":render",
    ":initialize",
    ":doc",
    ":parents",
)


def group_segments(items: Iterable[Any]) -> dict[str | None, list[Any]]:
    """Split a flat keyword-delimited list into named segments.

    Everything between two recognized keywords belongs to the first. Items
    before the first keyword go under None. An unrecognized keyword (a string
    starting with ":") is kept as an ordinary item of the segment before it.

    Usage:
        group_segments([":mutable", ("count", 0), ":render", fn])
        # {":mutable": [("count", 0)], ":render": [fn]}
    """
    segments: dict[str | None, list[Any]] = {}
    current: str | None = None
    for item in items:
        if isinstance(item, str) and item in SEGMENT_KEYWORDS:
            current = item
            segments.setdefault(current, [])
            continue
        if isinstance(item, str) and item.startswith(":"):
            logger.warning(
                "Unknown segment keyword %r; treating it as part of segment %s",
                item, current,
            )
        segments.setdefault(current, []).append(item)
    return segments


def defwidget(name: str, prefix: str, items: Iterable[Any], **options: Any) -> type[SchemaWidget]:
    """define_widget() from a keyword-segment list.

    Usage:
        Counter = defwidget("Counter", "counter_", [
            ":doc", "Shows a number.",
            ":mutable", field("count", 0, redraw=True),
            ":render", lambda w: str(w.counter_count),
        ])
    """
    segments = group_segments(items)
    if segments.get(None):
        raise WidgetDefinitionError(
            f"{name}: items before the first segment keyword: {segments[None]!r}"
        )

    def single(key: str) -> Any:
        values = segments.get(key, [])
        if len(values) > 1:
            raise WidgetDefinitionError(f"{name}: {key} takes one item, got {len(values)}")
        return values[0] if values else None

    doc_parts = segments.get(":doc", [])
    return define_widget(
        name,
        prefix=prefix,
        bases=segments.get(":parents", ()),
        doc="\n".join(str(p) for p in doc_parts) if doc_parts else None,
        shared=segments.get(":shared", ()),
        immutable=segments.get(":immutable", ()),
        mutable=segments.get(":mutable", ()),
        state=segments.get(":state", ()),
        render=single(":render"),
        initialize=single(":initialize"),
        module=options.pop("module", None) or _caller_module(),
        **options,
    )
