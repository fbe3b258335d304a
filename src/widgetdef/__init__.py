"""widgetdef: declarative, self-redrawing widgets for text documents."""

from importlib.metadata import version as _version

__version__ = _version("widgetdef")

from widgetdef._anchor import ElementID
from widgetdef._tracking import get_pending_count
from widgetdef.document import Document, Marker
from widgetdef.observable import Observable, add_listener, notify
from widgetdef.element import (
    Element,
    Group,
    element_ids,
    insert_element,
    delete_element,
    redraw_element,
    point_at_element,
)
from widgetdef.widget import Widget
from widgetdef.action import action, transaction
from widgetdef.schema import (
    Field,
    FieldKind,
    FieldTypeError,
    SchemaWidget,
    WidgetDefinitionError,
    define_widget,
    defwidget,
    field,
    get_widget_type,
    group_segments,
    set_strict_state,
)

__all__ = [
    "ElementID",
    "Document",
    "Marker",
    "Observable",
    "add_listener",
    "notify",
    "Element",
    "Group",
    "element_ids",
    "insert_element",
    "delete_element",
    "redraw_element",
    "point_at_element",
    "Widget",
    "action",
    "transaction",
    "get_pending_count",
    "Field",
    "FieldKind",
    "FieldTypeError",
    "SchemaWidget",
    "WidgetDefinitionError",
    "define_widget",
    "defwidget",
    "field",
    "get_widget_type",
    "group_segments",
    "set_strict_state",
]
