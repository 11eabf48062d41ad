"""Binding introspection for Pydantic models.

This module analyzes Pydantic models and derives the immutable mapping between
their fields and XML nodes: element and attribute names, nesting, repetition
and the text conversion used for every scalar value.
"""

from __future__ import annotations

import base64
import datetime
import decimal
import enum
import threading
import types
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..exceptions import BindingError
from ..models.fields import (
    NODE_ATTRIBUTE,
    NODE_ELEMENT,
    NODE_TEXT,
    XML_NAME_KEY,
    XML_NODE_KEY,
    XML_WRAPPER_KEY,
)


class ValueKind(enum.Enum):
    """How a field value is rendered as XML text."""

    STR = "str"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DECIMAL = "decimal"
    BYTES = "bytes"
    DATETIME = "datetime"
    DATE = "date"
    ENUM = "enum"
    MODEL = "model"


_SCALAR_KINDS: Dict[Any, ValueKind] = {
    str: ValueKind.STR,
    int: ValueKind.INT,
    float: ValueKind.FLOAT,
    bool: ValueKind.BOOL,
    decimal.Decimal: ValueKind.DECIMAL,
    bytes: ValueKind.BYTES,
    datetime.datetime: ValueKind.DATETIME,
    datetime.date: ValueKind.DATE,
}

_EMPTY_VALUES: Dict[ValueKind, Any] = {
    ValueKind.STR: "",
    ValueKind.INT: 0,
    ValueKind.FLOAT: 0.0,
    ValueKind.BOOL: False,
    ValueKind.DECIMAL: decimal.Decimal(0),
    ValueKind.BYTES: b"",
    ValueKind.DATETIME: datetime.datetime.min,
    ValueKind.DATE: datetime.date.min,
}

_TRUE_TEXT = frozenset({"true", "1"})
_FALSE_TEXT = frozenset({"false", "0"})

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XSI_NIL = f"{{{XSI_NAMESPACE}}}nil"


def qualify(namespace: Optional[str], local_name: str) -> str:
    """Return the lxml tag for ``local_name`` in ``namespace``."""
    if namespace:
        return f"{{{namespace}}}{local_name}"
    return local_name


def is_nil(element: Any) -> bool:
    """Whether an element carries the ``xsi:nil`` marker."""
    return element.get(XSI_NIL) in _TRUE_TEXT


@dataclass(frozen=True)
class FieldBinding:
    """Binding information for a single model field.

    Attributes:
        name: Python field name
        key: Key the model accepts the field under on validation (alias aware)
        xml_name: Element or attribute local name
        node: One of "element", "attribute" or "text"
        kind: How scalar values are rendered (MODEL for nested models)
        python_type: Item type after Optional/list unwrapping
        required: Whether the model declares no default for the field
        optional: Whether None is an accepted value
        is_list: Whether the field holds repeated items
        wrapper: Name of the element wrapping repeated items, if any
        nillable: Whether None is written as an ``xsi:nil`` element instead
            of being omitted (its absence would decode to something else)
    """

    name: str
    key: str
    xml_name: str
    node: str
    kind: ValueKind
    python_type: Type[Any]
    required: bool
    optional: bool
    is_list: bool
    wrapper: Optional[str] = None
    nillable: bool = False

    @property
    def is_model(self) -> bool:
        return self.kind is ValueKind.MODEL

    def to_text(self, value: Any) -> str:
        """Render a scalar item as XML text.

        Raises:
            TypeError: If the value does not match the field kind
        """
        kind = self.kind
        if kind is ValueKind.BOOL:
            if not isinstance(value, bool):
                raise TypeError(f"expected bool, got {type(value).__name__}")
            return "true" if value else "false"
        if kind is ValueKind.ENUM:
            if not isinstance(value, self.python_type):
                raise TypeError(f"expected {self.python_type.__name__}, got {type(value).__name__}")
            return str(value.value)
        if kind is ValueKind.FLOAT:
            return repr(float(value))
        if kind is ValueKind.BYTES:
            if not isinstance(value, (bytes, bytearray)):
                raise TypeError(f"expected bytes, got {type(value).__name__}")
            return base64.b64encode(value).decode("ascii")
        if kind in (ValueKind.DATETIME, ValueKind.DATE):
            return value.isoformat()
        if kind is ValueKind.STR:
            if not isinstance(value, str):
                raise TypeError(f"expected str, got {type(value).__name__}")
            return value
        return str(value)

    def from_text(self, text: Optional[str]) -> Any:
        """Convert XML text back to a scalar item.

        Raises:
            ValueError: If the text is not a valid rendering for the field kind
        """
        kind = self.kind
        if kind is ValueKind.STR:
            return text or ""
        raw = (text or "").strip()
        if kind is ValueKind.INT:
            return int(raw)
        if kind is ValueKind.FLOAT:
            return float(raw)
        if kind is ValueKind.BOOL:
            if raw in _TRUE_TEXT:
                return True
            if raw in _FALSE_TEXT:
                return False
            raise ValueError(f"invalid boolean {raw!r}")
        if kind is ValueKind.DECIMAL:
            try:
                return decimal.Decimal(raw)
            except decimal.InvalidOperation as err:
                raise ValueError(f"invalid decimal {raw!r}") from err
        if kind is ValueKind.BYTES:
            return base64.b64decode(raw, validate=True)
        if kind is ValueKind.DATETIME:
            return datetime.datetime.fromisoformat(raw)
        if kind is ValueKind.DATE:
            return datetime.date.fromisoformat(raw)
        if kind is ValueKind.ENUM:
            for member in self.python_type:
                if str(member.value) == raw:
                    return member
            raise ValueError(f"{raw!r} is not a valid {self.python_type.__name__}")
        raise ValueError(f"field {self.name} has no scalar text form")

    def empty_value(self) -> Any:
        """Value a missing field takes when the model declares no default.

        Nested models are filled by the decoder, which needs their binding.
        """
        if self.optional:
            return None
        if self.is_list:
            return []
        if self.kind is ValueKind.ENUM:
            return next(iter(self.python_type))
        return _EMPTY_VALUES[self.kind]


class DocumentBinding:
    """Binding information for an entire model.

    This class introspects a Pydantic model and extracts the XML mapping of
    each field. Instances are immutable once built and are shared between
    threads through a BindingRegistry.

    Example:
        >>> binding = DocumentBinding.from_model(Server)
        >>> binding.root_name
        'server'
        >>> [f.xml_name for f in binding.attributes]
        ['id']
    """

    def __init__(self, model_class: Type[BaseModel]) -> None:
        """Initialize binding from a Pydantic model.

        Args:
            model_class: Pydantic model class to introspect

        Raises:
            BindingError: If the model cannot be mapped onto XML
        """
        _ensure_model_class(model_class)
        self.model_class = model_class
        self.root_name: str = getattr(model_class, "xml_root_name", None) or _decapitalize(
            model_class.__name__
        )
        self.namespace: Optional[str] = getattr(model_class, "xml_namespace", None)
        self.fields: Tuple[FieldBinding, ...] = tuple(
            _extract_field_binding(model_class, name, info)
            for name, info in model_class.model_fields.items()
        )
        self.attributes = tuple(f for f in self.fields if f.node == NODE_ATTRIBUTE)
        self.elements = tuple(f for f in self.fields if f.node == NODE_ELEMENT)
        text_fields = [f for f in self.fields if f.node == NODE_TEXT]
        self.text_field: Optional[FieldBinding] = text_fields[0] if text_fields else None
        self._check_layout(text_fields)

    @classmethod
    def from_model(cls, model_class: Type[BaseModel]) -> DocumentBinding:
        return cls(model_class)

    @property
    def root_tag(self) -> str:
        return qualify(self.namespace, self.root_name)

    def nested_models(self) -> Tuple[Type[BaseModel], ...]:
        return tuple(f.python_type for f in self.fields if f.is_model)

    def _check_layout(self, text_fields: list[FieldBinding]) -> None:
        owner = self.model_class.__name__
        if len(text_fields) > 1:
            raise BindingError(f"{owner}: only one text field is allowed, got {len(text_fields)}")
        if text_fields and self.elements:
            raise BindingError(
                f"{owner}: a text field cannot be combined with child elements "
                f"(mixed content is not supported)"
            )

        seen_attributes: set[str] = set()
        for field in self.attributes:
            if field.xml_name in seen_attributes:
                raise BindingError(f"{owner}: duplicate attribute name {field.xml_name!r}")
            seen_attributes.add(field.xml_name)

        seen_elements: set[str] = set()
        for field in self.elements:
            occupied = field.wrapper or field.xml_name
            if occupied in seen_elements:
                raise BindingError(f"{owner}: duplicate element name {occupied!r}")
            seen_elements.add(occupied)

    def __repr__(self) -> str:
        return f"DocumentBinding({self.model_class.__name__}, root={self.root_name!r})"


class BindingRegistry:
    """Thread-safe cache of DocumentBindings keyed by model class.

    Lookups of already bound models take no lock. The first resolution of a
    model builds its binding and the bindings of every model it nests while
    holding a re-entrant lock, then publishes them all at once, so concurrent
    first use never observes a partially built cache.
    """

    def __init__(self) -> None:
        self._bindings: Dict[Type[BaseModel], DocumentBinding] = {}
        self._lock = threading.RLock()

    def resolve(self, model_class: Type[BaseModel]) -> DocumentBinding:
        """Return the binding for ``model_class``, building it on first use.

        Raises:
            BindingError: If the model (or a model it nests) cannot be bound
        """
        try:
            return self._bindings[model_class]
        except (KeyError, TypeError):
            pass

        with self._lock:
            _ensure_model_class(model_class)
            cached = self._bindings.get(model_class)
            if cached is not None:
                return cached

            built: Dict[Type[BaseModel], DocumentBinding] = {}
            pending = [model_class]
            while pending:
                current = pending.pop()
                if current in built or current in self._bindings:
                    continue
                binding = DocumentBinding.from_model(current)
                built[current] = binding
                pending.extend(binding.nested_models())

            self._bindings.update(built)
            return built[model_class]

    def __contains__(self, model_class: object) -> bool:
        return model_class in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def clear(self) -> None:
        with self._lock:
            self._bindings.clear()


default_registry = BindingRegistry()


def element_namespace(
    registry: BindingRegistry, field_binding: FieldBinding, enclosing: Optional[str]
) -> Optional[str]:
    """Namespace of the elements written for ``field_binding``.

    A nested model declaring its own namespace puts its element (and
    everything below it) in that namespace. Everything else stays in the
    namespace of the enclosing element.
    """
    if field_binding.is_model:
        return registry.resolve(field_binding.python_type).namespace or enclosing
    return enclosing


def _ensure_model_class(model_class: Any) -> None:
    if not (isinstance(model_class, type) and issubclass(model_class, BaseModel)):
        raise BindingError(f"{model_class!r} is not a pydantic model class")
    if model_class is BaseModel or vars(model_class).get("__xml_abstract__", False):
        raise BindingError(f"{model_class.__name__} declares no field structure to bind")
    if not model_class.__pydantic_complete__:
        try:
            model_class.model_rebuild()
        except Exception as err:
            raise BindingError(
                f"{model_class.__name__} is not fully defined: {err}", cause=err
            ) from err


def _decapitalize(name: str) -> str:
    # "Server" -> "server", "URLMapping" stays as is
    if len(name) > 1 and name[0].isupper() and name[1].isupper():
        return name
    return name[:1].lower() + name[1:]


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


def _extract_field_binding(
    model_class: Type[BaseModel], name: str, field_info: FieldInfo
) -> FieldBinding:
    """Extract binding information from a Pydantic FieldInfo.

    Args:
        model_class: Model declaring the field (for error messages)
        name: Field name
        field_info: Pydantic FieldInfo object

    Returns:
        FieldBinding with extracted information

    Raises:
        BindingError: If the annotation or XML options are not supported
    """
    owner = model_class.__name__
    annotation = field_info.annotation
    if annotation is None:
        raise BindingError(f"{owner}.{name} has no type annotation")

    # Optional[T] / T | None
    optional = False
    if _is_union(get_origin(annotation)):
        args = get_args(annotation)
        non_none_args = [arg for arg in args if arg is not type(None)]
        if len(non_none_args) != 1:
            raise BindingError(f"{owner}.{name}: union types other than Optional are not supported")
        annotation = non_none_args[0]
        optional = True

    # list[T] / tuple[T, ...]
    is_list = False
    origin = get_origin(annotation)
    if origin is list or origin is tuple:
        args = get_args(annotation)
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            raise BindingError(f"{owner}.{name}: only homogeneous tuple[T, ...] is supported")
        if not args:
            raise BindingError(f"{owner}.{name}: list fields need an item type")
        annotation = args[0]
        is_list = True
        if get_origin(annotation) is not None:
            raise BindingError(f"{owner}.{name}: nested containers are not supported")

    kind = _value_kind(annotation)
    if kind is None:
        raise BindingError(
            f"{owner}.{name}: unsupported type {annotation!r}. "
            f"Supported: str, int, float, bool, Decimal, bytes, datetime, date, "
            f"Enum, pydantic models and lists of them."
        )

    extra = field_info.json_schema_extra if isinstance(field_info.json_schema_extra, dict) else {}
    node = extra.get(XML_NODE_KEY, NODE_ELEMENT)
    xml_name = extra.get(XML_NAME_KEY) or name
    wrapper = extra.get(XML_WRAPPER_KEY)

    if node not in (NODE_ELEMENT, NODE_ATTRIBUTE, NODE_TEXT):
        raise BindingError(f"{owner}.{name}: unknown XML node kind {node!r}")
    if node != NODE_ELEMENT and (is_list or kind is ValueKind.MODEL):
        raise BindingError(f"{owner}.{name}: {node} fields must hold a single scalar value")
    if wrapper is not None and not is_list:
        raise BindingError(f"{owner}.{name}: wrapper is only valid on list fields")

    required = field_info.is_required()
    absent = None if required else _default_value(owner, name, field_info)

    # None must be written out when a missing node would decode to something else
    nillable = optional and (node == NODE_TEXT or (not required and absent is not None))
    if nillable and node == NODE_ATTRIBUTE:
        raise BindingError(
            f"{owner}.{name}: an optional attribute defaulting to {absent!r} cannot hold None"
        )
    if is_list and wrapper is None:
        if optional:
            raise BindingError(
                f"{owner}.{name}: list fields without a wrapper cannot be Optional"
            )
        if not required and absent:
            raise BindingError(
                f"{owner}.{name}: list fields without a wrapper must default to an empty list"
            )

    validation_alias = field_info.validation_alias
    key = validation_alias if isinstance(validation_alias, str) else (field_info.alias or name)

    return FieldBinding(
        name=name,
        key=key,
        xml_name=xml_name,
        node=node,
        kind=kind,
        python_type=annotation,
        required=required,
        optional=optional,
        is_list=is_list,
        wrapper=wrapper,
        nillable=nillable,
    )


def _default_value(owner: str, name: str, field_info: FieldInfo) -> Any:
    if field_info.default_factory is None:
        return field_info.default
    try:
        return field_info.get_default(call_default_factory=True)
    except Exception as err:
        raise BindingError(
            f"{owner}.{name}: default factory cannot be evaluated without model data",
            cause=err,
        ) from err


def _value_kind(annotation: Any) -> Optional[ValueKind]:
    if get_origin(annotation) is not None or not isinstance(annotation, type):
        return None
    if issubclass(annotation, enum.Enum):
        return ValueKind.ENUM
    if issubclass(annotation, BaseModel):
        return ValueKind.MODEL
    return _SCALAR_KINDS.get(annotation)
