"""Field helpers for declaring how model fields map onto XML.

Every helper is a thin wrapper around Pydantic's Field() that records the XML
mapping under ``json_schema_extra`` so the binding step can read it back.
Fields declared without a helper are bound as child elements named after the
Python field.
"""

from __future__ import annotations

from typing import Any, cast

from pydantic import Field
from pydantic.fields import FieldInfo

XML_NODE_KEY = "xml_node"
XML_NAME_KEY = "xml_name"
XML_WRAPPER_KEY = "xml_wrapper"

NODE_ELEMENT = "element"
NODE_ATTRIBUTE = "attribute"
NODE_TEXT = "text"


def _xml_field(node: str, name: str | None, wrapper: str | None, kwargs: dict[str, Any]) -> FieldInfo:
    extra: dict[str, Any] = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[XML_NODE_KEY] = node
    if name is not None:
        extra[XML_NAME_KEY] = name
    if wrapper is not None:
        extra[XML_WRAPPER_KEY] = wrapper
    return cast(FieldInfo, Field(json_schema_extra=extra, **kwargs))


def XmlElement(*, name: str | None = None, wrapper: str | None = None, **kwargs: Any) -> FieldInfo:
    """Bind a field to a child element.

    Args:
        name: Element name (defaults to the Python field name)
        wrapper: For list fields, name of an element wrapping the repeated items
        **kwargs: Additional Field() arguments (default, description, etc.)

    Returns:
        Pydantic FieldInfo suitable for use as a field default/metadata.

    Example:
        >>> class Server(BaseDocument):
        ...     host_name: str = XmlElement(name="hostName")
        ...     ports: list[int] = XmlElement(name="port", wrapper="ports", default=[])
    """
    return _xml_field(NODE_ELEMENT, name, wrapper, kwargs)


def XmlAttribute(*, name: str | None = None, **kwargs: Any) -> FieldInfo:
    """Bind a scalar field to an attribute of the model's element.

    Example:
        >>> class Server(BaseDocument):
        ...     id: int = XmlAttribute()
        ...     zone: Optional[str] = XmlAttribute(name="availability-zone", default=None)
    """
    return _xml_field(NODE_ATTRIBUTE, name, None, kwargs)


def XmlText(**kwargs: Any) -> FieldInfo:
    """Bind a scalar field to the text content of the model's element.

    A model with a text field may carry attributes but no child elements.

    Example:
        >>> class Price(BaseDocument):
        ...     currency: str = XmlAttribute()
        ...     amount: Decimal = XmlText()
    """
    return _xml_field(NODE_TEXT, None, None, kwargs)


def XmlList(*, wrapper: str, item: str | None = None, **kwargs: Any) -> FieldInfo:
    """Bind a list field to repeated ``item`` elements inside a ``wrapper`` element.

    Shorthand for ``XmlElement(name=item, wrapper=wrapper)``.

    Example:
        >>> class Image(BaseDocument):
        ...     tags: list[str] = XmlList(wrapper="tags", item="tag", default=[])
    """
    return _xml_field(NODE_ELEMENT, item, wrapper, kwargs)
