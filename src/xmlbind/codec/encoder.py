"""XML encoder for Pydantic models.

This module provides the encode() function that converts a model instance to
an XML document using the binding derived from its model class.
"""

from __future__ import annotations

from typing import Any, Optional

from lxml import etree
from pydantic import BaseModel

from ..exceptions import EncodingError
from .binding import (
    XSI_NIL,
    BindingRegistry,
    DocumentBinding,
    FieldBinding,
    default_registry,
    element_namespace,
    qualify,
)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'


def encode(
    value: Any,
    model_class: Optional[type[BaseModel]] = None,
    *,
    pretty_print: bool = False,
    xml_declaration: bool = True,
    registry: Optional[BindingRegistry] = None,
) -> str:
    """Encode a model instance to an XML document.

    Fields are written in declaration order: attribute fields on the model's
    element, then either its text field or one child element per field value.
    Optional fields holding None are omitted.

    Args:
        value: Model instance to encode
        model_class: Model class whose binding drives the encoding. Defaults to
            ``type(value)``; pass an ancestor class to write only its fields
            under its root element.
        pretty_print: Indent the document, one element per line
        xml_declaration: Prefix the document with an XML declaration
        registry: Binding cache to use (defaults to the process-wide registry)

    Returns:
        The XML document as text

    Raises:
        EncodingError: If the model cannot be bound or the value cannot be written

    Examples:
        ```python
        from xmlbind import BaseDocument, XmlAttribute, encode

        class Server(BaseDocument):
            id: int = XmlAttribute()
            name: str

        encode(Server(id=7, name="web"))
        # '<?xml version="1.0" encoding="UTF-8" standalone="yes"?><server id="7"><name>web</name></server>'
        ```
    """
    if value is None:
        raise EncodingError("Could not marshal object: value is None")

    target = model_class if model_class is not None else type(value)
    target_name = getattr(target, "__name__", repr(target))
    registry = registry if registry is not None else default_registry

    try:
        binding = registry.resolve(target)
        root = etree.Element(binding.root_tag, nsmap=_nsmap(binding.namespace, None))
        _write_fields(registry, binding, root, value, binding.namespace)
        body = etree.tostring(root, encoding="unicode", pretty_print=pretty_print)
    except EncodingError:
        raise
    except Exception as e:
        raise EncodingError(f"Could not marshal object of type {target_name}: {e}", cause=e) from e

    if not xml_declaration:
        return body
    separator = "\n" if pretty_print else ""
    return f"{XML_DECLARATION}{separator}{body}"


def _nsmap(namespace: Optional[str], enclosing: Optional[str]) -> Optional[dict]:
    if not namespace or namespace == enclosing:
        return None
    return {None: namespace}


def _field_value(value: Any, field_binding: FieldBinding) -> Any:
    try:
        return getattr(value, field_binding.name)
    except AttributeError as err:
        raise EncodingError(
            f"{type(value).__name__} has no field {field_binding.name!r}", cause=err
        ) from err


def _write_fields(
    registry: BindingRegistry,
    binding: DocumentBinding,
    element: Any,
    value: Any,
    namespace: Optional[str],
) -> None:
    """Write every field of ``value`` onto ``element``.

    Args:
        registry: Binding cache for nested models
        binding: Binding of the model being written
        element: lxml element representing the model
        value: Model instance (or any object carrying the bound fields)
        namespace: Namespace of ``element``, inherited by child elements
    """
    for field_binding in binding.attributes:
        item = _field_value(value, field_binding)
        if item is not None:
            element.set(field_binding.xml_name, field_binding.to_text(item))

    if binding.text_field is not None:
        item = _field_value(value, binding.text_field)
        if item is not None:
            element.text = binding.text_field.to_text(item)
        elif binding.text_field.nillable:
            element.set(XSI_NIL, "true")
        return

    for field_binding in binding.elements:
        item = _field_value(value, field_binding)
        item_namespace = element_namespace(registry, field_binding, namespace)

        if item is None:
            if field_binding.nillable:
                _write_nil(element, field_binding, item_namespace, namespace)
            continue

        if not field_binding.is_list:
            _write_item(registry, element, field_binding, item, item_namespace, namespace)
            continue

        parent = element
        if field_binding.wrapper:
            parent = etree.SubElement(element, qualify(namespace, field_binding.wrapper))
        for entry in item:
            _write_item(registry, parent, field_binding, entry, item_namespace, namespace)


def _write_nil(
    parent: Any, field_binding: FieldBinding, namespace: Optional[str], enclosing: Optional[str]
) -> None:
    # a None list is marked on its wrapper
    if field_binding.wrapper:
        marker = etree.SubElement(parent, qualify(enclosing, field_binding.wrapper))
    else:
        tag = qualify(namespace, field_binding.xml_name)
        marker = etree.SubElement(parent, tag, nsmap=_nsmap(namespace, enclosing))
    marker.set(XSI_NIL, "true")


def _write_item(
    registry: BindingRegistry,
    parent: Any,
    field_binding: FieldBinding,
    item: Any,
    namespace: Optional[str],
    enclosing: Optional[str],
) -> None:
    tag = qualify(namespace, field_binding.xml_name)

    if field_binding.is_model:
        nested = registry.resolve(field_binding.python_type)
        child = etree.SubElement(parent, tag, nsmap=_nsmap(namespace, enclosing))
        _write_fields(registry, nested, child, item, namespace)
        return

    child = etree.SubElement(parent, tag)
    child.text = field_binding.to_text(item)
