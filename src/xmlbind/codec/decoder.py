"""XML decoder for Pydantic models.

This module provides the decode() function that converts an XML document back
to a model instance. Decoding is lenient: elements and attributes the binding
does not know are ignored, and fields missing from the document take their
declared default or the empty value of their type.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, FrozenSet, List, Optional, TypeVar

from lxml import etree
from pydantic import BaseModel

from ..exceptions import DecodingError
from ..utils.text import excerpt, is_blank, strip_bom, strip_declaration
from .binding import (
    BindingRegistry,
    DocumentBinding,
    FieldBinding,
    ValueKind,
    default_registry,
    element_namespace,
    is_nil,
    qualify,
)

T = TypeVar("T", bound=BaseModel)


def decode(
    text: str | bytes,
    model_class: type[T],
    *,
    registry: Optional[BindingRegistry] = None,
) -> T:
    """Decode an XML document to a model instance.

    Args:
        text: XML document. A leading byte-order mark is ignored. ``bytes``
            input may declare its own encoding.
        model_class: Model class to decode to
        registry: Binding cache to use (defaults to the process-wide registry)

    Returns:
        Fully constructed model instance

    Raises:
        DecodingError: If the document is malformed, the model cannot be bound,
            or the document cannot be mapped onto the model

    Examples:
        ```python
        from xmlbind import decode

        server = decode('<server id="7"><name>web</name></server>', Server)
        assert server.id == 7
        ```
    """
    type_name = getattr(model_class, "__name__", repr(model_class))
    registry = registry if registry is not None else default_registry

    if text is None:
        raise DecodingError(
            f"Could not unmarshal document into type: {type_name}: no document given",
            type_name=type_name,
        )

    source = strip_bom(text)

    try:
        binding = registry.resolve(model_class)
        if is_blank(source):
            return model_class.model_validate({})

        root = _parse(source)
        if root.tag != binding.root_tag:
            raise ValueError(
                f"unexpected root element {root.tag!r}, expected {binding.root_tag!r}"
            )

        values = _read_fields(registry, binding, root, binding.namespace)
        return model_class.model_validate(values)
    except Exception as e:
        snippet = excerpt(source)
        raise DecodingError(
            f"Could not unmarshal document into type: {type_name}: {e}\n{snippet}",
            type_name=type_name,
            excerpt=snippet,
            cause=e,
        ) from e


def _parse(source: str | bytes) -> Any:
    """Parse untrusted text without resolving entities or touching the network."""
    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
        remove_comments=True,
        remove_pis=True,
    )
    if isinstance(source, str):
        source = strip_declaration(source)
    return etree.fromstring(source, parser)


def _child_elements(element: Any) -> Dict[str, List[Any]]:
    children: Dict[str, List[Any]] = defaultdict(list)
    for child in element:
        # entity references left unresolved have a non-string tag
        if isinstance(child.tag, str):
            children[child.tag].append(child)
    return children


def _read_fields(
    registry: BindingRegistry,
    binding: DocumentBinding,
    element: Any,
    namespace: Optional[str],
) -> Dict[str, Any]:
    """Collect the field values of one model element.

    Args:
        registry: Binding cache for nested models
        binding: Binding of the model being read
        element: lxml element representing the model
        namespace: Namespace of ``element``, inherited by child elements

    Returns:
        Mapping of validation keys to field values, ready for model_validate()
    """
    values: Dict[str, Any] = {}

    for field_binding in binding.attributes:
        raw = element.get(field_binding.xml_name)
        if raw is not None:
            values[field_binding.key] = field_binding.from_text(raw)
        elif field_binding.required:
            values[field_binding.key] = _empty_value(registry, field_binding, frozenset())

    text_field = binding.text_field
    if text_field is not None:
        if is_nil(element):
            values[text_field.key] = None
        elif text_field.kind is ValueKind.STR or (element.text and element.text.strip()):
            values[text_field.key] = text_field.from_text(element.text)
        elif text_field.required:
            values[text_field.key] = _empty_value(registry, text_field, frozenset())
        return values

    children = _child_elements(element)
    for field_binding in binding.elements:
        item_namespace = element_namespace(registry, field_binding, namespace)
        tag = qualify(item_namespace, field_binding.xml_name)

        if field_binding.wrapper:
            wrappers = children.get(qualify(namespace, field_binding.wrapper))
            if wrappers and is_nil(wrappers[-1]):
                values[field_binding.key] = None
                continue
            found = [c for c in wrappers[-1] if c.tag == tag] if wrappers else None
        elif field_binding.is_list:
            found = children.get(tag)
        else:
            matches = children.get(tag)
            found = matches[-1:] if matches else None
            if found and is_nil(found[0]):
                values[field_binding.key] = None
                continue

        if found is None:
            if field_binding.required:
                values[field_binding.key] = _empty_value(registry, field_binding, frozenset())
            continue

        items = [_read_item(registry, field_binding, child, item_namespace) for child in found]
        values[field_binding.key] = items if field_binding.is_list else items[0]

    return values


def _read_item(
    registry: BindingRegistry, field_binding: FieldBinding, child: Any, namespace: Optional[str]
) -> Any:
    if field_binding.is_model:
        nested = registry.resolve(field_binding.python_type)
        return _read_fields(registry, nested, child, namespace)
    return field_binding.from_text(child.text)


def _empty_value(
    registry: BindingRegistry, field_binding: FieldBinding, seen: FrozenSet[type]
) -> Any:
    """Build the value a missing required field takes."""
    if field_binding.is_list or field_binding.optional or not field_binding.is_model:
        return field_binding.empty_value()

    model_class = field_binding.python_type
    if model_class in seen:
        raise ValueError(f"cannot build an empty {model_class.__name__}: it requires itself")

    nested = registry.resolve(model_class)
    return {
        f.key: _empty_value(registry, f, seen | {model_class})
        for f in nested.fields
        if f.required
    }
