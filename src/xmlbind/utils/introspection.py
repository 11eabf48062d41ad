"""Binding introspection utilities.

This module provides functions to inspect how a model maps onto XML
without encoding a value.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

from ..codec.binding import DocumentBinding, FieldBinding, default_registry


def binding_for(model_or_class: BaseModel | type[BaseModel]) -> DocumentBinding:
    """Return the binding of a model class or instance.

    Raises:
        BindingError: If the model cannot be bound
    """
    # Get the class if we were passed an instance
    if isinstance(model_or_class, BaseModel):
        model_class = type(model_or_class)
    else:
        model_class = model_or_class

    return default_registry.resolve(model_class)


def element_names(model_or_class: BaseModel | type[BaseModel]) -> dict[str, str]:
    """Map each Python field name to its XML element or attribute name.

    Example:
        >>> element_names(Server)
        {'id': 'id', 'host_name': 'hostName'}
    """
    binding = binding_for(model_or_class)
    return {field.name: field.xml_name for field in binding.fields}


def describe_binding(model_or_class: BaseModel | type[BaseModel]) -> str:
    """Render the binding of a model as an indented tree.

    Example:
        >>> print(describe_binding(Server))
        <server>  (Server)
          @id: int
          <hostName>: str
          <ports>
            <port>*: int
    """
    binding = binding_for(model_or_class)
    lines: List[str] = []
    _describe(binding, f"<{binding.root_name}>", 0, lines, set())
    return "\n".join(lines)


def _describe(
    binding: DocumentBinding, label: str, depth: int, lines: List[str], seen: set[type]
) -> None:
    indent = "  " * depth
    namespace = f" {{{binding.namespace}}}" if binding.namespace else ""
    lines.append(f"{indent}{label}  ({binding.model_class.__name__}){namespace}")

    if binding.model_class in seen:
        lines.append(f"{indent}  ... (recursive)")
        return
    seen = seen | {binding.model_class}

    for field in binding.attributes:
        lines.append(f"{indent}  @{field.xml_name}: {_type_label(field)}")

    if binding.text_field is not None:
        lines.append(f"{indent}  #text: {_type_label(binding.text_field)}")

    for field in binding.elements:
        item_depth = depth + 1
        if field.wrapper:
            lines.append(f"{indent}  <{field.wrapper}>")
            item_depth += 1
        repeat = "*" if field.is_list else ("?" if field.optional else "")
        item_label = f"<{field.xml_name}>{repeat}"
        if field.is_model:
            nested = default_registry.resolve(field.python_type)
            _describe(nested, item_label, item_depth, lines, seen)
        else:
            lines.append(f"{'  ' * item_depth}{item_label}: {_type_label(field)}")


def _type_label(field: FieldBinding) -> str:
    label = field.python_type.__name__
    return f"{label} | None" if field.optional else label
