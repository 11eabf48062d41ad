"""Model analysis and document reformatting CLI commands."""

from __future__ import annotations

import importlib.util
import inspect
import sys
from pathlib import Path

from pydantic import BaseModel

from ..codec.xml_codec import XmlCodec
from ..exceptions import BindingError
from ..models.base import BaseDocument
from ..utils.introspection import binding_for, describe_binding

_USER_MODULE = "xmlbind_user_module"


def load_module(file_path: Path):
    """Import a Python file as a throwaway module."""
    spec = importlib.util.spec_from_file_location(_USER_MODULE, file_path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Could not load module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[_USER_MODULE] = module
    spec.loader.exec_module(module)
    return module


def find_models(module) -> list[type[BaseModel]]:
    """Return the pydantic models defined (not imported) in ``module``."""
    models = []
    for _name, obj in inspect.getmembers(module, inspect.isclass):
        if obj in (BaseModel, BaseDocument) or not issubclass(obj, BaseModel):
            continue
        if obj.__module__ == module.__name__:
            models.append(obj)
    return models


def analyze_file(file_path: Path) -> None:
    """Print the XML binding of every model class in a Python file.

    Args:
        file_path: Path to Python file containing model definitions
    """
    module = load_module(file_path)
    models = find_models(module)

    if not models:
        print(f"No model classes found in {file_path}")
        return

    print("|" * 7, "xmlbind: XML binding for Pydantic models", "|" * 7)
    print(f"{len(models)} model{'s' if len(models) != 1 else ''} loaded.")
    print()

    for model_class in models:
        analyze_model_class(model_class)


def analyze_model_class(model_class: type[BaseModel]) -> None:
    """Print the binding summary and element tree of one model class."""
    print(f"{'=' * 19} {model_class.__name__} {'=' * 19}")

    try:
        binding = binding_for(model_class)
    except BindingError as e:
        print(f"Not bindable: {e}")
        print()
        return

    print(f"Root element: <{binding.root_name}>")
    if binding.namespace:
        print(f"Namespace: {binding.namespace}")
    print(
        f"Fields: {len(binding.fields)} "
        f"({len(binding.attributes)} attributes, {len(binding.elements)} elements"
        f"{', 1 text' if binding.text_field is not None else ''})"
    )
    print()
    print(describe_binding(model_class))
    print()


def load_model(reference: str) -> type[BaseModel]:
    """Resolve a ``path/to/file.py:ClassName`` reference to a model class."""
    file_part, sep, class_name = reference.rpartition(":")
    if not sep or not file_part or not class_name:
        raise ValueError(f"Model reference must look like FILE:Class, got {reference!r}")

    module = load_module(Path(file_part))
    model_class = getattr(module, class_name, None)
    if not (inspect.isclass(model_class) and issubclass(model_class, BaseModel)):
        raise ValueError(f"{class_name} is not a pydantic model in {file_part}")
    return model_class


def reformat_file(xml_path: Path, model_reference: str, pretty_print: bool) -> str:
    """Decode an XML file into a model and encode it again.

    Returns:
        The re-encoded document
    """
    model_class = load_model(model_reference)
    codec = XmlCodec(pretty_print=pretty_print)
    value = codec.decode(xml_path.read_bytes(), model_class)
    return codec.encode(value)
