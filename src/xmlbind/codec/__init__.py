"""XML document codec for xmlbind.

This module provides encoding and decoding of Pydantic models to and from XML,
driven by bindings derived from the model classes.
"""

from __future__ import annotations

from .binding import BindingRegistry, DocumentBinding, FieldBinding, ValueKind, default_registry
from .decoder import decode
from .encoder import encode
from .xml_codec import FormattingMode, XmlCodec

__all__ = [
    "encode",
    "decode",
    "XmlCodec",
    "FormattingMode",
    "BindingRegistry",
    "DocumentBinding",
    "FieldBinding",
    "ValueKind",
    "default_registry",
]
