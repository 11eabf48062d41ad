"""xmlbind: Type-directed XML binding for Pydantic models

A Python library that converts Pydantic model instances to XML documents and
back, without hand-written per-type encoding logic. The mapping between fields
and XML nodes is derived once per model class and cached.

Key Features:
- Pydantic-based document modeling
- Elements, attributes, text content, repeated and wrapped lists, nested models
- Compact or pretty-printed output, fixed per codec instance
- Hardened parsing of untrusted input (no entity resolution, no network, BOM tolerant)
- Typed errors carrying the underlying cause

Quick Start:
    >>> from xmlbind import BaseDocument, XmlAttribute, XmlCodec
    >>>
    >>> class Server(BaseDocument):
    ...     id: int = XmlAttribute()
    ...     name: str
    ...     ports: list[int] = []
    >>>
    >>> codec = XmlCodec(pretty_print=True)
    >>> text = codec.encode(Server(id=7, name="web", ports=[80, 443]))
    >>> server = codec.decode(text, Server)
"""

from __future__ import annotations

from .codec import (
    BindingRegistry,
    DocumentBinding,
    FieldBinding,
    FormattingMode,
    XmlCodec,
    decode,
    encode,
)
from .config import CodecConfig, parse_flag
from .exceptions import (
    BindingError,
    CodecError,
    CodecOperation,
    DecodingError,
    EncodingError,
)
from .models import BaseDocument, XmlAttribute, XmlElement, XmlList, XmlText
from .utils import binding_for, describe_binding, element_names

__version__ = "0.1.0"

__all__ = [
    # Core API
    "XmlCodec",
    "FormattingMode",
    "encode",
    "decode",
    # Models and field helpers
    "BaseDocument",
    "XmlAttribute",
    "XmlElement",
    "XmlList",
    "XmlText",
    # Configuration
    "CodecConfig",
    "parse_flag",
    # Bindings
    "BindingRegistry",
    "DocumentBinding",
    "FieldBinding",
    "binding_for",
    "describe_binding",
    "element_names",
    # Exceptions
    "CodecError",
    "CodecOperation",
    "BindingError",
    "EncodingError",
    "DecodingError",
    # Version
    "__version__",
]
