"""Pydantic document modeling for xmlbind.

This module provides the BaseDocument class and field helpers for declaring
how model fields map onto XML elements, attributes and text.
"""

from __future__ import annotations

from .base import BaseDocument
from .fields import XmlAttribute, XmlElement, XmlList, XmlText

__all__ = [
    "BaseDocument",
    "XmlAttribute",
    "XmlElement",
    "XmlList",
    "XmlText",
]
