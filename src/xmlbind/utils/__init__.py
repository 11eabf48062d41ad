"""Utility functions for xmlbind.

This module provides input sanitation and binding introspection helpers.
"""

from __future__ import annotations

from .introspection import binding_for, describe_binding, element_names
from .text import excerpt, strip_bom

__all__ = [
    # Introspection
    "binding_for",
    "describe_binding",
    "element_names",
    # Input sanitation
    "excerpt",
    "strip_bom",
]
