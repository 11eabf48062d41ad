"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from xmlbind import BindingRegistry, XmlCodec


@pytest.fixture
def registry() -> BindingRegistry:
    """Empty binding registry, isolated from the process-wide one."""
    return BindingRegistry()


@pytest.fixture
def compact_codec() -> XmlCodec:
    """Codec producing compact output."""
    return XmlCodec(pretty_print=False)


@pytest.fixture
def pretty_codec() -> XmlCodec:
    """Codec producing indented output."""
    return XmlCodec(pretty_print=True)
