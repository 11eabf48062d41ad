"""Configuration for XML codecs.

This module provides the configuration dataclass read once when a codec is
created. Values usually arrive as strings from property files or the process
environment; malformed values never raise and fall back to compact output.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

PROPERTY_PRETTY_PRINT = "xmlbind.pretty-print"
PROPERTY_XML_DECLARATION = "xmlbind.xml-declaration"

ENV_PRETTY_PRINT = "XMLBIND_PRETTY_PRINT"
ENV_XML_DECLARATION = "XMLBIND_XML_DECLARATION"


def parse_flag(raw: Optional[str | bool]) -> bool:
    """Convert a configuration value to a boolean.

    Only "true" (case-insensitive, surrounding whitespace ignored) is true.

    Examples:
        >>> parse_flag("TRUE")
        True
        >>> parse_flag("yes")
        False
        >>> parse_flag(None)
        False
    """
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    return str(raw).strip().lower() == "true"


@dataclass(frozen=True)
class CodecConfig:
    """Construction-time settings for an XmlCodec.

    Attributes:
        pretty_print: Indent encoded documents, one element per line (default False)
        xml_declaration: Prefix encoded documents with an XML declaration (default True)

    Examples:
        ```python
        from xmlbind import CodecConfig, XmlCodec

        # From a properties mapping
        config = CodecConfig.from_properties({"xmlbind.pretty-print": "true"})

        # From XMLBIND_* environment variables
        config = CodecConfig.from_env()

        codec = XmlCodec.from_config(config)
        ```
    """

    pretty_print: bool = False
    xml_declaration: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not isinstance(self.pretty_print, bool):
            raise TypeError(f"pretty_print must be a bool, got {type(self.pretty_print).__name__}")
        if not isinstance(self.xml_declaration, bool):
            raise TypeError(
                f"xml_declaration must be a bool, got {type(self.xml_declaration).__name__}"
            )

    @classmethod
    def from_properties(cls, properties: Mapping[str, Optional[str]]) -> CodecConfig:
        """Build a config from string-valued properties.

        Missing keys keep their defaults.
        """
        xml_declaration = properties.get(PROPERTY_XML_DECLARATION)
        return cls(
            pretty_print=parse_flag(properties.get(PROPERTY_PRETTY_PRINT)),
            xml_declaration=True if xml_declaration is None else parse_flag(xml_declaration),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> CodecConfig:
        """Build a config from ``XMLBIND_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls.from_properties(
            {
                PROPERTY_PRETTY_PRINT: env.get(ENV_PRETTY_PRINT),
                PROPERTY_XML_DECLARATION: env.get(ENV_XML_DECLARATION),
            }
        )
