"""Codec instances with a fixed formatting mode."""

from __future__ import annotations

import enum
from typing import Any, Optional, TypeVar

from pydantic import BaseModel

from ..config import CodecConfig
from .binding import BindingRegistry, default_registry
from .decoder import decode
from .encoder import encode

T = TypeVar("T", bound=BaseModel)


class FormattingMode(enum.Enum):
    """Layout of encoded documents."""

    COMPACT = "compact"
    PRETTY = "pretty"


class XmlCodec:
    """Encode and decode models with a formatting mode fixed at construction.

    Instances hold no per-call state and may be shared between threads.

    Example:
        >>> codec = XmlCodec.from_config(CodecConfig.from_properties(props))
        >>> text = codec.encode(server)
        >>> codec.decode(text, Server) == server
        True
    """

    def __init__(
        self,
        pretty_print: bool = False,
        *,
        xml_declaration: bool = True,
        registry: Optional[BindingRegistry] = None,
    ) -> None:
        self._mode = FormattingMode.PRETTY if pretty_print else FormattingMode.COMPACT
        self._xml_declaration = xml_declaration
        self._registry = registry if registry is not None else default_registry

    @classmethod
    def from_config(
        cls, config: CodecConfig, *, registry: Optional[BindingRegistry] = None
    ) -> XmlCodec:
        return cls(
            config.pretty_print,
            xml_declaration=config.xml_declaration,
            registry=registry,
        )

    @property
    def mode(self) -> FormattingMode:
        return self._mode

    @property
    def pretty_print(self) -> bool:
        return self._mode is FormattingMode.PRETTY

    @property
    def registry(self) -> BindingRegistry:
        return self._registry

    def encode(self, value: Any, model_class: Optional[type[BaseModel]] = None) -> str:
        """Encode ``value`` using this codec's formatting mode.

        Raises:
            EncodingError: See :func:`xmlbind.codec.encoder.encode`
        """
        return encode(
            value,
            model_class,
            pretty_print=self.pretty_print,
            xml_declaration=self._xml_declaration,
            registry=self._registry,
        )

    def decode(self, text: str | bytes, model_class: type[T]) -> T:
        """Decode ``text`` into a new ``model_class`` instance.

        Raises:
            DecodingError: See :func:`xmlbind.codec.decoder.decode`
        """
        return decode(text, model_class, registry=self._registry)

    def __repr__(self) -> str:
        return f"XmlCodec(mode={self._mode.value})"
