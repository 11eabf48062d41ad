"""Exception hierarchy for xmlbind.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from CodecError for easy catching of any xmlbind-specific error.
"""

from __future__ import annotations

import enum


class CodecOperation(enum.Enum):
    """Operation that was running when a CodecError was raised."""

    ENCODE = "encode"
    DECODE = "decode"
    BIND = "bind"


class CodecError(Exception):
    """Base exception for all xmlbind errors.

    Attributes:
        operation: Which codec operation failed
        cause: The underlying low-level exception, if any
    """

    operation: CodecOperation = CodecOperation.BIND

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class BindingError(CodecError):
    """Raised when a model class cannot be mapped onto XML.

    Examples:
        - Type descriptor is not a pydantic model class
        - Unsupported field annotation (dict, Any, multi-member Union)
        - Attribute or text field declared with a non-scalar type
        - Two fields mapped onto the same XML name
    """

    operation = CodecOperation.BIND


class EncodingError(CodecError):
    """Raised when a value cannot be turned into XML text.

    Examples:
        - Value is None
        - Model class is not bindable
        - Value does not carry a field its binding expects
        - Field value cannot be rendered as text
    """

    operation = CodecOperation.ENCODE


class DecodingError(CodecError):
    """Raised when XML text cannot be turned into a value.

    Examples:
        - Document is not well-formed
        - Root element does not match the target model
        - Field text cannot be converted to the field type
        - Collected values fail the model's own validation

    Attributes:
        type_name: Name of the model class that was being decoded
        excerpt: Bounded excerpt of the offending document text
    """

    operation = CodecOperation.DECODE

    def __init__(
        self,
        message: str,
        *,
        type_name: str,
        excerpt: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.type_name = type_name
        self.excerpt = excerpt
