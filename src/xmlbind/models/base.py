"""Base document class and xmlbind-specific Pydantic configuration.

This module provides the BaseDocument class that xmlbind models may inherit
from. Plain pydantic models work with the codec too; BaseDocument adds
class-level XML options and binds subclasses as soon as they are defined.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class BaseDocument(BaseModel):
    """Base class for xmlbind documents.

    Documents should inherit from this class and define fields using the
    helpers in :mod:`xmlbind.models.fields` (or plain annotations, which bind
    to child elements).

    xmlbind-specific options can be configured as ClassVar attributes:

    Example:
        >>> from typing import ClassVar, Optional
        >>> class Server(BaseDocument):
        ...     id: int = XmlAttribute()
        ...     name: str
        ...
        ...     xml_root_name: ClassVar[Optional[str]] = "server"
        ...     xml_namespace: ClassVar[Optional[str]] = "http://example.com/compute"

    Attributes:
        xml_root_name: Root element name (defaults to the class name with a lower-case first letter)
        xml_namespace: Default namespace of the document's elements (optional)
    """

    model_config = ConfigDict(
        # Validate on assignment
        validate_assignment=True,
    )

    # not bindable itself, only its subclasses are
    __xml_abstract__ = True

    xml_root_name: ClassVar[str | None] = None
    xml_namespace: ClassVar[str | None] = None

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        """Hook called once Pydantic has finished building a subclass.

        Binding here surfaces unsupported field declarations at class creation.
        Models with unresolved forward references are bound on first use instead.
        """
        super().__pydantic_init_subclass__(**kwargs)

        if not cls.__pydantic_complete__:
            return

        # Import here to avoid circular dependency
        from ..codec.binding import default_registry

        default_registry.resolve(cls)
