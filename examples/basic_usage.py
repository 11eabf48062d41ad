#!/usr/bin/env python3
"""Basic usage example for xmlbind.

This example demonstrates:
1. Defining documents with Pydantic
2. Encoding to compact and pretty-printed XML
3. Decoding back to a Pydantic model
4. Inspecting the derived binding
"""

from __future__ import annotations

import datetime
import enum
from decimal import Decimal
from typing import ClassVar, Optional

from xmlbind import (
    BaseDocument,
    XmlAttribute,
    XmlCodec,
    XmlElement,
    XmlList,
    XmlText,
    describe_binding,
)


class ServerStatus(enum.Enum):
    """Lifecycle state of a server."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    TERMINATED = "TERMINATED"


class Address(BaseDocument):
    """Network address of a server."""

    version: int = XmlAttribute(default=4)
    addr: str = XmlText()


class Hardware(BaseDocument):
    """Hardware profile."""

    cores: int
    ram_mb: int = XmlElement(name="ramMb")
    disk_gb: Optional[int] = XmlElement(name="diskGb", default=None)


class HourlyPrice(BaseDocument):
    """Price with its currency as an attribute."""

    currency: str = XmlAttribute(default="USD")
    amount: Decimal = XmlText()


class Server(BaseDocument):
    """A compute server as described by a provider API."""

    id: str = XmlAttribute()
    status: ServerStatus = XmlAttribute()
    name: str
    created: datetime.datetime
    hardware: Hardware
    price: Optional[HourlyPrice] = None
    addresses: list[Address] = XmlList(wrapper="addresses", item="address", default=[])
    tags: list[str] = XmlElement(name="tag", default=[])

    xml_root_name: ClassVar[Optional[str]] = "server"


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("xmlbind Basic Usage Example")
    print("=" * 60)
    print()

    server = Server(
        id="i-0042",
        status=ServerStatus.RUNNING,
        name="web-1",
        created=datetime.datetime(2024, 5, 1, 12, 30),
        hardware=Hardware(cores=4, ram_mb=8192),
        price=HourlyPrice(amount=Decimal("0.096")),
        addresses=[Address(addr="10.0.0.12"), Address(version=6, addr="fd00::12")],
        tags=["web", "frontend"],
    )

    print("1. Binding derived from the Server model:")
    print(describe_binding(Server))
    print()

    print("2. Compact encoding:")
    compact = XmlCodec().encode(server)
    print(compact)
    print()

    print("3. Pretty encoding:")
    pretty_codec = XmlCodec(pretty_print=True)
    pretty = pretty_codec.encode(server)
    print(pretty)

    print("4. Decoding both documents...")
    assert pretty_codec.decode(compact, Server) == server
    assert pretty_codec.decode(pretty, Server) == server
    print("   Round-trip successful!")


if __name__ == "__main__":
    main()
