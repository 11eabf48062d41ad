"""Unit tests for binding introspection and the binding registry."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any, ClassVar, Optional, Union

import pytest
from pydantic import BaseModel, Field

from xmlbind import (
    BaseDocument,
    BindingError,
    BindingRegistry,
    DocumentBinding,
    XmlAttribute,
    XmlCodec,
    XmlElement,
    XmlList,
    XmlText,
    describe_binding,
    element_names,
)
from xmlbind.codec import binding as binding_module
from xmlbind.codec.binding import ValueKind


class Endpoint(BaseDocument):
    """Binding test document."""

    id: int = XmlAttribute()
    zone: Optional[str] = XmlAttribute(name="availability-zone", default=None)
    host_name: str = XmlElement(name="hostName")
    ports: list[int] = XmlList(wrapper="ports", item="port", default=[])
    weight: Decimal = Decimal("1.0")


class Label(BaseDocument):
    """Text content document."""

    lang: str = XmlAttribute(default="en")
    value: str = XmlText()


class URLMapping(BaseModel):
    """Name starting with an acronym."""

    path: str


class Aliased(BaseModel):
    """Model whose field validates under an alias."""

    full_name: str = Field(alias="fullName")


class Pending(BaseModel):
    """Model referring to a class defined after it."""

    later: Later


class Later(BaseModel):
    """Model completing Pending."""

    value: int = 0


class TestDocumentBinding:
    """Test bindings derived from model classes."""

    def test_root_name_from_class(self) -> None:
        """Test the default root name lower-cases the first letter."""
        assert DocumentBinding.from_model(Endpoint).root_name == "endpoint"

    def test_root_name_keeps_acronyms(self) -> None:
        """Test names starting with two capitals are kept."""
        assert DocumentBinding.from_model(URLMapping).root_name == "URLMapping"

    def test_root_name_override(self) -> None:
        """Test xml_root_name replaces the derived root name."""

        class Listing(BaseDocument):
            items: list[str] = []

            xml_root_name: ClassVar[Optional[str]] = "ListAllMyBucketsResult"

        assert DocumentBinding.from_model(Listing).root_name == "ListAllMyBucketsResult"

    def test_field_layout(self) -> None:
        """Test attributes, elements and names are extracted."""
        binding = DocumentBinding.from_model(Endpoint)

        assert [f.xml_name for f in binding.attributes] == ["id", "availability-zone"]
        assert [f.xml_name for f in binding.elements] == ["hostName", "port", "weight"]
        assert binding.text_field is None

        ports = binding.elements[1]
        assert ports.is_list
        assert ports.wrapper == "ports"
        assert ports.kind is ValueKind.INT
        assert not ports.required

        zone = binding.attributes[1]
        assert zone.optional
        assert zone.kind is ValueKind.STR

        assert binding.elements[2].kind is ValueKind.DECIMAL

    def test_text_field(self) -> None:
        """Test a text content field."""
        binding = DocumentBinding.from_model(Label)

        assert binding.text_field is not None
        assert binding.text_field.name == "value"
        assert binding.elements == ()

    def test_nillable_fields(self) -> None:
        """Test which optional fields write None explicitly."""

        class Limits(BaseDocument):
            soft: Optional[int] = None
            hard: Optional[int] = 100
            burst: Optional[int] = Field(default_factory=lambda: 10)
            unit: Optional[str] = XmlAttribute(default=None)

        binding = DocumentBinding.from_model(Limits)
        nillable = {f.name: f.nillable for f in binding.fields}

        assert nillable == {"soft": False, "hard": True, "burst": True, "unit": False}
        assert DocumentBinding.from_model(Label).text_field.nillable is False

    def test_alias_is_validation_key(self) -> None:
        """Test decoded values are keyed by the alias the model validates."""
        field = DocumentBinding.from_model(Aliased).fields[0]

        assert field.key == "fullName"
        assert field.xml_name == "full_name"

    def test_element_names(self) -> None:
        """Test the python-to-XML name mapping helper."""
        assert element_names(Endpoint) == {
            "id": "id",
            "zone": "availability-zone",
            "host_name": "hostName",
            "ports": "port",
            "weight": "weight",
        }

    def test_describe_binding(self) -> None:
        """Test the human-readable binding tree."""
        description = describe_binding(Endpoint)

        assert description.splitlines()[0] == "<endpoint>  (Endpoint)"
        assert "  @availability-zone: str | None" in description
        assert "  <hostName>: str" in description
        assert "  <ports>\n    <port>*: int" in description


class TestUnbindableModels:
    """Test models that cannot be mapped onto XML."""

    @pytest.mark.parametrize("descriptor", [dict, int, object, BaseModel, BaseDocument])
    def test_not_a_model(self, registry: BindingRegistry, descriptor: Any) -> None:
        """Test descriptors without field structure."""
        with pytest.raises(BindingError):
            registry.resolve(descriptor)

    def test_unhashable_descriptor(self, registry: BindingRegistry) -> None:
        """Test a value passed where a class is expected."""
        with pytest.raises(BindingError):
            registry.resolve({"a": 1})  # type: ignore[arg-type]

    def test_dict_field_rejected_at_class_creation(self) -> None:
        """Test BaseDocument subclasses are bound when defined."""
        with pytest.raises(BindingError, match="unsupported type"):

            class Tags(BaseDocument):
                values: dict[str, str]

    def test_any_field(self, registry: BindingRegistry) -> None:
        """Test untyped fields are rejected."""

        class Loose(BaseModel):
            payload: Any

        with pytest.raises(BindingError, match="unsupported type"):
            registry.resolve(Loose)

    def test_union_field(self, registry: BindingRegistry) -> None:
        """Test unions other than Optional are rejected."""

        class Either(BaseModel):
            value: Union[int, str]

        with pytest.raises(BindingError, match="union"):
            registry.resolve(Either)

    def test_nested_list(self, registry: BindingRegistry) -> None:
        """Test lists of lists are rejected."""

        class Matrix(BaseModel):
            rows: list[list[int]]

        with pytest.raises(BindingError, match="nested containers"):
            registry.resolve(Matrix)

    def test_model_attribute(self) -> None:
        """Test attributes must be scalar."""
        with pytest.raises(BindingError, match="single scalar"):

            class Holder(BaseDocument):
                label: Label = XmlAttribute()

    def test_text_with_elements(self) -> None:
        """Test mixed content is rejected."""
        with pytest.raises(BindingError, match="mixed content"):

            class Mixed(BaseDocument):
                value: str = XmlText()
                child: str

    def test_duplicate_element_names(self) -> None:
        """Test two fields mapped onto one element name."""
        with pytest.raises(BindingError, match="duplicate element"):

            class Clash(BaseDocument):
                first: str = XmlElement(name="name")
                second: str = XmlElement(name="name")

    def test_wrapper_on_scalar(self) -> None:
        """Test wrappers are only valid on list fields."""
        with pytest.raises(BindingError, match="wrapper"):

            class Wrapped(BaseDocument):
                name: str = XmlElement(wrapper="names")

    def test_optional_attribute_with_value_default(self) -> None:
        """Test attributes cannot mark None when they default to a value."""
        with pytest.raises(BindingError, match="cannot hold None"):

            class Zoned(BaseDocument):
                zone: Optional[str] = XmlAttribute(default="eu-west")

    def test_optional_unwrapped_list(self) -> None:
        """Test None and [] are indistinguishable without a wrapper."""
        with pytest.raises(BindingError, match="without a wrapper cannot be Optional"):

            class Bag(BaseDocument):
                items: Optional[list[str]] = XmlElement(name="item", default=None)

    def test_unwrapped_list_with_items_default(self) -> None:
        """Test an empty unwrapped list would decode to its default."""
        with pytest.raises(BindingError, match="default to an empty list"):

            class Seeded(BaseDocument):
                items: list[str] = XmlElement(name="item", default=["x"])

    def test_nested_model_failure(self, registry: BindingRegistry) -> None:
        """Test a model nesting an unbindable model is unbindable."""

        class Inner(BaseModel):
            payload: Any

        class Outer(BaseModel):
            inner: Inner

        with pytest.raises(BindingError, match="Inner.payload"):
            registry.resolve(Outer)
        assert Outer not in registry
        assert len(registry) == 0


class TestBindingRegistry:
    """Test binding caching."""

    def test_binding_is_cached(self, registry: BindingRegistry) -> None:
        """Test repeated resolution returns the same binding."""
        assert registry.resolve(Endpoint) is registry.resolve(Endpoint)

    def test_nested_models_resolved_together(self, registry: BindingRegistry) -> None:
        """Test nested models are bound along with their parent."""

        class Leaf(BaseModel):
            value: int

        class Branch(BaseModel):
            leaves: list[Leaf] = []

        registry.resolve(Branch)

        assert Leaf in registry
        assert len(registry) == 2

    def test_clear(self, registry: BindingRegistry) -> None:
        """Test the cache can be emptied."""
        registry.resolve(Endpoint)
        registry.clear()
        assert Endpoint not in registry

    def test_deferred_model_completed_under_lock(
        self, registry: BindingRegistry, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test models with forward references are rebuilt while the registry is locked."""
        original = binding_module._ensure_model_class
        lock_held: list[bool] = []

        def checked(model_class: Any) -> None:
            lock_held.append(registry._lock._is_owned())
            original(model_class)

        monkeypatch.setattr(binding_module, "_ensure_model_class", checked)

        workers = 8
        barrier = threading.Barrier(workers)

        def resolve(_: int) -> DocumentBinding:
            barrier.wait()
            return registry.resolve(Pending)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(resolve, range(workers)))

        assert len({id(binding) for binding in results}) == 1
        assert Pending.__pydantic_complete__
        assert Later in registry
        assert lock_held and all(lock_held)

    def test_concurrent_first_use(self, registry: BindingRegistry) -> None:
        """Test many threads binding an unseen model at once."""

        class Job(BaseModel):
            id: int
            name: str
            steps: list[str] = []

        workers = 16
        barrier = threading.Barrier(workers)
        codec = XmlCodec(registry=registry)
        job = Job(id=1, name="build", steps=["fetch", "compile", "test"])

        def use_codec(_: int) -> tuple[DocumentBinding, str, Job]:
            barrier.wait()
            text = codec.encode(job)
            return registry.resolve(Job), text, codec.decode(text, Job)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(use_codec, range(workers)))

        assert len({id(binding) for binding, _, _ in results}) == 1
        assert len({text for _, text, _ in results}) == 1
        assert all(decoded == job for _, _, decoded in results)
        assert len(registry) == 1
