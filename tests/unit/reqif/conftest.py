from collections.abc import Callable

import pytest
from structlog.typing import FilteringBoundLogger

from reqsmith.config import DocumentConfig
from reqsmith.reqif import (
    AttributeDefinition,
    BooleanDatatype,
    CoreContent,
    EnumerationDatatype,
    EnumerationValue,
    EnumValue,
    IntegerDatatype,
    IntegerValue,
    RealDatatype,
    ReqIF,
    ReqIFDocument,
    ReqIFHeader,
    SpecHierarchy,
    Specification,
    SpecObject,
    SpecRelation,
    SpecType,
    SpecTypeKind,
    StringDatatype,
    StringValue,
    ToolExtension,
    XhtmlDatatype,
    preserve,
)


@pytest.fixture
def make_header() -> Callable[..., ReqIFHeader]:
    def _make(**overrides: object) -> ReqIFHeader:
        defaults: dict[str, object] = {
            "identifier": "doc-1",
            "creation_time": "2024-01-15T10:30:00Z",
            "source_tool_id": "reqsmith-tests",
            "title": "Test Document",
        }
        defaults.update(overrides)
        return ReqIFHeader(**defaults)  # pyright: ignore[reportArgumentType]

    return _make


@pytest.fixture
def make_spec_object() -> Callable[..., SpecObject]:
    def _make(identifier: str = "REQ-9", **overrides: object) -> SpecObject:
        defaults: dict[str, object] = {
            "identifier": identifier,
            "spec_type": "st-req",
            "values": (StringValue("ad-title", f"Requirement {identifier}"),),
        }
        defaults.update(overrides)
        return SpecObject(**defaults)  # pyright: ignore[reportArgumentType]

    return _make


@pytest.fixture
def sample_reqif(make_header: Callable[..., ReqIFHeader]) -> ReqIF:
    """A small document covering every datatype and entity kind.

    Structure of SPEC-1:
        H-1 (REQ-1)
            H-2 (REQ-2)
                H-3 (REQ-3)
        H-4 (REQ-2)
    """
    datatypes = (
        StringDatatype("dt-str", "Text", max_length=20),
        IntegerDatatype("dt-int", "Priority", min=0, max=100),
        RealDatatype("dt-real", "Weight", min=0.0, max=1.0, accuracy=2),
        BooleanDatatype("dt-bool", "Flag"),
        EnumerationDatatype(
            "dt-enum",
            "Status",
            values=(EnumValue("ev-open", "Open"), EnumValue("ev-closed", "Closed")),
        ),
        XhtmlDatatype("dt-xhtml", "Rich Text"),
    )
    spec_types = (
        SpecType(
            "st-req",
            "Requirement",
            kind=SpecTypeKind.OBJECT,
            spec_attributes=(
                AttributeDefinition("ad-title", "dt-str", "Title"),
                AttributeDefinition("ad-priority", "dt-int", "Priority"),
                AttributeDefinition("ad-status", "dt-enum", "Status"),
                AttributeDefinition("ad-weight", "dt-real", "Weight"),
                AttributeDefinition("ad-flag", "dt-bool", "Flag"),
                AttributeDefinition("ad-body", "dt-xhtml", "Body"),
            ),
        ),
        SpecType(
            "st-link",
            "Trace",
            kind=SpecTypeKind.RELATION,
            spec_attributes=(AttributeDefinition("ad-rationale", "dt-str"),),
        ),
        SpecType(
            "st-spec",
            "Specification",
            kind=SpecTypeKind.SPECIFICATION,
            spec_attributes=(AttributeDefinition("ad-spec-title", "dt-str"),),
        ),
    )
    spec_objects = (
        SpecObject(
            "REQ-1",
            "st-req",
            values=(
                StringValue("ad-title", "Login"),
                IntegerValue("ad-priority", 10),
                EnumerationValue("ad-status", "ev-open"),
            ),
            foreign=preserve({"x-vendor": '{"color":"red"}'}),
        ),
        SpecObject("REQ-2", "st-req", values=(StringValue("ad-title", "Logout"),)),
        SpecObject("REQ-3", "st-req"),
    )
    relations = (
        SpecRelation(
            "REL-1",
            "st-link",
            source="REQ-1",
            target="REQ-2",
            values=(StringValue("ad-rationale", "refines"),),
        ),
    )
    specifications = (
        Specification(
            "SPEC-1",
            "st-spec",
            values=(StringValue("ad-spec-title", "System"),),
            children=(
                SpecHierarchy(
                    "H-1",
                    "REQ-1",
                    children=(
                        SpecHierarchy(
                            "H-2", "REQ-2", children=(SpecHierarchy("H-3", "REQ-3"),)
                        ),
                    ),
                ),
                SpecHierarchy("H-4", "REQ-2"),
            ),
        ),
    )
    return ReqIF(
        header=make_header(),
        core_content=CoreContent(
            spec_objects=spec_objects,
            spec_relations=relations,
            specifications=specifications,
            spec_types=spec_types,
            datatype_definitions=datatypes,
        ),
        tool_extensions=(ToolExtension("ext-1", "<tool>opaque</tool>"),),
        foreign=preserve({"x-generator": '"reqsmith"'}),
    )


@pytest.fixture
def make_document(
    sample_reqif: ReqIF,
    capturing_logger: FilteringBoundLogger,
) -> Callable[..., ReqIFDocument]:
    """Return a factory building a fresh document from sample_reqif."""

    def _make(*, cascade_deletes: bool = False) -> ReqIFDocument:
        return ReqIFDocument.from_snapshot(
            sample_reqif,
            config=DocumentConfig(cascade_deletes=cascade_deletes),
            logger=capturing_logger,
        )

    return _make


@pytest.fixture
def document(make_document: Callable[..., ReqIFDocument]) -> ReqIFDocument:
    return make_document()
