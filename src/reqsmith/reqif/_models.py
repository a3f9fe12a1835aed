"""Data models for ReqIF requirements-interchange documents.

This module defines the enums and dataclasses for datatype definitions,
attribute values, and the referencable entities of a document. All models are
frozen dataclasses with slots. Entities refer to one another only by
identifier; resolving those references is the job of ReqIFDocument.

Entities (anything with an identifier in a document namespace) compare and
hash by namespace and identifier. Attribute values, the header, and the
snapshot containers compare structurally.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import ClassVar

__all__ = [
    "AttributeDefinition",
    "AttributeValue",
    "BooleanDatatype",
    "BooleanValue",
    "CoreContent",
    "DatatypeDefinition",
    "DatatypeKind",
    "EnumValue",
    "EnumerationDatatype",
    "EnumerationValue",
    "ForeignContent",
    "IntegerDatatype",
    "IntegerValue",
    "RealDatatype",
    "RealValue",
    "ReqIF",
    "ReqIFHeader",
    "SpecHierarchy",
    "SpecObject",
    "SpecRelation",
    "SpecType",
    "SpecTypeKind",
    "Specification",
    "StringDatatype",
    "StringValue",
    "ToolExtension",
    "XhtmlDatatype",
    "XhtmlValue",
]

type ForeignContent = MappingProxyType[str, str]


def _empty_foreign() -> MappingProxyType[str, str]:
    """Create an empty MappingProxyType for foreign content defaults."""
    return MappingProxyType({})


# =============================================================================
# Kind Enums
# =============================================================================


class DatatypeKind(StrEnum):
    """The closed set of datatype and attribute value kinds.

    Values match the variant tags used by the interchange format.
    """

    BOOLEAN = "Boolean"
    INTEGER = "Integer"
    REAL = "Real"
    STRING = "String"
    ENUMERATION = "Enumeration"
    XHTML = "XHTML"


class SpecTypeKind(StrEnum):
    """Kind of entity a spec type is declared for.

    A spec type without a kind may be used by any entity.
    """

    OBJECT = "object"
    RELATION = "relation"
    SPECIFICATION = "specification"


# =============================================================================
# Identity
# =============================================================================


class _Entity:
    """Identity by namespace and identifier for referencable records."""

    __slots__ = ()

    namespace: ClassVar[str]
    identifier: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Entity):
            return NotImplemented
        return (
            self.namespace == other.namespace and self.identifier == other.identifier
        )

    def __hash__(self) -> int:
        return hash((self.namespace, self.identifier))


# =============================================================================
# Datatype Definitions
# =============================================================================


@dataclass(frozen=True, slots=True)
class EnumValue:
    """One declared member of an enumeration datatype.

    Attributes:
        identifier: Identifier, unique within the enumeration.
        long_name: Human-readable name.
        properties: Raw properties text (e.g. ReqIF EMBEDDED-VALUE key/color).
    """

    identifier: str
    long_name: str | None = None
    properties: str | None = None


@dataclass(frozen=True, slots=True, eq=False)
class BooleanDatatype(_Entity):
    """Boolean datatype definition."""

    namespace: ClassVar[str] = "datatype"
    kind: ClassVar[DatatypeKind] = DatatypeKind.BOOLEAN

    identifier: str
    long_name: str | None = None
    last_change: str | None = None
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)


@dataclass(frozen=True, slots=True, eq=False)
class IntegerDatatype(_Entity):
    """Integer datatype definition with optional inclusive bounds.

    Attributes:
        identifier: Datatype identifier.
        long_name: Human-readable name.
        last_change: Last-change timestamp as found in the source document.
        min: Inclusive lower bound.
        max: Inclusive upper bound.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "datatype"
    kind: ClassVar[DatatypeKind] = DatatypeKind.INTEGER

    identifier: str
    long_name: str | None = None
    last_change: str | None = None
    min: int | None = None
    max: int | None = None
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)

    @property
    def bounds(self) -> tuple[int | None, int | None]:
        return (self.min, self.max)


@dataclass(frozen=True, slots=True, eq=False)
class RealDatatype(_Entity):
    """Real (double precision) datatype definition.

    Attributes:
        identifier: Datatype identifier.
        long_name: Human-readable name.
        last_change: Last-change timestamp as found in the source document.
        min: Inclusive lower bound.
        max: Inclusive upper bound.
        accuracy: Number of decimal places to render. Advisory only.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "datatype"
    kind: ClassVar[DatatypeKind] = DatatypeKind.REAL

    identifier: str
    long_name: str | None = None
    last_change: str | None = None
    min: float | None = None
    max: float | None = None
    accuracy: int | None = None
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)

    @property
    def bounds(self) -> tuple[float | None, float | None]:
        return (self.min, self.max)


@dataclass(frozen=True, slots=True, eq=False)
class StringDatatype(_Entity):
    """String datatype definition with an optional maximum length."""

    namespace: ClassVar[str] = "datatype"
    kind: ClassVar[DatatypeKind] = DatatypeKind.STRING

    identifier: str
    long_name: str | None = None
    last_change: str | None = None
    max_length: int | None = None
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)


@dataclass(frozen=True, slots=True, eq=False)
class EnumerationDatatype(_Entity):
    """Enumeration datatype definition.

    Attributes:
        identifier: Datatype identifier.
        long_name: Human-readable name.
        last_change: Last-change timestamp as found in the source document.
        values: Declared enum values in document order.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "datatype"
    kind: ClassVar[DatatypeKind] = DatatypeKind.ENUMERATION

    identifier: str
    long_name: str | None = None
    last_change: str | None = None
    values: tuple[EnumValue, ...] = ()
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)

    @property
    def value_ids(self) -> tuple[str, ...]:
        return tuple(value.identifier for value in self.values)


@dataclass(frozen=True, slots=True, eq=False)
class XhtmlDatatype(_Entity):
    """XHTML datatype definition. Values are carried as raw markup."""

    namespace: ClassVar[str] = "datatype"
    kind: ClassVar[DatatypeKind] = DatatypeKind.XHTML

    identifier: str
    long_name: str | None = None
    last_change: str | None = None
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)


DatatypeDefinition = (
    BooleanDatatype
    | IntegerDatatype
    | RealDatatype
    | StringDatatype
    | EnumerationDatatype
    | XhtmlDatatype
)


# =============================================================================
# Attribute Values
# =============================================================================


@dataclass(frozen=True, slots=True)
class BooleanValue:
    """Boolean attribute value."""

    kind: ClassVar[DatatypeKind] = DatatypeKind.BOOLEAN

    definition: str
    value: bool


@dataclass(frozen=True, slots=True)
class IntegerValue:
    """Integer attribute value (64-bit signed)."""

    kind: ClassVar[DatatypeKind] = DatatypeKind.INTEGER

    definition: str
    value: int


@dataclass(frozen=True, slots=True)
class RealValue:
    """Real attribute value (double precision)."""

    kind: ClassVar[DatatypeKind] = DatatypeKind.REAL

    definition: str
    value: float


@dataclass(frozen=True, slots=True)
class StringValue:
    """String attribute value."""

    kind: ClassVar[DatatypeKind] = DatatypeKind.STRING

    definition: str
    value: str


@dataclass(frozen=True, slots=True)
class EnumerationValue:
    """Enumeration attribute value.

    Attributes:
        definition: Identifier of the attribute definition this value fills.
        value: Identifier of the selected EnumValue.
    """

    kind: ClassVar[DatatypeKind] = DatatypeKind.ENUMERATION

    definition: str
    value: str


@dataclass(frozen=True, slots=True)
class XhtmlValue:
    """XHTML attribute value carried as raw markup text."""

    kind: ClassVar[DatatypeKind] = DatatypeKind.XHTML

    definition: str
    value: str


AttributeValue = (
    BooleanValue | IntegerValue | RealValue | StringValue | EnumerationValue | XhtmlValue
)


# =============================================================================
# Types
# =============================================================================


@dataclass(frozen=True, slots=True, eq=False)
class AttributeDefinition(_Entity):
    """One typed attribute slot declared by a spec type.

    Attributes:
        identifier: Identifier, unique across the document.
        datatype_ref: Identifier of the datatype definition for this slot.
        long_name: Human-readable name.
        last_change: Last-change timestamp as found in the source document.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "attribute_definition"

    identifier: str
    datatype_ref: str
    long_name: str | None = None
    last_change: str | None = None
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)


@dataclass(frozen=True, slots=True, eq=False)
class SpecType(_Entity):
    """Schema shared by a set of objects, relations, or specifications.

    Attributes:
        identifier: Spec type identifier.
        long_name: Human-readable name.
        description: Free-text description.
        last_change: Last-change timestamp as found in the source document.
        kind: Entity kind this type is declared for, or None for any.
        spec_attributes: Attribute definitions in declaration order.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "spec_type"

    identifier: str
    long_name: str | None = None
    description: str | None = None
    last_change: str | None = None
    kind: SpecTypeKind | None = None
    spec_attributes: tuple[AttributeDefinition, ...] = ()
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)

    def attribute(self, identifier: str) -> AttributeDefinition | None:
        """Return the attribute definition with the given identifier, if declared."""
        for definition in self.spec_attributes:
            if definition.identifier == identifier:
                return definition
        return None


# =============================================================================
# Instances
# =============================================================================


class _Valued(_Entity):
    """Lookup helpers for entities carrying attribute values."""

    __slots__ = ()

    values: tuple[AttributeValue, ...]

    def value_for(self, definition: str) -> AttributeValue | None:
        """Return the value filling the given attribute definition, if any."""
        for value in self.values:
            if value.definition == definition:
                return value
        return None


@dataclass(frozen=True, slots=True, eq=False)
class SpecObject(_Valued):
    """A requirement or other specification-object instance.

    Attributes:
        identifier: Object identifier.
        spec_type: Identifier of the spec type describing this object.
        last_change: Last-change timestamp as found in the source document.
        values: Attribute values in document order.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "spec_object"

    identifier: str
    spec_type: str
    last_change: str | None = None
    values: tuple[AttributeValue, ...] = ()
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)


@dataclass(frozen=True, slots=True, eq=False)
class SpecRelation(_Valued):
    """A directed, typed link between two spec objects.

    Attributes:
        identifier: Relation identifier.
        spec_type: Identifier of the spec type describing this relation.
        source: Identifier of the source spec object.
        target: Identifier of the target spec object.
        last_change: Last-change timestamp as found in the source document.
        values: Attribute values in document order.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "spec_relation"

    identifier: str
    spec_type: str
    source: str
    target: str
    last_change: str | None = None
    values: tuple[AttributeValue, ...] = ()
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)


@dataclass(frozen=True, slots=True, eq=False)
class SpecHierarchy(_Entity):
    """One node in a specification's hierarchy tree.

    Attributes:
        identifier: Node identifier, unique across the document.
        object: Identifier of the spec object this node shows.
        last_change: Last-change timestamp as found in the source document.
        children: Child nodes in document order.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "spec_hierarchy"

    identifier: str
    object: str
    last_change: str | None = None
    children: tuple["SpecHierarchy", ...] = ()
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)

    def walk(self) -> Iterator["SpecHierarchy"]:
        """Yield this node and its descendants in depth-first pre-order."""
        stack: list[SpecHierarchy] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True, slots=True, eq=False)
class Specification(_Valued):
    """A named root of a hierarchical view over spec objects.

    Attributes:
        identifier: Specification identifier.
        spec_type: Identifier of the spec type describing this specification.
        last_change: Last-change timestamp as found in the source document.
        values: Attribute values in document order.
        children: Top-level hierarchy nodes in document order.
        foreign: Preserved content with no modeled field.
    """

    namespace: ClassVar[str] = "specification"

    identifier: str
    spec_type: str
    last_change: str | None = None
    values: tuple[AttributeValue, ...] = ()
    children: tuple[SpecHierarchy, ...] = ()
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)

    def walk(self) -> Iterator[SpecHierarchy]:
        """Yield every hierarchy node under this specification in pre-order."""
        for child in self.children:
            yield from child.walk()


# =============================================================================
# Document Containers
# =============================================================================


@dataclass(frozen=True, slots=True)
class ReqIFHeader:
    """Document metadata.

    Attributes:
        identifier: Document identifier. Must be non-empty.
        creation_time: Creation timestamp as found in the source document.
        source_tool_id: Identifier of the tool that produced the document.
        title: Document title.
        comment: Free-text comment.
        foreign: Preserved content with no modeled field.
    """

    identifier: str
    creation_time: str = ""
    source_tool_id: str = ""
    title: str | None = None
    comment: str | None = None
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)


@dataclass(frozen=True, slots=True, eq=False)
class ToolExtension(_Entity):
    """Opaque tool-specific payload, re-emitted verbatim."""

    namespace: ClassVar[str] = "tool_extension"

    identifier: str
    content: str


@dataclass(frozen=True, slots=True)
class CoreContent:
    """All entities of a document in stored order.

    Attributes:
        spec_objects: Spec objects.
        spec_relations: Spec relations.
        specifications: Specifications with their hierarchy trees.
        spec_types: Spec types with their attribute definitions.
        datatype_definitions: Datatype definitions.
    """

    spec_objects: tuple[SpecObject, ...] = ()
    spec_relations: tuple[SpecRelation, ...] = ()
    specifications: tuple[Specification, ...] = ()
    spec_types: tuple[SpecType, ...] = ()
    datatype_definitions: tuple[DatatypeDefinition, ...] = ()


@dataclass(frozen=True, slots=True)
class ReqIF:
    """Immutable snapshot of a whole document.

    Attributes:
        header: Document metadata.
        core_content: All entities in stored order.
        tool_extensions: Tool extensions in stored order.
        foreign: Preserved document-level content with no modeled field.
    """

    header: ReqIFHeader
    core_content: CoreContent = field(default_factory=CoreContent)
    tool_extensions: tuple[ToolExtension, ...] = ()
    foreign: MappingProxyType[str, str] = field(default_factory=_empty_foreign)
