"""ReqIF document model.

This module provides the public API for building, checking, and exchanging
requirements-interchange documents: the immutable data model, the
ReqIFDocument aggregate that guards reference and value integrity, and the
JSON interchange codec.

Example:
    >>> from reqsmith.reqif import ReqIFDocument, ReqIFHeader
    >>> document = ReqIFDocument(ReqIFHeader(identifier="doc-1"))
    >>> document.spec_objects
    ()
"""

# Codec
from ._codec import (
    document_from_dict,
    document_to_dict,
    dumps,
    loads,
    read_document,
    write_document,
)

# Aggregate
from ._document import MAX_HIERARCHY_DEPTH, ReqIFDocument, ValidationIssue

# Preservation
from ._foreign import check_foreign, merge_foreign, modeled_keys, preserve

# File I/O
from ._io import read_bytes, write_bytes_atomic

# Models
from ._models import (
    AttributeDefinition,
    AttributeValue,
    BooleanDatatype,
    BooleanValue,
    CoreContent,
    DatatypeDefinition,
    DatatypeKind,
    EnumerationDatatype,
    EnumerationValue,
    EnumValue,
    ForeignContent,
    IntegerDatatype,
    IntegerValue,
    RealDatatype,
    RealValue,
    ReqIF,
    ReqIFHeader,
    SpecHierarchy,
    SpecObject,
    SpecRelation,
    Specification,
    SpecType,
    SpecTypeKind,
    StringDatatype,
    StringValue,
    ToolExtension,
    XhtmlDatatype,
    XhtmlValue,
)

# Value system
from ._values import (
    INT64_MAX,
    INT64_MIN,
    check_value,
    validate_datatype,
    validate_value,
)

__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    "MAX_HIERARCHY_DEPTH",
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
    "ReqIFDocument",
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
    "ValidationIssue",
    "XhtmlDatatype",
    "XhtmlValue",
    "check_foreign",
    "check_value",
    "document_from_dict",
    "document_to_dict",
    "dumps",
    "loads",
    "merge_foreign",
    "modeled_keys",
    "preserve",
    "read_bytes",
    "read_document",
    "validate_datatype",
    "validate_value",
    "write_bytes_atomic",
    "write_document",
]
