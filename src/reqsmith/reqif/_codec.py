# pyright: reportAny=false, reportExplicitAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""JSON interchange codec for ReqIF documents.

The JSON form mirrors the data model: records are objects with snake_case
keys, and datatype definitions and attribute values carry a "type" tag naming
their kind. Optional fields that are unset are omitted.

Reading keeps every key the model does not know as foreign content of the
entity it appeared on (key to compact JSON text, in encounter order) and
builds the document through ReqIFDocument, so the usual reference and value
checks apply. Writing audits the document first, emits entities in stored
order, and places foreign content after the modeled fields. Because nothing
is sorted, dumps(loads(dumps(doc))) == dumps(doc).
"""

import math
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

import orjson

from reqsmith.config import CodecConfig, Config
from reqsmith.exceptions import CodecError, CodecParseError
from reqsmith.reqif._document import ReqIFDocument
from reqsmith.reqif._foreign import merge_foreign, preserve
from reqsmith.reqif._io import read_bytes, write_bytes_atomic
from reqsmith.reqif._models import (
    AttributeDefinition,
    AttributeValue,
    BooleanDatatype,
    CoreContent,
    DatatypeDefinition,
    DatatypeKind,
    EnumerationDatatype,
    EnumValue,
    IntegerDatatype,
    RealDatatype,
    RealValue,
    ReqIF,
    ReqIFHeader,
    SpecHierarchy,
    SpecObject,
    SpecRelation,
    SpecType,
    SpecTypeKind,
    Specification,
    StringDatatype,
    ToolExtension,
    XhtmlDatatype,
)
from reqsmith.reqif._values import VALUE_CLASS_FOR_KIND
from reqsmith.utils import create_logger, create_logger_from_config

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reqsmith.config import DocumentConfig

__all__ = [
    "document_from_dict",
    "document_to_dict",
    "dumps",
    "loads",
    "read_document",
    "write_document",
]

_DOCUMENT_FIELDS: Final = ("header", "core_content", "tool_extensions")
_CORE_FIELDS: Final = (
    "datatype_definitions",
    "spec_types",
    "spec_objects",
    "spec_relations",
    "specifications",
)
_HEADER_FIELDS: Final = (
    "identifier",
    "creation_time",
    "source_tool_id",
    "title",
    "comment",
)
_DATATYPE_BASE: Final = ("type", "identifier", "long_name", "last_change")
_DATATYPE_FIELDS: Final[dict[DatatypeKind, tuple[str, ...]]] = {
    DatatypeKind.BOOLEAN: _DATATYPE_BASE,
    DatatypeKind.INTEGER: (*_DATATYPE_BASE, "min", "max"),
    DatatypeKind.REAL: (*_DATATYPE_BASE, "min", "max", "accuracy"),
    DatatypeKind.STRING: (*_DATATYPE_BASE, "max_length"),
    DatatypeKind.ENUMERATION: (*_DATATYPE_BASE, "values"),
    DatatypeKind.XHTML: _DATATYPE_BASE,
}
_ENUM_VALUE_FIELDS: Final = ("identifier", "long_name", "properties")
_VALUE_FIELDS: Final = ("type", "definition", "value")
_ATTRIBUTE_FIELDS: Final = ("identifier", "datatype_ref", "long_name", "last_change")
_SPEC_TYPE_FIELDS: Final = (
    "identifier",
    "long_name",
    "description",
    "last_change",
    "kind",
    "spec_attributes",
)
_SPEC_OBJECT_FIELDS: Final = ("identifier", "spec_type", "last_change", "values")
_SPEC_RELATION_FIELDS: Final = (
    "identifier",
    "spec_type",
    "source",
    "target",
    "last_change",
    "values",
)
_SPECIFICATION_FIELDS: Final = (
    "identifier",
    "spec_type",
    "last_change",
    "values",
    "children",
)
_HIERARCHY_FIELDS: Final = ("identifier", "object", "last_change", "children")
_TOOL_EXTENSION_FIELDS: Final = ("identifier", "content")


def _default_logger(logger: "FilteringBoundLogger | None") -> "FilteringBoundLogger":
    return logger if logger is not None else create_logger().bind(component="codec")


def _summary(reqif: ReqIF) -> dict[str, int]:
    content = reqif.core_content
    return {
        "datatypes": len(content.datatype_definitions),
        "spec_types": len(content.spec_types),
        "spec_objects": len(content.spec_objects),
        "spec_relations": len(content.spec_relations),
        "specifications": len(content.specifications),
        "tool_extensions": len(reqif.tool_extensions),
    }


# =============================================================================
# Encoding
# =============================================================================


def _foreign_json(raw: str) -> Any:
    # Text that is not JSON, vendor XML say, is written as a JSON string.
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw


def _with_foreign(
    owner: str,
    fields: dict[str, Any],
    foreign: MappingProxyType[str, str],
) -> dict[str, Any]:
    """Merge foreign content after fields, then drop unset modeled fields."""
    merged = merge_foreign(owner, fields, foreign, decode=_foreign_json)
    return {
        key: value
        for key, value in merged.items()
        if key not in fields or value is not None
    }


def _check_finite(owner: str, name: str, number: float | None) -> None:
    if number is not None and not math.isfinite(number):
        msg = f"{owner!r} has non-finite {name} {number!r}, which JSON cannot represent"
        raise CodecError(msg)


def _encode_value(owner: str, value: AttributeValue) -> dict[str, Any]:
    payload: Any = value.value
    if isinstance(value, RealValue):
        _check_finite(owner, f"value for {value.definition!r}", value.value)
        payload = float(value.value)
    return {"type": str(value.kind), "definition": value.definition, "value": payload}


def _encode_values(owner: str, values: tuple[AttributeValue, ...]) -> list[dict[str, Any]]:
    return [_encode_value(owner, value) for value in values]


def _encode_datatype(datatype: DatatypeDefinition) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "type": str(datatype.kind),
        "identifier": datatype.identifier,
        "long_name": datatype.long_name,
        "last_change": datatype.last_change,
    }
    match datatype:
        case IntegerDatatype():
            fields |= {"min": datatype.min, "max": datatype.max}
        case RealDatatype():
            _check_finite(datatype.identifier, "min", datatype.min)
            _check_finite(datatype.identifier, "max", datatype.max)
            fields |= {
                "min": None if datatype.min is None else float(datatype.min),
                "max": None if datatype.max is None else float(datatype.max),
                "accuracy": datatype.accuracy,
            }
        case StringDatatype():
            fields["max_length"] = datatype.max_length
        case EnumerationDatatype():
            fields["values"] = [
                {
                    key: value
                    for key, value in (
                        ("identifier", enum_value.identifier),
                        ("long_name", enum_value.long_name),
                        ("properties", enum_value.properties),
                    )
                    if value is not None
                }
                for enum_value in datatype.values
            ]
        case BooleanDatatype() | XhtmlDatatype():
            pass
    return _with_foreign(datatype.identifier, fields, datatype.foreign)


def _encode_spec_type(spec_type: SpecType) -> dict[str, Any]:
    attributes = [
        _with_foreign(
            definition.identifier,
            {
                "identifier": definition.identifier,
                "datatype_ref": definition.datatype_ref,
                "long_name": definition.long_name,
                "last_change": definition.last_change,
            },
            definition.foreign,
        )
        for definition in spec_type.spec_attributes
    ]
    fields: dict[str, Any] = {
        "identifier": spec_type.identifier,
        "long_name": spec_type.long_name,
        "description": spec_type.description,
        "last_change": spec_type.last_change,
        "kind": None if spec_type.kind is None else str(spec_type.kind),
        "spec_attributes": attributes,
    }
    return _with_foreign(spec_type.identifier, fields, spec_type.foreign)


def _encode_hierarchy(node: SpecHierarchy) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "identifier": node.identifier,
        "object": node.object,
        "last_change": node.last_change,
        "children": [_encode_hierarchy(child) for child in node.children],
    }
    return _with_foreign(node.identifier, fields, node.foreign)


def document_to_dict(document: ReqIFDocument) -> dict[str, Any]:
    """Convert a document to its JSON-ready dictionary form.

    Args:
        document: The document to convert.

    Returns:
        A dictionary of plain JSON values in stored entity order.

    Raises:
        InvariantViolationError: If the document audit finds a violation or
            foreign content collides with a modeled field or is not JSON text.
        CodecError: If a Real value or bound is not finite.
    """
    document.check_integrity()
    reqif = document.snapshot()
    content = reqif.core_content
    header = reqif.header

    core: dict[str, Any] = {
        "datatype_definitions": [
            _encode_datatype(datatype) for datatype in content.datatype_definitions
        ],
        "spec_types": [_encode_spec_type(spec_type) for spec_type in content.spec_types],
        "spec_objects": [
            _with_foreign(
                spec_object.identifier,
                {
                    "identifier": spec_object.identifier,
                    "spec_type": spec_object.spec_type,
                    "last_change": spec_object.last_change,
                    "values": _encode_values(spec_object.identifier, spec_object.values),
                },
                spec_object.foreign,
            )
            for spec_object in content.spec_objects
        ],
        "spec_relations": [
            _with_foreign(
                relation.identifier,
                {
                    "identifier": relation.identifier,
                    "spec_type": relation.spec_type,
                    "source": relation.source,
                    "target": relation.target,
                    "last_change": relation.last_change,
                    "values": _encode_values(relation.identifier, relation.values),
                },
                relation.foreign,
            )
            for relation in content.spec_relations
        ],
        "specifications": [
            _with_foreign(
                specification.identifier,
                {
                    "identifier": specification.identifier,
                    "spec_type": specification.spec_type,
                    "last_change": specification.last_change,
                    "values": _encode_values(
                        specification.identifier, specification.values
                    ),
                    "children": [
                        _encode_hierarchy(child) for child in specification.children
                    ],
                },
                specification.foreign,
            )
            for specification in content.specifications
        ],
    }

    fields: dict[str, Any] = {
        "header": _with_foreign(
            header.identifier,
            {
                "identifier": header.identifier,
                "creation_time": header.creation_time,
                "source_tool_id": header.source_tool_id,
                "title": header.title,
                "comment": header.comment,
            },
            header.foreign,
        ),
        "core_content": core,
        "tool_extensions": [
            {"identifier": extension.identifier, "content": extension.content}
            for extension in reqif.tool_extensions
        ],
    }
    return _with_foreign(header.identifier, fields, reqif.foreign)


def dumps(document: ReqIFDocument, *, config: CodecConfig | None = None) -> bytes:
    """Serialize a document to JSON bytes.

    Args:
        document: The document to serialize.
        config: Output settings. Defaults to two-space indentation with a
            trailing newline.

    Returns:
        UTF-8 encoded JSON.

    Raises:
        InvariantViolationError: If the document audit finds a violation.
        CodecError: If the document holds a value JSON cannot represent.
    """
    config = config if config is not None else CodecConfig()
    option = orjson.OPT_INDENT_2 if config.indent else 0
    if config.trailing_newline:
        option |= orjson.OPT_APPEND_NEWLINE

    data = document_to_dict(document)
    try:
        return orjson.dumps(data, option=option)
    except orjson.JSONEncodeError as e:
        msg = f"Failed to serialize document: {e}"
        raise CodecError(msg) from e


# =============================================================================
# Decoding
# =============================================================================


def _expect_object(raw: Any, location: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        msg = f"Expected JSON object at {location}, got {type(raw).__name__}"
        raise CodecParseError(msg, location=location)
    return raw


def _split(
    raw: Any,
    known: tuple[str, ...],
    location: str,
    *,
    keep_foreign: bool = True,
) -> tuple[dict[str, Any], MappingProxyType[str, str]]:
    """Separate modeled keys from foreign ones.

    Raises:
        CodecParseError: If raw is not an object, or it has unknown keys and
            the record has nowhere to keep them.
    """
    data = _expect_object(raw, location)
    unknown = [key for key in data if key not in known]
    if unknown and not keep_foreign:
        msg = f"Unexpected keys at {location}: {', '.join(unknown)}"
        raise CodecParseError(msg, location=location)
    foreign = preserve((key, orjson.dumps(data[key]).decode()) for key in unknown)
    return data, foreign


def _text(data: dict[str, Any], key: str, location: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        msg = f"Expected string at {location}.{key}, got {type(value).__name__}"
        raise CodecParseError(msg, location=f"{location}.{key}")
    return value


def _required_text(data: dict[str, Any], key: str, location: str) -> str:
    value = _text(data, key, location)
    if value is None:
        msg = f"Missing required {key!r} at {location}"
        raise CodecParseError(msg, location=location)
    return value


def _integer(data: dict[str, Any], key: str, location: str) -> int | None:
    value = data.get(key)
    if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
        msg = f"Expected integer at {location}.{key}, got {type(value).__name__}"
        raise CodecParseError(msg, location=f"{location}.{key}")
    return value


def _number(data: dict[str, Any], key: str, location: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, int | float) or isinstance(value, bool):
        msg = f"Expected number at {location}.{key}, got {type(value).__name__}"
        raise CodecParseError(msg, location=f"{location}.{key}")
    return float(value)


def _array(data: dict[str, Any], key: str, location: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"Expected array at {location}.{key}, got {type(value).__name__}"
        raise CodecParseError(msg, location=f"{location}.{key}")
    return value


def _kind(data: dict[str, Any], location: str) -> DatatypeKind:
    tag = _required_text(data, "type", location)
    try:
        return DatatypeKind(tag)
    except ValueError:
        msg = f"Unknown type tag {tag!r} at {location}"
        raise CodecParseError(msg, location=f"{location}.type") from None


def _decode_value(raw: Any, location: str) -> AttributeValue:
    data, _ = _split(raw, _VALUE_FIELDS, location, keep_foreign=False)
    kind = _kind(data, location)
    definition = _required_text(data, "definition", location)
    if "value" not in data:
        msg = f"Missing required 'value' at {location}"
        raise CodecParseError(msg, location=location)

    payload = data["value"]
    if kind is DatatypeKind.REAL and isinstance(payload, int) and not isinstance(payload, bool):
        payload = float(payload)
    return VALUE_CLASS_FOR_KIND[kind](definition=definition, value=payload)


def _decode_values(data: dict[str, Any], location: str) -> tuple[AttributeValue, ...]:
    return tuple(
        _decode_value(raw, f"{location}.values[{index}]")
        for index, raw in enumerate(_array(data, "values", location))
    )


def _decode_datatype(raw: Any, location: str) -> DatatypeDefinition:
    kind = _kind(_expect_object(raw, location), location)
    data, foreign = _split(raw, _DATATYPE_FIELDS[kind], location)
    identifier = _required_text(data, "identifier", location)
    long_name = _text(data, "long_name", location)
    last_change = _text(data, "last_change", location)

    match kind:
        case DatatypeKind.BOOLEAN:
            return BooleanDatatype(identifier, long_name, last_change, foreign=foreign)
        case DatatypeKind.INTEGER:
            return IntegerDatatype(
                identifier,
                long_name,
                last_change,
                min=_integer(data, "min", location),
                max=_integer(data, "max", location),
                foreign=foreign,
            )
        case DatatypeKind.REAL:
            return RealDatatype(
                identifier,
                long_name,
                last_change,
                min=_number(data, "min", location),
                max=_number(data, "max", location),
                accuracy=_integer(data, "accuracy", location),
                foreign=foreign,
            )
        case DatatypeKind.STRING:
            return StringDatatype(
                identifier,
                long_name,
                last_change,
                max_length=_integer(data, "max_length", location),
                foreign=foreign,
            )
        case DatatypeKind.ENUMERATION:
            values: list[EnumValue] = []
            for index, raw_value in enumerate(_array(data, "values", location)):
                value_location = f"{location}.values[{index}]"
                value_data, _ = _split(
                    raw_value, _ENUM_VALUE_FIELDS, value_location, keep_foreign=False
                )
                values.append(
                    EnumValue(
                        _required_text(value_data, "identifier", value_location),
                        _text(value_data, "long_name", value_location),
                        _text(value_data, "properties", value_location),
                    )
                )
            return EnumerationDatatype(
                identifier, long_name, last_change, values=tuple(values), foreign=foreign
            )
        case DatatypeKind.XHTML:
            return XhtmlDatatype(identifier, long_name, last_change, foreign=foreign)


def _decode_spec_type(raw: Any, location: str) -> SpecType:
    data, foreign = _split(raw, _SPEC_TYPE_FIELDS, location)

    kind_tag = _text(data, "kind", location)
    try:
        kind = None if kind_tag is None else SpecTypeKind(kind_tag)
    except ValueError:
        msg = f"Unknown spec type kind {kind_tag!r} at {location}"
        raise CodecParseError(msg, location=f"{location}.kind") from None

    attributes: list[AttributeDefinition] = []
    for index, raw_attribute in enumerate(_array(data, "spec_attributes", location)):
        attribute_location = f"{location}.spec_attributes[{index}]"
        attribute, attribute_foreign = _split(
            raw_attribute, _ATTRIBUTE_FIELDS, attribute_location
        )
        attributes.append(
            AttributeDefinition(
                identifier=_required_text(attribute, "identifier", attribute_location),
                datatype_ref=_required_text(attribute, "datatype_ref", attribute_location),
                long_name=_text(attribute, "long_name", attribute_location),
                last_change=_text(attribute, "last_change", attribute_location),
                foreign=attribute_foreign,
            )
        )

    return SpecType(
        identifier=_required_text(data, "identifier", location),
        long_name=_text(data, "long_name", location),
        description=_text(data, "description", location),
        last_change=_text(data, "last_change", location),
        kind=kind,
        spec_attributes=tuple(attributes),
        foreign=foreign,
    )


def _decode_spec_object(raw: Any, location: str) -> SpecObject:
    data, foreign = _split(raw, _SPEC_OBJECT_FIELDS, location)
    return SpecObject(
        identifier=_required_text(data, "identifier", location),
        spec_type=_required_text(data, "spec_type", location),
        last_change=_text(data, "last_change", location),
        values=_decode_values(data, location),
        foreign=foreign,
    )


def _decode_spec_relation(raw: Any, location: str) -> SpecRelation:
    data, foreign = _split(raw, _SPEC_RELATION_FIELDS, location)
    return SpecRelation(
        identifier=_required_text(data, "identifier", location),
        spec_type=_required_text(data, "spec_type", location),
        source=_required_text(data, "source", location),
        target=_required_text(data, "target", location),
        last_change=_text(data, "last_change", location),
        values=_decode_values(data, location),
        foreign=foreign,
    )


def _decode_children(data: dict[str, Any], location: str) -> tuple[SpecHierarchy, ...]:
    children: list[SpecHierarchy] = []
    for index, raw in enumerate(_array(data, "children", location)):
        child_location = f"{location}.children[{index}]"
        child, foreign = _split(raw, _HIERARCHY_FIELDS, child_location)
        children.append(
            SpecHierarchy(
                identifier=_required_text(child, "identifier", child_location),
                object=_required_text(child, "object", child_location),
                last_change=_text(child, "last_change", child_location),
                children=_decode_children(child, child_location),
                foreign=foreign,
            )
        )
    return tuple(children)


def _decode_specification(raw: Any, location: str) -> Specification:
    data, foreign = _split(raw, _SPECIFICATION_FIELDS, location)
    return Specification(
        identifier=_required_text(data, "identifier", location),
        spec_type=_required_text(data, "spec_type", location),
        last_change=_text(data, "last_change", location),
        values=_decode_values(data, location),
        children=_decode_children(data, location),
        foreign=foreign,
    )


def _decode_header(raw: Any, location: str) -> ReqIFHeader:
    data, foreign = _split(raw, _HEADER_FIELDS, location)
    return ReqIFHeader(
        identifier=_required_text(data, "identifier", location),
        creation_time=_text(data, "creation_time", location) or "",
        source_tool_id=_text(data, "source_tool_id", location) or "",
        title=_text(data, "title", location),
        comment=_text(data, "comment", location),
        foreign=foreign,
    )


def document_from_dict(
    data: dict[str, Any],
    *,
    config: "DocumentConfig | None" = None,
    logger: "FilteringBoundLogger | None" = None,
) -> ReqIFDocument:
    """Build a validated document from its dictionary form.

    Args:
        data: Parsed JSON, as produced by document_to_dict.
        config: Settings for the new document.
        logger: Logger for the new document and the import summary.

    Returns:
        The document.

    Raises:
        CodecParseError: If the data does not have the interchange shape.
        DocumentError: If the content breaks a document invariant.
        ValueValidationError: If an attribute value fails its datatype.
    """
    logger = _default_logger(logger)
    root, foreign = _split(data, _DOCUMENT_FIELDS, "document")
    if "header" not in root:
        msg = "Missing required 'header' at document"
        raise CodecParseError(msg, location="document")

    core_raw = root.get("core_content")
    core, _ = _split(
        {} if core_raw is None else core_raw,
        _CORE_FIELDS,
        "core_content",
        keep_foreign=False,
    )

    def decode_all(key: str, decode: Any) -> tuple[Any, ...]:
        return tuple(
            decode(raw, f"core_content.{key}[{index}]")
            for index, raw in enumerate(_array(core, key, "core_content"))
        )

    extensions: list[ToolExtension] = []
    for index, raw in enumerate(_array(root, "tool_extensions", "document")):
        location = f"tool_extensions[{index}]"
        extension, _ = _split(raw, _TOOL_EXTENSION_FIELDS, location, keep_foreign=False)
        extensions.append(
            ToolExtension(
                identifier=_required_text(extension, "identifier", location),
                content=_required_text(extension, "content", location),
            )
        )

    reqif = ReqIF(
        header=_decode_header(root["header"], "header"),
        core_content=CoreContent(
            spec_objects=decode_all("spec_objects", _decode_spec_object),
            spec_relations=decode_all("spec_relations", _decode_spec_relation),
            specifications=decode_all("specifications", _decode_specification),
            spec_types=decode_all("spec_types", _decode_spec_type),
            datatype_definitions=decode_all("datatype_definitions", _decode_datatype),
        ),
        tool_extensions=tuple(extensions),
        foreign=foreign,
    )

    document = ReqIFDocument.from_snapshot(
        reqif, config=config, logger=logger.bind(component="document")
    )
    logger.info("document_decoded", identifier=reqif.header.identifier, **_summary(reqif))
    return document


def loads(
    content: bytes | str,
    *,
    config: "DocumentConfig | None" = None,
    logger: "FilteringBoundLogger | None" = None,
) -> ReqIFDocument:
    """Parse JSON text into a validated document.

    Raises:
        CodecParseError: If the content is not JSON or not the interchange shape.
        DocumentError: If the content breaks a document invariant.
        ValueValidationError: If an attribute value fails its datatype.
    """
    try:
        data = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        msg = f"Invalid JSON: {e}"
        raise CodecParseError(msg, content_type="json", cause=e) from e

    if not isinstance(data, dict):
        msg = f"Expected JSON object, got {type(data).__name__}"
        raise CodecParseError(msg, location="document", content_type="json")

    return document_from_dict(data, config=config, logger=logger)


# =============================================================================
# Files
# =============================================================================


def read_document(
    path: Path,
    *,
    config: Config | None = None,
    logger: "FilteringBoundLogger | None" = None,
) -> ReqIFDocument:
    """Read a document from a JSON interchange file.

    Args:
        path: Path to the file.
        config: Settings. Defaults apply when None.
        logger: Logger. One is built from config.logging when None.

    Returns:
        The validated document.

    Raises:
        CodecIOError: If the file cannot be read.
        CodecParseError: If the content cannot be parsed. Its path is set.
        DocumentError: If the content breaks a document invariant.
        ValueValidationError: If an attribute value fails its datatype.
    """
    config = config if config is not None else Config()
    if logger is None:
        logger = create_logger_from_config(config.logging, component="codec")

    content = read_bytes(path)
    try:
        document = loads(content, config=config.document, logger=logger)
    except CodecParseError as e:
        if e.path is None:
            e.path = path
        raise

    logger.info("document_read", path=str(path), size=len(content))
    return document


def write_document(
    document: ReqIFDocument,
    path: Path,
    *,
    config: Config | None = None,
    logger: "FilteringBoundLogger | None" = None,
) -> None:
    """Write a document to a JSON interchange file atomically.

    Args:
        document: The document to write.
        path: Destination path. Missing parent directories are created.
        config: Settings. Defaults apply when None.
        logger: Logger. One is built from config.logging when None.

    Raises:
        InvariantViolationError: If the document audit finds a violation.
        CodecError: If the document holds a value JSON cannot represent.
        CodecIOError: If the file cannot be written.
    """
    config = config if config is not None else Config()
    if logger is None:
        logger = create_logger_from_config(config.logging, component="codec")

    content = dumps(document, config=config.codec)
    write_bytes_atomic(path, content)
    logger.info(
        "document_written",
        path=str(path),
        size=len(content),
        **_summary(document.snapshot()),
    )
