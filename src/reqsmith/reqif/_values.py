"""Value system: typing and constraint checks for attribute values.

Values are checked against a resolved datatype definition. Checks never
coerce a payload; a value either passes unchanged or is rejected with one of
the ValueValidationError subclasses.
"""

import math
from typing import Final, assert_never

from reqsmith.exceptions import (
    DatatypeDefinitionError,
    DuplicateIdentifierError,
    KindMismatchError,
    LengthExceededError,
    OutOfRangeError,
    UnknownEnumValueError,
    ValueValidationError,
)
from reqsmith.reqif._models import (
    AttributeValue,
    BooleanDatatype,
    BooleanValue,
    DatatypeDefinition,
    DatatypeKind,
    EnumerationDatatype,
    EnumerationValue,
    IntegerDatatype,
    IntegerValue,
    RealDatatype,
    RealValue,
    StringDatatype,
    StringValue,
    XhtmlDatatype,
    XhtmlValue,
)

__all__ = [
    "DATATYPE_CLASS_FOR_KIND",
    "INT64_MAX",
    "INT64_MIN",
    "VALUE_CLASS_FOR_KIND",
    "check_value",
    "validate_datatype",
    "validate_value",
]

INT64_MIN: Final = -(2**63)
INT64_MAX: Final = 2**63 - 1

DATATYPE_CLASS_FOR_KIND: Final[dict[DatatypeKind, type[DatatypeDefinition]]] = {
    DatatypeKind.BOOLEAN: BooleanDatatype,
    DatatypeKind.INTEGER: IntegerDatatype,
    DatatypeKind.REAL: RealDatatype,
    DatatypeKind.STRING: StringDatatype,
    DatatypeKind.ENUMERATION: EnumerationDatatype,
    DatatypeKind.XHTML: XhtmlDatatype,
}

VALUE_CLASS_FOR_KIND: Final[dict[DatatypeKind, type[AttributeValue]]] = {
    DatatypeKind.BOOLEAN: BooleanValue,
    DatatypeKind.INTEGER: IntegerValue,
    DatatypeKind.REAL: RealValue,
    DatatypeKind.STRING: StringValue,
    DatatypeKind.ENUMERATION: EnumerationValue,
    DatatypeKind.XHTML: XhtmlValue,
}


def _is_integer(payload: object) -> bool:
    # bool is an int subclass but never an Integer payload
    return isinstance(payload, int) and not isinstance(payload, bool)


def _is_real(payload: object) -> bool:
    return isinstance(payload, (int, float)) and not isinstance(payload, bool)


def _fits_double(number: float) -> bool:
    # ints beyond about 1.8e308 have no double representation
    try:
        _ = float(number)
    except OverflowError:
        return False
    return True


def _check_payload_type(value: AttributeValue) -> bool:
    """Return whether a value's payload has the Python type its tag requires."""
    match value:
        case BooleanValue():
            return isinstance(value.value, bool)
        case IntegerValue():
            return _is_integer(value.value)
        case RealValue():
            return _is_real(value.value)
        case StringValue() | EnumerationValue() | XhtmlValue():
            return isinstance(value.value, str)
        case _:
            assert_never(value)


def _check_bounds(
    definition: IntegerDatatype | RealDatatype,
    value: IntegerValue | RealValue,
) -> None:
    lower, upper = definition.bounds
    payload = value.value
    context = {
        "definition": value.definition,
        "datatype": definition.identifier,
        "value": payload,
    }

    if isinstance(payload, float) and math.isnan(payload):
        if lower is not None or upper is not None:
            msg = f"Value NaN for {value.definition!r} cannot satisfy bounds"
            raise OutOfRangeError(msg, **context)
        return

    if lower is not None and payload < lower:
        msg = f"Value {payload} for {value.definition!r} is below minimum {lower}"
        raise OutOfRangeError(msg, **context)
    if upper is not None and payload > upper:
        msg = f"Value {payload} for {value.definition!r} is above maximum {upper}"
        raise OutOfRangeError(msg, **context)


def validate_value(definition: DatatypeDefinition, value: AttributeValue) -> None:
    """Validate an attribute value against its resolved datatype definition.

    Args:
        definition: The datatype the value's attribute definition refers to.
        value: The attribute value to check.

    Raises:
        KindMismatchError: If the value's variant does not match the datatype
            kind, or its payload is not of the Python type the variant requires.
        OutOfRangeError: If an Integer is outside the 64-bit range or the
            datatype's bounds, or a Real is outside the datatype's bounds or
            cannot be held in a double.
        LengthExceededError: If a String is longer than max_length.
        UnknownEnumValueError: If an Enumeration names an undeclared value.
    """
    if value.kind is not definition.kind:
        msg = (
            f"{value.kind} value for {value.definition!r} does not match "
            f"{definition.kind} datatype {definition.identifier!r}"
        )
        raise KindMismatchError(
            msg,
            definition=value.definition,
            datatype=definition.identifier,
            value=value.value,
        )

    if not _check_payload_type(value):
        msg = (
            f"{value.kind} value for {value.definition!r} has payload of type "
            f"{type(value.value).__name__}"
        )
        raise KindMismatchError(
            msg,
            definition=value.definition,
            datatype=definition.identifier,
            value=value.value,
        )

    context = {
        "definition": value.definition,
        "datatype": definition.identifier,
        "value": value.value,
    }

    # Kinds already agree, so each datatype pairs with exactly one value class.
    match definition, value:
        case IntegerDatatype(), IntegerValue():
            if not INT64_MIN <= value.value <= INT64_MAX:
                msg = f"Value {value.value} for {value.definition!r} exceeds 64 bits"
                raise OutOfRangeError(msg, **context)
            _check_bounds(definition, value)
        case RealDatatype(), RealValue():
            if not _fits_double(value.value):
                msg = f"Value for {value.definition!r} does not fit a double"
                raise OutOfRangeError(msg, **context)
            _check_bounds(definition, value)
        case StringDatatype(max_length=int() as max_length), StringValue():
            if len(value.value) > max_length:
                msg = (
                    f"Value for {value.definition!r} has length {len(value.value)}, "
                    f"maximum is {max_length}"
                )
                raise LengthExceededError(msg, **context)
        case EnumerationDatatype(), EnumerationValue():
            if value.value not in definition.value_ids:
                msg = (
                    f"Enum value {value.value!r} for {value.definition!r} is not "
                    f"declared by {definition.identifier!r}"
                )
                raise UnknownEnumValueError(msg, **context)
        case _:
            pass


def check_value(
    definition: DatatypeDefinition, value: AttributeValue
) -> ValueValidationError | None:
    """Check a value without raising.

    Args:
        definition: The datatype the value's attribute definition refers to.
        value: The attribute value to check.

    Returns:
        The validation error that validate_value would raise, or None.
    """
    try:
        validate_value(definition, value)
    except ValueValidationError as e:
        return e
    return None


def validate_datatype(definition: DatatypeDefinition) -> None:
    """Validate the internal consistency of a datatype definition.

    Args:
        definition: The datatype definition to check.

    Raises:
        DatatypeDefinitionError: If the identifier is empty, bounds are
            inverted or not representable, or a length/accuracy is negative.
        DuplicateIdentifierError: If an enumeration declares the same enum
            value identifier twice.
    """
    if not definition.identifier:
        msg = "Datatype identifier must not be empty"
        raise DatatypeDefinitionError(msg, identifier="", field="identifier")

    match definition:
        case IntegerDatatype():
            for bound_name, bound in (("min", definition.min), ("max", definition.max)):
                if bound is None:
                    continue
                if not _is_integer(bound) or not INT64_MIN <= bound <= INT64_MAX:
                    msg = (
                        f"Integer datatype {definition.identifier!r} has "
                        f"{bound_name}={bound!r}, expected a 64-bit integer"
                    )
                    raise DatatypeDefinitionError(
                        msg, identifier=definition.identifier, field=bound_name
                    )
            _check_bound_order(definition)
        case RealDatatype():
            for bound_name, bound in (("min", definition.min), ("max", definition.max)):
                if bound is None:
                    continue
                if not _is_real(bound) or not _fits_double(bound) or math.isnan(bound):
                    msg = (
                        f"{bound_name} that is NaN or not a double-precision number"
                        f"{bound_name} that is not a double-precision number"
                    )
                    raise DatatypeDefinitionError(
                        msg, identifier=definition.identifier, field=bound_name
                    )
            _check_bound_order(definition)
            if definition.accuracy is not None and definition.accuracy < 0:
                msg = f"Real datatype {definition.identifier!r} has negative accuracy"
                raise DatatypeDefinitionError(
                    msg, identifier=definition.identifier, field="accuracy"
                )
        case StringDatatype():
            if definition.max_length is not None and definition.max_length < 0:
                msg = f"String datatype {definition.identifier!r} has negative max_length"
                raise DatatypeDefinitionError(
                    msg, identifier=definition.identifier, field="max_length"
                )
        case EnumerationDatatype():
            seen: set[str] = set()
            for enum_value in definition.values:
                if enum_value.identifier in seen:
                    msg = (
                        f"Enum value {enum_value.identifier!r} declared twice in "
                        f"{definition.identifier!r}"
                    )
                    raise DuplicateIdentifierError(
                        msg,
                        identifier=enum_value.identifier,
                        namespace="enum_value",
                    )
                seen.add(enum_value.identifier)
        case BooleanDatatype() | XhtmlDatatype():
            pass
        case _:
            assert_never(definition)


def _check_bound_order(definition: IntegerDatatype | RealDatatype) -> None:
    lower, upper = definition.bounds
    if lower is not None and upper is not None and lower > upper:
        msg = (
            f"{definition.kind} datatype {definition.identifier!r} has "
            f"min {lower} greater than max {upper}"
        )
        raise DatatypeDefinitionError(msg, identifier=definition.identifier, field="min")
