"""Round-trip preservation of foreign content.

Foreign content is whatever a codec read that has no modeled field: vendor
attributes, unrecognized elements, extension blocks. It travels beside the
typed fields of an entity as an ordered mapping of key to raw text. The
document never interprets it; writers re-embed it with merge_foreign.
"""

import dataclasses
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from reqsmith.exceptions import InvariantViolationError

__all__ = ["check_foreign", "merge_foreign", "modeled_keys", "preserve"]


def preserve(
    content: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
) -> MappingProxyType[str, str]:
    """Build a read-only, ordered foreign content mapping.

    Args:
        content: A mapping or an iterable of (key, raw text) pairs. Order is
            kept as given. A repeated key keeps its first position and last
            text, as dict assignment does.

    Returns:
        The foreign content as a MappingProxyType over a private dict.
    """
    if content is None:
        return MappingProxyType({})
    items = content.items() if isinstance(content, Mapping) else content
    return MappingProxyType(dict(items))


def modeled_keys(record: object) -> frozenset[str]:
    """Return the keys a writer emits for the modeled fields of a record.

    Accepts a record instance or its class. Datatypes also carry the "type"
    tag naming their variant.
    """
    record_fields = dataclasses.fields(record)  # pyright: ignore[reportArgumentType]
    names = {item.name for item in record_fields} - {"foreign"}
    if getattr(record, "namespace", None) == "datatype":
        names.add("type")
    return frozenset(names)


def check_foreign(
    owner: str,
    foreign: Mapping[str, str],
    reserved: Iterable[str] = (),
) -> None:
    """Verify foreign content is still a mapping of text to text.

    Args:
        owner: Identifier of the entity carrying the content, for messages.
        foreign: The foreign content to check.
        reserved: Keys of modeled fields the content must not reuse.

    Raises:
        InvariantViolationError: If any key or value is not a string, or a
            key collides with a reserved one.
    """
    if not isinstance(foreign, Mapping):
        msg = f"Foreign content of {owner!r} is not a mapping"
        raise InvariantViolationError(msg, issues=(msg,))
    bad = [
        key
        for key, raw in foreign.items()
        if not isinstance(key, str) or not isinstance(raw, str)
    ]
    if bad:
        msg = f"Foreign content of {owner!r} has non-text entries: {bad!r}"
        raise InvariantViolationError(msg, issues=(msg,))
    reserved_keys = set(reserved)
    clashes = [key for key in foreign if key in reserved_keys]
    if clashes:
        msg = f"Foreign keys {clashes!r} of {owner!r} collide with modeled fields"
        raise InvariantViolationError(msg, issues=(msg,))


def merge_foreign(
    owner: str,
    fields: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    foreign: Mapping[str, str],
    decode: Any = None,  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Re-embed foreign content after the modeled fields of an entity.

    Args:
        owner: Identifier of the entity being written, for messages.
        fields: Modeled fields, already in output order. Not modified.
        foreign: Preserved foreign content in stored order.
        decode: Optional callable turning raw text back into the codec's
            native value. Raw text is emitted unchanged when omitted.

    Returns:
        A new dictionary: modeled fields first, then foreign entries.

    Raises:
        InvariantViolationError: If the foreign content is corrupt, collides
            with a modeled field, or cannot be decoded.
    """
    check_foreign(owner, foreign)
    merged = dict(fields)
    for key, raw in foreign.items():
        if key in merged:
            msg = f"Foreign key {key!r} of {owner!r} collides with a modeled field"
            raise InvariantViolationError(msg, issues=(msg,))
        if decode is None:
            merged[key] = raw
            continue
        try:
            merged[key] = decode(raw)
        except ValueError as e:
            msg = f"Foreign content {key!r} of {owner!r} is corrupt: {e}"
            raise InvariantViolationError(msg, issues=(msg,)) from e
    return merged
