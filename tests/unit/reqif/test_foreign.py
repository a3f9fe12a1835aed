"""Unit tests for foreign content preservation."""

from types import MappingProxyType

import orjson
import pytest

from reqsmith.exceptions import InvariantViolationError
from reqsmith.reqif import (
    BooleanDatatype,
    ReqIF,
    SpecHierarchy,
    SpecObject,
    check_foreign,
    merge_foreign,
    modeled_keys,
    preserve,
)


class TestPreserve:
    def test_keeps_pair_order(self) -> None:
        foreign = preserve([("z", "1"), ("a", "2"), ("m", "3")])

        assert list(foreign) == ["z", "a", "m"]

    def test_accepts_mapping(self) -> None:
        foreign = preserve({"x-a": "1"})

        assert foreign == {"x-a": "1"}

    def test_none_gives_empty_mapping(self) -> None:
        assert dict(preserve(None)) == {}

    def test_result_is_read_only_copy(self) -> None:
        source = {"x-a": "1"}
        foreign = preserve(source)
        source["x-b"] = "2"

        assert isinstance(foreign, MappingProxyType)
        assert "x-b" not in foreign


class TestCheckForeign:
    def test_accepts_text_entries(self) -> None:
        check_foreign("REQ-1", preserve({"x-a": "1"}))

    def test_rejects_non_text_values(self) -> None:
        with pytest.raises(InvariantViolationError) as exc_info:
            check_foreign("REQ-1", {"x-a": 1})  # pyright: ignore[reportArgumentType]

        assert "REQ-1" in str(exc_info.value)
        assert exc_info.value.issues

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(InvariantViolationError):
            check_foreign("REQ-1", [("x-a", "1")])  # pyright: ignore[reportArgumentType]


class TestMergeForeign:
    def test_foreign_entries_follow_modeled_fields(self) -> None:
        merged = merge_foreign(
            "REQ-1",
            {"identifier": "REQ-1", "spec_type": "st-1"},
            preserve([("x-b", "b"), ("x-a", "a")]),
        )

        assert list(merged) == ["identifier", "spec_type", "x-b", "x-a"]
        assert merged["x-b"] == "b"

    def test_does_not_modify_fields(self) -> None:
        fields = {"identifier": "REQ-1"}

        _ = merge_foreign("REQ-1", fields, preserve({"x-a": "1"}))

        assert fields == {"identifier": "REQ-1"}

    def test_decode_converts_raw_text(self) -> None:
        merged = merge_foreign(
            "REQ-1", {}, preserve({"x-a": '{"k":[1,2]}'}), decode=orjson.loads
        )

        assert merged == {"x-a": {"k": [1, 2]}}

    def test_collision_with_modeled_field_is_rejected(self) -> None:
        with pytest.raises(InvariantViolationError):
            merge_foreign("REQ-1", {"identifier": "REQ-1"}, preserve({"identifier": "x"}))

    def test_undecodable_text_is_rejected(self) -> None:
        with pytest.raises(InvariantViolationError) as exc_info:
            merge_foreign("REQ-1", {}, preserve({"x-a": "not json"}), decode=orjson.loads)

        assert "x-a" in str(exc_info.value)


class TestModeledKeys:
    def test_entity_keys_exclude_foreign(self) -> None:
        assert modeled_keys(SpecHierarchy("H-1", "REQ-1")) == {
            "identifier",
            "object",
            "last_change",
            "children",
        }

    def test_datatypes_reserve_their_tag(self) -> None:
        assert "type" in modeled_keys(BooleanDatatype("dt-1"))
        assert "type" not in modeled_keys(SpecObject("REQ-1", "st-1"))

    def test_accepts_record_classes(self) -> None:
        assert modeled_keys(ReqIF) == {"header", "core_content", "tool_extensions"}

    def test_check_foreign_rejects_reserved_keys(self) -> None:
        with pytest.raises(InvariantViolationError) as exc_info:
            check_foreign(
                "REQ-1",
                preserve({"x-a": "1", "values": "[]"}),
                modeled_keys(SpecObject),
            )

        assert "values" in str(exc_info.value)
