"""Property-based tests for the document aggregate and the JSON codec."""

import orjson
import pytest
from hypothesis import given, strategies as st
from structlog.typing import FilteringBoundLogger

from reqsmith.config import DocumentConfig
from reqsmith.exceptions import (
    CyclicHierarchyError,
    HierarchyDepthError,
    KindMismatchError,
    OutOfRangeError,
    ReferencedElsewhereError,
)
from reqsmith.reqif import (
    INT64_MAX,
    INT64_MIN,
    MAX_HIERARCHY_DEPTH,
    AttributeDefinition,
    CoreContent,
    IntegerDatatype,
    IntegerValue,
    ReqIF,
    ReqIFDocument,
    ReqIFHeader,
    SpecHierarchy,
    Specification,
    SpecObject,
    SpecRelation,
    SpecType,
    StringDatatype,
    StringValue,
    dumps,
    loads,
    preserve,
)
from reqsmith.utils import create_logger

# =============================================================================
# Strategies
# =============================================================================

MAX_TITLE = 20
PRIORITY_MIN = 0
PRIORITY_MAX = 100

title_text = st.text(
    alphabet=st.characters(blacklist_categories=["Cs"]),
    max_size=MAX_TITLE,
)

priority = st.integers(min_value=PRIORITY_MIN, max_value=PRIORITY_MAX)

out_of_range_priority = st.one_of(
    st.integers(min_value=INT64_MIN, max_value=PRIORITY_MIN - 1),
    st.integers(min_value=PRIORITY_MAX + 1, max_value=INT64_MAX),
)

json_scalar = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=INT64_MIN, max_value=INT64_MAX),
    st.text(alphabet=st.characters(blacklist_categories=["Cs"]), max_size=10),
)

# Foreign content is stored as compact JSON text, as the codec reads it
foreign_content = st.dictionaries(
    keys=st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=8).map(
        lambda name: f"x-{name}"
    ),
    values=st.one_of(
        json_scalar, st.lists(json_scalar, max_size=3)
    ).map(lambda raw: orjson.dumps(raw).decode()),
    max_size=4,
)

# Vendor text that may or may not parse as JSON
raw_foreign_content = st.dictionaries(
    keys=st.sampled_from(["x-note", "x-markup", "x-blob"]),
    values=st.text(alphabet=st.characters(blacklist_categories=["Cs"]), max_size=20),
    max_size=3,
)

depth = st.integers(min_value=1, max_value=8)


# =============================================================================
# Helpers
# =============================================================================


def _quiet_logger() -> FilteringBoundLogger:
    return create_logger(level="error", respect_env=False)


def base_reqif(
    *,
    titles: tuple[str, ...] = ("Login", "Logout"),
    priorities: tuple[int, ...] = (1, 2),
    foreign: dict[str, str] | None = None,
    chain: int = 2,
) -> ReqIF:
    """Build a document with one object per title and a chained hierarchy.

    Object REQ-0 is the source of a relation to REQ-1 when both exist, and
    the hierarchy of SPEC-1 is a single chain of `chain` nodes over REQ-0.
    """
    objects = tuple(
        SpecObject(
            f"REQ-{index}",
            "st-req",
            values=(
                StringValue("ad-title", title),
                IntegerValue("ad-priority", priorities[index % len(priorities)]),
            ),
            foreign=preserve(foreign),
        )
        for index, title in enumerate(titles)
    )
    relations = ()
    if len(objects) > 1:
        relations = (SpecRelation("REL-1", "st-link", source="REQ-0", target="REQ-1"),)

    node = None
    for level in reversed(range(chain)):
        node = SpecHierarchy(
            f"H-{level}", "REQ-0", children=() if node is None else (node,)
        )
    children = () if node is None else (node,)

    return ReqIF(
        header=ReqIFHeader("doc-prop", title="Properties"),
        core_content=CoreContent(
            spec_objects=objects,
            spec_relations=relations,
            specifications=(Specification("SPEC-1", "st-spec", children=children),),
            spec_types=(
                SpecType(
                    "st-req",
                    spec_attributes=(
                        AttributeDefinition("ad-title", "dt-str"),
                        AttributeDefinition("ad-priority", "dt-int"),
                    ),
                ),
                SpecType("st-link"),
                SpecType("st-spec"),
            ),
            datatype_definitions=(
                StringDatatype("dt-str", max_length=MAX_TITLE),
                IntegerDatatype("dt-int", min=PRIORITY_MIN, max=PRIORITY_MAX),
            ),
        ),
        foreign=preserve(foreign),
    )


def build(reqif: ReqIF, *, cascade_deletes: bool = False) -> ReqIFDocument:
    return ReqIFDocument.from_snapshot(
        reqif,
        config=DocumentConfig(cascade_deletes=cascade_deletes),
        logger=_quiet_logger(),
    )


# =============================================================================
# Codec Properties
# =============================================================================


@given(
    titles=st.lists(title_text, min_size=1, max_size=4).map(tuple),
    priorities=st.lists(priority, min_size=1, max_size=4).map(tuple),
    foreign=st.one_of(foreign_content, raw_foreign_content),
)
def test_dumps_is_stable_across_a_load(
    titles: tuple[str, ...], priorities: tuple[int, ...], foreign: dict[str, str]
) -> None:
    """Property: writing a loaded document reproduces the first written bytes."""
    document = build(base_reqif(titles=titles, priorities=priorities, foreign=foreign))
    first = dumps(document)

    reloaded = loads(first, logger=_quiet_logger())

    assert dumps(reloaded) == first


@given(foreign=foreign_content)
def test_foreign_content_order_survives_a_load(foreign: dict[str, str]) -> None:
    """Property: foreign keys come back in the order they were written."""
    document = build(base_reqif(foreign=foreign))

    reloaded = loads(dumps(document), logger=_quiet_logger())

    spec_object = reloaded.resolve_spec_object("REQ-0")
    assert spec_object is not None
    assert list(spec_object.foreign.items()) == list(foreign.items())
    assert list(reloaded.foreign.items()) == list(foreign.items())


# =============================================================================
# Mutation Properties
# =============================================================================


@given(chain=depth)
def test_refused_removal_leaves_document_unchanged(chain: int) -> None:
    """Property: a removal refused for live references changes nothing."""
    document = build(base_reqif(chain=chain))
    before = dumps(document)

    with pytest.raises(ReferencedElsewhereError) as exc_info:
        document.remove_spec_object("REQ-0")

    assert "REL-1" in exc_info.value.by
    assert dumps(document) == before


@given(
    titles=st.lists(title_text, min_size=2, max_size=4).map(tuple),
    chain=depth,
)
def test_cascade_removal_leaves_no_dangling_references(
    titles: tuple[str, ...], chain: int
) -> None:
    """Property: cascading removal keeps every invariant intact."""
    document = build(base_reqif(titles=titles, chain=chain), cascade_deletes=True)

    document.remove_spec_object("REQ-0")

    assert document.validate() == ()
    assert document.resolve_spec_relation("REL-1") is None
    assert document.resolve_hierarchy("H-0") is None


@given(data=st.data(), chain=depth)
def test_inserting_an_ancestor_identifier_is_cyclic(
    data: st.DataObject, chain: int
) -> None:
    """Property: a subtree reusing any id on the parent's path is rejected."""
    document = build(base_reqif(chain=chain))
    parent = f"H-{chain - 1}"
    ancestor = f"H-{data.draw(st.integers(min_value=0, max_value=chain - 1))}"
    before = dumps(document)

    with pytest.raises(CyclicHierarchyError) as exc_info:
        document.add_hierarchy(parent, SpecHierarchy(ancestor, "REQ-0"))

    assert exc_info.value.cycle[-1] == ancestor
    assert dumps(document) == before


@given(chain=st.integers(min_value=1, max_value=MAX_HIERARCHY_DEPTH + 20))
def test_hierarchy_depth_limit_is_exact(chain: int) -> None:
    """Property: a chain loads exactly when it fits the depth limit."""
    reqif = base_reqif(chain=chain)

    if chain <= MAX_HIERARCHY_DEPTH:
        document = build(reqif)
        assert len(document.hierarchy_path(f"H-{chain - 1}")) == chain
        assert dumps(loads(dumps(document), logger=_quiet_logger())) == dumps(document)
    else:
        with pytest.raises(HierarchyDepthError) as exc_info:
            _ = build(reqif)
        assert exc_info.value.depth == MAX_HIERARCHY_DEPTH + 1


# =============================================================================
# Value Typing Properties
# =============================================================================


@given(value=out_of_range_priority)
def test_integer_outside_bounds_is_out_of_range(value: int) -> None:
    """Property: any integer beyond the declared bounds is refused."""
    document = build(base_reqif())

    with pytest.raises(OutOfRangeError):
        document.set_attribute_value("REQ-0", IntegerValue("ad-priority", value))

    assert document.resolve_spec_object("REQ-0").value_for("ad-priority") == (  # pyright: ignore[reportOptionalMemberAccess]
        IntegerValue("ad-priority", 1)
    )


@given(value=st.integers(min_value=INT64_MIN, max_value=INT64_MAX))
def test_integer_on_string_attribute_is_kind_mismatch(value: int) -> None:
    """Property: an integer never fills a string attribute."""
    document = build(base_reqif())

    with pytest.raises(KindMismatchError):
        document.set_attribute_value("REQ-0", IntegerValue("ad-title", value))
