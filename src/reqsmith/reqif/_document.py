# pyright: reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Document aggregate: the single consistency boundary of a ReqIF document.

This module provides the ReqIFDocument class. It owns every entity of a
document in one ordered dictionary per identifier namespace and is the only
way to add, replace, or remove entities. Every operation checks all outgoing
references and attribute values before it touches any store, so a failed
operation leaves the document exactly as it was.

The document is not thread-safe. Callers serialize mutating operations;
readers that need a stable view take a snapshot().
"""

import functools
from collections import ChainMap
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Concatenate, Final

from reqsmith.exceptions import (
    CyclicHierarchyError,
    DanglingReferenceError,
    DocumentError,
    DuplicateIdentifierError,
    EntityNotFoundError,
    HeaderError,
    HierarchyDepthError,
    InvariantViolationError,
    KindMismatchError,
    ReferencedElsewhereError,
    SpecTypeUsageError,
    ValueValidationError,
)
from reqsmith.reqif._foreign import check_foreign, modeled_keys
from reqsmith.reqif._models import (
    AttributeDefinition,
    AttributeValue,
    CoreContent,
    DatatypeDefinition,
    ReqIF,
    ReqIFHeader,
    SpecHierarchy,
    SpecObject,
    SpecRelation,
    SpecType,
    SpecTypeKind,
    Specification,
    ToolExtension,
)
from reqsmith.reqif._values import validate_datatype, validate_value
from reqsmith.utils import create_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reqsmith.config import DocumentConfig

__all__ = ["MAX_HIERARCHY_DEPTH", "ReqIFDocument", "ValidationIssue"]

_VALUED_TYPES: Final = (SpecObject, SpecRelation, Specification)

# Deepest level a hierarchy node may occupy, roots being level 1. Keeps the
# JSON form of a specification inside the encoder's nesting limit.
MAX_HIERARCHY_DEPTH: Final = 100


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One invariant violation found by a document audit.

    Attributes:
        kind: Namespace of the offending entity (e.g. "spec_object").
        identifier: Identifier of the offending entity.
        error: Name of the error class the violation corresponds to.
        message: Human-readable description of the violation.
    """

    kind: str
    identifier: str
    error: str
    message: str


def _logged[**P, R](
    operation: str,
) -> Callable[
    [Callable[Concatenate["ReqIFDocument", P], R]],
    Callable[Concatenate["ReqIFDocument", P], R],
]:
    """Log the outcome of a mutating document operation.

    Committed operations are logged at debug level, rejected ones at info
    level with the error class. The error is always re-raised.
    """

    def decorator(
        func: Callable[Concatenate["ReqIFDocument", P], R],
    ) -> Callable[Concatenate["ReqIFDocument", P], R]:
        @functools.wraps(func)
        def wrapper(self: "ReqIFDocument", *args: P.args, **kwargs: P.kwargs) -> R:
            try:
                result = func(self, *args, **kwargs)
            except (DocumentError, ValueValidationError) as e:
                self._logger.info(
                    "operation_rejected",
                    operation=operation,
                    error=type(e).__name__,
                    reason=str(e),
                )
                raise
            self._logger.debug("operation_committed", operation=operation)
            return result

        return wrapper

    return decorator


# =============================================================================
# Hierarchy Tree Helpers
# =============================================================================


def _spliced(
    children: tuple[SpecHierarchy, ...],
    node: SpecHierarchy,
    position: int | None,
) -> tuple[SpecHierarchy, ...]:
    items = list(children)
    if position is None:
        items.append(node)
    else:
        items.insert(position, node)
    return tuple(items)


def _find_path(
    children: Iterable[SpecHierarchy],
    target_id: str,
) -> list[SpecHierarchy] | None:
    """Return the nodes from a root down to target_id, or None if absent."""
    stack = [(child, 0) for child in reversed(tuple(children))]
    path: list[SpecHierarchy] = []
    while stack:
        node, level = stack.pop()
        del path[level:]
        path.append(node)
        if node.identifier == target_id:
            return path
        stack.extend((child, level + 1) for child in reversed(node.children))
    return None


def _rebuilt(
    roots: tuple[SpecHierarchy, ...],
    path: list[SpecHierarchy],
    last: SpecHierarchy | None,
) -> tuple[SpecHierarchy, ...]:
    """Return roots with the node at the end of path swapped for last.

    The node is dropped when last is None. Every node above it on the path
    is copied with its updated children.
    """
    replacement = last
    for level in range(len(path) - 1, -1, -1):
        siblings = roots if level == 0 else path[level - 1].children
        index = next(i for i, child in enumerate(siblings) if child is path[level])
        head, tail = siblings[:index], siblings[index + 1 :]
        items = (*head, *tail) if replacement is None else (*head, replacement, *tail)
        if level == 0:
            return items
        replacement = replace(path[level - 1], children=items)
    return roots


def _insert_under(
    children: tuple[SpecHierarchy, ...],
    parent_id: str,
    node: SpecHierarchy,
    position: int | None,
) -> tuple[SpecHierarchy, ...] | None:
    """Return children with node inserted below parent_id, or None if absent."""
    path = _find_path(children, parent_id)
    if path is None:
        return None
    parent = path[-1]
    return _rebuilt(
        children, path, replace(parent, children=_spliced(parent.children, node, position))
    )


def _remove_subtree(
    children: tuple[SpecHierarchy, ...],
    target_id: str,
) -> tuple[SpecHierarchy, ...] | None:
    """Return children without the target node, or None if absent."""
    path = _find_path(children, target_id)
    if path is None:
        return None
    return _rebuilt(children, path, None)


def _prune_object(
    children: tuple[SpecHierarchy, ...],
    object_id: str,
    removed: list[str],
) -> tuple[SpecHierarchy, ...]:
    """Drop nodes showing object_id, promoting their children into their place."""
    roots: list[SpecHierarchy] = []
    # (node, children not yet visited, rebuilt children); None marks the forest
    stack: list[tuple[SpecHierarchy | None, Iterator[SpecHierarchy], list[SpecHierarchy]]]
    stack = [(None, iter(children), roots)]
    while stack:
        node, pending, kept = stack[-1]
        child = next(pending, None)
        if child is not None:
            stack.append((child, iter(child.children), []))
            continue
        _ = stack.pop()
        if node is None:
            break
        siblings = stack[-1][2]
        if node.object == object_id:
            removed.append(node.identifier)
            siblings.extend(kept)
        else:
            siblings.append(replace(node, children=tuple(kept)))
    return tuple(roots)


def _check_tree(
    owner: str,
    roots: Iterable[SpecHierarchy],
    objects: Mapping[str, SpecObject],
    *,
    ancestors: Sequence[str] = (),
    is_taken: Callable[[str], bool] = lambda _: False,
) -> list[str]:
    """Check a hierarchy forest depth-first.

    Args:
        owner: Identifier of the specification (or parent node) owning the forest.
        roots: Top-level nodes of the forest.
        objects: Spec objects the nodes may refer to.
        ancestors: Identifiers above the forest's roots, root first.
        is_taken: Whether an identifier is already used outside the forest.

    Returns:
        Identifiers of every node in the forest, in pre-order.

    Raises:
        CyclicHierarchyError: If a node revisits an identifier on its path.
        DuplicateIdentifierError: If a node identifier is used elsewhere.
        DanglingReferenceError: If a node refers to a missing spec object.
        HierarchyDepthError: If a node sits below MAX_HIERARCHY_DEPTH.
    """
    seen: list[str] = []
    seen_set: set[str] = set()
    path: list[str] = list(ancestors)
    base = len(path)
    stack = [(root, 0) for root in reversed(tuple(roots))]

    while stack:
        node, level = stack.pop()
        del path[base + level :]
        if node.identifier in path:
            cycle = [*path[path.index(node.identifier) :], node.identifier]
            msg = f"Hierarchy cycle detected: {' -> '.join(cycle)}"
            raise CyclicHierarchyError(msg, cycle=cycle)
        if node.identifier in seen_set or is_taken(node.identifier):
            msg = f"Spec hierarchy {node.identifier!r} already exists"
            raise DuplicateIdentifierError(
                msg, identifier=node.identifier, namespace="spec_hierarchy"
            )
        if node.object not in objects:
            msg = (
                f"Spec hierarchy {node.identifier!r} refers to missing spec "
                f"object {node.object!r}"
            )
            raise DanglingReferenceError(
                msg, kind="spec_object", identifier=node.object, referrer=node.identifier
            )
        depth = len(path) + 1
        if depth > MAX_HIERARCHY_DEPTH:
            msg = (
                f"Spec hierarchy {node.identifier!r} under {owner!r} would sit at "
                f"depth {depth}, limit is {MAX_HIERARCHY_DEPTH}"
            )
            raise HierarchyDepthError(
                msg, identifier=node.identifier, depth=depth, limit=MAX_HIERARCHY_DEPTH
            )

        seen.append(node.identifier)
        seen_set.add(node.identifier)
        path.append(node.identifier)
        stack.extend((child, level + 1) for child in reversed(node.children))

    return seen


# =============================================================================
# ReqIFDocument Class
# =============================================================================


class ReqIFDocument:
    """In-memory ReqIF document with validated, all-or-nothing operations.

    Entities are stored by identifier, one ordered dictionary per namespace,
    and refer to each other only by identifier. Insertion order is the
    document order and is kept by every operation, including replacements.

    Attributes:
        _header: Document metadata.
        _datatypes: Datatype definitions by identifier.
        _spec_types: Spec types by identifier.
        _attribute_owners: Spec type identifier by attribute definition identifier.
        _spec_objects: Spec objects by identifier.
        _spec_relations: Spec relations by identifier.
        _specifications: Specifications by identifier.
        _hierarchy_owners: Specification identifier by hierarchy node identifier.
        _tool_extensions: Tool extensions by identifier.
        _foreign: Preserved document-level content.
        _cascade_deletes: Default cascade mode for remove_spec_object.
        _logger: Structured logger for operation outcomes.
    """

    __slots__: Final = (
        "_attribute_owners",
        "_cascade_deletes",
        "_datatypes",
        "_foreign",
        "_header",
        "_hierarchy_owners",
        "_logger",
        "_spec_objects",
        "_spec_relations",
        "_spec_types",
        "_specifications",
        "_tool_extensions",
    )

    _attribute_owners: dict[str, str]
    _cascade_deletes: bool
    _datatypes: dict[str, DatatypeDefinition]
    _foreign: MappingProxyType[str, str]
    _header: ReqIFHeader
    _hierarchy_owners: dict[str, str]
    _logger: "FilteringBoundLogger"
    _spec_objects: dict[str, SpecObject]
    _spec_relations: dict[str, SpecRelation]
    _spec_types: dict[str, SpecType]
    _specifications: dict[str, Specification]
    _tool_extensions: dict[str, ToolExtension]

    def __init__(
        self,
        header: ReqIFHeader,
        *,
        foreign: Mapping[str, str] | None = None,
        config: "DocumentConfig | None" = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize an empty document.

        Args:
            header: Document metadata. Its identifier must be non-empty.
            foreign: Preserved document-level content.
            config: Document settings. Defaults apply when None.
            logger: Logger for operation outcomes. A stderr logger honoring
                REQSMITH_DEBUG and REQSMITH_LOG_LEVEL is created when None.

        Raises:
            HeaderError: If the header identifier is empty.
        """
        self._validate_header(header)
        self._header = header
        self._foreign = MappingProxyType(dict(foreign or {}))
        self._cascade_deletes = config.cascade_deletes if config is not None else False
        self._logger = (
            logger if logger is not None else create_logger().bind(component="document")
        )
        self._datatypes = {}
        self._spec_types = {}
        self._attribute_owners = {}
        self._spec_objects = {}
        self._spec_relations = {}
        self._specifications = {}
        self._hierarchy_owners = {}
        self._tool_extensions = {}

    @classmethod
    def from_snapshot(
        cls,
        reqif: ReqIF,
        *,
        config: "DocumentConfig | None" = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> "ReqIFDocument":
        """Build a validated document from a snapshot.

        Entities are added in dependency order: datatypes, spec types, spec
        objects, spec relations, specifications, then tool extensions. Order
        within each namespace is taken from the snapshot.

        Args:
            reqif: The snapshot to load.
            config: Document settings.
            logger: Logger for operation outcomes.

        Returns:
            A new document holding every entity of the snapshot.

        Raises:
            DocumentError: If the snapshot breaks a document invariant.
            ValueValidationError: If an attribute value fails its datatype.
        """
        document = cls(reqif.header, foreign=reqif.foreign, config=config, logger=logger)
        content = reqif.core_content
        for datatype in content.datatype_definitions:
            document.add_datatype(datatype)
        for spec_type in content.spec_types:
            document.add_spec_type(spec_type)
        for spec_object in content.spec_objects:
            document.add_spec_object(spec_object)
        for relation in content.spec_relations:
            document.add_spec_relation(relation)
        for specification in content.specifications:
            document.add_specification(specification)
        for extension in reqif.tool_extensions:
            document.add_tool_extension(extension)
        return document

    # -------------------------------------------------------------------------
    # Read Access
    # -------------------------------------------------------------------------

    @property
    def header(self) -> ReqIFHeader:
        return self._header

    @property
    def foreign(self) -> MappingProxyType[str, str]:
        return self._foreign

    @property
    def datatypes(self) -> tuple[DatatypeDefinition, ...]:
        return tuple(self._datatypes.values())

    @property
    def spec_types(self) -> tuple[SpecType, ...]:
        return tuple(self._spec_types.values())

    @property
    def spec_objects(self) -> tuple[SpecObject, ...]:
        return tuple(self._spec_objects.values())

    @property
    def spec_relations(self) -> tuple[SpecRelation, ...]:
        return tuple(self._spec_relations.values())

    @property
    def specifications(self) -> tuple[Specification, ...]:
        return tuple(self._specifications.values())

    @property
    def tool_extensions(self) -> tuple[ToolExtension, ...]:
        return tuple(self._tool_extensions.values())

    def snapshot(self) -> ReqIF:
        """Return an immutable view of the whole document in stored order."""
        return ReqIF(
            header=self._header,
            core_content=CoreContent(
                spec_objects=self.spec_objects,
                spec_relations=self.spec_relations,
                specifications=self.specifications,
                spec_types=self.spec_types,
                datatype_definitions=self.datatypes,
            ),
            tool_extensions=self.tool_extensions,
            foreign=self._foreign,
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def resolve[T](self, entity_type: type[T], identifier: str) -> T | None:
        """Look up an entity by identifier within the namespace of entity_type.

        For datatype classes the lookup also requires the stored datatype to
        be of that class, so resolve(IntegerDatatype, id) returns None for a
        String datatype with the same identifier.

        Args:
            entity_type: An entity class (SpecObject, SpecType, ...).
            identifier: The identifier to look up.

        Returns:
            The entity, or None if the namespace holds no such identifier.

        Raises:
            TypeError: If entity_type is not a document entity class.
        """
        namespace = getattr(entity_type, "namespace", None)
        found: object
        match namespace:
            case "datatype":
                found = self._datatypes.get(identifier)
            case "spec_type":
                found = self._spec_types.get(identifier)
            case "attribute_definition":
                found = self.resolve_attribute_definition(identifier)
            case "spec_object":
                found = self._spec_objects.get(identifier)
            case "spec_relation":
                found = self._spec_relations.get(identifier)
            case "specification":
                found = self._specifications.get(identifier)
            case "spec_hierarchy":
                found = self.resolve_hierarchy(identifier)
            case "tool_extension":
                found = self._tool_extensions.get(identifier)
            case _:
                msg = f"{entity_type!r} is not a document entity type"
                raise TypeError(msg)
        return found if isinstance(found, entity_type) else None

    def resolve_datatype(self, identifier: str) -> DatatypeDefinition | None:
        return self._datatypes.get(identifier)

    def resolve_spec_type(self, identifier: str) -> SpecType | None:
        return self._spec_types.get(identifier)

    def resolve_attribute_definition(
        self, identifier: str
    ) -> AttributeDefinition | None:
        owner = self.owner_of_attribute_definition(identifier)
        return owner.attribute(identifier) if owner is not None else None

    def resolve_spec_object(self, identifier: str) -> SpecObject | None:
        return self._spec_objects.get(identifier)

    def resolve_spec_relation(self, identifier: str) -> SpecRelation | None:
        return self._spec_relations.get(identifier)

    def resolve_specification(self, identifier: str) -> Specification | None:
        return self._specifications.get(identifier)

    def resolve_hierarchy(self, identifier: str) -> SpecHierarchy | None:
        path = self._hierarchy_path(identifier)
        return path[-1] if path else None

    def resolve_tool_extension(self, identifier: str) -> ToolExtension | None:
        return self._tool_extensions.get(identifier)

    def owner_of_attribute_definition(self, identifier: str) -> SpecType | None:
        """Return the spec type declaring an attribute definition, if any."""
        owner = self._attribute_owners.get(identifier)
        return self._spec_types.get(owner) if owner is not None else None

    def specification_of(self, hierarchy_id: str) -> Specification | None:
        """Return the specification whose tree contains a hierarchy node."""
        owner = self._hierarchy_owners.get(hierarchy_id)
        return self._specifications.get(owner) if owner is not None else None

    def hierarchy_path(self, hierarchy_id: str) -> tuple[SpecHierarchy, ...]:
        """Return the nodes from the top of the tree down to a hierarchy node.

        Returns:
            The path, ending with the node itself, or an empty tuple if the
            node does not exist.
        """
        return tuple(self._hierarchy_path(hierarchy_id) or ())

    def parent_of(self, hierarchy_id: str) -> str | None:
        """Return the identifier of a node's parent node or specification."""
        path = self._hierarchy_path(hierarchy_id)
        if not path:
            return None
        if len(path) > 1:
            return path[-2].identifier
        return self._hierarchy_owners[hierarchy_id]

    def relations_of(self, object_id: str) -> tuple[SpecRelation, ...]:
        """Return relations with the given spec object as source or target."""
        return tuple(
            relation
            for relation in self._spec_relations.values()
            if object_id in (relation.source, relation.target)
        )

    def referrers_of(self, object_id: str) -> tuple[str, ...]:
        """Return identifiers of every relation and hierarchy node naming an object."""
        referrers = [relation.identifier for relation in self.relations_of(object_id)]
        for specification in self._specifications.values():
            referrers.extend(
                node.identifier
                for node in specification.walk()
                if node.object == object_id
            )
        return tuple(referrers)

    def _hierarchy_path(self, hierarchy_id: str) -> list[SpecHierarchy] | None:
        specification = self.specification_of(hierarchy_id)
        if specification is None:
            return None
        return _find_path(specification.children, hierarchy_id)

    # -------------------------------------------------------------------------
    # Validation Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_header(header: ReqIFHeader) -> None:
        if not isinstance(header.identifier, str) or not header.identifier.strip():
            msg = "Document header identifier must not be empty"
            raise HeaderError(msg, field="identifier")

    def _check_new(self, store: Mapping[str, object], identifier: str, kind: str) -> None:
        if identifier in store:
            msg = f"{kind.replace('_', ' ').capitalize()} {identifier!r} already exists"
            raise DuplicateIdentifierError(msg, identifier=identifier, namespace=kind)

    def _require[T](self, store: Mapping[str, T], identifier: str, kind: str) -> T:
        try:
            return store[identifier]
        except KeyError:
            msg = f"{kind.replace('_', ' ').capitalize()} {identifier!r} not found"
            raise EntityNotFoundError(msg, kind=kind, identifier=identifier) from None

    def _check_spec_type_definition(
        self,
        spec_type: SpecType,
        datatypes: Mapping[str, DatatypeDefinition],
    ) -> None:
        declared: set[str] = set()
        for definition in spec_type.spec_attributes:
            if definition.identifier in declared:
                msg = (
                    f"Attribute definition {definition.identifier!r} declared twice "
                    f"in spec type {spec_type.identifier!r}"
                )
                raise DuplicateIdentifierError(
                    msg, identifier=definition.identifier, namespace="attribute_definition"
                )
            declared.add(definition.identifier)

            owner = self._attribute_owners.get(definition.identifier)
            if owner is not None and owner != spec_type.identifier:
                msg = (
                    f"Attribute definition {definition.identifier!r} already "
                    f"declared by spec type {owner!r}"
                )
                raise DuplicateIdentifierError(
                    msg, identifier=definition.identifier, namespace="attribute_definition"
                )

            if definition.datatype_ref not in datatypes:
                msg = (
                    f"Attribute definition {definition.identifier!r} refers to "
                    f"missing datatype {definition.datatype_ref!r}"
                )
                raise DanglingReferenceError(
                    msg,
                    kind="datatype",
                    identifier=definition.datatype_ref,
                    referrer=definition.identifier,
                )

    def _check_spec_type_ref(
        self,
        owner: str,
        spec_type_id: str,
        usage: SpecTypeKind,
        spec_types: Mapping[str, SpecType],
    ) -> SpecType:
        spec_type = spec_types.get(spec_type_id)
        if spec_type is None:
            msg = f"{owner!r} refers to missing spec type {spec_type_id!r}"
            raise DanglingReferenceError(
                msg, kind="spec_type", identifier=spec_type_id, referrer=owner
            )
        if spec_type.kind is not None and spec_type.kind != usage:
            msg = (
                f"Spec type {spec_type_id!r} is declared for {spec_type.kind} "
                f"entities but used by {usage} {owner!r}"
            )
            raise SpecTypeUsageError(
                msg, spec_type=spec_type_id, expected=spec_type.kind, actual=usage
            )
        return spec_type

    def _check_values(
        self,
        owner: str,
        spec_type: SpecType,
        values: Iterable[AttributeValue],
        datatypes: Mapping[str, DatatypeDefinition],
    ) -> None:
        filled: set[str] = set()
        for value in values:
            kind = getattr(value, "kind", None)
            if kind is None:
                msg = f"{owner!r} carries {type(value).__name__}, not an attribute value"
                raise KindMismatchError(msg, value=value)

            definition = spec_type.attribute(value.definition)
            if definition is None:
                msg = (
                    f"{owner!r} has a value for {value.definition!r}, which spec "
                    f"type {spec_type.identifier!r} does not declare"
                )
                raise DanglingReferenceError(
                    msg,
                    kind="attribute_definition",
                    identifier=value.definition,
                    referrer=owner,
                )
            if value.definition in filled:
                msg = f"{owner!r} has more than one value for {value.definition!r}"
                raise DuplicateIdentifierError(
                    msg, identifier=value.definition, namespace="attribute_value"
                )
            filled.add(value.definition)

            datatype = datatypes.get(definition.datatype_ref)
            if datatype is None:
                msg = (
                    f"Attribute definition {definition.identifier!r} refers to "
                    f"missing datatype {definition.datatype_ref!r}"
                )
                raise DanglingReferenceError(
                    msg,
                    kind="datatype",
                    identifier=definition.datatype_ref,
                    referrer=definition.identifier,
                )
            validate_value(datatype, value)

    def _check_endpoints(self, relation: SpecRelation) -> None:
        for endpoint in (relation.source, relation.target):
            if endpoint not in self._spec_objects:
                msg = (
                    f"Spec relation {relation.identifier!r} refers to missing "
                    f"spec object {endpoint!r}"
                )
                raise DanglingReferenceError(
                    msg,
                    kind="spec_object",
                    identifier=endpoint,
                    referrer=relation.identifier,
                )

    def _check_entity(
        self,
        entity: SpecObject | SpecRelation | Specification,
        *,
        spec_types: Mapping[str, SpecType] | None = None,
        datatypes: Mapping[str, DatatypeDefinition] | None = None,
    ) -> None:
        """Check an entity's type reference and values against the given stores."""
        usage = {
            SpecObject: SpecTypeKind.OBJECT,
            SpecRelation: SpecTypeKind.RELATION,
            Specification: SpecTypeKind.SPECIFICATION,
        }[type(entity)]
        spec_type = self._check_spec_type_ref(
            entity.identifier,
            entity.spec_type,
            usage,
            spec_types if spec_types is not None else self._spec_types,
        )
        self._check_values(
            entity.identifier,
            spec_type,
            entity.values,
            datatypes if datatypes is not None else self._datatypes,
        )

    def _users_of_spec_type(
        self, spec_type_id: str
    ) -> list[SpecObject | SpecRelation | Specification]:
        users: list[SpecObject | SpecRelation | Specification] = []
        for store in (self._spec_objects, self._spec_relations, self._specifications):
            users.extend(
                entity for entity in store.values() if entity.spec_type == spec_type_id
            )
        return users

    # -------------------------------------------------------------------------
    # Header and Tool Extensions
    # -------------------------------------------------------------------------

    @_logged("set_header")
    def set_header(self, header: ReqIFHeader) -> None:
        """Replace the document header.

        Raises:
            HeaderError: If the header identifier is empty.
        """
        self._validate_header(header)
        self._header = header

    @_logged("add_tool_extension")
    def add_tool_extension(self, extension: ToolExtension) -> None:
        """Append an opaque tool extension.

        Raises:
            DuplicateIdentifierError: If the identifier already exists.
        """
        self._check_new(self._tool_extensions, extension.identifier, "tool_extension")
        self._tool_extensions[extension.identifier] = extension

    @_logged("remove_tool_extension")
    def remove_tool_extension(self, identifier: str) -> ToolExtension:
        """Remove and return a tool extension.

        Raises:
            EntityNotFoundError: If the identifier does not exist.
        """
        extension = self._require(self._tool_extensions, identifier, "tool_extension")
        del self._tool_extensions[identifier]
        return extension

    # -------------------------------------------------------------------------
    # Datatypes
    # -------------------------------------------------------------------------

    @_logged("add_datatype")
    def add_datatype(self, datatype: DatatypeDefinition) -> None:
        """Append a datatype definition.

        Raises:
            DuplicateIdentifierError: If the identifier already exists or an
                enumeration repeats an enum value identifier.
            DatatypeDefinitionError: If the datatype's constraints are
                inconsistent.
        """
        self._check_new(self._datatypes, datatype.identifier, "datatype")
        validate_datatype(datatype)
        self._datatypes[datatype.identifier] = datatype

    @_logged("replace_datatype")
    def replace_datatype(self, datatype: DatatypeDefinition) -> None:
        """Replace a datatype definition in place.

        Every value filling an attribute definition that refers to the
        datatype is re-validated against the replacement, so narrowing a
        bound or dropping an enum value fails while values still use it.

        Raises:
            EntityNotFoundError: If no datatype has this identifier.
            DatatypeDefinitionError: If the replacement is inconsistent.
            ValueValidationError: If an existing value fails the replacement.
        """
        _ = self._require(self._datatypes, datatype.identifier, "datatype")
        validate_datatype(datatype)

        overlay = ChainMap({datatype.identifier: datatype}, self._datatypes)
        for spec_type in self._spec_types.values():
            if any(
                definition.datatype_ref == datatype.identifier
                for definition in spec_type.spec_attributes
            ):
                for entity in self._users_of_spec_type(spec_type.identifier):
                    self._check_entity(entity, datatypes=overlay)

        self._datatypes[datatype.identifier] = datatype

    @_logged("remove_datatype")
    def remove_datatype(self, identifier: str) -> DatatypeDefinition:
        """Remove and return a datatype definition no attribute refers to.

        Raises:
            EntityNotFoundError: If no datatype has this identifier.
            ReferencedElsewhereError: If attribute definitions refer to it.
        """
        datatype = self._require(self._datatypes, identifier, "datatype")
        by = tuple(
            definition.identifier
            for spec_type in self._spec_types.values()
            for definition in spec_type.spec_attributes
            if definition.datatype_ref == identifier
        )
        if by:
            msg = f"Datatype {identifier!r} is referenced by {', '.join(by)}"
            raise ReferencedElsewhereError(msg, identifier=identifier, by=by)
        del self._datatypes[identifier]
        return datatype

    # -------------------------------------------------------------------------
    # Spec Types
    # -------------------------------------------------------------------------

    @_logged("add_spec_type")
    def add_spec_type(self, spec_type: SpecType) -> None:
        """Append a spec type with its attribute definitions.

        Raises:
            DuplicateIdentifierError: If the spec type identifier exists, or an
                attribute definition identifier is repeated or already
                declared by another spec type.
            DanglingReferenceError: If an attribute definition refers to a
                missing datatype.
        """
        self._check_new(self._spec_types, spec_type.identifier, "spec_type")
        self._check_spec_type_definition(spec_type, self._datatypes)

        self._spec_types[spec_type.identifier] = spec_type
        for definition in spec_type.spec_attributes:
            self._attribute_owners[definition.identifier] = spec_type.identifier

    @_logged("replace_spec_type")
    def replace_spec_type(self, spec_type: SpecType) -> None:
        """Replace a spec type in place, re-validating every entity using it.

        Raises:
            EntityNotFoundError: If no spec type has this identifier.
            DuplicateIdentifierError: If an attribute definition clashes.
            DanglingReferenceError: If an attribute definition refers to a
                missing datatype, or a user's value fills an attribute
                definition the replacement no longer declares.
            SpecTypeUsageError: If the replacement's kind excludes a user.
            ValueValidationError: If a user's value fails the replacement.
        """
        previous = self._require(self._spec_types, spec_type.identifier, "spec_type")
        self._check_spec_type_definition(spec_type, self._datatypes)

        overlay = ChainMap({spec_type.identifier: spec_type}, self._spec_types)
        for entity in self._users_of_spec_type(spec_type.identifier):
            self._check_entity(entity, spec_types=overlay)

        for definition in previous.spec_attributes:
            del self._attribute_owners[definition.identifier]
        self._spec_types[spec_type.identifier] = spec_type
        for definition in spec_type.spec_attributes:
            self._attribute_owners[definition.identifier] = spec_type.identifier

    @_logged("remove_spec_type")
    def remove_spec_type(self, identifier: str) -> SpecType:
        """Remove and return a spec type no entity uses.

        Raises:
            EntityNotFoundError: If no spec type has this identifier.
            ReferencedElsewhereError: If objects, relations, or
                specifications use it.
        """
        spec_type = self._require(self._spec_types, identifier, "spec_type")
        by = tuple(entity.identifier for entity in self._users_of_spec_type(identifier))
        if by:
            msg = f"Spec type {identifier!r} is used by {', '.join(by)}"
            raise ReferencedElsewhereError(msg, identifier=identifier, by=by)

        for definition in spec_type.spec_attributes:
            del self._attribute_owners[definition.identifier]
        del self._spec_types[identifier]
        return spec_type

    # -------------------------------------------------------------------------
    # Spec Objects
    # -------------------------------------------------------------------------

    @_logged("add_spec_object")
    def add_spec_object(self, spec_object: SpecObject) -> None:
        """Append a spec object.

        Raises:
            DuplicateIdentifierError: If the identifier exists, or two values
                fill the same attribute definition.
            DanglingReferenceError: If the spec type is missing, or a value
                fills an attribute definition the type does not declare.
            SpecTypeUsageError: If the spec type is declared for another kind.
            ValueValidationError: If a value fails its datatype.
        """
        self._check_new(self._spec_objects, spec_object.identifier, "spec_object")
        self._check_entity(spec_object)
        self._spec_objects[spec_object.identifier] = spec_object

    @_logged("replace_spec_object")
    def replace_spec_object(self, spec_object: SpecObject) -> None:
        """Replace a spec object in place.

        Raises:
            EntityNotFoundError: If no spec object has this identifier.
            DocumentError: As for add_spec_object.
            ValueValidationError: If a value fails its datatype.
        """
        _ = self._require(self._spec_objects, spec_object.identifier, "spec_object")
        self._check_entity(spec_object)
        self._spec_objects[spec_object.identifier] = spec_object

    @_logged("remove_spec_object")
    def remove_spec_object(
        self,
        identifier: str,
        *,
        cascade: bool | None = None,
    ) -> SpecObject:
        """Remove and return a spec object.

        Without cascade, removal is refused while any relation or hierarchy
        node refers to the object. With cascade, those relations are removed
        and those hierarchy nodes are dropped with their children promoted
        into their place.

        Args:
            identifier: The spec object identifier.
            cascade: Whether to remove referrers too. Uses the document's
                configured default when None.

        Returns:
            The removed spec object.

        Raises:
            EntityNotFoundError: If no spec object has this identifier.
            ReferencedElsewhereError: If referrers exist and cascade is off.
        """
        spec_object = self._require(self._spec_objects, identifier, "spec_object")
        if cascade is None:
            cascade = self._cascade_deletes

        by = self.referrers_of(identifier)
        if by and not cascade:
            msg = f"Spec object {identifier!r} is referenced by {', '.join(by)}"
            raise ReferencedElsewhereError(msg, identifier=identifier, by=by)

        pruned: dict[str, Specification] = {}
        removed_nodes: list[str] = []
        for specification in self._specifications.values():
            if any(node.object == identifier for node in specification.walk()):
                children = _prune_object(specification.children, identifier, removed_nodes)
                pruned[specification.identifier] = replace(
                    specification, children=children
                )

        for relation in self.relations_of(identifier):
            del self._spec_relations[relation.identifier]
        self._specifications.update(pruned)
        for node_id in removed_nodes:
            del self._hierarchy_owners[node_id]
        del self._spec_objects[identifier]

        if by:
            self._logger.debug(
                "spec_object_cascade", identifier=identifier, removed=list(by)
            )
        return spec_object

    # -------------------------------------------------------------------------
    # Spec Relations
    # -------------------------------------------------------------------------

    @_logged("add_spec_relation")
    def add_spec_relation(self, relation: SpecRelation) -> None:
        """Append a spec relation.

        Raises:
            DuplicateIdentifierError: If the identifier exists, or two values
                fill the same attribute definition.
            DanglingReferenceError: If the spec type, source, or target is
                missing, or a value fills an undeclared attribute definition.
            SpecTypeUsageError: If the spec type is declared for another kind.
            ValueValidationError: If a value fails its datatype.
        """
        self._check_new(self._spec_relations, relation.identifier, "spec_relation")
        self._check_endpoints(relation)
        self._check_entity(relation)
        self._spec_relations[relation.identifier] = relation

    @_logged("replace_spec_relation")
    def replace_spec_relation(self, relation: SpecRelation) -> None:
        """Replace a spec relation in place.

        Raises:
            EntityNotFoundError: If no spec relation has this identifier.
            DocumentError: As for add_spec_relation.
            ValueValidationError: If a value fails its datatype.
        """
        _ = self._require(self._spec_relations, relation.identifier, "spec_relation")
        self._check_endpoints(relation)
        self._check_entity(relation)
        self._spec_relations[relation.identifier] = relation

    @_logged("remove_spec_relation")
    def remove_spec_relation(self, identifier: str) -> SpecRelation:
        """Remove and return a spec relation.

        Raises:
            EntityNotFoundError: If no spec relation has this identifier.
        """
        relation = self._require(self._spec_relations, identifier, "spec_relation")
        del self._spec_relations[identifier]
        return relation

    # -------------------------------------------------------------------------
    # Specifications and Hierarchies
    # -------------------------------------------------------------------------

    def _check_specification(self, specification: Specification) -> list[str]:
        self._check_entity(specification)
        owner = specification.identifier
        return _check_tree(
            owner,
            specification.children,
            self._spec_objects,
            is_taken=lambda node_id: self._hierarchy_owners.get(node_id, owner) != owner,
        )

    @_logged("add_specification")
    def add_specification(self, specification: Specification) -> None:
        """Append a specification with its hierarchy tree.

        Raises:
            DuplicateIdentifierError: If the identifier exists, a hierarchy
                node identifier is already used, or two values fill the same
                attribute definition.
            DanglingReferenceError: If the spec type or a node's spec object
                is missing, or a value fills an undeclared attribute definition.
            CyclicHierarchyError: If a node repeats an ancestor's identifier.
            HierarchyDepthError: If a node would sit below MAX_HIERARCHY_DEPTH.
            SpecTypeUsageError: If the spec type is declared for another kind.
            ValueValidationError: If a value fails its datatype.
        """
        self._check_new(self._specifications, specification.identifier, "specification")
        node_ids = self._check_specification(specification)

        self._specifications[specification.identifier] = specification
        for node_id in node_ids:
            self._hierarchy_owners[node_id] = specification.identifier

    @_logged("replace_specification")
    def replace_specification(self, specification: Specification) -> None:
        """Replace a specification and its hierarchy tree in place.

        Raises:
            EntityNotFoundError: If no specification has this identifier.
            DocumentError: As for add_specification.
            ValueValidationError: If a value fails its datatype.
        """
        previous = self._require(
            self._specifications, specification.identifier, "specification"
        )
        node_ids = self._check_specification(specification)

        for node in previous.walk():
            del self._hierarchy_owners[node.identifier]
        self._specifications[specification.identifier] = specification
        for node_id in node_ids:
            self._hierarchy_owners[node_id] = specification.identifier

    @_logged("remove_specification")
    def remove_specification(self, identifier: str) -> Specification:
        """Remove and return a specification with its hierarchy tree.

        Raises:
            EntityNotFoundError: If no specification has this identifier.
        """
        specification = self._require(self._specifications, identifier, "specification")
        for node in specification.walk():
            del self._hierarchy_owners[node.identifier]
        del self._specifications[identifier]
        return specification

    @_logged("add_hierarchy")
    def add_hierarchy(
        self,
        parent_id: str,
        node: SpecHierarchy,
        *,
        position: int | None = None,
    ) -> None:
        """Insert a hierarchy node, with its subtree, under a parent.

        Args:
            parent_id: Identifier of a specification or of an existing
                hierarchy node.
            node: The node to insert.
            position: Index among the parent's children, as list.insert
                takes it. Appends when None.

        Raises:
            DanglingReferenceError: If the parent does not exist, or a node in
                the subtree refers to a missing spec object.
            CyclicHierarchyError: If the subtree contains the parent or one of
                its ancestors.
            HierarchyDepthError: If a subtree node would sit below
                MAX_HIERARCHY_DEPTH.
            DuplicateIdentifierError: If a subtree node identifier is already
                used elsewhere in the document.
        """
        if parent_id in self._specifications:
            specification = self._specifications[parent_id]
            ancestors: list[str] = []
        elif parent_id in self._hierarchy_owners:
            specification = self._specifications[self._hierarchy_owners[parent_id]]
            ancestors = [
                entry.identifier for entry in self._hierarchy_path(parent_id) or ()
            ]
        else:
            msg = f"Hierarchy parent {parent_id!r} does not exist"
            raise DanglingReferenceError(
                msg,
                kind="specification",
                identifier=parent_id,
                referrer=node.identifier,
            )

        node_ids = _check_tree(
            parent_id,
            (node,),
            self._spec_objects,
            ancestors=ancestors,
            is_taken=lambda node_id: node_id in self._hierarchy_owners,
        )

        if not ancestors:
            children = _spliced(specification.children, node, position)
        else:
            inserted = _insert_under(specification.children, parent_id, node, position)
            if inserted is None:
                msg = f"Hierarchy index lists {parent_id!r} but its tree does not"
                raise InvariantViolationError(msg, issues=(msg,))
            children = inserted

        self._specifications[specification.identifier] = replace(
            specification, children=children
        )
        for node_id in node_ids:
            self._hierarchy_owners[node_id] = specification.identifier

    @_logged("remove_hierarchy")
    def remove_hierarchy(self, identifier: str) -> SpecHierarchy:
        """Remove and return a hierarchy node together with its subtree.

        Raises:
            EntityNotFoundError: If no hierarchy node has this identifier.
        """
        owner = self._require(self._hierarchy_owners, identifier, "spec_hierarchy")
        specification = self._specifications[owner]
        path = _find_path(specification.children, identifier)
        children = _remove_subtree(specification.children, identifier)
        if path is None or children is None:
            msg = f"Hierarchy index lists {identifier!r} but its tree does not"
            raise InvariantViolationError(msg, issues=(msg,))

        node = path[-1]
        self._specifications[owner] = replace(specification, children=children)
        for removed in node.walk():
            del self._hierarchy_owners[removed.identifier]
        return node

    # -------------------------------------------------------------------------
    # Attribute Values
    # -------------------------------------------------------------------------

    def set_attribute_value(
        self,
        owner_id: str,
        value: AttributeValue,
        *,
        owner_type: type[SpecObject | SpecRelation | Specification] = SpecObject,
    ) -> None:
        """Set one attribute value on an object, relation, or specification.

        A value already filling the same attribute definition is replaced in
        its position; otherwise the value is appended.

        Args:
            owner_id: Identifier of the entity carrying the value.
            value: The new value.
            owner_type: Namespace of the owner.

        Raises:
            EntityNotFoundError: If the owner does not exist.
            DocumentError: If the value refers to an undeclared attribute.
            ValueValidationError: If the value fails its datatype.
        """
        if owner_type not in _VALUED_TYPES:
            msg = f"{owner_type!r} does not carry attribute values"
            raise TypeError(msg)
        owner = self.resolve(owner_type, owner_id)
        if owner is None:
            msg = f"{owner_type.__name__} {owner_id!r} not found"
            raise EntityNotFoundError(
                msg, kind=owner_type.namespace, identifier=owner_id
            )

        values = list(owner.values)
        for index, existing in enumerate(values):
            if existing.definition == value.definition:
                values[index] = value
                break
        else:
            values.append(value)
        updated: Any = replace(owner, values=tuple(values))  # pyright: ignore[reportExplicitAny]

        match updated:
            case SpecObject():
                self.replace_spec_object(updated)
            case SpecRelation():
                self.replace_spec_relation(updated)
            case Specification():
                self.replace_specification(updated)

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    def validate(self) -> tuple[ValidationIssue, ...]:
        """Audit every document invariant without raising.

        Stored entities were checked when they entered the document, so most
        issues mean state was corrupted behind the document's back (for
        example, preserved content mutated through a shared dictionary). The
        document never interprets foreign content, so a foreign key reusing a
        modeled field name is only reported here, before a writer would emit
        it.

        Returns:
            Every violation found, in document order.
        """
        issues: list[ValidationIssue] = []

        def record(kind: str, identifier: str, error: Exception) -> None:
            issues.append(
                ValidationIssue(
                    kind=kind,
                    identifier=identifier,
                    error=type(error).__name__,
                    message=str(error),
                )
            )

        try:
            self._validate_header(self._header)
            check_foreign(
                "header", self._header.foreign, modeled_keys(self._header)
            )
            check_foreign("document", self._foreign, modeled_keys(ReqIF))
        except (DocumentError, InvariantViolationError) as e:
            record("header", self._header.identifier, e)

        for datatype in self._datatypes.values():
            try:
                validate_datatype(datatype)
                check_foreign(
                    datatype.identifier, datatype.foreign, modeled_keys(datatype)
                )
            except (DocumentError, InvariantViolationError) as e:
                record("datatype", datatype.identifier, e)

        owners: dict[str, str] = {}
        for spec_type in self._spec_types.values():
            try:
                for definition in spec_type.spec_attributes:
                    if owners.setdefault(definition.identifier, spec_type.identifier) != (
                        spec_type.identifier
                    ):
                        msg = f"Attribute definition {definition.identifier!r} declared twice"
                        raise DuplicateIdentifierError(
                            msg,
                            identifier=definition.identifier,
                            namespace="attribute_definition",
                        )
                    if definition.datatype_ref not in self._datatypes:
                        msg = (
                            f"Attribute definition {definition.identifier!r} refers "
                            f"to missing datatype {definition.datatype_ref!r}"
                        )
                        raise DanglingReferenceError(
                            msg,
                            kind="datatype",
                            identifier=definition.datatype_ref,
                            referrer=definition.identifier,
                        )
                    check_foreign(
                        definition.identifier,
                        definition.foreign,
                        modeled_keys(definition),
                    )
                check_foreign(
                    spec_type.identifier, spec_type.foreign, modeled_keys(spec_type)
                )
            except (DocumentError, InvariantViolationError) as e:
                record("spec_type", spec_type.identifier, e)

        for spec_object in self._spec_objects.values():
            try:
                self._check_entity(spec_object)
                check_foreign(
                    spec_object.identifier,
                    spec_object.foreign,
                    modeled_keys(spec_object),
                )
            except (DocumentError, ValueValidationError, InvariantViolationError) as e:
                record("spec_object", spec_object.identifier, e)

        for relation in self._spec_relations.values():
            try:
                self._check_endpoints(relation)
                self._check_entity(relation)
                check_foreign(
                    relation.identifier, relation.foreign, modeled_keys(relation)
                )
            except (DocumentError, ValueValidationError, InvariantViolationError) as e:
                record("spec_relation", relation.identifier, e)

        taken: set[str] = set()
        for specification in self._specifications.values():
            try:
                self._check_entity(specification)
                node_ids = _check_tree(
                    specification.identifier,
                    specification.children,
                    self._spec_objects,
                    is_taken=taken.__contains__,
                )
                taken.update(node_ids)
                check_foreign(
                    specification.identifier,
                    specification.foreign,
                    modeled_keys(specification),
                )
                for node in specification.walk():
                    check_foreign(node.identifier, node.foreign, modeled_keys(node))
            except (DocumentError, ValueValidationError, InvariantViolationError) as e:
                record("specification", specification.identifier, e)

        for extension in self._tool_extensions.values():
            if not isinstance(extension.content, str):
                msg = f"Tool extension {extension.identifier!r} content is not text"
                record(
                    "tool_extension",
                    extension.identifier,
                    InvariantViolationError(msg),
                )

        return tuple(issues)

    def check_integrity(self) -> None:
        """Raise if the document audit finds any violation.

        Writers call this before emitting a document.

        Raises:
            InvariantViolationError: If validate() reports any issue.
        """
        issues = self.validate()
        if issues:
            self._logger.error(
                "integrity_check_failed",
                issues=[issue.message for issue in issues],
            )
            msg = f"Document {self._header.identifier!r} failed {len(issues)} invariant checks"
            raise InvariantViolationError(
                msg, issues=tuple(issue.message for issue in issues)
            )
