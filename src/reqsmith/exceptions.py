"""ReqSmith exceptions."""

from pathlib import Path
from typing import Any


class ReqSmithError(Exception):
    """Base exception for ReqSmith errors."""


class ConfigError(ReqSmithError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


# =============================================================================
# Document Exceptions
# =============================================================================


class DocumentError(ReqSmithError):
    """Base exception for errors raised by document aggregate operations.

    A document operation that raises a DocumentError (or a
    ValueValidationError) has not modified the document.
    """


class DanglingReferenceError(DocumentError, KeyError):
    """Raised when an entity refers to an identifier that does not exist.

    Attributes:
        kind: The namespace the reference points into (e.g. "spec_type").
        identifier: The identifier that could not be resolved.
        referrer: The identifier of the entity holding the reference.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        identifier: str,
        referrer: str | None = None,
    ) -> None:
        """Initialize with error message and reference context.

        Args:
            message: Human-readable error message.
            kind: The namespace the reference points into.
            identifier: The identifier that could not be resolved.
            referrer: The identifier of the entity holding the reference.
        """
        super().__init__(message)
        self.kind: str = kind
        self.identifier: str = identifier
        self.referrer: str | None = referrer

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0]) if self.args else ""


class EntityNotFoundError(DocumentError, KeyError):
    """Raised when an operation targets an entity that is not in the document.

    Attributes:
        kind: The namespace that was searched.
        identifier: The identifier that was not found.
    """

    def __init__(self, message: str, *, kind: str, identifier: str) -> None:
        """Initialize with error message and lookup context.

        Args:
            message: Human-readable error message.
            kind: The namespace that was searched.
            identifier: The identifier that was not found.
        """
        super().__init__(message)
        self.kind: str = kind
        self.identifier: str = identifier

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class DuplicateIdentifierError(DocumentError, ValueError):
    """Raised when an identifier already exists in its namespace.

    Attributes:
        identifier: The identifier that already exists.
        namespace: The namespace where the clash was detected.
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: str,
        namespace: str | None = None,
    ) -> None:
        """Initialize with error message and duplicate context.

        Args:
            message: Human-readable error message.
            identifier: The identifier that already exists.
            namespace: The namespace where the clash was detected.
        """
        super().__init__(message)
        self.identifier: str = identifier
        self.namespace: str | None = namespace


class CyclicHierarchyError(DocumentError, ValueError):
    """Raised when a hierarchy insertion would revisit an ancestor node.

    Attributes:
        cycle: Hierarchy identifiers from the ancestor back to itself.
    """

    def __init__(self, message: str, *, cycle: list[str] | None = None) -> None:
        """Initialize with error message and cycle context.

        Args:
            message: Human-readable error message.
            cycle: Hierarchy identifiers forming the cycle.
        """
        super().__init__(message)
        self.cycle: list[str] | None = cycle


class HierarchyDepthError(DocumentError, ValueError):
    """Raised when a hierarchy node would sit deeper than the supported limit.

    Attributes:
        identifier: The first node found beyond the limit.
        depth: Depth that node would have, counting root nodes as 1.
        limit: The deepest level allowed.
    """

    def __init__(self, message: str, *, identifier: str, depth: int, limit: int) -> None:
        """Initialize with error message and depth context."""
        super().__init__(message)
        self.identifier: str = identifier
        self.depth: int = depth
        self.limit: int = limit


class ReferencedElsewhereError(DocumentError, ValueError):
    """Raised when removing an entity that other entities still point at.

    Attributes:
        identifier: The identifier of the entity that could not be removed.
        by: Identifiers of every entity still referencing it.
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: str,
        by: tuple[str, ...] = (),
    ) -> None:
        """Initialize with error message and referrer context.

        Args:
            message: Human-readable error message.
            identifier: The identifier of the entity that could not be removed.
            by: Identifiers of every entity still referencing it.
        """
        super().__init__(message)
        self.identifier: str = identifier
        self.by: tuple[str, ...] = by


class SpecTypeUsageError(DocumentError, ValueError):
    """Raised when a spec type declared for one kind of entity is used by another.

    Attributes:
        spec_type: The spec type identifier.
        expected: The kind of entity the type is declared for.
        actual: The kind of entity that tried to use it.
    """

    def __init__(
        self,
        message: str,
        *,
        spec_type: str,
        expected: str,
        actual: str,
    ) -> None:
        """Initialize with error message and usage context."""
        super().__init__(message)
        self.spec_type: str = spec_type
        self.expected: str = expected
        self.actual: str = actual


class HeaderError(DocumentError, ValueError):
    """Raised when the document header is invalid.

    Attributes:
        field: The header field that failed validation.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        """Initialize with error message and field context."""
        super().__init__(message)
        self.field: str | None = field


class DatatypeDefinitionError(DocumentError, ValueError):
    """Raised when a datatype definition's own constraints are inconsistent.

    Attributes:
        identifier: The datatype identifier.
        field: The constraint field that failed validation.
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: str,
        field: str | None = None,
    ) -> None:
        """Initialize with error message and datatype context."""
        super().__init__(message)
        self.identifier: str = identifier
        self.field: str | None = field


# =============================================================================
# Value Exceptions
# =============================================================================


class ValueValidationError(ReqSmithError, ValueError):
    """Base exception for attribute values rejected by their datatype.

    Attributes:
        definition: Identifier of the attribute definition the value fills.
        datatype: Identifier of the datatype the value was checked against.
        value: The rejected payload.
    """

    def __init__(
        self,
        message: str,
        *,
        definition: str | None = None,
        datatype: str | None = None,
        value: Any = None,  # pyright: ignore[reportAny,reportExplicitAny]
    ) -> None:
        """Initialize with error message and value context.

        Args:
            message: Human-readable error message.
            definition: Identifier of the attribute definition.
            datatype: Identifier of the datatype definition.
            value: The rejected payload.
        """
        super().__init__(message)
        self.definition: str | None = definition
        self.datatype: str | None = datatype
        self.value: Any = value  # pyright: ignore[reportExplicitAny]


class KindMismatchError(ValueValidationError):
    """Raised when a value's variant or payload type does not match its datatype."""


class OutOfRangeError(ValueValidationError):
    """Raised when a numeric value falls outside its datatype's bounds."""


class LengthExceededError(ValueValidationError):
    """Raised when a string value is longer than its datatype allows."""


class UnknownEnumValueError(ValueValidationError):
    """Raised when an enumeration value names an undeclared enum value."""


# =============================================================================
# Internal Errors
# =============================================================================


class InvariantViolationError(ReqSmithError):
    """Raised when a document invariant is found broken outside a mutation.

    This signals a bug in a collaborator (for example corrupted preserved
    content discovered during export), not a user-facing validation failure.

    Attributes:
        issues: Descriptions of every violated invariant.
    """

    def __init__(self, message: str, *, issues: tuple[str, ...] = ()) -> None:
        """Initialize with error message and the violated invariants."""
        super().__init__(message)
        self.issues: tuple[str, ...] = issues


# =============================================================================
# Codec Exceptions
# =============================================================================


class CodecError(ReqSmithError):
    """Base exception for interchange codec errors."""


class CodecIOError(CodecError):
    """Raised when an interchange file cannot be read or written.

    Attributes:
        path: Path to the file that caused the error.
        operation: The operation that failed ("read", "write").
        cause: The underlying exception that caused this error.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        operation: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and I/O context."""
        super().__init__(message)
        self.path: Path = path
        self.operation: str = operation
        self.cause: Exception | None = cause


class CodecParseError(CodecError):
    """Raised when interchange content cannot be parsed into the model.

    Attributes:
        path: Path to the file that caused the error, if any.
        location: Dotted location of the offending element, if known.
        content_type: The content type that failed to parse.
        cause: The underlying exception that caused this error.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        location: str | None = None,
        content_type: str = "json",
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and parse context."""
        super().__init__(message)
        self.path: Path | None = path
        self.location: str | None = location
        self.content_type: str = content_type
        self.cause: Exception | None = cause
