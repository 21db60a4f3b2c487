"""Exception hierarchy for specir.

All exceptions inherit from :class:`SpecirError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specir.exit_codes`.
The top-level error handler in :func:`specir.app.main` catches
``SpecirError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Translation is fail-fast: the first :class:`TranslationError` aborts the
whole document and no partial IR is returned. Every translation error names
the offending location (a dotted path into the document such as
``paths./items.get.parameters.q``) and the violated rule.

Subclass hierarchy::

    SpecirError (exit 1)
    +-- ConfigError             (exit 1)
    +-- SpecParseError          (exit 7)
    +-- RendererError           (exit 10)
    +-- TranslationError        (exit 8)
        +-- MalformedDocument
        +-- UnresolvedReference
        +-- UnsupportedFeature
        +-- ConflictingRefinement
        +-- InvalidSchema
"""

from __future__ import annotations

from specir.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_RENDERER_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TRANSLATION_ERROR,
)


class SpecirError(Exception):
    """Base exception for all specir errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SpecirError):
    """Raised for configuration problems (invalid project file, bad package name)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(SpecirError):
    """Raised when the source document cannot be loaded or parsed as JSON/YAML."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class RendererError(SpecirError):
    """Raised when a renderer cannot be found, loaded, or fails to render."""

    exit_code = EXIT_RENDERER_ERROR


class TranslationError(SpecirError):
    """Base class for every error raised while translating a document into IR.

    Args:
        rule: Short description of the violated rule, e.g.
            ``"unsupported feature: nested object definition"``.
        location: Dotted path to the offending node. Empty when the error
            concerns the document root.
    """

    exit_code = EXIT_TRANSLATION_ERROR

    def __init__(self, rule: str, location: str = ""):
        self.rule = rule
        self.location = location
        super().__init__(f"{location}: {rule}" if location else rule)


class MalformedDocument(TranslationError):
    """Raised when the input tree is structurally invalid (missing keys, wrong shapes)."""

    def __init__(self, reason: str, location: str = ""):
        self.reason = reason
        super().__init__(f"malformed document: {reason}", location)


class UnresolvedReference(TranslationError):
    """Raised when a reference names a component absent from ``components.schemas``."""

    def __init__(self, name: str, location: str = ""):
        self.name = name
        super().__init__(f"unresolved reference: {name}", location)


class UnsupportedFeature(TranslationError):
    """Raised for inputs outside the supported subset.

    ``feature`` is one of ``"nested object definition"``,
    ``"external reference"``, ``"anonymous inline type"`` or a similar short
    label.
    """

    def __init__(self, feature: str, location: str = ""):
        self.feature = feature
        super().__init__(f"unsupported feature: {feature}", location)


class ConflictingRefinement(TranslationError):
    """Raised when the same refinement kind is declared twice on one primitive."""

    def __init__(self, kind: str, location: str = ""):
        self.kind = kind
        super().__init__(f"conflicting refinement: {kind}", location)


class InvalidSchema(TranslationError):
    """Raised for schemas that are well-formed but semantically invalid."""

    def __init__(self, reason: str, location: str = ""):
        self.reason = reason
        super().__init__(f"invalid schema: {reason}", location)
