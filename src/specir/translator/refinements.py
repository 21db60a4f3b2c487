"""Refinement model: normalise JSON Schema constraints into canonical refinements.

A refinement is a validation constraint attached to a primitive type
(``minLength``, ``maxLength``, ``minimum``, ``maximum``, ``pattern``). The
translator carries them into the IR so a renderer can emit validated
decoders.

:func:`normalize` maps raw ``(key, value)`` pairs to
:data:`~specir.models.Refinement` values and sorts them by a fixed kind
precedence (lengths, then numeric bounds, then pattern). Two constraint sets
that differ only in declaration order therefore normalise to the same tuple,
and the planner can deduplicate decoders by plain equality.
"""

from __future__ import annotations

from typing import Any, Iterable, Union

from specir.exceptions import ConflictingRefinement, InvalidSchema
from specir.models import (
    Maximum,
    MaxLength,
    Minimum,
    MinLength,
    Pattern,
    PrimitiveKind,
    Refinement,
)

RawConstraint = tuple[str, Any]

_PRECEDENCE: dict[str, int] = {
    "minLength": 0,
    "maxLength": 1,
    "minimum": 2,
    "maximum": 3,
    "pattern": 4,
}

_LENGTH_KINDS = frozenset({"minLength", "maxLength"})
_BOUND_KINDS = frozenset({"minimum", "maximum"})

# Which refinement kinds make sense on which primitive.
APPLICABLE_KINDS: dict[PrimitiveKind, frozenset[str]] = {
    PrimitiveKind.STRING: _LENGTH_KINDS | {"pattern"},
    PrimitiveKind.INTEGER: _BOUND_KINDS,
    PrimitiveKind.NUMBER: _BOUND_KINDS,
    PrimitiveKind.BOOLEAN: frozenset(),
}


def normalize(
    raw: Iterable[Union[RawConstraint, Refinement]], where: str = ""
) -> tuple[Refinement, ...]:
    """Normalise constraints into a canonical, ordered refinement tuple.

    Args:
        raw: ``(key, value)`` pairs as found on a schema, already-built
            refinements, or a mix of both. Passing the output of a previous
            call returns an equal tuple.
        where: Dotted location used in error messages.

    Returns:
        The refinements sorted by kind precedence.

    Documents coming through :func:`~specir.parser.loader.load_document`
    never repeat a key within one schema, since the loader rejects
    duplicate keys first. The conflict check applies to trees built by
    other parsers and to mixed lists such as a raw ``minLength`` next to a
    :class:`~specir.models.MinLength`.

    Raises:
        ConflictingRefinement: If a kind occurs more than once.
        InvalidSchema: If a value has the wrong type, or a lower bound
            exceeds its upper bound.

    Example::

        >>> normalize([("maxLength", 256), ("description", "x"), ("minLength", 1)])
        (MinLength(kind='minLength', value=1), MaxLength(kind='maxLength', value=256))
    """
    by_kind: dict[str, Refinement] = {}
    for entry in raw:
        if isinstance(entry, tuple):
            key, value = entry
            if key not in _PRECEDENCE:
                continue
            refinement = _build(key, value, where)
        else:
            refinement = entry
        if refinement.kind in by_kind:
            raise ConflictingRefinement(refinement.kind, where)
        by_kind[refinement.kind] = refinement

    _check_bounds(by_kind, "minLength", "maxLength", where)
    _check_bounds(by_kind, "minimum", "maximum", where)
    return tuple(sorted(by_kind.values(), key=lambda r: _PRECEDENCE[r.kind]))


def _build(key: str, value: Any, where: str) -> Refinement:
    if key in _LENGTH_KINDS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidSchema(f"{key} must be a non-negative integer, got {value!r}", where)
        return MinLength(value=value) if key == "minLength" else MaxLength(value=value)

    if key in _BOUND_KINDS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidSchema(f"{key} must be a number, got {value!r}", where)
        return Minimum(value=value) if key == "minimum" else Maximum(value=value)

    if not isinstance(value, str):
        raise InvalidSchema(f"pattern must be a string, got {value!r}", where)
    return Pattern(value=value)


def _check_bounds(by_kind: dict[str, Refinement], low: str, high: str, where: str) -> None:
    lower = by_kind.get(low)
    upper = by_kind.get(high)
    if lower is not None and upper is not None and lower.value > upper.value:
        raise InvalidSchema(f"{low} {lower.value} exceeds {high} {upper.value}", where)
