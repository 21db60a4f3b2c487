"""Translator -- turn a :class:`~specir.models.CoreDocument` into IR.

This sub-package holds the translation core of the specir pipeline:

* :mod:`~specir.translator.refinements` -- Normalise JSON Schema constraints
  into an ordered tuple of refinements.
* :mod:`~specir.translator.types` -- Translate schema definitions into
  :data:`~specir.models.TypeRepr` values and enforce the no-nested-object
  rule.
* :mod:`~specir.translator.routes` -- Group operations by path into
  :class:`~specir.models.PathItemAggregation` values.
* :mod:`~specir.translator.planner` -- Collect the deduplicated decoders
  the routes need.

Most callers want :func:`specir.pipeline.translate_document`, which runs
these in order.
"""

from specir.translator.planner import plan_decoders
from specir.translator.refinements import normalize
from specir.translator.routes import aggregate
from specir.translator.types import resolve, translate, translate_components

__all__ = [
    "aggregate",
    "normalize",
    "plan_decoders",
    "resolve",
    "translate",
    "translate_components",
]
