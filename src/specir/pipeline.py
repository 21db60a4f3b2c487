"""Run the full translation pipeline over one document.

:func:`translate_document` is the pure function at the centre of specir: it
takes a parsed document tree and returns a
:class:`~specir.models.TranslationResult`, or raises the first
:class:`~specir.exceptions.TranslationError` it meets. Stages run strictly
in order, each one finishing before the next begins:

1. ``read`` -- :func:`~specir.parser.reader.read_document`
2. ``components`` -- :func:`~specir.translator.types.translate_components`
3. ``routes`` -- :func:`~specir.translator.routes.aggregate`
4. ``plan`` -- :func:`~specir.translator.planner.plan_decoders`

:func:`translate_source` adds the loader in front for callers holding a file
path or URL rather than a tree.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specir.models import TranslationResult
from specir.parser.loader import load_document
from specir.parser.reader import read_document
from specir.tracing import TraceRunner, Tracer
from specir.translator.planner import plan_decoders
from specir.translator.routes import aggregate
from specir.translator.types import translate_components

logger = logging.getLogger(__name__)


def translate_document(
    tree: dict[str, Any],
    tracers: Optional[list[Tracer]] = None,
) -> TranslationResult:
    """Translate a parsed document tree into IR.

    Args:
        tree: The generic tree, e.g. from
            :func:`~specir.parser.loader.load_document`.
        tracers: Optional tracers notified of every stage transition.

    Returns:
        The components, path aggregations and decoder plan.

    Raises:
        TranslationError: The first structural problem found. No partial
            result is produced.

    Example::

        result = translate_document(yaml.safe_load(text))
        print(list(result.components))
    """
    runner = TraceRunner(tracers)

    with runner.stage("read") as counts:
        document = read_document(tree)
        counts["components"] = len(document.components)
        counts["paths"] = len(document.paths)

    with runner.stage("components") as counts:
        components = translate_components(document.components)
        counts["components"] = len(components)

    with runner.stage("routes") as counts:
        paths = aggregate(document.paths, components)
        counts["route_items"] = sum(len(a.items) for a in paths.values())

    with runner.stage("plan") as counts:
        decoders = plan_decoders(paths, components)
        counts["refinement_decoders"] = len(decoders.refinement_decoders)
        counts["list_decoders"] = len(decoders.list_decoders)
        counts["enum_decoders"] = len(decoders.enum_decoders)

    logger.debug("translated %d components and %d paths", len(components), len(paths))
    return TranslationResult(components=components, paths=paths, decoders=decoders)


def translate_source(
    source: str,
    tracers: Optional[list[Tracer]] = None,
) -> TranslationResult:
    """Load *source* (file path, URL or ``-``) and translate it.

    Raises:
        SpecParseError: If the document cannot be loaded.
        TranslationError: If it cannot be translated.
    """
    return translate_document(load_document(source), tracers)
