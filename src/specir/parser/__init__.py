"""Document parser -- load a source document and read it into a typed model.

This sub-package is responsible for the first stage of the specir pipeline:
turning a raw OpenAPI 3.0 document (JSON or YAML, local file, URL or stdin)
into a :class:`~specir.models.CoreDocument` that the translator can consume.

Typical usage::

    from specir.parser import load_document, read_document

    tree = load_document("api/openapi.yaml")
    document = read_document(tree)

Sub-modules:

* :mod:`~specir.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and duplicate-key rejection.
* :mod:`~specir.parser.reader` -- Explicit mapping from the generic tree to
  :class:`~specir.models.CoreDocument`, rejecting unsupported shapes.
"""

from specir.parser.loader import load_document
from specir.parser.reader import read_document

__all__ = ["load_document", "read_document"]
