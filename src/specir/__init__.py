"""specir -- Translate OpenAPI 3.0 documents into a typed intermediate representation.

specir reads an OpenAPI document (JSON or YAML, from a file, URL or stdin),
checks it against the supported subset, and produces an IR that a code
renderer can turn into server stubs without ever looking at the raw document:

* component schemas become :data:`~specir.models.TypeRepr` values,
* paths become :class:`~specir.models.PathItemAggregation` values,
* a :class:`~specir.models.DecoderPlan` lists every refinement, list and enum
  decoder the generated code needs, deduplicated.

Typical workflow::

    specir translate openapi.yaml -o api.ir.json
    specir inspect routes openapi.yaml
    specir render <renderer> openapi.yaml --output-dir gen/

Modules:
    app: Typer application and CLI entry point.
    pipeline: The translation pipeline (read, components, routes, plan).
    models: Pydantic models for the document, the IR and the decoder plan.
    emission: Read-only queries over the IR for renderers.
    renderers: Renderer base class and entry-point registry.
    config: Configuration resolution and output writes.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    tracing: Optional stage-transition hooks.
"""

__version__ = "0.1.0"
