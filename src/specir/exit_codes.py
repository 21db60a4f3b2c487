"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specir.exceptions.SpecirError` subclass.
Build scripts wrapping ``specir translate`` can inspect the exit code to
tell a broken input file from an unsupported schema without parsing stderr.

Example::

    $ specir translate api.yaml
    $ echo $?
    8   # EXIT_TRANSLATION_ERROR -- the document uses an unsupported feature
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The document could not be read or is not valid JSON/YAML."""

EXIT_TRANSLATION_ERROR = 8
"""The document was parsed but could not be translated into the IR."""

EXIT_RENDERER_ERROR = 10
"""A renderer failed to load or to render the IR."""
