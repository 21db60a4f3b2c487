"""Built-in CLI sub-commands for specir.

* :mod:`~specir.commands.translate` -- translate a document and emit the IR
  as JSON.
* :mod:`~specir.commands.inspect` -- tabulate components, routes and
  decoders of a translated document.
* :mod:`~specir.commands.render` -- hand the IR to an installed renderer and
  write the files it returns.

``translate`` and ``render`` are plain callbacks registered directly on the
root app; ``inspect`` is a :class:`typer.Typer` sub-application.
"""
