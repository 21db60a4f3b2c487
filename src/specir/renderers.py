"""Renderer boundary -- the abstract base class and registry for renderers.

specir stops at the IR. Turning a :class:`~specir.models.TranslationResult`
into source text is the job of a :class:`Renderer`, which lives outside this
package. Renderers are registered as Python entry points in the
``specir.renderers`` group::

    [project.entry-points."specir.renderers"]
    http4s = "my_package.render:Http4sRenderer"

and discovered at runtime by :class:`RendererRegistry`. ``specir render``
then loads one by name, hands it the IR, and writes the returned files.
"""

from __future__ import annotations

import importlib.metadata
import logging
from abc import ABC, abstractmethod

from specir.exceptions import RendererError
from specir.models import TranslationResult

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "specir.renderers"
"""The entry-point group name used for renderer discovery."""


class Renderer(ABC):
    """Base class for all renderers.

    Subclasses implement :attr:`name` and :meth:`render`. A renderer must
    only read the IR, through the model attributes and the queries in
    :mod:`specir.emission`.

    Example::

        class ListingRenderer(Renderer):
            @property
            def name(self) -> str:
                return "listing"

            def render(self, result, package):
                lines = [f"package {package}"] + list(result.components)
                return {"listing.txt": "\\n".join(lines) + "\\n"}
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique renderer name used on the command line."""
        ...

    @property
    def description(self) -> str:
        return ""

    @abstractmethod
    def render(self, result: TranslationResult, package: str) -> dict[str, str]:
        """Render *result* into files.

        Args:
            result: The IR of one document.
            package: Output package/namespace name.

        Returns:
            Relative file path to file content.
        """
        ...


class RendererRegistry:
    """Discovers and holds renderers by name.

    Example::

        registry = RendererRegistry()
        registry.discover()
        files = registry.get("http4s").render(result, "com.example.api")
    """

    def __init__(self) -> None:
        self._renderers: dict[str, Renderer] = {}

    def discover(self) -> list[str]:
        """Load every renderer registered in the ``specir.renderers`` group.

        Returns:
            Names of the renderers that loaded. Entry points that fail to
            load are logged as warnings and skipped.
        """
        loaded: list[str] = []
        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            try:
                renderer_cls = ep.load()
                self.register(renderer_cls())
                loaded.append(ep.name)
            except Exception as exc:
                logger.warning("Failed to load renderer '%s': %s", ep.name, exc)
        return loaded

    def register(self, renderer: Renderer) -> None:
        """Register *renderer* under its :attr:`~Renderer.name`.

        Raises:
            RendererError: If a renderer with the same name is already registered.
        """
        if renderer.name in self._renderers:
            raise RendererError(f"Renderer '{renderer.name}' is already registered")
        self._renderers[renderer.name] = renderer
        logger.debug("registered renderer '%s'", renderer.name)

    def get(self, name: str) -> Renderer:
        """Return the renderer called *name*.

        Raises:
            RendererError: If no such renderer is registered.
        """
        try:
            return self._renderers[name]
        except KeyError:
            available = ", ".join(sorted(self._renderers)) or "none"
            raise RendererError(
                f"Renderer '{name}' is not installed (available: {available})"
            ) from None

    def list_renderers(self) -> list[dict[str, str]]:
        return [
            {"name": r.name, "description": r.description}
            for r in self._renderers.values()
        ]
