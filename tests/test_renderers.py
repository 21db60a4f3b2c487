"""Tests for specir.renderers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from specir.emission import iter_route_items, route_signature
from specir.exceptions import RendererError
from specir.models import TranslationResult
from specir.renderers import ENTRY_POINT_GROUP, Renderer, RendererRegistry


class RouteListRenderer(Renderer):
    """Lists routes, one per line."""

    @property
    def name(self) -> str:
        return "routes"

    @property
    def description(self) -> str:
        return "Route listing"

    def render(self, result: TranslationResult, package: str) -> dict[str, str]:
        lines = [f"# {package}"] + [route_signature(i) for i in iter_route_items(result.paths)]
        return {"routes.txt": "\n".join(lines) + "\n"}


class TestRenderer:
    """The abstract base."""

    def test_cannot_instantiate_base(self) -> None:
        with pytest.raises(TypeError):
            Renderer()  # type: ignore[abstract]

    def test_render_consumes_ir(self, petstore_result: TranslationResult) -> None:
        files = RouteListRenderer().render(petstore_result, "pets")
        assert files["routes.txt"].splitlines()[:2] == ["# pets", "GET /pets"]


class TestRendererRegistry:
    """Registration, lookup and entry-point discovery."""

    def test_register_and_get(self) -> None:
        registry = RendererRegistry()
        renderer = RouteListRenderer()
        registry.register(renderer)
        assert registry.get("routes") is renderer
        assert registry.list_renderers() == [{"name": "routes", "description": "Route listing"}]

    def test_duplicate_name_rejected(self) -> None:
        registry = RendererRegistry()
        registry.register(RouteListRenderer())
        with pytest.raises(RendererError, match="already registered"):
            registry.register(RouteListRenderer())

    def test_unknown_renderer(self) -> None:
        registry = RendererRegistry()
        registry.register(RouteListRenderer())
        with pytest.raises(RendererError, match=r"'nope' is not installed \(available: routes\)") as exc_info:
            registry.get("nope")
        assert exc_info.value.exit_code == 10

    def test_discover_loads_entry_points(self) -> None:
        ep = MagicMock()
        ep.name = "routes"
        ep.load.return_value = RouteListRenderer
        with patch("specir.renderers.importlib.metadata.entry_points", return_value=[ep]) as mock_eps:
            registry = RendererRegistry()
            assert registry.discover() == ["routes"]
        mock_eps.assert_called_once_with(group=ENTRY_POINT_GROUP)
        assert registry.get("routes").name == "routes"

    def test_discover_skips_broken_entry_points(self) -> None:
        broken = MagicMock()
        broken.name = "broken"
        broken.load.side_effect = ImportError("missing module")
        with patch("specir.renderers.importlib.metadata.entry_points", return_value=[broken]):
            registry = RendererRegistry()
            assert registry.discover() == []
        assert registry.list_renderers() == []
