"""Optional tracing hooks recording pipeline stage transitions.

This module provides three core components:

* :class:`StageEvent` -- A dataclass describing one stage transition
  (``start``, ``end`` or ``error``) together with a few counters.
* :class:`Tracer` -- Base class with no-op ``on_stage_start``,
  ``on_stage_end`` and ``on_error`` hooks. Subclass and override the ones
  you need.
* :class:`TraceRunner` -- Fans each event out to a list of tracers in
  registration order.

Tracing never changes what the pipeline produces. A tracer that raises is
logged and skipped so it cannot mask the translation result or the original
translation error.

Two tracers ship with specir: :class:`RecordingTracer` keeps every event in
memory (useful in tests), and :class:`OutputTracer` prints stage transitions
through :func:`specir.output.debug`, so they show up with ``--verbose``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class StageEvent:
    """One stage transition.

    Attributes:
        stage: Stage name (``"read"``, ``"components"``, ``"routes"``,
            ``"plan"``).
        phase: ``"start"``, ``"end"`` or ``"error"``.
        elapsed: Seconds spent in the stage, set on ``end`` and ``error``.
        counts: Stage-specific counters, e.g. ``{"components": 3}``.
        error: The exception for ``error`` events, otherwise ``None``.
    """

    stage: str
    phase: str
    elapsed: float = 0.0
    counts: dict[str, int] = field(default_factory=dict)
    error: Optional[Exception] = None


class Tracer:
    """Base class for tracers. All hooks default to no-ops."""

    def on_stage_start(self, event: StageEvent) -> None:
        pass

    def on_stage_end(self, event: StageEvent) -> None:
        pass

    def on_error(self, event: StageEvent) -> None:
        pass


class RecordingTracer(Tracer):
    """Keeps every event it receives in :attr:`events`."""

    def __init__(self) -> None:
        self.events: list[StageEvent] = []

    def on_stage_start(self, event: StageEvent) -> None:
        self.events.append(event)

    def on_stage_end(self, event: StageEvent) -> None:
        self.events.append(event)

    def on_error(self, event: StageEvent) -> None:
        self.events.append(event)

    @property
    def transitions(self) -> list[tuple[str, str]]:
        """``(stage, phase)`` pairs in the order they happened."""
        return [(e.stage, e.phase) for e in self.events]


class OutputTracer(Tracer):
    """Prints stage transitions as debug messages on stderr."""

    def on_stage_start(self, event: StageEvent) -> None:
        from specir.output import debug

        debug(f"stage {event.stage}: start")

    def on_stage_end(self, event: StageEvent) -> None:
        from specir.output import debug

        counts = ", ".join(f"{k}={v}" for k, v in event.counts.items())
        suffix = f" ({counts})" if counts else ""
        debug(f"stage {event.stage}: done in {event.elapsed * 1000:.1f} ms{suffix}")

    def on_error(self, event: StageEvent) -> None:
        from specir.output import debug

        debug(f"stage {event.stage}: failed with {event.error}")


class TraceRunner:
    """Runs hooks across tracers and times the stages.

    Usage::

        runner = TraceRunner([RecordingTracer()])
        with runner.stage("read") as counts:
            document = read_document(tree)
            counts["paths"] = len(document.paths)
    """

    def __init__(self, tracers: Optional[list[Tracer]] = None) -> None:
        self._tracers = list(tracers or [])

    def stage(self, name: str) -> "_Stage":
        return _Stage(self, name)

    def emit(self, hook: str, event: StageEvent) -> None:
        for tracer in self._tracers:
            try:
                getattr(tracer, hook)(event)
            except Exception:
                logger.warning("tracer %r failed in %s", tracer, hook, exc_info=True)


class _Stage:
    def __init__(self, runner: TraceRunner, name: str) -> None:
        self._runner = runner
        self._name = name
        self._counts: dict[str, int] = {}
        self._started = 0.0

    def __enter__(self) -> dict[str, int]:
        self._started = time.perf_counter()
        self._runner.emit("on_stage_start", StageEvent(stage=self._name, phase="start"))
        return self._counts

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        elapsed = time.perf_counter() - self._started
        if exc is None:
            event = StageEvent(self._name, "end", elapsed, dict(self._counts))
            self._runner.emit("on_stage_end", event)
        elif isinstance(exc, Exception):
            event = StageEvent(self._name, "error", elapsed, dict(self._counts), exc)
            self._runner.emit("on_error", event)
