from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator
import logging
import time

from .instrumentation import Cat, format_ctx
from .session import FVSession

# Phases longer than this are logged at WARNING
SLOW_PHASE_S = 120.0


def _fmt_elapsed(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.2f}s"
    return f"{int(seconds // 60)}m {int(seconds % 60)}s"


def _emit(sink: FVSession | logging.Logger, level: str, cat: Cat, msg: str, ctx: dict[str, Any]) -> None:
    if isinstance(sink, FVSession):
        sink.emit_signal(cat, msg, level=level, **ctx)
        return
    c = format_ctx(**ctx)
    getattr(sink, level)(f"[{cat.value}] {msg} :: {c}" if c else f"[{cat.value}] {msg}")


@contextmanager
def phase_timer(
    sink: FVSession | logging.Logger,
    label: str,
    *,
    cat: Cat = Cat.SCENARIO,
    ctx: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Log START/END around a block. The yielded dict is the log context; the
    block may add keys to it and gets `elapsed_s` filled in on exit.
    """
    phase_ctx: dict[str, Any] = {"phase": label, **(ctx or {})}
    _emit(sink, "info", cat, f"START {label}", phase_ctx)
    start = time.perf_counter()
    try:
        yield phase_ctx
    finally:
        elapsed = time.perf_counter() - start
        phase_ctx["elapsed_s"] = round(elapsed, 3)
        level = "warning" if elapsed >= SLOW_PHASE_S else "info"
        _emit(sink, level, cat, f"END {label} ({_fmt_elapsed(elapsed)})", phase_ctx)
