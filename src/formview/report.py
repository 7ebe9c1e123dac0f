import json
from pathlib import Path
from typing import Any, Iterable

from .instrumentation import Cat
from .session import FVSession
from .types import ScenarioResult, ScenarioStatus


def summarize(results: Iterable[ScenarioResult]) -> dict[str, Any]:
    results = list(results)
    counts = {s.value: 0 for s in ScenarioStatus}
    for r in results:
        counts[ScenarioStatus(r["status"]).value] += 1
    return {
        "total": len(results),
        **counts,
        "elapsed_s": round(sum(r["elapsed_s"] for r in results), 3),
    }


def dump_run_report(
    results: Iterable[ScenarioResult],
    out_path: Path,
    *,
    logger=None,
    session: FVSession | None = None,
) -> dict[str, Any]:
    def _emit(level: str, msg: str, **ctx: Any) -> None:
        if session:
            session.emit_signal(Cat.SCENARIO, msg, level=level, **ctx)
            return
        if logger:
            getattr(logger, level, logger.info)(msg)

    results = list(results)
    payload = {"summary": summarize(results), "scenarios": results}

    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
        _emit("info", f"Wrote run report to: {out_path}")
    except OSError as e:
        _emit("warning", f"Could not write run report. Message: {e!r}")
    return payload
