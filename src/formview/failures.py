from __future__ import annotations
from typing import Any

from .errors import FormViewError
from .types import ScenarioResult, ScenarioStatus


def make_scenario_result(
    *,
    scenario: str,
    elapsed_s: float,
    error: BaseException | None = None,
    counters: dict[str, int] | None = None,
) -> ScenarioResult:
    """
    FormViewError -> FAILED with its diagnostic fields; anything else -> ERROR.
    """
    rec: ScenarioResult = {
        "scenario": scenario,
        "status": ScenarioStatus.PASSED,
        "elapsed_s": round(elapsed_s, 3),
        "error_kind": None,
        "diagnostic": None,
    }
    if error is not None:
        if isinstance(error, FormViewError):
            diag: dict[str, Any] = error.diagnostic()
            rec["status"] = ScenarioStatus.FAILED
            rec["error_kind"] = diag.get("error_kind", error.kind)
            rec["diagnostic"] = diag.get("message", str(error))
            for key in ("expected", "observed", "element"):
                if key in diag:
                    rec[key] = diag[key]
        else:
            rec["status"] = ScenarioStatus.ERROR
            rec["error_kind"] = type(error).__name__
            rec["diagnostic"] = repr(error)
    if counters:
        rec["counters"] = dict(counters)
    return rec
