import json

from src.formview.errors import ActionPreconditionFailed, AmbiguousOrMissingElement, SettleTimeout
from src.formview.failures import make_scenario_result
from src.formview.report import dump_run_report, summarize
from src.formview.types import ScenarioStatus


def test_passed_result():
    rec = make_scenario_result(scenario="field_reorder", elapsed_s=1.23456)
    assert rec == {
        "scenario": "field_reorder",
        "status": ScenarioStatus.PASSED,
        "elapsed_s": 1.235,
        "error_kind": None,
        "diagnostic": None,
    }


def test_missing_element_result():
    rec = make_scenario_result(
        scenario="form_elements",
        elapsed_s=2,
        error=AmbiguousOrMissingElement("form.submit", 0, "[data-testid='nc-form-submit']"),
        counters={"action.click": 4},
    )
    assert rec["status"] == ScenarioStatus.FAILED
    assert rec["error_kind"] == "ambiguous_or_missing_element"
    assert rec["element"] == "form.submit"
    assert (rec["expected"], rec["observed"]) == (1, 0)
    assert rec["counters"] == {"action.click": 4}


def test_precondition_result():
    rec = make_scenario_result(
        scenario="form_elements",
        elapsed_s=0.5,
        error=ActionPreconditionFailed("fill", "input is disabled", "form.field_input"),
    )
    assert rec["diagnostic"] == "fill: input is disabled"
    assert rec["observed"] == "input is disabled"


def test_report_written(tmp_path):
    results = [
        make_scenario_result(scenario="a", elapsed_s=1),
        make_scenario_result(scenario="b", elapsed_s=2, error=RuntimeError("driver died")),
    ]
    out = tmp_path / "run" / "report.json"
    payload = dump_run_report(results, out)

    assert payload["summary"] == {"total": 2, "passed": 1, "failed": 0, "error": 1, "elapsed_s": 3}
    on_disk = json.loads(out.read_text(encoding="utf-8"))
    assert on_disk["scenarios"][1]["status"] == "error"
    assert on_disk["scenarios"][1]["error_kind"] == "RuntimeError"


def test_summarize_empty():
    assert summarize([]) == {"total": 0, "passed": 0, "failed": 0, "error": 0, "elapsed_s": 0}


def test_settle_timeout_result():
    rec = make_scenario_result(scenario="field_reorder", elapsed_s=3, error=SettleTimeout(10.0, "drag_and_drop"))
    assert rec["status"] == ScenarioStatus.FAILED
    assert rec["error_kind"] == "settle_timeout"
    assert rec["element"] == "drag_and_drop"
    assert (rec["expected"], rec["observed"]) == ("settled", "busy")
