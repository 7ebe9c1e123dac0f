import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from . import config
from .formview.form_scenarios import SCENARIOS
from .formview.report import dump_run_report
from .formview.scenarios import ScenarioRunner
from .formview.types import ScenarioStatus


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run form view UI scenarios against a live instance.")
    parser.add_argument("scenarios", nargs="*", help=f"scenario names (default: all). Known: {', '.join(SCENARIOS)}")
    parser.add_argument("--tag", action="append", default=[], help="only run scenarios carrying this tag")
    parser.add_argument("--workers", type=int, default=1, help="scenarios run concurrently, one browser each")
    parser.add_argument("--log-mode", default=None, help="live | debug | trace (default FV_LOG_MODE)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output on the console")
    args = parser.parse_args(argv)

    unknown = [n for n in args.scenarios if n not in SCENARIOS]
    if unknown:
        parser.error(f"unknown scenario(s): {', '.join(unknown)}")

    selected = [SCENARIOS[n] for n in args.scenarios] if args.scenarios else list(SCENARIOS.values())
    if args.tag:
        selected = [s for s in selected if set(args.tag) & set(s.tags)]
    if not selected:
        parser.error("no scenarios selected")

    run_dir = config.RUNS_DIR / datetime.now().strftime("%Y%m%d-%H%M%S")
    logger = setup_logging(verbose_console=args.verbose, log_path=run_dir / "run.log")
    logger.info("Running %d scenario(s): %s", len(selected), ", ".join(s.name for s in selected))

    runner = ScenarioRunner(logger, log_mode=args.log_mode)
    results = runner.run_all(selected, workers=args.workers)

    payload = dump_run_report(results, run_dir / "report.json", logger=logger)
    summary = payload["summary"]
    logger.warning(
        "Done: %d passed, %d failed, %d errored",
        summary[ScenarioStatus.PASSED.value],
        summary[ScenarioStatus.FAILED.value],
        summary[ScenarioStatus.ERROR.value],
    )
    for r in results:
        if r["status"] != ScenarioStatus.PASSED:
            logger.error("%s: %s (%s)", r["scenario"], r["error_kind"], r["diagnostic"])

    return 0 if summary["total"] == summary[ScenarioStatus.PASSED.value] else 1


def setup_logging(verbose_console: bool = False, log_path: Path | None = None):
    logger = logging.getLogger("formview")
    logger.setLevel(logging.DEBUG)  # emit everything; handlers will filter

    # Clear existing handlers if this is called multiple times
    logger.handlers.clear()
    logger.propagate = False  # don't double-log via root

    fmt = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
    formatter = logging.Formatter(fmt)

    # --- Console: WARNING (or DEBUG if verbose_console=True) ---
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose_console else logging.WARNING)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # --- File: DEBUG, truncated each run ---
    log_path = log_path or Path("formview.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    file_handler.name = "default_file"
    logger.addHandler(file_handler)

    return logger


if __name__ == "__main__":
    sys.exit(main())
