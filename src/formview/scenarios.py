# src/formview/scenarios.py
from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .context import PageKit, ScenarioContext, TestContext
from .dashboard import DashboardPage
from .driver import create_driver
from .failures import make_scenario_result
from .fixtures import load_seed_plan
from .instrumentation import Cat, format_ctx
from .seeder import FixtureSeeder
from .session import FVSession
from .timing import phase_timer
from .types import ScenarioResult, ScenarioStatus
from .. import config


@dataclass(frozen=True)
class Scenario:
    """
    name: unique id, also used in the project title
    body: the steps; receives a fully built ScenarioContext
    seed: seed plan name/path applied through the API before the browser opens
    """
    name: str
    body: Callable[[ScenarioContext], None]
    seed: Optional[str] = None
    tags: tuple[str, ...] = ()


class ScenarioRunner:
    """
    Runs each scenario against its own freshly created project with its own
    browser. Nothing is shared between two scenarios except the logger.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        driver_factory: Callable[[], object] = create_driver,
        seeder_factory: Callable[..., FixtureSeeder] = FixtureSeeder,
        log_mode: str | None = None,
        verify_timeout: float | None = None,
    ) -> None:
        self.logger = logger
        self.driver_factory = driver_factory
        self.seeder_factory = seeder_factory
        self.log_mode = log_mode
        self.verify_timeout = verify_timeout

    def _log(self, level: str, msg: str, **ctx) -> None:
        c = format_ctx(**ctx)
        line = f"[{Cat.SCENARIO.value}] {msg} :: {c}" if c else f"[{Cat.SCENARIO.value}] {msg}"
        getattr(self.logger, level, self.logger.info)(line)

    def build_context(self, scenario: Scenario) -> ScenarioContext:
        """
        Sign in, create an isolated project, apply the seed plan, then open a
        signed-in browser on the project.
        """
        seeder = self.seeder_factory(config.FV_API_URL, logger=self.logger)
        session: FVSession | None = None
        try:
            token = seeder.sign_in()
            title = f"fv_{scenario.name}_{uuid.uuid4().hex[:8]}"
            project = seeder.create_project(title)
            base_id = seeder.default_base_id(project["id"])

            tables = {}
            if scenario.seed:
                tables = seeder.seed_plan(project["id"], load_seed_plan(scenario.seed), base_id=base_id)

            test = TestContext(
                project_id=project["id"],
                project_title=title,
                base_id=base_id,
                token=token,
                base_url=config.FV_BASE_URL,
                api_url=seeder.api_url,
            )

            session = FVSession(self.logger, driver=self.driver_factory(), log_mode=self.log_mode)
            session.sign_in_with_token(token)
            kit = PageKit.build(session, verify_timeout=self.verify_timeout)
            dashboard = DashboardPage(kit, test)
            dashboard.goto_project()
        except BaseException:
            if session is not None:
                session.close()
            seeder.close()
            raise

        return ScenarioContext(
            logger=self.logger,
            test=test,
            seeder=seeder,
            kit=kit,
            dashboard=dashboard,
            tables=tables,
        )

    def run(self, scenario: Scenario, *, raise_errors: bool = False) -> ScenarioResult:
        start = time.perf_counter()
        ctx: ScenarioContext | None = None
        error: BaseException | None = None
        counters = None

        self._log("info", "Scenario starting", scn=scenario.name, seed=scenario.seed)
        try:
            ctx = self.build_context(scenario)
            with phase_timer(ctx.kit.session, scenario.name, ctx={"scn": scenario.name}):
                scenario.body(ctx)
        except Exception as e:
            error = e
            self._log("error", f"Scenario failed: {e}", scn=scenario.name, error=type(e).__name__)
        finally:
            if ctx is not None:
                counters = ctx.kit.session.counters.snapshot()
                ctx.kit.session.close()
                ctx.seeder.close()

        result = make_scenario_result(
            scenario=scenario.name,
            elapsed_s=time.perf_counter() - start,
            error=error,
            counters=counters,
        )
        self._log(
            "info" if result["status"] == ScenarioStatus.PASSED else "warning",
            f"Scenario {result['status'].value}",
            scn=scenario.name,
            elapsed_s=result["elapsed_s"],
        )
        if error is not None and raise_errors:
            raise error
        return result

    def run_all(self, scenarios: Iterable[Scenario], *, workers: int = 1) -> list[ScenarioResult]:
        """
        Results come back in input order. workers > 1 runs scenarios on a
        thread pool; each still gets its own project and browser.
        """
        scenarios = list(scenarios)
        if workers <= 1 or len(scenarios) <= 1:
            return [self.run(s) for s in scenarios]
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scenario") as pool:
            return list(pool.map(self.run, scenarios))
