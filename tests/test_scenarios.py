import threading

import pytest

from src.formview.errors import SeedError, VerificationTimeout
from src.formview.form_scenarios import SCENARIOS
from src.formview.scenarios import Scenario, ScenarioRunner
from src.formview.types import ScenarioStatus

from fakes import FakeDriver


class FakeSeeder:
    instances: list["FakeSeeder"] = []

    def __init__(self, api_url=None, *, logger=None, fail_sign_in=False):
        self.api_url = api_url
        self.fail_sign_in = fail_sign_in
        self.projects = []
        self.plans = []
        self.closed = False
        FakeSeeder.instances.append(self)

    def sign_in(self):
        if self.fail_sign_in:
            raise SeedError("POST", "/api/v1/auth/user/signin", 401, "bad credentials")
        return "tok"

    def create_project(self, title):
        self.projects.append(title)
        return {"id": f"p_{len(self.projects)}", "title": title}

    def default_base_id(self, project_id):
        return "ds_1"

    def seed_plan(self, project_id, plan, *, base_id=None):
        self.plans.append(plan.name)
        return {t.title: {"id": f"t_{t.title}"} for t in plan.tables}

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def reset_seeders():
    FakeSeeder.instances = []


@pytest.fixture
def drivers():
    return []


@pytest.fixture
def runner(logger, drivers):
    def _driver():
        d = FakeDriver()
        drivers.append(d)
        return d

    return ScenarioRunner(logger, driver_factory=_driver, seeder_factory=FakeSeeder, log_mode="debug")


def test_builtin_scenarios_registered():
    assert list(SCENARIOS) == ["field_reorder", "form_elements", "form_share_attachment", "form_view_links"]
    assert SCENARIOS["form_view_links"].seed == "country_city_links"
    assert SCENARIOS["form_share_attachment"].seed is None


def test_passing_scenario(runner, drivers):
    seen = {}

    def body(ctx):
        seen["project"] = ctx.test.project_id
        seen["tables"] = sorted(ctx.tables)
        ctx.kit.session.counters.inc("custom")

    result = runner.run(Scenario("demo", body, seed="country_city"))

    assert result["status"] == ScenarioStatus.PASSED
    assert result["error_kind"] is None
    assert result["counters"]["custom"] == 1
    assert seen == {"project": "p_1", "tables": ["City", "Country"]}

    seeder = FakeSeeder.instances[0]
    assert seeder.plans == ["country_city"]
    assert seeder.projects[0].startswith("fv_demo_")
    assert seeder.closed
    assert drivers[0].quit_called
    assert drivers[0].visited[-1].endswith("/#/nc/p_1")


def test_verification_failure_is_reported(runner, drivers):
    def body(ctx):
        raise VerificationTimeout("form fields order", ["LastUpdate", "Country"], ["Country"], 10.0)

    result = runner.run(Scenario("demo", body))

    assert result["status"] == ScenarioStatus.FAILED
    assert result["error_kind"] == "verification_timeout"
    assert result["expected"] == ["LastUpdate", "Country"]
    assert result["observed"] == ["Country"]
    assert result["element"] == "form fields order"
    assert drivers[0].quit_called


def test_unexpected_error(runner):
    def body(ctx):
        raise KeyError("boom")

    result = runner.run(Scenario("demo", body))
    assert result["status"] == ScenarioStatus.ERROR
    assert result["error_kind"] == "KeyError"


def test_raise_errors_reraises_original(runner):
    err = VerificationTimeout("toast", "x", None, 1.0)

    def body(ctx):
        raise err

    with pytest.raises(VerificationTimeout) as exc:
        runner.run(Scenario("demo", body), raise_errors=True)
    assert exc.value is err


def test_seed_failure_never_opens_a_browser(logger, drivers):
    runner = ScenarioRunner(
        logger,
        driver_factory=lambda: drivers.append(FakeDriver()),
        seeder_factory=lambda *a, **kw: FakeSeeder(*a, fail_sign_in=True, **kw),
    )
    result = runner.run(Scenario("demo", lambda ctx: None))

    assert result["status"] == ScenarioStatus.FAILED
    assert result["error_kind"] == "seed_error"
    assert drivers == []
    assert FakeSeeder.instances[0].closed


def test_each_scenario_gets_its_own_project_and_browser(runner, drivers):
    names = ["a", "b", "c"]
    threads = set()

    def body(ctx):
        threads.add(threading.current_thread().name)

    results = runner.run_all([Scenario(n, body) for n in names], workers=3)

    assert [r["scenario"] for r in results] == names
    assert all(r["status"] == ScenarioStatus.PASSED for r in results)
    assert len(drivers) == 3
    assert len({s.projects[0] for s in FakeSeeder.instances}) == 3
    assert all(t.startswith("scenario") for t in threads)


def test_run_all_sequential(runner):
    results = runner.run_all([Scenario("a", lambda ctx: None), Scenario("b", lambda ctx: None)])
    assert [r["scenario"] for r in results] == ["a", "b"]
