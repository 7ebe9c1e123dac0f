"""
Live scenarios. Needs a running instance (FV_BASE_URL / FV_API_URL) and Chrome.

    FV_E2E=1 pytest -m e2e
"""
import logging
import os

import pytest

from src.formview.form_scenarios import SCENARIOS
from src.formview.scenarios import ScenarioRunner

pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(os.getenv("FV_E2E") != "1", reason="set FV_E2E=1 to drive a real browser"),
]


@pytest.fixture(scope="module")
def runner():
    return ScenarioRunner(logging.getLogger("formview.e2e"))


@pytest.mark.parametrize("name", list(SCENARIOS))
def test_scenario(runner, name):
    runner.run(SCENARIOS[name], raise_errors=True)
