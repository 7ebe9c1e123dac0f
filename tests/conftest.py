import logging

import pytest

from src import config
from src.formview.context import PageKit
from src.formview.session import FVSession

from fakes import FakeDriver


@pytest.fixture(autouse=True)
def fast_config(request, monkeypatch):
    if request.node.get_closest_marker("e2e"):
        return
    monkeypatch.setattr(config, "WAIT_TIME", 0.2)
    monkeypatch.setattr(config, "POLL_INTERVAL", 0.01)
    monkeypatch.setattr(config, "SETTLE_TIMEOUT", 0.1)
    monkeypatch.setattr(config, "VERIFY_TIMEOUT", 0.3)
    monkeypatch.setattr(config, "BLANK_FORM_DELAY_S", 0.1)


@pytest.fixture
def logger():
    return logging.getLogger("formview.tests")


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def session(driver, logger):
    return FVSession(logger, driver=driver, log_mode="trace")


@pytest.fixture
def kit(session):
    return PageKit.build(session)
