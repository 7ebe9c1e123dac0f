# src/formview/context.py
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from .session import FVSession
from .locators import LocatorRegistry
from .actions import ActionExecutor
from .verifier import StateVerifier

if TYPE_CHECKING:
    from .dashboard import DashboardPage
    from .seeder import FixtureSeeder


@dataclass(frozen=True)
class TestContext:
    """
    Identifiers for the isolated project one scenario runs against.
    """
    __test__ = False  # not a pytest class

    project_id: str
    project_title: str
    base_id: str
    token: str
    base_url: str
    api_url: str

    @property
    def project_url(self) -> str:
        return f"{self.base_url}/#/nc/{self.project_id}"


@dataclass
class PageKit:
    """
    The four collaborators every page section is built from.
    """
    session: FVSession
    registry: LocatorRegistry
    actions: ActionExecutor
    verifier: StateVerifier

    @classmethod
    def build(cls, session: FVSession, *, verify_timeout: float | None = None) -> "PageKit":
        registry = LocatorRegistry(session)
        return cls(
            session=session,
            registry=registry,
            actions=ActionExecutor(session, registry),
            verifier=StateVerifier(session, timeout=verify_timeout),
        )


@dataclass
class ScenarioContext:
    logger: logging.Logger
    test: TestContext
    seeder: "FixtureSeeder"
    kit: PageKit
    dashboard: "DashboardPage"
    tables: dict
