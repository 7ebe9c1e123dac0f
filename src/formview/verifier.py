from __future__ import annotations

import operator
import time
from typing import Any, Callable, Sequence, TypeVar

from selenium.common.exceptions import WebDriverException

from .errors import AmbiguousOrMissingElement, VerificationTimeout
from .instrumentation import Cat
from .session import FVSession
from .. import config

T = TypeVar("T")

# Exceptions that mean "the DOM is mid-render", not "the check failed"
TRANSIENT_ERRORS = (WebDriverException, AmbiguousOrMissingElement)


def contains(observed: Any, expected: Any) -> bool:
    return observed is not None and expected in observed


class StateVerifier:
    """
    Poll a read-only projection of UI state until it matches.

    First match returns immediately; running out of budget raises
    VerificationTimeout with the expected value and the last observation.
    Never sleeps for a fixed duration without a predicate attached.
    """

    def __init__(
        self,
        session: FVSession,
        *,
        timeout: float | None = None,
        interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session
        self.timeout = config.VERIFY_TIMEOUT if timeout is None else timeout
        self.interval = config.POLL_INTERVAL if interval is None else interval
        self._clock = clock
        self._sleep = sleep

    def expect(
        self,
        name: str,
        read: Callable[[], T],
        expected: Any,
        *,
        compare: Callable[[Any, Any], bool] = operator.eq,
        timeout: float | None = None,
        interval: float | None = None,
    ) -> T:
        budget = self.timeout if timeout is None else timeout
        step = self.interval if interval is None else interval
        deadline = self._clock() + budget
        observed: Any = None
        polls = 0

        while True:
            polls += 1
            try:
                observed = read()
                if compare(observed, expected):
                    self.session.counters.inc("verify.passed")
                    self.session.emit_diag(
                        Cat.VERIFY,
                        f"{name} verified",
                        **{"kind": "verify", "polls": polls},
                    )
                    return observed
            except TRANSIENT_ERRORS as e:
                observed = f"<{type(e).__name__}: {e}>"

            if self._clock() >= deadline:
                break
            self._sleep(step)

        self.session.counters.inc("verify.timeouts")
        self.session.emit_signal(
            Cat.VERIFY,
            f"{name} not observed within {budget}s (expected={expected!r} last={observed!r})",
            level="error",
            kind="verify",
            polls=polls,
        )
        raise VerificationTimeout(name, expected, observed, budget)

    def expect_equal(self, name: str, read: Callable[[], T], expected: Any, **kw: Any) -> T:
        return self.expect(name, read, expected, **kw)

    def expect_contains(self, name: str, read: Callable[[], str], expected: str, **kw: Any) -> str:
        return self.expect(name, read, expected, compare=contains, **kw)

    def expect_sequence(self, name: str, read: Callable[[], Sequence[Any]], expected: Sequence[Any], **kw: Any):
        # exact order, no extras, nothing missing
        return self.expect(name, lambda: list(read()), list(expected), **kw)

    def expect_true(self, name: str, read: Callable[[], bool], **kw: Any) -> bool:
        return self.expect(name, lambda: bool(read()), True, **kw)

    def wait_until(self, name: str, predicate: Callable[[], bool], **kw: Any) -> bool:
        """
        Condition-based replacement for fixed pauses: returns once predicate() holds.
        """
        return self.expect_true(name, predicate, **kw)
