import pytest
from selenium.common.exceptions import StaleElementReferenceException

from src.formview.errors import AmbiguousOrMissingElement, VerificationTimeout
from src.formview.verifier import StateVerifier, contains


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, s):
        self.sleeps.append(s)
        self.now += s


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def verifier(session, clock):
    return StateVerifier(session, timeout=1.0, interval=0.25, clock=clock, sleep=clock.sleep)


def reads(*values):
    it = iter(values)

    def _read():
        v = next(it)
        if isinstance(v, Exception):
            raise v
        return v

    return _read


def test_first_match_returns_without_sleeping(verifier, clock):
    assert verifier.expect("x", lambda: 3, 3) == 3
    assert clock.sleeps == []


def test_polls_until_match(verifier, clock, session):
    assert verifier.expect_equal("x", reads(1, 2, 3), 3) == 3
    assert clock.sleeps == [0.25, 0.25]
    assert session.counters.get("verify.passed") == 1


def test_timeout_carries_expected_and_last_observed(verifier, clock, session):
    with pytest.raises(VerificationTimeout) as exc:
        verifier.expect("fields order", lambda: ["Country"], ["LastUpdate", "Country"])
    err = exc.value
    assert err.expected == ["LastUpdate", "Country"]
    assert err.observed == ["Country"]
    assert err.timeout_s == 1.0
    assert clock.now == pytest.approx(1.0)
    assert session.counters.get("verify.timeouts") == 1
    diag = err.diagnostic()
    assert diag["error_kind"] == "verification_timeout"
    assert diag["element"] == "fields order"


def test_transient_errors_count_as_not_yet(verifier):
    read = reads(
        StaleElementReferenceException("gone"),
        AmbiguousOrMissingElement("form.root", 0),
        "ok",
    )
    assert verifier.expect("x", read, "ok") == "ok"


def test_transient_error_is_last_observation(verifier):
    with pytest.raises(VerificationTimeout) as exc:
        verifier.expect("x", reads(*[AmbiguousOrMissingElement("form.root", 2)] * 10), "ok")
    assert exc.value.observed.startswith("<AmbiguousOrMissingElement:")


def test_other_errors_propagate(verifier):
    with pytest.raises(ZeroDivisionError):
        verifier.expect("x", lambda: 1 / 0, 1)


def test_expect_sequence_is_order_sensitive(verifier):
    with pytest.raises(VerificationTimeout):
        verifier.expect_sequence("order", lambda: ("a", "b"), ["b", "a"], timeout=0)
    assert verifier.expect_sequence("order", lambda: ("a", "b"), ["a", "b"]) == ["a", "b"]


def test_expect_contains(verifier):
    assert verifier.expect_contains("toast", lambda: "Saved | Successfully submitted form data", "Successfully")


def test_wait_until(verifier):
    assert verifier.wait_until("ready", reads(False, 0, "yes")) is True


def test_compare_helpers():
    assert contains("abc", "b")
    assert not contains(None, "b")
