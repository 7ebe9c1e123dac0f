from typing import Any


class FormViewError(RuntimeError):
    """Base for every failure the page-object layer surfaces to a scenario."""

    kind = "error"

    def diagnostic(self) -> dict[str, Any]:
        return {"error_kind": self.kind, "message": str(self)}


class AmbiguousOrMissingElement(FormViewError):
    """Raised when a locator resolves to zero or more than one element."""

    kind = "ambiguous_or_missing_element"

    def __init__(self, name: str, count: int, selector: str | None = None):
        self.name = name
        self.count = count
        self.selector = selector
        what = "no element" if count == 0 else f"{count} elements"
        super().__init__(f"Locator {name!r} matched {what} (selector={selector!r})")

    def diagnostic(self) -> dict[str, Any]:
        return {
            **super().diagnostic(),
            "element": self.name,
            "observed": self.count,
            "expected": 1,
        }


class VerificationTimeout(FormViewError):
    """Raised when an expected state is not observed within the wait budget."""

    kind = "verification_timeout"

    def __init__(self, name: str, expected: Any, observed: Any, timeout_s: float):
        self.name = name
        self.expected = expected
        self.observed = observed
        self.timeout_s = timeout_s
        super().__init__(
            f"{name}: expected {expected!r} but last observed {observed!r} after {timeout_s:.1f}s"
        )

    def diagnostic(self) -> dict[str, Any]:
        return {
            **super().diagnostic(),
            "element": self.name,
            "expected": self.expected,
            "observed": self.observed,
        }


class ActionPreconditionFailed(FormViewError):
    """Raised when an action is invoked on an element not in the required state."""

    kind = "action_precondition_failed"

    def __init__(self, action: str, reason: str, element: str | None = None):
        self.action = action
        self.reason = reason
        self.element = element
        super().__init__(f"{action}: {reason}")

    def diagnostic(self) -> dict[str, Any]:
        return {
            **super().diagnostic(),
            "element": self.element,
            "observed": self.reason,
        }


class SettleTimeout(FormViewError):
    """Raised when the UI is still busy after an action's settle budget."""

    kind = "settle_timeout"

    def __init__(self, timeout_s: float, action: str | None = None):
        self.timeout_s = timeout_s
        self.action = action
        what = f"after {action}" if action else "after navigation"
        super().__init__(f"UI did not settle {what} within {timeout_s}s")

    def diagnostic(self) -> dict[str, Any]:
        return {
            **super().diagnostic(),
            "element": self.action,
            "expected": "settled",
            "observed": "busy",
        }


class SeedError(FormViewError):
    """Raised when a fixture-seeding API call fails."""

    kind = "seed_error"

    def __init__(self, method: str, path: str, status: int | None, body: str = ""):
        self.method = method
        self.path = path
        self.status = status
        self.body = body
        super().__init__(f"{method} {path} failed (status={status}): {body[:200]}")

    def diagnostic(self) -> dict[str, Any]:
        return {
            **super().diagnostic(),
            "element": f"{self.method} {self.path}",
            "observed": self.status,
        }


class LoginError(FormViewError):
    """Raised when sign-in to the app under test fails."""

    kind = "login_error"
