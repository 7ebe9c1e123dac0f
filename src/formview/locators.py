from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait
from selenium.common.exceptions import StaleElementReferenceException, TimeoutException

from .errors import AmbiguousOrMissingElement
from .instrumentation import Cat
from .session import FVSession
from .. import config

_WS_RE = re.compile(r"\s+")


def field_key(title: str) -> str:
    """
    Selector fragment for a field title: the app builds class names and
    test ids from the title with spaces removed ("City List" -> "CityList").
    """
    return (title or "").replace(" ", "")


def css_quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def norm_text(s: str | None) -> str:
    return _WS_RE.sub(" ", (s or "").strip())


def flatten_selectors(tree: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    {"form": {"submit": "..."}} -> {"form.submit": "..."}
    """
    out: Dict[str, str] = {}
    for key, value in tree.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, Mapping):
            out.update(flatten_selectors(value, name))
        elif value is not None:
            out[name] = value
    return out


@dataclass(frozen=True)
class Locator:
    """
    Semantic name + resolution rule. Holds no element reference; every use
    re-resolves against the live page.
    """
    name: str
    selector: str
    by: str = By.CSS_SELECTOR
    scope: Optional["Locator"] = None
    text: Optional[str] = None      # visible-text filter (substring, whitespace-normalised)
    exact_text: bool = False

    def describe(self) -> str:
        label = self.name
        if self.text is not None:
            label += f"[{self.text!r}]"
        if self.scope is not None:
            label += f" in {self.scope.describe()}"
        return label


class LocatorRegistry:
    """
    Named selector templates for the form-view UI.

    - Templates come from config.FORM_SELECTORS (dotted names) and can be
      overridden/added with register().
    - get() builds a Locator without touching the DOM.
    - resolve() insists on exactly one match; resolve_all() returns whatever
      is there right now.
    """

    def __init__(self, session: FVSession, selectors: Mapping[str, Any] | None = None) -> None:
        self.session = session
        self.driver = session.driver
        self._templates: Dict[str, tuple[str, str]] = {}
        for name, sel in flatten_selectors(selectors if selectors is not None else config.FORM_SELECTORS).items():
            self.register(name, sel)

    def _ctx(self, locator: Locator, **extra: Any) -> dict[str, Any]:
        ctx: dict[str, Any] = {"el": locator.describe(), "kind": "locate"}
        ctx.update(extra)
        return ctx

    # --- templates ---

    def register(self, name: str, selector: str, *, by: str = By.CSS_SELECTOR) -> None:
        self._templates[name] = (by, selector)

    def get(
        self,
        name: str,
        *,
        scope: Locator | None = None,
        text: str | None = None,
        exact_text: bool = False,
        **params: Any,
    ) -> Locator:
        try:
            by, template = self._templates[name]
        except KeyError:
            raise KeyError(f"No locator registered under {name!r}") from None
        try:
            selector = template.format(**{k: css_quote(str(v)) for k, v in params.items()})
        except KeyError as e:
            raise KeyError(f"Locator {name!r} needs parameter {e.args[0]!r}") from None
        return Locator(name=name, selector=selector, by=by, scope=scope, text=text, exact_text=exact_text)

    # --- resolution ---

    def _text_matches(self, el: WebElement, locator: Locator) -> bool:
        if locator.text is None:
            return True
        observed = norm_text(el.text)
        wanted = norm_text(locator.text)
        return observed == wanted if locator.exact_text else wanted in observed

    def _find(self, locator: Locator) -> List[WebElement]:
        root: Any = self.driver
        if locator.scope is not None:
            root = self._resolve_once(locator.scope)
        found = root.find_elements(locator.by, locator.selector)
        if locator.text is None:
            return list(found)
        matches = []
        for el in found:
            try:
                if self._text_matches(el, locator):
                    matches.append(el)
            except StaleElementReferenceException:
                continue
        return matches

    def _resolve_once(self, locator: Locator) -> WebElement:
        els = self._find(locator)
        if len(els) != 1:
            raise AmbiguousOrMissingElement(locator.describe(), len(els), locator.selector)
        return els[0]

    def resolve(self, locator: Locator, *, timeout: float | None = None) -> WebElement:
        """
        Wait up to `timeout` (default config.WAIT_TIME) for exactly one match.

        Raises AmbiguousOrMissingElement naming the locator (or the scope that
        failed) and the last observed match count.
        """
        budget = config.WAIT_TIME if timeout is None else timeout
        last: dict[str, Any] = {"err": None}

        def _exactly_one(_driver):
            try:
                return self._resolve_once(locator)
            except AmbiguousOrMissingElement as e:
                last["err"] = e
                return False

        try:
            el = WebDriverWait(
                self.driver,
                budget,
                poll_frequency=config.POLL_INTERVAL,
                ignored_exceptions=(StaleElementReferenceException,),
            ).until(_exactly_one)
        except TimeoutException:
            err = last["err"] or AmbiguousOrMissingElement(locator.describe(), 0, locator.selector)
            self.session.counters.inc("locate.failures")
            self.session.emit_signal(
                Cat.LOCATE,
                f"Could not resolve locator: {err}",
                level="warning",
                **self._ctx(locator, count=err.count),
            )
            raise err from None

        self.session.counters.inc("locate.resolved")
        self.session.emit_trace(
            Cat.LOCATE,
            "Resolved locator",
            key="LOCATE.resolve",
            every_s=self.session.instr_policy.rate_limits_s.get("LOCATE.resolve"),
            **self._ctx(locator),
        )
        return el

    def resolve_all(self, locator: Locator) -> List[WebElement]:
        """
        Current matches, possibly empty. No waiting; a missing scope still raises.
        """
        return self._find(locator)

    def count(self, locator: Locator) -> int:
        try:
            return len(self._find(locator))
        except AmbiguousOrMissingElement:
            return 0

    def exists(self, locator: Locator) -> bool:
        return self.count(locator) > 0
