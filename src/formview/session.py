# src/formview/session.py
import json
import logging
from typing import Any

from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.common.keys import Keys
from selenium.common.exceptions import (
    TimeoutException,
    WebDriverException,
    StaleElementReferenceException,
    ElementClickInterceptedException,
    ElementNotInteractableException,
)

from .driver import create_driver
from .errors import LoginError, SettleTimeout
from .instrumentation import Cat, Counters, InstrumentPolicy, LogMode, RateLimiter, format_ctx, parse_log_mode
from .. import config

# Key the frontend keeps its auth state under in localStorage
GUI_STORAGE_KEY = "nocodb-gui-v2"

_SETTLED_JS = """
if (document.readyState !== 'complete') return false;
for (const el of document.querySelectorAll(arguments[0])) {
    const r = el.getBoundingClientRect();
    if (r.width > 0 && r.height > 0) return false;
}
return true;
"""


class FVSession:
    """
    One browser session for one scenario.

    Owns the WebDriver, the default explicit wait and the instrumentation
    (signal/diag/trace logging + counters). Page sections borrow all of it.
    """

    def __init__(self, logger=None, *, driver=None, log_mode: str | None = None):
        self.driver = driver if driver is not None else create_driver()
        self.logger = logger or logging.getLogger("formview")
        self.wait = WebDriverWait(self.driver, config.WAIT_TIME)

        mode = parse_log_mode(log_mode or config.LOG_MODE)
        self.instr_policy = InstrumentPolicy(
            mode=mode,
            rate_limits_s=dict(config.LOG_RATE_LIMITS_S),
        )
        self.counters = Counters()
        self._rate = RateLimiter()
        self.emit_signal(Cat.STARTUP, "Session ready", kind="startup", log_mode=mode.value)

    # ------------------------------------------------------------------
    # Navigation + sign-in
    # ------------------------------------------------------------------

    @property
    def current_url(self) -> str:
        return self.driver.current_url

    def goto(self, url: str, *, settle: bool = True) -> None:
        self.emit_diag(Cat.NAV, f"Navigating to {url}", kind="goto")
        self.driver.get(url)
        if settle:
            self.wait_for_settle(action="goto")

    def sign_in_with_token(self, token: str) -> None:
        """
        Put the API token where the frontend looks for it, then reload.

        Raises LoginError if the app still routes to the sign-in page.
        """
        self.driver.get(config.FV_BASE_URL)
        self.driver.execute_script(
            "window.localStorage.setItem(arguments[0], arguments[1]);",
            GUI_STORAGE_KEY,
            json.dumps({"token": token}),
        )
        self.goto(config.FV_PROJECTS_URL)

        try:
            self.wait.until(lambda d: "/signin" not in (d.current_url or ""))
        except TimeoutException:
            self.emit_signal(Cat.NAV, f"Still on sign-in page ({self.current_url})", level="error", kind="login")
            raise LoginError("Sign-in failed. Check FV_USER_EMAIL/FV_USER_PASSWORD and FV_BASE_URL.") from None
        self.emit_signal(Cat.NAV, "Signed in", kind="login")

    # ------------------------------------------------------------------
    # Settle detection
    # ------------------------------------------------------------------

    def is_settled(self) -> bool:
        try:
            return bool(self.driver.execute_script(_SETTLED_JS, config.BUSY_SELECTORS))
        except WebDriverException:
            return False

    def wait_for_settle(self, timeout: float | None = None, *, action: str | None = None) -> None:
        """
        Block until the document is ready and no busy indicator is on screen.

        Raises SettleTimeout when the settle budget runs out.
        """
        budget = config.SETTLE_TIMEOUT if timeout is None else timeout
        try:
            WebDriverWait(self.driver, budget, poll_frequency=0.1).until(lambda _d: self.is_settled())
        except TimeoutException:
            self.counters.inc("session.settle_timeouts")
            self.emit_signal(
                Cat.ACTION,
                f"UI did not settle within {budget}s",
                level="warning",
                kind="settle",
                a=action,
            )
            raise SettleTimeout(budget, action) from None

    # ------------------------------------------------------------------
    # Low-level element helpers
    # ------------------------------------------------------------------

    def scroll_into_view(self, el: WebElement) -> None:
        self.driver.execute_script("arguments[0].scrollIntoView({block:'center', inline:'center'});", el)

    def click_element(self, el: WebElement, *, label: str = "<element>", js_fallback: bool = True) -> bool:
        """
        One click on an already-resolved element.

        An overlay or not-yet-interactable element gets a JS click instead of
        the native one. A stale element returns False; the caller re-resolves.
        """
        try:
            try:
                self.scroll_into_view(el)
            except StaleElementReferenceException:
                raise
            except WebDriverException:
                self.emit_trace(Cat.ACTION, "scrollIntoView failed", kind="click", el=label)

            try:
                el.click()
            except (ElementClickInterceptedException, ElementNotInteractableException) as e:
                if not js_fallback:
                    raise
                self.emit_diag(Cat.ACTION, f"Native click refused ({type(e).__name__}); using JS", kind="click", el=label)
                self.driver.execute_script("arguments[0].click();", el)
                self.counters.inc("session.js_clicks")
        except StaleElementReferenceException:
            self.counters.inc("session.stale_clicks")
            self.emit_signal(Cat.ACTION, "Element went stale before the click landed", level="warning", kind="click", el=label)
            return False
        except (ElementClickInterceptedException, ElementNotInteractableException) as e:
            self.emit_signal(Cat.ACTION, f"Click refused: {type(e).__name__}", level="warning", kind="click", el=label)
            return False
        return True

    def clear_and_type(self, el: WebElement, text: str, *, click_first: bool = True) -> None:
        if click_first:
            el.click()
        try:
            el.clear()
        except WebDriverException:
            self.emit_trace(Cat.ACTION, "clear() refused; falling back to select-all", kind="fill")
        # clear() does not fire input events on every framework; select-all + delete does
        el.send_keys(Keys.CONTROL, "a")
        el.send_keys(Keys.BACKSPACE)
        if text:
            el.send_keys(text)

    def press_escape(self) -> None:
        self.driver.switch_to.active_element.send_keys(Keys.ESCAPE)

    def close(self):
        self.emit_diag(Cat.STARTUP, "Closing session", counters=self.counters.snapshot() or None)
        self.driver.quit()

    # ------------------------------------------------------------------
    # Logging
    #   signal: always
    #   diag:   debug + trace modes
    #   trace:  trace mode only
    # ------------------------------------------------------------------

    def _line(self, cat: Cat, msg: str, ctx: dict[str, Any]) -> str:
        c = format_ctx(**ctx) if self.instr_policy.include_ctx else ""
        return f"[{cat.value}] {msg} :: {c}" if c else f"[{cat.value}] {msg}"

    def _allowed(self, key: str | None, every_s: float | None) -> bool:
        return not (key and every_s) or self._rate.allow(key, every_s)

    def emit_signal(self, cat: Cat, msg: str, *, level: str | int = "info", **ctx):
        if isinstance(level, str):
            level = {
                "warn": logging.WARNING,
                "warning": logging.WARNING,
                "error": logging.ERROR,
                "critical": logging.ERROR,
                "debug": logging.DEBUG,
                "trace": logging.DEBUG,
            }.get(level.lower(), logging.INFO)
        self.logger.log(level, self._line(cat, msg, ctx))

    def emit_diag(self, cat: Cat, msg: str, *, key: str | None = None, every_s: float | None = None, **ctx):
        if self.instr_policy.mode == LogMode.LIVE or not self._allowed(key, every_s):
            return
        self.logger.debug(self._line(cat, msg, ctx))

    def emit_trace(self, cat: Cat, msg: str, *, key: str | None = None, every_s: float | None = None, **ctx):
        if self.instr_policy.mode != LogMode.TRACE or not self._allowed(key, every_s):
            return
        self.logger.debug(self._line(cat, msg, ctx))
