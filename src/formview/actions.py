from __future__ import annotations

from pathlib import Path
from typing import Any

from selenium.webdriver import ActionChains
from selenium.webdriver.remote.webelement import WebElement

from .errors import ActionPreconditionFailed
from .instrumentation import Cat
from .locators import Locator, LocatorRegistry, norm_text
from .session import FVSession
from .. import config


class ActionExecutor:
    """
    Single user-intent primitives on top of the locator registry.

    Every call re-resolves its locator, performs exactly one gesture and then
    waits for the UI to settle. Nothing here retries a gesture that "did not
    take"; the caller re-reads state through the StateVerifier instead.
    """

    def __init__(self, session: FVSession, registry: LocatorRegistry) -> None:
        self.session = session
        self.driver = session.driver
        self.registry = registry

    def _ctx(self, locator: Locator | None, *, kind: str, **extra: Any) -> dict[str, Any]:
        ctx: dict[str, Any] = {"kind": kind}
        if locator is not None:
            ctx["el"] = locator.describe()
        ctx.update(extra)
        return ctx

    def _settle(self, settle: bool, action: str) -> None:
        if settle:
            self.session.wait_for_settle(action=action)

    def resolve(self, locator: Locator, *, timeout: float | None = None) -> WebElement:
        return self.registry.resolve(locator, timeout=timeout)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def click(self, locator: Locator, *, settle: bool = True, timeout: float | None = None) -> None:
        el = self.resolve(locator, timeout=timeout)
        self.session.counters.inc("action.click")
        if not self.session.click_element(el, label=locator.describe()):
            raise ActionPreconditionFailed("click", "element did not accept the click", locator.describe())
        self.session.emit_diag(Cat.ACTION, "Clicked", **self._ctx(locator, kind="click"))
        self._settle(settle, "click")

    def fill(self, locator: Locator, text: str, *, settle: bool = True) -> None:
        el = self.resolve(locator)
        if not el.is_enabled():
            raise ActionPreconditionFailed("fill", "input is disabled", locator.describe())
        self.session.counters.inc("action.fill")
        self.session.clear_and_type(el, text)
        self.session.emit_diag(Cat.ACTION, f"Filled {text!r}", **self._ctx(locator, kind="fill"))
        self._settle(settle, "fill")

    def clear(self, locator: Locator, *, settle: bool = True) -> None:
        self.fill(locator, "", settle=settle)

    def hover(self, locator: Locator) -> None:
        el = self.resolve(locator)
        ActionChains(self.driver).move_to_element(el).perform()

    def drag_and_drop(self, source: Locator, destination: Locator, *, settle: bool = True) -> None:
        """
        Press on source, nudge (sortable needs a small move to start), move onto
        destination, release. One attempt only.
        """
        src = self.resolve(source)
        dst = self.resolve(destination)
        self.session.counters.inc("action.drag")
        ctx = self._ctx(source, kind="drag", dst=destination.describe())
        self.session.emit_diag(Cat.DRAG, "Starting drag/drop gesture", **ctx)

        self.session.scroll_into_view(src)
        (
            ActionChains(self.driver)
            .move_to_element(src)
            .click_and_hold(src)
            .move_by_offset(5, 5)
            .move_to_element(dst)
            .pause(0.2)
            .release(dst)
            .perform()
        )
        self.session.emit_diag(Cat.DRAG, "Drag/drop gesture released", **ctx)
        self._settle(settle, "drag_and_drop")

    def select_option(self, trigger: Locator, option: Locator, *, settle: bool = True) -> None:
        self.click(trigger, settle=False)
        self.click(option, settle=settle)

    def upload_file(self, locator: Locator, file_path: str | Path, *, settle: bool = True) -> None:
        path = Path(file_path)
        if not path.is_file():
            raise ActionPreconditionFailed("upload_file", f"file does not exist: {path}", locator.describe())
        el = self.resolve(locator)
        self.session.counters.inc("action.upload")
        el.send_keys(str(path.resolve()))
        self.session.emit_diag(Cat.ACTION, f"Uploaded {path.name}", **self._ctx(locator, kind="upload"))
        self._settle(settle, "upload_file")

    def set_checkbox(self, locator: Locator, desired: bool, *, settle: bool = True) -> bool:
        """
        Click only if the checkbox is not already in the desired state.
        Returns True when a click was issued.
        """
        if self.is_checked(locator) == desired:
            return False
        self.click(locator, settle=settle)
        return True

    def press_escape(self) -> None:
        self.session.press_escape()

    # ------------------------------------------------------------------
    # Reads (no waiting beyond resolution)
    # ------------------------------------------------------------------

    def read_text(self, locator: Locator) -> str:
        return norm_text(self.resolve(locator).text)

    def read_value(self, locator: Locator) -> str:
        return self.resolve(locator).get_attribute("value") or ""

    def read_texts(self, locator: Locator) -> list[str]:
        return [norm_text(el.text) for el in self.registry.resolve_all(locator)]

    def is_checked(self, locator: Locator) -> bool:
        el = self.resolve(locator)
        classes = (el.get_attribute("class") or "").split()
        if config.CHECKED_CLASS in classes:
            return True
        return bool(self.driver.execute_script(
            "const i = arguments[0].matches('input') ? arguments[0] : arguments[0].querySelector('input');"
            "return !!(i && i.checked);",
            el,
        ))
