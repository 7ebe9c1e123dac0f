from __future__ import annotations

from typing import Callable, Iterable

from selenium.common.exceptions import NoSuchElementException
from selenium.webdriver.common.keys import Keys

from src import config

_SPECIAL_KEYS = {getattr(Keys, k) for k in dir(Keys) if k.isupper()}


class FakeElement:
    """
    Just enough of a WebElement: children keyed by selector, attributes,
    typed value and click bookkeeping.
    """

    def __init__(
        self,
        text: str = "",
        *,
        attrs: dict | None = None,
        enabled: bool = True,
        children: dict[str, list["FakeElement"]] | None = None,
        on_click: Callable[["FakeElement"], None] | None = None,
        click_error: Exception | None = None,
    ):
        self.text = text
        self.attrs = dict(attrs or {})
        self.enabled = enabled
        self.children = children or {}
        self.on_click = on_click
        self.click_error = click_error
        self.clicks = 0
        self.sent: list[tuple] = []

    def add(self, selector: str, *els: "FakeElement") -> "FakeElement":
        self.children.setdefault(selector, []).extend(els)
        return self

    def find_elements(self, by, selector):
        return list(self.children.get(selector, []))

    def find_element(self, by, selector):
        found = self.find_elements(by, selector)
        if not found:
            raise NoSuchElementException(selector)
        return found[0]

    def get_attribute(self, name):
        return self.attrs.get(name)

    def is_enabled(self):
        return self.enabled

    def click(self):
        if self.click_error is not None:
            raise self.click_error
        self.clicks += 1
        if self.on_click:
            self.on_click(self)

    def clear(self):
        self.attrs["value"] = ""

    def send_keys(self, *keys):
        self.sent.append(keys)
        if Keys.BACKSPACE in keys:
            self.attrs["value"] = ""
        elif not any(k in _SPECIAL_KEYS for k in keys):
            self.attrs["value"] = (self.attrs.get("value") or "") + "".join(keys)

    @property
    def value(self):
        return self.attrs.get("value")


class FakeDriver:
    def __init__(self, dom: dict[str, list[FakeElement]] | None = None):
        self.dom = dom or {}
        self.current_url = "http://localhost:3000/#/"
        self.visited: list[str] = []
        self.scripts: list[tuple] = []
        self.settled = True
        self.quit_called = False

    def add(self, selector: str, *els: FakeElement) -> "FakeDriver":
        self.dom.setdefault(selector, []).extend(els)
        return self

    def find_elements(self, by, selector):
        return list(self.dom.get(selector, []))

    def execute_script(self, script, *args):
        self.scripts.append((script, args))
        if "readyState" in script:
            return self.settled
        return None

    def get(self, url):
        self.visited.append(url)
        self.current_url = url

    def quit(self):
        self.quit_called = True


def checkbox(checked: bool = False) -> FakeElement:
    """antd checkbox wrapper that flips its checked class on click."""

    def _toggle(el: FakeElement) -> None:
        classes = (el.attrs.get("class") or "").split()
        if config.CHECKED_CLASS in classes:
            classes.remove(config.CHECKED_CLASS)
        else:
            classes.append(config.CHECKED_CLASS)
        el.attrs["class"] = " ".join(classes)

    cls = f"ant-checkbox-wrapper {config.CHECKED_CLASS}" if checked else "ant-checkbox-wrapper"
    return FakeElement(attrs={"class": cls}, on_click=_toggle)


def labels(*texts: str) -> list[FakeElement]:
    return [FakeElement(t) for t in texts]


def sel(group: str, name: str, **params) -> str:
    """Rendered selector from the registry config, for building fake DOMs."""
    return config.FORM_SELECTORS[group][name].format(**params)


def texts(els: Iterable[FakeElement]) -> list[str]:
    return [e.text for e in els]
