# src/formview/dashboard.py
from __future__ import annotations

from typing import Any

from .context import PageKit, TestContext
from .form_view import FormPage
from .grid import GridPage
from .instrumentation import Cat
from .locators import field_key
from .verifier import contains
from .. import config


class TreeView:
    """
    Project tree on the left: tables live here.
    """

    def __init__(self, kit: PageKit) -> None:
        self.kit = kit
        self.registry = kit.registry
        self.actions = kit.actions

    def open_table(self, title: str) -> None:
        self.actions.click(self.registry.get("tree_view.table", title=field_key(title)))
        tab = self.registry.get("dashboard.tab", text=title, exact_text=True)
        self.kit.verifier.expect_true(f"table tab {title!r} open", lambda: self.registry.exists(tab))
        self.kit.session.emit_signal(Cat.NAV, f"Opened table {title!r}", kind="open_table")

    def create_table(self, title: str) -> None:
        self.actions.click(self.registry.get("tree_view.add_table"))
        self.actions.fill(self.registry.get("tree_view.modal_input"), title, settle=False)
        self.actions.click(self.registry.get("tree_view.modal_submit"))
        entry = self.registry.get("tree_view.table", title=field_key(title))
        self.kit.verifier.expect_true(f"table {title!r} in tree", lambda: self.registry.exists(entry))


class ViewSidebar:
    """
    Views of the open table + the "create view" buttons.
    """

    def __init__(self, kit: PageKit, toast: "Toast") -> None:
        self.kit = kit
        self.registry = kit.registry
        self.actions = kit.actions
        self.toast = toast

    def _create_view(self, create_button: str, title: str) -> None:
        self.actions.click(self.registry.get(create_button))
        self.actions.fill(self.registry.get("view_sidebar.modal_input"), title, settle=False)
        self.actions.click(self.registry.get("view_sidebar.modal_submit"))
        self.toast.verify(config.MESSAGES["view_created"])
        self.kit.verifier.expect_true(
            f"view {title!r} listed",
            lambda: title in self.view_titles(),
        )

    def create_form_view(self, title: str) -> None:
        self._create_view("view_sidebar.create_form", title)

    def view_titles(self) -> list[str]:
        return self.actions.read_texts(self.registry.get("view_sidebar.view_titles"))

    def verify_view(self, title: str, index: int) -> None:
        def _title_at() -> str | None:
            titles = self.view_titles()
            return titles[index] if index < len(titles) else None

        self.kit.verifier.expect_equal(f"view title at {index}", _title_at, title)

    def open_view(self, title: str) -> None:
        self.actions.click(self.registry.get("view_sidebar.view_titles", text=title, exact_text=True))


class Toast:
    def __init__(self, kit: PageKit) -> None:
        self.kit = kit

    def messages(self) -> list[str]:
        return self.kit.actions.read_texts(self.kit.registry.get("toast.notice"))

    def verify(self, message: str, *, timeout: float | None = None) -> None:
        self.kit.verifier.expect(
            "toast",
            lambda: " | ".join(self.messages()),
            message,
            compare=contains,
            timeout=timeout,
        )
        self.kit.session.emit_signal(Cat.TOAST, f"Toast shown: {message!r}", kind="toast")


class DashboardPage:
    """
    Root of the page-object tree for an authenticated project.

    Each child exposes only what makes sense at its scope:
      tree_view, view_sidebar, toast, form (+ toolbar), grid.
    """

    def __init__(self, kit: PageKit, test_ctx: TestContext) -> None:
        self.kit = kit
        self.test_ctx = test_ctx
        self.session = kit.session
        self.toast = Toast(kit)
        self.tree_view = TreeView(kit)
        self.view_sidebar = ViewSidebar(kit, self.toast)
        self.form = FormPage(kit)
        self.grid = GridPage(kit)

    def _ctx(self, **extra: Any) -> dict[str, Any]:
        ctx: dict[str, Any] = {"kind": "dashboard", "project": self.test_ctx.project_id}
        ctx.update(extra)
        return ctx

    @property
    def url(self) -> str:
        return self.session.current_url

    def goto(self, url: str) -> None:
        self.session.goto(url)

    def goto_project(self) -> None:
        self.session.goto(self.test_ctx.project_url)
        self.session.emit_signal(Cat.NAV, "Project opened", **self._ctx())

    def close_tab(self, title: str, *, missing_ok: bool = False) -> bool:
        """
        Close a dashboard tab by its title. Returns False only when the tab is
        absent and missing_ok is set.
        """
        registry = self.kit.registry
        tab = registry.get("dashboard.tab", text=title, exact_text=True)
        if missing_ok and not registry.exists(tab):
            self.session.emit_diag(Cat.NAV, f"Tab {title!r} not open; nothing to close", **self._ctx())
            return False
        self.kit.actions.click(registry.get("dashboard.tab_close", scope=tab))
        self.kit.verifier.expect_true(f"tab {title!r} closed", lambda: not registry.exists(tab))
        return True
