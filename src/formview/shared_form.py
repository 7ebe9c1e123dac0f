from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .context import PageKit
from .form_view import wait_for_submit_outcome
from .instrumentation import Cat
from .locators import Locator, field_key
from .. import config


class Attachment:
    def __init__(self, kit: PageKit, cell: Locator) -> None:
        self.kit = kit
        self.cell = cell

    def add_file(self, file_path: str | Path) -> None:
        file_input = self.kit.registry.get("shared_form.file_input", scope=self.cell)
        self.kit.actions.upload_file(file_input, file_path)


class SharedFormCell:
    def __init__(self, kit: PageKit, root: Locator) -> None:
        self.kit = kit
        self.root = root

    def locator(self, field: str) -> Locator:
        return self.kit.registry.get("shared_form.cell", scope=self.root, field=field_key(field))

    def fill_text(self, field: str, value: str) -> None:
        text_input = self.kit.registry.get("shared_form.text_input", scope=self.locator(field))
        self.kit.actions.fill(text_input, value)

    def attachment(self, field: str) -> Attachment:
        return Attachment(self.kit, self.locator(field))


class SharedFormPage:
    """
    Public form reached through a share link; no sign-in required.
    """

    def __init__(self, kit: PageKit) -> None:
        self.kit = kit
        self.registry = kit.registry
        self.actions = kit.actions
        self.root = self.registry.get("shared_form.root")
        self.cell = SharedFormCell(kit, self.root)

    def goto(self, url: str) -> None:
        self.kit.session.goto(url)
        self.kit.verifier.expect_true("shared form loaded", lambda: self.registry.exists(self.root))
        self.kit.session.emit_signal(Cat.SHARE, "Shared form opened", kind="shared_form", url=url)

    def click_link_to_child_list(self, field: str | None = None) -> None:
        scope = self.cell.locator(field) if field else self.root
        self.actions.click(self.registry.get("shared_form.child_list_link", scope=scope))

    def read_child_list(self) -> list[str]:
        return self.actions.read_texts(self.registry.get("shared_form.child_list_card"))

    def verify_child_list(self, items: Iterable[str]) -> None:
        self.kit.verifier.expect_sequence("child list", self.read_child_list, list(items))

    def select_child_list(self, item: str) -> None:
        self.actions.click(self.registry.get("shared_form.child_list_card", text=item, exact_text=True))

    def submit(self) -> None:
        self.actions.click(self.registry.get("shared_form.submit"), settle=False)
        wait_for_submit_outcome(
            self.kit,
            action="shared_form_submit",
            success=self.registry.get("shared_form.success"),
            error=self.registry.get("form.validation_error", scope=self.root),
        )
        self.kit.session.counters.inc("shared_form.submitted")

    def verify_success_message(self, message: str | None = None) -> None:
        self.kit.verifier.expect_contains(
            "shared form success message",
            lambda: self.actions.read_text(self.registry.get("shared_form.success")),
            message or config.MESSAGES["form_submitted"],
        )
