# src/formview/form_view.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Mapping

from selenium.common.exceptions import WebDriverException

from .context import PageKit
from .errors import ActionPreconditionFailed, AmbiguousOrMissingElement, FormViewError
from .field_configs import FieldConfig, HeaderConfig
from .field_types import spec_for
from .instrumentation import Cat
from .locators import Locator, field_key, norm_text
from .toolbar import Toolbar
from .types import (
    AddMode,
    FieldDescriptor,
    FillFailure,
    FillReport,
    FormConfiguration,
    FormEntry,
    PostSubmitMode,
    RemoveMode,
    TOGGLE_MODES,
)
from .verifier import contains
from .. import config

_HIDDEN_PREFIX = "nc-form-hidden-column-"

_MODE_CHECKBOX = {
    PostSubmitMode.ALLOW_RESUBMIT: "form.checkbox_submit_another",
    PostSubmitMode.SHOW_BLANK_AFTER_DELAY: "form.checkbox_show_blank",
    PostSubmitMode.EMAIL_NOTIFY: "form.checkbox_send_email",
}

SUBMIT_ANOTHER_LABEL = "Submit Another Form"


def clean_label(text: str | None) -> str:
    # required fields render a trailing asterisk next to the label
    t = norm_text(text)
    if t.endswith("*"):
        t = t[:-1].rstrip()
    return t


def wait_for_submit_outcome(
    kit: PageKit,
    *,
    action: str,
    success: Locator,
    error: Locator,
    timeout: float | None = None,
) -> None:
    """
    Block until either the success indicator or a validation error is on screen.
    A validation error raises ActionPreconditionFailed with the messages shown.
    """
    registry = kit.registry
    kit.verifier.wait_until(
        f"{action} outcome",
        lambda: registry.exists(success) or registry.exists(error),
        timeout=timeout,
    )
    if not registry.exists(success):
        messages = kit.actions.read_texts(error)
        kit.session.counters.inc("form.validation_errors")
        raise ActionPreconditionFailed(action, f"validation errors: {messages}", error.describe())
    kit.session.wait_for_settle(action=action)


class FormPage:
    """
    Form view editor for the currently open form view.

    Responsibilities:
      - Field order: reorder, hide/show (drag-drop, remove icon, hidden card click), hide/show all
      - Field settings: label, help text, required
      - Header + after-submit message + after-submit mode checkboxes
      - Filling and submitting the form in the editor preview
      - Reads/verifications of all of the above

    Gestures never retry; each mutating call re-reads the resulting state so the
    caller can verify it.
    """

    def __init__(self, kit: PageKit) -> None:
        self.kit = kit
        self.session = kit.session
        self.registry = kit.registry
        self.actions = kit.actions
        self.verifier = kit.verifier
        self.toolbar = Toolbar(kit)
        # what this page has asked the app for; the app may refuse (email without SMTP)
        self.configuration = FormConfiguration()

    def _ctx(self, *, kind: str, field: str | None = None, mode: str | None = None, **extra: Any) -> dict[str, Any]:
        ctx: dict[str, Any] = {"kind": kind, "field": field, "mode": mode}
        ctx.update(extra)
        return ctx

    # ------------------------------------------------------------------
    # Locators
    # ------------------------------------------------------------------

    def root(self) -> Locator:
        return self.registry.get("form.root")

    def _in_root(self, name: str, **params: Any) -> Locator:
        return self.registry.get(name, scope=self.root(), **params)

    def drag_handle(self, field: str) -> Locator:
        return self._in_root("form.field_drag", field=field_key(field))

    def hidden_card(self, field: str) -> Locator:
        return self._in_root("form.hidden_column", field=field)

    def mode_checkbox(self, mode: PostSubmitMode) -> Locator:
        try:
            return self._in_root(_MODE_CHECKBOX[mode])
        except KeyError:
            raise ValueError(f"Post-submit mode {mode.value!r} has no checkbox") from None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_fields_order(self) -> list[str]:
        labels = self.registry.resolve_all(self._in_root("form.field_label"))
        return [clean_label(el.text) for el in labels]

    def read_hidden_fields(self) -> list[str]:
        names = []
        for el in self.registry.resolve_all(self._in_root("form.hidden_columns")):
            testid = el.get_attribute("data-testid") or ""
            if testid.startswith(_HIDDEN_PREFIX):
                names.append(testid[len(_HIDDEN_PREFIX):])
        return names

    def _field_cards(self) -> list:
        return self.registry.resolve_all(self._in_root("form.fields"))

    def _field_card(self, index: int):
        cards = self._field_cards()
        if index >= len(cards):
            # canvas re-renders after every settings change; not there yet
            raise AmbiguousOrMissingElement(f"form.fields[{index}]", 0, config.FORM_SELECTORS["form"]["fields"])
        return cards[index]

    def read_field_label(self, index: int) -> str:
        card = self._field_card(index)
        return clean_label(card.find_element("css selector", config.FORM_SELECTORS["form"]["field_label"]).text)

    def read_field_help_text(self, index: int) -> str:
        card = self._field_card(index)
        found = card.find_elements("css selector", config.FORM_SELECTORS["form"]["field_help_text"])
        # no help-text node at all means the help text is empty
        return norm_text(found[0].text) if found else ""

    def read_field_descriptors(self) -> list[FieldDescriptor]:
        out: list[FieldDescriptor] = []
        label_sel = config.FORM_SELECTORS["form"]["field_label"]
        help_sel = config.FORM_SELECTORS["form"]["field_help_text"]
        for pos, card in enumerate(self._field_cards()):
            raw_label = norm_text(card.find_element("css selector", label_sel).text)
            helps = card.find_elements("css selector", help_sel)
            label = clean_label(raw_label)
            out.append(FieldDescriptor(
                name=label,
                visible=True,
                position=pos,
                label=label,
                help_text=norm_text(helps[0].text) if helps else "",
                required=raw_label.endswith("*"),
            ))
        for name in self.read_hidden_fields():
            out.append(FieldDescriptor(name=name, visible=False))
        return out

    def read_header(self) -> HeaderConfig:
        return HeaderConfig(
            title=self.actions.read_value(self._in_root("form.heading")),
            subtitle=self.actions.read_value(self._in_root("form.sub_heading")),
        )

    def read_after_submit_menu_state(self) -> dict[PostSubmitMode, bool]:
        return {mode: self.actions.is_checked(self.mode_checkbox(mode)) for mode in TOGGLE_MODES}

    # ------------------------------------------------------------------
    # Field order
    # ------------------------------------------------------------------

    def reorder_fields(self, source: str, destination: str) -> list[str]:
        """
        Drag `source` onto `destination`. Returns the order read back afterwards;
        drag gestures are flaky, so callers verify rather than assume.
        """
        self.actions.drag_and_drop(self.drag_handle(source), self.drag_handle(destination))
        order = self.read_fields_order()
        self.session.emit_signal(
            Cat.FORM,
            f"Reordered fields; now {order}",
            **self._ctx(kind="reorder", field=source, dst=destination),
        )
        return order

    def remove_field(self, field: str, mode: RemoveMode) -> None:
        ctx = self._ctx(kind="remove_field", field=field, mode=mode)
        if mode == "drag_drop":
            self.actions.drag_and_drop(self.drag_handle(field), self._in_root("form.hide_drop_zone"))
        elif mode == "hide_field":
            self.actions.hover(self.drag_handle(field))
            self.actions.click(self.registry.get("form.field_remove_icon", scope=self.drag_handle(field)))
        else:
            raise ValueError(f"Unknown remove mode {mode!r}")
        self.session.counters.inc(f"form.remove.{mode}")
        self.session.emit_signal(Cat.FORM, "Field removed from form", **ctx)

    def add_field(self, field: str, mode: AddMode) -> None:
        ctx = self._ctx(kind="add_field", field=field, mode=mode)
        if mode == "drag_drop":
            visible = self.read_fields_order()
            if visible:
                target = self.drag_handle(visible[-1])
            else:
                target = self._in_root("form.fields")
            self.actions.drag_and_drop(self._in_root("form.hidden_column_body", field=field), target)
        elif mode == "click_field":
            self.actions.click(self.hidden_card(field))
        else:
            raise ValueError(f"Unknown add mode {mode!r}")
        self.session.counters.inc(f"form.add.{mode}")
        self.session.emit_signal(Cat.FORM, "Field added to form", **ctx)

    def remove_all_fields(self) -> None:
        self.actions.click(self._in_root("form.remove_all"))

    def add_all_fields(self) -> None:
        self.actions.click(self._in_root("form.add_all"))

    def verify_fields_order(self, fields: Iterable[str], *, timeout: float | None = None) -> list[str]:
        return self.verifier.expect_sequence("form fields order", self.read_fields_order, list(fields), timeout=timeout)

    # ------------------------------------------------------------------
    # Field settings
    # ------------------------------------------------------------------

    def configure_field(self, field: str, cfg: FieldConfig) -> None:
        """
        Open the field's settings, apply only what cfg provides, close again.
        """
        requested = cfg.requested()
        ctx = self._ctx(kind="configure_field", field=field, requested=requested or None)
        if not requested:
            self.session.emit_diag(Cat.FORM, "Nothing to configure", **ctx)
            return

        self.actions.click(self.registry.get("form.field_label", scope=self.drag_handle(field)))

        if cfg.label is not None:
            self.actions.fill(self._in_root("form.label_input"), cfg.label, settle=False)
        if cfg.help_text is not None:
            self.actions.fill(self._in_root("form.help_text_input"), cfg.help_text, settle=False)
        if cfg.required is not None:
            switch = self._in_root("form.required_switch")
            current = (self.registry.resolve(switch).get_attribute("aria-checked") or "").lower() == "true"
            if current != cfg.required:
                self.actions.click(switch, settle=False)

        # clicking the heading closes the settings surface and commits the edit
        self.actions.click(self._in_root("form.heading"))
        self.session.emit_signal(Cat.FORM, "Field configured", **ctx)

    def verify_field_label(self, index: int, label: str) -> None:
        self.verifier.expect_equal(f"field label at {index}", lambda: self.read_field_label(index), label)

    def verify_field_help_text(self, index: int, help_text: str) -> None:
        self.verifier.expect_equal(f"field help text at {index}", lambda: self.read_field_help_text(index), help_text)

    # ------------------------------------------------------------------
    # Header + after-submit configuration
    # ------------------------------------------------------------------

    def configure_header(self, header: HeaderConfig) -> None:
        if header.title is not None:
            self.actions.fill(self._in_root("form.heading"), header.title)
        if header.subtitle is not None:
            self.actions.fill(self._in_root("form.sub_heading"), header.subtitle)
        self.configuration = replace(self.configuration, **header.requested())

    def verify_header(self, header: HeaderConfig) -> None:
        expected = header.requested()

        def _read() -> dict[str, Any]:
            current = self.read_header().requested()
            return {k: current.get(k) for k in expected}

        self.verifier.expect_equal("form header", _read, expected)

    def configure_submit_message(self, message: str) -> None:
        self.actions.fill(self._in_root("form.after_submit_msg"), message)
        self.configuration = replace(self.configuration, submit_message=message)

    def _apply_toggles(self, target: FormConfiguration) -> None:
        # unticks first so two boxes are never on at once
        for mode, on in sorted(target.toggle_state().items(), key=lambda kv: kv[1]):
            self.actions.set_checkbox(self.mode_checkbox(mode), on)
        self.configuration = target

    def set_post_submit_mode(self, mode: PostSubmitMode) -> None:
        """
        Make `mode` the single active after-submit option: clear whatever is on,
        then tick the box for `mode` (DEFAULT/SHOW_MESSAGE tick nothing).

        The app may refuse a mode (email without SMTP); that is reported through
        a toast and left to the caller's verification.
        """
        self._apply_toggles(self.configuration.enable(mode))
        self.session.emit_signal(
            Cat.FORM,
            "Post-submit mode requested",
            **self._ctx(kind="post_submit_mode", mode=mode.value),
        )

    def clear_post_submit_mode(self, mode: PostSubmitMode) -> None:
        """Untick `mode` if it is the active one; no-op otherwise."""
        self._apply_toggles(self.configuration.disable(mode))
        self.session.emit_signal(
            Cat.FORM,
            f"Post-submit mode now {self.configuration.post_submit_mode.value}",
            **self._ctx(kind="post_submit_mode", mode=mode.value),
        )

    def verify_after_submit_menu_state(self, expected: Mapping[PostSubmitMode, bool]) -> None:
        active = [m for m, on in expected.items() if on]
        if len(active) > 1:
            raise ValueError(f"At most one post-submit mode can be active, got {active}")
        full = {m: bool(expected.get(m, False)) for m in TOGGLE_MODES}
        self.verifier.expect_equal("after submit menu state", self.read_after_submit_menu_state, full)

    def verify_active_post_submit_mode(self, mode: PostSubmitMode) -> None:
        self.verify_after_submit_menu_state(FormConfiguration(post_submit_mode=mode).toggle_state())

    # ------------------------------------------------------------------
    # Fill + submit
    # ------------------------------------------------------------------

    def fill_form(self, entries: Iterable[FormEntry]) -> FillReport:
        """
        Fill each entry independently; one bad field does not stop the rest.
        The report says what was applied and what failed.
        """
        report = FillReport()
        for entry in entries:
            if entry.kind is not None and not spec_for(entry.kind).fillable:
                report.failures.append(FillFailure(entry.field, entry.value, f"{entry.kind} fields cannot be typed into"))
                continue
            loc = self._in_root("form.field_input", field=field_key(entry.field))
            try:
                self.actions.fill(loc, entry.value, settle=False)
                report.applied.append(entry.field)
            except (FormViewError, WebDriverException) as e:
                report.failures.append(FillFailure(entry.field, entry.value, str(e)))
                self.session.emit_signal(
                    Cat.FORM,
                    f"Could not fill field: {e}",
                    level="warning",
                    **self._ctx(kind="fill", field=entry.field),
                )
        self.session.wait_for_settle(action="fill_form")
        return report

    def submit_form(self) -> None:
        submit = self._in_root("form.submit")
        try:
            el = self.registry.resolve(submit)
        except AmbiguousOrMissingElement as e:
            raise ActionPreconditionFailed("submit_form", "submit button not available", e.name) from e
        if not el.is_enabled():
            raise ActionPreconditionFailed("submit_form", "submit button is disabled", submit.describe())

        self.actions.click(submit, settle=False)
        wait_for_submit_outcome(
            self.kit,
            action="submit_form",
            success=self.registry.get("form.after_submit"),
            error=self._in_root("form.validation_error"),
        )
        self.session.counters.inc("form.submitted")
        self.session.emit_signal(Cat.FORM, "Form submitted", **self._ctx(kind="submit"))

    def submit_another_form(self) -> None:
        self.actions.click(self._submit_another_button())

    def _submit_another_button(self) -> Locator:
        return self.registry.get(
            "form.after_submit_button",
            scope=self.registry.get("form.after_submit"),
            text=SUBMIT_ANOTHER_LABEL,
        )

    def verify_state_post_submit(
        self,
        *,
        message: str | None = None,
        submit_another_form: bool | None = None,
        show_blank_form: bool | None = None,
    ) -> None:
        after = self.registry.get("form.after_submit")
        if message is not None:
            self.verifier.expect(
                "after submit message",
                lambda: self.actions.read_text(after),
                message,
                compare=contains,
            )
        if submit_another_form is not None:
            button = self._submit_another_button()
            self.verifier.expect_equal(
                "submit another form button",
                lambda: self.registry.exists(button),
                submit_another_form,
            )
        if show_blank_form is not None:
            # the blank form replaces the success panel after a fixed delay
            def _blank_form_shown() -> bool:
                return self.registry.exists(self.root()) and not self.registry.exists(after)

            self.verifier.expect_equal(
                "blank form shown",
                _blank_form_shown,
                show_blank_form,
                timeout=config.BLANK_FORM_DELAY_S + self.verifier.timeout,
            )
