from __future__ import annotations
from typing import TypedDict, NotRequired, Any, Literal
from enum import Enum
from dataclasses import dataclass, field, replace

RemoveMode = Literal["drag_drop", "hide_field"]
AddMode = Literal["drag_drop", "click_field"]


class PostSubmitMode(str, Enum):
    DEFAULT = "default"
    SHOW_MESSAGE = "show_message"
    ALLOW_RESUBMIT = "allow_resubmit"
    SHOW_BLANK_AFTER_DELAY = "show_blank_after_delay"
    EMAIL_NOTIFY = "email_notify"

    @property
    def has_toggle(self) -> bool:
        return self in TOGGLE_MODES


# Modes backed by a checkbox in the "after submit" menu
TOGGLE_MODES = (
    PostSubmitMode.ALLOW_RESUBMIT,
    PostSubmitMode.SHOW_BLANK_AFTER_DELAY,
    PostSubmitMode.EMAIL_NOTIFY,
)


class ScenarioStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Snapshot of one field as the form canvas (or hidden-field list) shows it.
    """
    name: str
    kind: str | None = None
    visible: bool = True
    position: int | None = None   # 0-based among visible fields; None when hidden
    label: str | None = None
    help_text: str | None = None
    required: bool = False


@dataclass(frozen=True)
class FormEntry:
    field: str
    value: str
    kind: str | None = None   # field-type key or uidt; None skips the fillable check


@dataclass(frozen=True)
class FormConfiguration:
    title: str | None = None
    subtitle: str | None = None
    submit_message: str | None = None
    post_submit_mode: PostSubmitMode = PostSubmitMode.DEFAULT

    def enable(self, mode: PostSubmitMode) -> "FormConfiguration":
        # One mode at a time; enabling replaces whatever was active.
        return replace(self, post_submit_mode=mode)

    def disable(self, mode: PostSubmitMode) -> "FormConfiguration":
        if self.post_submit_mode != mode:
            return self
        fallback = PostSubmitMode.SHOW_MESSAGE if self.submit_message else PostSubmitMode.DEFAULT
        return replace(self, post_submit_mode=fallback)

    def toggle_state(self) -> dict[PostSubmitMode, bool]:
        return {m: (m == self.post_submit_mode) for m in TOGGLE_MODES}


@dataclass
class FillFailure:
    field: str
    value: str
    reason: str


@dataclass
class FillReport:
    applied: list[str] = field(default_factory=list)
    failures: list[FillFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ScenarioResult(TypedDict):
    scenario: str
    status: ScenarioStatus
    elapsed_s: float
    error_kind: str | None
    diagnostic: str | None
    expected: NotRequired[Any]
    observed: NotRequired[Any]
    element: NotRequired[str | None]
    counters: NotRequired[dict[str, int]]
