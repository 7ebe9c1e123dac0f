# src/formview/field_configs.py

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional, Any


# ---------------------------------------------------------------------------
# Partial configuration objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldConfig:
    """
    Per-field settings in the form editor.

    Any attribute left as None means "do not change this setting"
    when the form page applies the config. An empty string is a real
    value: help_text="" clears the help text.
    """
    label: Optional[str] = None
    help_text: Optional[str] = None
    required: Optional[bool] = None

    def requested(self) -> dict[str, Any]:
        return _requested(self)


@dataclass(frozen=True)
class HeaderConfig:
    """
    Form heading + sub heading.
    """
    title: Optional[str] = None
    subtitle: Optional[str] = None

    def requested(self) -> dict[str, Any]:
        return _requested(self)


@dataclass(frozen=True)
class SMTPConfig:
    """
    Settings for the SMTP notification plugin form in the app store.
    """
    email: str
    host: str
    port: str
    secure: Optional[bool] = None


def _requested(cfg) -> dict[str, Any]:
    return {f.name: getattr(cfg, f.name) for f in fields(cfg) if getattr(cfg, f.name) is not None}
