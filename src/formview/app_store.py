from __future__ import annotations

from .context import PageKit
from .dashboard import Toast
from .field_configs import SMTPConfig
from .instrumentation import Cat
from .. import config


class AccountAppStorePage:
    """
    Account > App Store. Installs, configures and resets notification plugins.
    """

    def __init__(self, kit: PageKit) -> None:
        self.kit = kit
        self.registry = kit.registry
        self.actions = kit.actions
        self.toast = Toast(kit)

    def goto(self) -> None:
        self.kit.session.goto(config.FV_APP_STORE_URL)

    def card(self, name: str):
        return self.registry.get("app_store.card", name=name)

    def install(self, name: str) -> None:
        card = self.card(name)
        self.actions.hover(card)
        self.actions.click(self.registry.get("app_store.install", scope=card))
        self.kit.session.emit_signal(Cat.PLUGIN, "Plugin install opened", kind="plugin", a=name)

    def configure_smtp(self, smtp: SMTPConfig) -> None:
        self.actions.fill(self.registry.get("app_store.smtp_email"), smtp.email, settle=False)
        self.actions.fill(self.registry.get("app_store.smtp_host"), smtp.host, settle=False)
        self.actions.fill(self.registry.get("app_store.smtp_port"), str(smtp.port), settle=False)
        self.actions.click(self.registry.get("app_store.save"))
        self.toast.verify(config.MESSAGES["smtp_installed"])
        self.kit.session.emit_signal(Cat.PLUGIN, "SMTP configured", kind="plugin", host=smtp.host)

    def uninstall(self, name: str) -> None:
        card = self.card(name)
        self.actions.hover(card)
        self.actions.click(self.registry.get("app_store.reset", scope=card))
        self.actions.click(self.registry.get("app_store.confirm"))
        self.toast.verify(config.MESSAGES["plugin_uninstalled"])
        self.kit.session.emit_signal(Cat.PLUGIN, "Plugin uninstalled", kind="plugin", a=name)
