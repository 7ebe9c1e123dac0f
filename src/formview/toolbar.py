from __future__ import annotations

from .context import PageKit
from .instrumentation import Cat


class ShareViewModal:
    def __init__(self, kit: PageKit) -> None:
        self.kit = kit

    def get_share_link(self) -> str:
        link = self.kit.registry.get("toolbar.share_link")
        url = self.kit.verifier.expect(
            "share link rendered",
            lambda: self.kit.actions.read_text(link),
            "http",
            compare=lambda observed, prefix: bool(observed) and observed.startswith(prefix),
        )
        self.kit.session.emit_signal(Cat.SHARE, "Share link read", kind="share", link=url)
        return url

    def close(self) -> None:
        self.kit.actions.press_escape()


class Toolbar:
    """
    View toolbar. Only sharing is needed for form views.
    """

    def __init__(self, kit: PageKit) -> None:
        self.kit = kit
        self.share_view = ShareViewModal(kit)

    def click_share_view(self) -> None:
        self.kit.actions.click(self.kit.registry.get("toolbar.share_view"))
