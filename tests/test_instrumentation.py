import logging
from pathlib import Path

from scripts.check_cat_enum import DEFAULT_ROOT, main as check_cat_main, missing_members
from src.formview.instrumentation import Cat, LogMode, RateLimiter, format_ctx, parse_log_mode
from src.formview.session import FVSession

from fakes import FakeDriver


def test_format_ctx_orders_known_keys_first():
    line = format_ctx(zeta=1, field="Country", scn="field_reorder", kind="drag", el=None)
    assert line == "scn=field_reorder field=Country kind=drag zeta=1"


def test_parse_log_mode_falls_back_to_live():
    assert parse_log_mode("TRACE") == LogMode.TRACE
    assert parse_log_mode("loud") == LogMode.LIVE
    assert parse_log_mode(None) == LogMode.LIVE


def test_rate_limiter():
    rl = RateLimiter()
    assert rl.allow("LOCATE.resolve", 60)
    assert not rl.allow("LOCATE.resolve", 60)
    assert rl.allow("other", 60)


def test_diag_is_gated_by_mode(caplog):
    logger = logging.getLogger("formview.tests.gating")
    live = FVSession(logger, driver=FakeDriver(), log_mode="live")
    debug = FVSession(logger, driver=FakeDriver(), log_mode="debug")

    with caplog.at_level(logging.DEBUG, logger="formview.tests.gating"):
        live.emit_diag(Cat.FORM, "hidden diag")
        debug.emit_diag(Cat.FORM, "shown diag", field="Country")
        debug.emit_trace(Cat.FORM, "hidden trace")
        live.emit_signal(Cat.FORM, "signal", level="warning")

    messages = [r.getMessage() for r in caplog.records]
    assert "[FORM] shown diag :: field=Country" in messages
    assert "[FORM] signal" in messages
    assert not any("hidden" in m for m in messages)


def test_every_cat_reference_exists():
    assert missing_members(DEFAULT_ROOT) == {}


def test_cat_check_flags_unknown_member(tmp_path: Path):
    (tmp_path / "instrumentation.py").write_text("class Cat:\n    NAV = 'NAV'\n", encoding="utf-8")
    (tmp_path / "user.py").write_text("Cat.NAV\nCat.BOGUS\n", encoding="utf-8")
    assert list(missing_members(tmp_path)) == ["BOGUS"]
    assert check_cat_main([str(tmp_path)]) == 1
    assert check_cat_main([str(tmp_path / "nowhere")]) == 2
