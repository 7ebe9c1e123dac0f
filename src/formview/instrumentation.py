from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter
from typing import Any, Callable


class LogMode(str, Enum):
    LIVE = "live"      # signals only
    DEBUG = "debug"    # + diag
    TRACE = "trace"    # + trace


class Cat(str, Enum):
    """Log line prefix; one per concern so a run log can be grepped by area."""
    NAV = "NAV"
    LOCATE = "LOCATE"
    ACTION = "ACTION"
    DRAG = "DRAG"
    VERIFY = "VERIFY"
    FORM = "FORM"
    SHARE = "SHARE"
    GRID = "GRID"
    TOAST = "TOAST"
    PLUGIN = "PLUGIN"
    SEED = "SEED"
    SCENARIO = "SCENARIO"
    STARTUP = "STARTUP"


@dataclass(frozen=True)
class InstrumentPolicy:
    mode: LogMode = LogMode.LIVE
    include_ctx: bool = True
    # event key -> minimum seconds between two emitted lines
    rate_limits_s: dict[str, float] = field(default_factory=dict)


@dataclass
class Counters:
    """Per-session event tallies, copied into the scenario result."""
    _tally: Counter = field(default_factory=Counter)

    def inc(self, key: str, n: int = 1) -> None:
        self._tally[key] += n

    def get(self, key: str) -> int:
        return self._tally[key]

    def snapshot(self) -> dict[str, int]:
        return dict(self._tally)


@dataclass
class RateLimiter:
    clock: Callable[[], float] = perf_counter
    _seen: dict[str, float] = field(default_factory=dict)

    def allow(self, key: str, every_s: float) -> bool:
        now = self.clock()
        prev = self._seen.get(key)
        if prev is not None and now - prev < every_s:
            return False
        self._seen[key] = now
        return True


def parse_log_mode(raw: str | None) -> LogMode:
    try:
        return LogMode((raw or "").lower())
    except ValueError:
        return LogMode.LIVE


# Keys printed first, in this order; anything else follows alphabetically
CTX_ORDER = ("scn", "view", "field", "el", "mode", "a")


def format_ctx(**ctx: Any) -> str:
    present = {k: v for k, v in ctx.items() if v is not None}
    keys = [k for k in CTX_ORDER if k in present]
    keys += sorted(k for k in present if k not in CTX_ORDER)
    return " ".join(f"{k}={present[k]}" for k in keys)
