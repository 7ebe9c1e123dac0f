# src/formview/fixtures.py

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml  # PyYAML

from .field_types import spec_for
from .. import config

LINK_TYPES = ("hm", "mm", "bt")


@dataclass(frozen=True)
class ColumnSpec:
    """
    One column of a seeded table. `type` is a field-type key or backend uidt.
    """
    title: str
    type: str = "single_line_text"
    column_name: Optional[str] = None
    primary: bool = False   # display value column ("pv")


@dataclass
class TableSpec:
    title: str
    columns: List[ColumnSpec] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    table_name: Optional[str] = None


@dataclass(frozen=True)
class LinkSpec:
    """
    Link column added to `parent`, pointing at `child`.
    """
    title: str
    parent: str
    child: str
    type: str = "hm"


@dataclass
class SeedPlan:
    name: str
    tables: List[TableSpec] = field(default_factory=list)
    links: List[LinkSpec] = field(default_factory=list)

    def table(self, title: str) -> TableSpec:
        for t in self.tables:
            if t.title == title:
                return t
        raise KeyError(f"Seed plan {self.name!r} has no table {title!r}")


def build_column_definition(col: ColumnSpec) -> Dict[str, Any]:
    """
    Column payload for the table-create call.
    """
    ft = spec_for(col.type)
    if ft.virtual:
        raise ValueError(f"Column {col.title!r}: {ft.uidt} columns are added as links, not table columns")
    out: Dict[str, Any] = {
        "column_name": col.column_name or col.title,
        "title": col.title,
        "uidt": ft.uidt,
    }
    if col.primary:
        out["pv"] = True
    return out


def _column_from_raw(raw: Union[str, Dict[str, Any]]) -> ColumnSpec:
    # "City" is shorthand for a single line text column
    if isinstance(raw, str):
        return ColumnSpec(title=raw)
    if "title" not in raw:
        raise ValueError(f"Column entry without title: {raw!r}")
    return ColumnSpec(
        title=raw["title"],
        type=raw.get("type", "single_line_text"),
        column_name=raw.get("column_name"),
        primary=bool(raw.get("primary", False)),
    )


def _link_from_raw(raw: Dict[str, Any]) -> LinkSpec:
    link = LinkSpec(
        title=raw["title"],
        parent=raw["parent"],
        child=raw["child"],
        type=raw.get("type", "hm"),
    )
    if link.type not in LINK_TYPES:
        raise ValueError(f"Link {link.title!r}: unsupported relation type {link.type!r}")
    return link


def parse_seed_plan(data: Dict[str, Any], *, name: str) -> SeedPlan:
    if not isinstance(data, dict):
        raise ValueError(f"Seed plan {name!r} must be a mapping, got {type(data).__name__}")

    tables = []
    for raw in data.get("tables") or []:
        tables.append(TableSpec(
            title=raw["title"],
            table_name=raw.get("table_name"),
            columns=[_column_from_raw(c) for c in raw.get("columns") or []],
            rows=list(raw.get("rows") or []),
        ))

    plan = SeedPlan(
        name=data.get("name", name),
        tables=tables,
        links=[_link_from_raw(l) for l in data.get("links") or []],
    )

    titles = {t.title for t in plan.tables}
    for link in plan.links:
        missing = {link.parent, link.child} - titles
        if missing:
            raise ValueError(f"Link {link.title!r} references unknown table(s): {sorted(missing)}")
    for t in plan.tables:
        known = {c.title for c in t.columns}
        for row in t.rows:
            extra = set(row) - known
            if extra:
                raise ValueError(f"Table {t.title!r} row has unknown column(s): {sorted(extra)}")
    return plan


def load_seed_plan(path: Union[str, Path]) -> SeedPlan:
    """
    Load a YAML plan. Bare names ("country_city") resolve against config.FIXTURES_DIR.
    """
    p = Path(path)
    if not p.suffix:
        p = config.FIXTURES_DIR / f"{p}.yaml"
    if not p.is_file():
        raise FileNotFoundError(f"Seed plan not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return parse_seed_plan(data, name=p.stem)


def sample_file(name: str) -> Path:
    return config.FIXTURES_DIR / "sampleFiles" / name
