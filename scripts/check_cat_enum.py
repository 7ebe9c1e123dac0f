"""
Every Cat.<NAME> referenced under a source tree must exist in the Cat enum.

    python -m scripts.check_cat_enum [src/formview]
"""
from __future__ import annotations

import ast
import sys
from pathlib import Path

DEFAULT_ROOT = Path(__file__).resolve().parent.parent / "src" / "formview"


def load_cat_members(inst_path: Path) -> set[str]:
    mod = ast.parse(inst_path.read_text(encoding="utf-8"))
    for node in mod.body:
        if isinstance(node, ast.ClassDef) and node.name == "Cat":
            return {
                stmt.targets[0].id
                for stmt in node.body
                if isinstance(stmt, ast.Assign)
                and len(stmt.targets) == 1
                and isinstance(stmt.targets[0], ast.Name)
            }
    return set()


def find_cat_usage(root: Path) -> dict[str, list[tuple[Path, int]]]:
    used: dict[str, list[tuple[Path, int]]] = {}
    for path in sorted(root.rglob("*.py")):
        mod = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(mod):
            if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name) and node.value.id == "Cat":
                used.setdefault(node.attr, []).append((path, node.lineno))
    return used


def missing_members(root: Path) -> dict[str, list[tuple[Path, int]]]:
    members = load_cat_members(root / "instrumentation.py")
    # .value / .name are enum attributes, not members
    return {
        name: locs
        for name, locs in find_cat_usage(root).items()
        if name not in members and name not in ("value", "name")
    }


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    root = Path(args[0]) if args else DEFAULT_ROOT
    if not (root / "instrumentation.py").exists():
        print(f"ERROR: instrumentation.py not found under {root}")
        return 2

    missing = missing_members(root)
    if not missing:
        print("OK: All Cat.* references are present in the Cat enum.")
        return 0

    print("ERROR: Missing Cat enum entries:")
    for name in sorted(missing):
        for path, line in missing[name]:
            print(f"  {name}: {path}:{line}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
