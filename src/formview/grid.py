from __future__ import annotations

from typing import Iterable

from .context import PageKit
from .field_types import spec_for
from .instrumentation import Cat
from .locators import field_key


class Column:
    def __init__(self, kit: PageKit) -> None:
        self.kit = kit

    def create(self, title: str, type: str = "single_line_text") -> None:
        """
        Add a column through the grid header. `type` is a field-type key or uidt.
        """
        registry = self.kit.registry
        actions = self.kit.actions
        ft = spec_for(type)

        actions.click(registry.get("grid.column_add"))
        actions.fill(registry.get("grid.column_name_input"), title, settle=False)
        if ft.uidt != "SingleLineText":
            actions.select_option(
                registry.get("grid.column_type_input"),
                registry.get("grid.column_type_option", text=ft.display_name, exact_text=True),
                settle=False,
            )
        actions.click(registry.get("grid.column_save"))

        header = registry.get("grid.header", title=title)
        self.kit.verifier.expect_true(f"column {title!r} in grid", lambda: registry.exists(header))
        self.kit.session.emit_signal(Cat.GRID, "Column created", kind="column", field=title, uidt=ft.uidt)


class Cell:
    def __init__(self, kit: PageKit) -> None:
        self.kit = kit

    def locator(self, index: int, column: str):
        return self.kit.registry.get("grid.cell", column=column, index=index)

    def read(self, index: int, column: str) -> str:
        return self.kit.actions.read_text(self.locator(index, column))

    def read_chips(self, index: int, column: str) -> list[str]:
        chip = self.kit.registry.get("grid.chip", scope=self.locator(index, column))
        return self.kit.actions.read_texts(chip)

    def verify(self, index: int, column: str, value: str) -> None:
        self.kit.verifier.expect_equal(f"cell {column}[{index}]", lambda: self.read(index, column), value)

    def verify_virtual_cell(self, index: int, column: str, count: int, values: Iterable[str]) -> None:
        """
        Link cells render one chip per linked record.
        """
        expected = list(values)
        if count != len(expected):
            raise ValueError(f"count={count} does not match {len(expected)} expected values")
        self.kit.verifier.expect_sequence(
            f"linked records {field_key(column)}[{index}]",
            lambda: self.read_chips(index, column),
            expected,
        )


class GridPage:
    def __init__(self, kit: PageKit) -> None:
        self.kit = kit
        self.column = Column(kit)
        self.cell = Cell(kit)
