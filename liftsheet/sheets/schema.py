"""Fixed-column layouts of the workout and cardio log sheets.

Every column position used anywhere in liftsheet is declared once here.
Rows are wrapped in typed classes whose attributes are generated from the
layout, so call sites read ``row.exercise`` rather than ``row[8]``.
"""

from dataclasses import dataclass

from ..errors import CodecError


def column_letter(index: int) -> str:
    """Translate a zero-based column index to spreadsheet letters.

    0 -> "A", 25 -> "Z", 26 -> "AA", 63 -> "BL", 64 -> "BM".
    """
    if index < 0:
        raise CodecError(f"Column index must be non-negative, got {index}")

    letters = ""
    while index >= 0:
        letters = chr(ord("A") + index % 26) + letters
        index = index // 26 - 1
    return letters


def quote_sheet(title: str) -> str:
    """Quote a sheet title for use in A1 notation."""
    return "'" + title.replace("'", "''") + "'"


def cell_range(sheet: str, column: int, row_number: int) -> str:
    """A1 reference for one cell, e.g. "'workout log'!O12"."""
    return f"{quote_sheet(sheet)}!{column_letter(column)}{row_number}"


@dataclass
class TableSchema:
    """Column layout of one logical table."""

    title: str
    width: int
    columns: dict[str, int]
    set_base: int | None = None  # First column of the (reps, weight, rir) triplets
    set_slots: int = 0

    def index(self, name: str) -> int:
        return self.columns[name]

    def set_columns(self, slot: int) -> tuple[int, int, int]:
        """Columns of the (reps, weight, rir) triplet for a zero-based slot."""
        if self.set_base is None or not 0 <= slot < self.set_slots:
            raise CodecError(f"{self.title} has no set slot {slot}")
        base = self.set_base + 3 * slot
        return base, base + 1, base + 2

    @property
    def last_letter(self) -> str:
        return column_letter(self.width - 1)

    def full_range(self, sheet: str | None = None) -> str:
        """Whole-table range, e.g. "'workout log'!A:AL"."""
        return f"{quote_sheet(sheet or self.title)}!A:{self.last_letter}"


SESSION_LOG = TableSchema(
    title="workout log",
    width=38,
    columns={
        "date": 6,  # G
        "exercise": 8,  # I
        "set_count": 13,  # N
        "notes": 37,  # AL
    },
    set_base=14,  # O..W
    set_slots=3,
)

CARDIO_LOG = TableSchema(
    title="cardio log",
    width=65,
    columns={
        "date": 5,  # F
        "modality": 8,  # I
        "minutes": 11,  # L
        "seconds": 12,  # M
        "rpe": 16,  # Q
        "work_rest": 17,  # R
        "watts": 24,  # Y
        "notes": 64,  # BM
    },
)


def _column_property(name: str, index: int) -> property:
    def getter(self: "SheetRow") -> str:
        return self.cell(index)

    def setter(self: "SheetRow", value: str) -> None:
        self.set_cell(index, value)

    return property(getter, setter, doc=f"Cell {column_letter(index)} ({name}).")


class SheetRow:
    """A positional row of string cells bound to a TableSchema.

    The remote omits trailing empty cells, so reads past the end of
    ``cells`` return "" instead of raising.
    """

    schema: TableSchema

    def __init_subclass__(cls, schema: TableSchema | None = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if schema is not None:
            cls.schema = schema
            for name, index in schema.columns.items():
                setattr(cls, name, _column_property(name, index))

    def __init__(self, cells: list | None = None, number: int | None = None):
        self.cells: list[str] = [
            "" if value is None else str(value) for value in (cells or [])
        ]
        self.number = number  # 1-based sheet row, when read from the sheet

    @classmethod
    def blank(cls) -> "SheetRow":
        """A row filled with empty cells to the full schema width."""
        return cls([""] * cls.schema.width)

    def cell(self, index: int) -> str:
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return ""

    def set_cell(self, index: int, value: str) -> None:
        if index >= len(self.cells):
            self.cells.extend([""] * (index + 1 - len(self.cells)))
        self.cells[index] = value

    def triplet(self, slot: int) -> tuple[str, str, str]:
        reps, weight, rir = self.schema.set_columns(slot)
        return self.cell(reps), self.cell(weight), self.cell(rir)

    def set_triplet(self, slot: int, values: tuple[str, str, str]) -> None:
        for index, value in zip(self.schema.set_columns(slot), values):
            self.set_cell(index, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(number={self.number}, cells={self.cells!r})"


class SessionRow(SheetRow, schema=SESSION_LOG):
    """Row of the workout (session) log."""


class CardioRow(SheetRow, schema=CARDIO_LOG):
    """Row of the cardio log."""
